"""
Domain errors

Services raise these instead of HTTPException so that the same rules can be
exercised without a request. main.py maps every DomainError to a JSON body of
the form {"detail": message, "code": code}.
"""


class DomainError(Exception):
    """Base class for business rule violations"""

    status_code = 400
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Referenced lead, schedule, agent or assignment does not exist"""

    status_code = 404
    code = "not_found"


class InvalidFormatError(DomainError):
    """Time slot text does not match the "H:MM AM/PM" pattern"""

    status_code = 400
    code = "invalid_format"


class InvalidStateError(DomainError):
    """A precondition about status, date or duration is violated"""

    status_code = 400
    code = "invalid_state"


class ConflictError(DomainError):
    """The write clashes with another job or with a concurrent update"""

    status_code = 409
    code = "conflict"


class AccessDeniedError(DomainError):
    status_code = 403
    code = "access_denied"
