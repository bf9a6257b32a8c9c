"""Shared validation utilities"""

import re
from datetime import date, datetime, timezone
from typing import Optional, Union


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a contact phone number.

    Keeps a leading "+" and the digits, dropping spaces, dashes and brackets.

    Raises:
        ValueError: If fewer than 7 or more than 15 digits remain
    """
    if not phone:
        return phone

    phone = phone.strip()
    prefix = "+" if phone.startswith("+") else ""
    digits = re.sub(r"\D", "", phone)

    if not 7 <= len(digits) <= 15:
        raise ValueError("Phone number must contain between 7 and 15 digits")

    return f"{prefix}{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def coerce_calendar_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Reduce an ISO date or datetime to a calendar day.

    Timezone-aware datetimes are converted to UTC before the date is taken,
    so "2026-10-20T23:30:00-05:00" becomes 2026-10-21.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("Date is required")
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    raise ValueError("Invalid date")
