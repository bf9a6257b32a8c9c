import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ADMIN_ROLES = ("super_admin", "admin")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the bearer token"""

    if not credentials:
        logger.warning("⚠️ No credentials provided")
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received: token length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    payload = verify_jwt_token(token)
    if not payload or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        logger.warning(f"⚠️ Token carries a non-numeric subject: {payload.get('sub')!r}")
        raise HTTPException(status_code=401, detail="Invalid token subject")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️ Token for unknown user {user_id}")
        raise HTTPException(status_code=401, detail="User not found")
    if user.status != "active":
        logger.warning(f"⚠️ Inactive user {user.email} attempted to authenticate")
        raise HTTPException(status_code=403, detail="Account is not active")

    return user


def require_roles(*roles: str):
    """
    Build a dependency that only lets the given roles through.

    Usage:
        @router.get("", dependencies=[Depends(require_roles("admin"))])
    """

    async def _check_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.warning(f"⚠️ User {user.email} with role {user.role} denied; requires {roles}")
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return _check_role


get_current_admin = require_roles(*ADMIN_ROLES)


def is_admin(user: User) -> bool:
    return user.role in ADMIN_ROLES
