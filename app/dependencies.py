"""
Request-scoped auth dependencies.

The chain is bearer token -> User -> (full access) -> Profile or Admin.
Routers pick the narrowest one they need.
"""
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.config import settings
from app.core.security import decode_access_token
from app.database import get_db
from app.models.user import User
from app.repos.profile_repo import get_by_user_id as get_profile_by_user_id
from app.repos.user_repo import get_by_id, is_temp_password_mode

logger = logging.getLogger(__name__)
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str, reason: str) -> HTTPException:
    logger.info("Auth rejected: %s", reason)
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated", "no bearer token")

    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise _unauthorized("Invalid or expired token", "token failed verification")

    user = get_by_id(db, user_id)
    if user is None:
        raise _unauthorized("User not found", f"token subject {user_id} has no account")
    if getattr(user, "is_active", True) is False:
        logger.info("Auth rejected: account %s is disabled", user.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")
    return user


def get_current_user_full_access(user: User = Depends(get_current_user)) -> User:
    """Signed in with a temporary password -> only the change-password flow is open."""
    if is_temp_password_mode(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Change your temporary password first")
    return user


def get_current_profile(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_full_access),
):
    profile = get_profile_by_user_id(db, user.id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


def is_admin_user(user) -> bool:
    """Admin flag on the account, or an email on the ADMIN_EMAILS allowlist."""
    if getattr(user, "is_admin", False):
        return True
    email = (getattr(user, "email", None) or "").lower()
    return bool(email) and email in settings.admin_email_set()


def get_current_admin(user: User = Depends(get_current_user_full_access)) -> User:
    if not is_admin_user(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
