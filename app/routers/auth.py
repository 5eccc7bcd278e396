import logging
from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.config import settings
from app.core.security import create_access_token, generate_temp_password, hash_password, utc_now, verify_password
from app.database import get_db
from app.dependencies import get_current_user, get_current_user_full_access, is_admin_user
from app.models.user import User
from app.repos import user_repo
from app.repos.profile_repo import get_by_user_id as get_profile_by_user_id
from app.repos.resume_repo import list_for_user as list_resumes_for_profile
from app.schemas.auth import (
    AccountUpdate,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    Token,
    UserLogin,
    UserRegister,
    UserResponse,
)
from app.services import storage
from app.services.email_service import send_temp_password_email

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])
TEMP_PASSWORD_EXPIRY_MINUTES = 10
RESET_MESSAGE = "If an account exists, a temporary password has been sent. Check your email."


def _user_to_response(db: Session, user: User) -> UserResponse:
    profile = get_profile_by_user_id(db, user.id)
    return UserResponse(
        id=user.id,
        email=user.email,
        has_profile=profile is not None,
        role=profile.role if profile is not None else None,
        is_admin=is_admin_user(user),
        requires_password_change=user_repo.is_temp_password_mode(user),
    )


def _issue_token(db: Session, user: User) -> Token:
    return Token(access_token=create_access_token(user.id), user=_user_to_response(db, user))


def _temp_password_matches(user: User, password: str) -> bool:
    if not user.temp_password_hash or not user.temp_password_expires_at:
        return False
    if user.temp_password_expires_at <= utc_now():
        return False
    return verify_password(password, user.temp_password_hash)


@router.post("/register", response_model=Token)
def register(data: UserRegister, db: Session = Depends(get_db)):
    try:
        if user_repo.get_by_email(db, data.email):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
        user = user_repo.create(db, data.email, data.password)
        logger.info("Account registered: %s", user.email)
        return _issue_token(db, user)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Register failed for email=%s: %s", data.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Registration failed") from e


@router.post("/login", response_model=Token)
def login(data: UserLogin, db: Session = Depends(get_db)):
    try:
        user = user_repo.get_by_email(db, data.email)
        if not user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")
        if _temp_password_matches(user, data.password):
            logger.info("Login with temporary password: %s", user.email)
            return _issue_token(db, user)
        if not verify_password(data.password, user.password_hash):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
        logger.info("Login: %s", user.email)
        return _issue_token(db, user)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Login failed for email=%s: %s", data.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Login failed") from e


@router.post("/forgot-password")
def forgot_password(
    data: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Email a temporary password valid for 10 minutes. The response never reveals whether the email exists."""
    try:
        user = user_repo.get_by_email(db, data.email)
        if not user:
            return {"message": RESET_MESSAGE}
        temp_pw = generate_temp_password()
        expires_at = utc_now() + timedelta(minutes=TEMP_PASSWORD_EXPIRY_MINUTES)
        user_repo.set_temp_password(db, user.id, hash_password(temp_pw), expires_at)
        background_tasks.add_task(send_temp_password_email, user.email, temp_pw, TEMP_PASSWORD_EXPIRY_MINUTES)
        logger.info("Temporary password issued for %s", user.email)
        if settings.expose_temp_password_in_response:
            return {
                "message": "Temporary password generated. Use it to log in, then change your password.",
                "temp_password": temp_pw,
                "expires_in_minutes": TEMP_PASSWORD_EXPIRY_MINUTES,
            }
        return {"message": RESET_MESSAGE}
    except Exception as e:
        logger.exception("Forgot-password failed for email=%s: %s", data.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to process request") from e


@router.post("/change-password", response_model=Token)
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Only valid while signed in with a temporary password."""
    if not user_repo.is_temp_password_mode(user):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Use account settings to change password when logged in normally",
        )
    try:
        user_repo.update(db, user.id, password_hash=hash_password(data.new_password))
        user = user_repo.clear_temp_password(db, user.id) or user
        logger.info("Password changed after temporary login: %s", user.email)
        return _issue_token(db, user)
    except Exception as e:
        logger.exception("Change-password failed for user=%s: %s", user.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to change password") from e


@router.get("/me", response_model=UserResponse)
def get_me(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _user_to_response(db, user)


@router.patch("/me", response_model=UserResponse)
def update_account(
    data: AccountUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_full_access),
):
    if data.new_password is not None and not verify_password(data.current_password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")
    try:
        if data.email is not None and data.email != user.email:
            if user_repo.get_by_email(db, data.email):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")
            user_repo.update(db, user.id, email=data.email)
        if data.new_password is not None:
            user_repo.update(db, user.id, password_hash=hash_password(data.new_password))
        user = user_repo.get_by_id(db, user.id) or user
        return _user_to_response(db, user)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Account update failed for user=%s: %s", user.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update account") from e


@router.delete("/account")
def delete_account(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_full_access),
):
    """Delete the account; profile, jobs and applications cascade. Stored resume files are removed best-effort."""
    try:
        profile = get_profile_by_user_id(db, user.id)
        paths = [r.storage_path for r in list_resumes_for_profile(db, profile.id)] if profile else []
        user_repo.delete_user(db, user.id)
        logger.info("Account deleted: %s", user.email)
    except Exception as e:
        logger.exception("Account delete failed for user=%s: %s", user.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete account") from e
    for path in paths:
        if path and not storage.delete_file(path):
            logger.warning("Stored resume %s left behind for deleted account %s", path, user.id)
    return {"message": "Account deleted"}
