import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_profile, get_current_user_full_access
from app.models.user import User
from app.repos.profile_repo import (
    get_by_user_id,
    create as create_profile,
    update as update_profile,
)
from app.schemas.profile import ProfileCreate, ProfileUpdate
from app.services import storage
from app.services.email_service import send_welcome_email
from app.services.profile_rating import rate_profile

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/profile", tags=["profile"])


def _profile_to_response(p) -> dict:
    return {
        "id": p.id,
        "userId": p.user_id,
        "fullName": p.full_name,
        "email": p.email,
        "avatarUrl": p.avatar_url,
        "bio": p.bio,
        "skills": list(p.skills or []),
        "interests": list(p.interests or []),
        "role": p.role,
        "department": p.department,
        "year": p.year,
        "createdAt": p.created_at.isoformat() if p.created_at else None,
        "updatedAt": p.updated_at.isoformat() if getattr(p, "updated_at", None) else None,
    }


@router.get("")
def get_profile(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_full_access),
):
    profile = get_by_user_id(db, user.id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return _profile_to_response(profile)


@router.post("")
def upsert_profile(
    data: ProfileCreate,
    response: Response,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_full_access),
):
    """Create the caller's profile on first call, update it afterwards."""
    try:
        existing = get_by_user_id(db, user.id)
        if existing:
            profile = update_profile(
                db,
                existing,
                full_name=data.full_name,
                role=data.role,
                skills=data.skills,
                interests=data.interests,
                bio=data.bio,
                department=data.department,
                year=data.year,
                avatar_url=data.avatar_url,
            )
            logger.info("Profile updated: %s", profile.id)
            return _profile_to_response(profile)

        profile = create_profile(
            db,
            user.id,
            full_name=data.full_name,
            email=user.email,
            role=data.role,
            skills=data.skills,
            interests=data.interests,
            bio=data.bio,
            department=data.department,
            year=data.year,
            avatar_url=data.avatar_url,
        )
        logger.info("Profile created: %s role=%s", profile.id, profile.role)
        background_tasks.add_task(send_welcome_email, user.email, profile.full_name)
        response.status_code = status.HTTP_201_CREATED
        return _profile_to_response(profile)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Profile upsert failed for user=%s: %s", user.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save profile") from e


@router.patch("/update")
def patch_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    try:
        profile = update_profile(
            db,
            profile,
            full_name=data.full_name,
            bio=data.bio,
            skills=data.skills,
            interests=data.interests,
            department=data.department,
            year=data.year,
            avatar_url=data.avatar_url,
        )
        return _profile_to_response(profile)
    except Exception as e:
        logger.exception("Profile patch failed for profile=%s: %s", profile.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update profile") from e


@router.post("/rate")
def rate_my_profile(profile=Depends(get_current_profile)):
    """AI rating (1-10) with a completeness percentage; never fails on AI errors."""
    return rate_profile(profile)


@router.post("/avatar")
def upload_avatar(
    file: UploadFile = File(..., description="Profile picture (any image type)"),
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    """Store a new avatar, point the profile at it and drop the previous one."""
    content = file.file.read()
    error = storage.validate_avatar_file(file.content_type, len(content))
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    previous_path = storage.path_from_url(profile.avatar_url)
    path = storage.build_avatar_path(profile.id, file.filename)
    try:
        url = storage.upload_file(path, content, file.content_type)
    except storage.StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload file to storage. Please try again.",
        ) from e
    try:
        profile = update_profile(db, profile, avatar_url=url)
    except Exception as e:
        logger.exception("Avatar save failed for profile=%s: %s", profile.id, e)
        storage.delete_file(path)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to upload avatar") from e

    # Only objects under this profile's avatar folder are ours to remove.
    if previous_path and previous_path.startswith(f"{storage.AVATAR_PREFIX}/{profile.id}/") and previous_path != path:
        if not storage.delete_file(previous_path):
            logger.warning("Old avatar %s for profile=%s was not removed", previous_path, profile.id)
    logger.info("Avatar uploaded for profile=%s path=%s", profile.id, path)
    return {"url": url, "storagePath": path, "profile": _profile_to_response(profile)}
