import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_profile
from app.repos import bookmark_repo
from app.repos.job_repo import get_by_id as get_job_by_id
from app.routers.serializers import iso, job_to_response
from app.schemas.bookmark import BookmarkCreate
from app.services.notification_service import notify_job_bookmarked

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/bookmarks", tags=["bookmarks"])


def _bookmark_to_response(b) -> dict:
    return {
        "id": b.id,
        "jobId": b.job_id,
        "createdAt": iso(b.created_at),
        "job": job_to_response(b.job) if getattr(b, "job", None) is not None else None,
    }


@router.get("")
def list_bookmarks(
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    return {"bookmarks": [_bookmark_to_response(b) for b in bookmark_repo.list_for_user(db, profile.id)]}


@router.post("", status_code=status.HTTP_201_CREATED)
def add_bookmark(
    data: BookmarkCreate,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    if not data.job_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Job ID is required")
    try:
        job = get_job_by_id(db, data.job_id)
        if not job:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
        if bookmark_repo.get(db, profile.id, job.id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Job already bookmarked")
        bookmark = bookmark_repo.create(db, profile.id, job.id)
        if job.created_by_id != profile.id:
            notify_job_bookmarked(db, job.created_by_id, job.id, job.title, profile.full_name or "Someone")
        return {"bookmark": {"id": bookmark.id, "jobId": bookmark.job_id, "createdAt": iso(bookmark.created_at)}}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Add bookmark failed for profile=%s job=%s: %s", profile.id, data.job_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to add bookmark") from e


@router.delete("")
def remove_bookmark(
    jobId: str | None = None,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    if not jobId:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Job ID is required")
    bookmark = bookmark_repo.get(db, profile.id, jobId)
    if not bookmark:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bookmark not found")
    try:
        bookmark_repo.delete(db, bookmark)
        return {"message": "Bookmark removed"}
    except Exception as e:
        logger.exception("Remove bookmark failed for profile=%s job=%s: %s", profile.id, jobId, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to remove bookmark") from e
