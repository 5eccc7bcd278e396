import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_admin, get_current_user_full_access, is_admin_user
from app.models.user import User
from app.repos import job_repo
from app.repos.admin_repo import get_stats
from app.repos.profile_repo import find_matching_profiles, list_with_stats
from app.routers.serializers import iso, job_to_response
from app.schemas.admin import JobModerationRequest
from app.services.email_service import send_job_approved_email, send_job_rejected_email
from app.services.notification_service import (
    notify_job_approved,
    notify_job_rejected,
    notify_matching_users,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])
MATCHING_USERS_LIMIT = 100


def _user_row(profile, jobs_posted: int, applications: int) -> dict:
    user = getattr(profile, "user", None)
    return {
        "id": profile.user_id,
        "email": user.email if user is not None else profile.email,
        "is_active": getattr(user, "is_active", True),
        "is_admin": getattr(user, "is_admin", False),
        "created_at": iso(getattr(user, "created_at", None)),
        "profile": {
            "id": profile.id,
            "fullName": profile.full_name,
            "role": profile.role,
            "department": profile.department,
            "year": profile.year,
        },
        "stats": {"jobsPosted": jobs_posted, "applications": applications},
    }


@router.get("/check")
def check_admin(user: User = Depends(get_current_user_full_access)):
    return {"isAdmin": is_admin_user(user)}


@router.get("/stats")
def get_admin_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_admin),
):
    """Return dashboard stats. Admin only."""
    try:
        return get_stats(db)
    except Exception as e:
        logger.exception("Admin stats failed for admin=%s: %s", user.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load admin stats") from e


@router.get("/users")
def list_users(
    page: int = 1,
    page_size: int = 50,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_admin),
):
    """Users with their profile and activity counts. Admin only."""
    page = max(1, page)
    page_size = min(max(1, page_size), 100)
    offset = (page - 1) * page_size
    try:
        rows = list_with_stats(db)
        items = [_user_row(p, jobs_n, apps_n) for p, jobs_n, apps_n in rows[offset:offset + page_size]]
        return {"items": items, "total": len(rows)}
    except Exception as e:
        logger.exception("Admin user list failed for admin=%s: %s", user.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load users") from e


@router.get("/jobs")
def list_jobs_for_review(
    status: str | None = None,
    type: str | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_admin),
):
    """All jobs (optionally filtered) with their creator and counts per moderation status."""
    jobs = job_repo.list_for_admin(db, status=status.upper() if status else None, job_type=type)
    return {
        "jobs": [job_to_response(j) for j in jobs],
        "stats": job_repo.count_by_status(db),
    }


@router.post("/jobs/{job_id}/approve")
def moderate_job(
    job_id: str,
    body: JobModerationRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_admin),
):
    """Approve (publish) or reject a job. Reject requires a reason."""
    action = (body.action or "").lower()
    if action not in ("approve", "reject"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid action. Use approve or reject")
    reason = (body.reason or "").strip()
    if action == "reject" and not reason:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Rejection reason is required")
    try:
        job = job_repo.get_with_creator(db, job_id)
        if not job:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
        owner = job.created_by

        if action == "approve":
            job = job_repo.approve(db, job, user.id)
            logger.info("Job %s approved by admin %s", job.id, user.email)
            notify_job_approved(db, job.created_by_id, job.id, job.title)
            if owner is not None and owner.email:
                background_tasks.add_task(send_job_approved_email, owner.email, owner.full_name, job.title, job.id)
            matches = find_matching_profiles(db, list(job.tags or []), job.created_by_id, MATCHING_USERS_LIMIT)
            notified = notify_matching_users(db, [p.id for p in matches], job.id, job.title, job.type)
            logger.info("Notified %d matching users about job %s", notified, job.id)
            message = "Job approved and published"
        else:
            job = job_repo.reject(db, job, reason)
            logger.info("Job %s rejected by admin %s", job.id, user.email)
            notify_job_rejected(db, job.created_by_id, job.id, job.title, reason)
            if owner is not None and owner.email:
                background_tasks.add_task(send_job_rejected_email, owner.email, owner.full_name, job.title, reason)
            message = "Job rejected"
        return {"job": job_to_response(job, include_creator=False), "message": message}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Job moderation failed for job=%s admin=%s: %s", job_id, user.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update job status") from e
