import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.permissions import has_permission
from app.database import get_db
from app.dependencies import get_current_profile, get_current_user_full_access
from app.models.user import User
from app.repos import application_repo, job_repo
from app.repos.bookmark_repo import get as get_bookmark
from app.routers.applications import submit_application
from app.routers.serializers import application_to_response, job_to_response
from app.schemas.application import JobApplyRequest
from app.schemas.job import JobCreate, JobPaymentRequest, JobUpdate
from app.services.email_service import send_job_filled_email
from app.services.match_scoring import build_request, calculate_match_score
from app.services.notification_service import notify_job_filled
from app.services.recommendations import get_recommendations
from app.services.stripe_service import PaymentConfigError, create_job_payment_checkout

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def _get_owned_job(db: Session, job_id: str, profile, *, with_creator: bool = False):
    job = job_repo.get_with_creator(db, job_id) if with_creator else job_repo.get_by_id(db, job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    if job.created_by_id != profile.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this job")
    return job


@router.post("", status_code=status.HTTP_201_CREATED)
def create_job(
    data: JobCreate,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    if not has_permission(profile.role, "job:create"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Switch to Finder mode to create jobs")
    try:
        job = job_repo.create(
            db,
            profile.id,
            title=data.title,
            type=data.type,
            description=data.description,
            requirements=data.requirements,
            duration=data.duration,
            compensation=data.compensation,
            location=data.location,
            team_size=data.team_size,
            tags=data.tags,
            is_draft=data.is_draft,
        )
        logger.info("Job created: %s by profile=%s (pending review)", job.id, profile.id)
        return {"job": job_to_response(job, include_creator=False), "message": "Job submitted for admin review"}
    except Exception as e:
        logger.exception("Create job failed for profile=%s: %s", profile.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create job") from e


@router.get("")
def list_jobs(
    type: str | None = None,
    search: str | None = None,
    page: int = 1,
    page_size: int = 20,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_full_access),
):
    """Published, unfilled jobs with optional type and text search."""
    page = max(1, page)
    page_size = min(max(1, page_size), 100)
    offset = (page - 1) * page_size
    try:
        items, total = job_repo.list_public(db, job_type=type, search=search, limit=page_size, offset=offset)
        return {"items": [job_to_response(j) for j in items], "total": total}
    except Exception as e:
        logger.exception("List jobs failed: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch jobs") from e


@router.get("/mine")
def list_my_jobs(
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    jobs = job_repo.list_by_creator(db, profile.id)
    ids = [j.id for j in jobs]
    app_counts = job_repo.application_counts(db, ids)
    bookmark_counts = job_repo.bookmark_counts(db, ids)
    items = []
    for j in jobs:
        row = job_to_response(j, include_creator=False)
        row["applicationCount"] = app_counts.get(j.id, 0)
        row["bookmarkCount"] = bookmark_counts.get(j.id, 0)
        items.append(row)
    return {"jobs": items}


@router.get("/recommendations")
def job_recommendations(
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    try:
        jobs = job_repo.list_recommendable(db, profile.id, limit=50)
        if not jobs:
            return {
                "recommendations": [],
                "careerInsights": "No open jobs right now. Check back soon!",
                "topSkillsToLearn": [],
            }
        result = get_recommendations(profile, jobs)
        by_id = {j.id: j for j in jobs}
        for rec in result["recommendations"]:
            job = by_id.get(rec.get("jobId"))
            if job is not None:
                rec["job"] = job_to_response(job)
        return result
    except Exception as e:
        logger.exception("Recommendations failed for profile=%s: %s", profile.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to get recommendations") from e


@router.get("/{job_id}")
def get_job(
    job_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    try:
        job = job_repo.get_with_creator(db, job_id)
        if not job:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
        if job.created_by_id != profile.id:
            job = job_repo.increment_views(db, job)
        data = job_to_response(job)
        data["isBookmarked"] = get_bookmark(db, profile.id, job.id) is not None
        data["hasApplied"] = application_repo.get_for_job_and_applicant(db, job.id, profile.id) is not None
        return data
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Get job failed for job=%s: %s", job_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch job") from e


@router.put("/{job_id}")
def update_job(
    job_id: str,
    data: JobUpdate,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    job = _get_owned_job(db, job_id, profile)
    try:
        job = job_repo.update_fields(db, job, **data.model_dump(exclude_unset=True))
        return {"job": job_to_response(job, include_creator=False)}
    except Exception as e:
        logger.exception("Update job failed for job=%s: %s", job_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update job") from e


@router.delete("/{job_id}")
def delete_job(
    job_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    job = _get_owned_job(db, job_id, profile)
    try:
        job_repo.delete(db, job)
        logger.info("Job deleted: %s by profile=%s", job_id, profile.id)
        return {"message": "Job deleted successfully"}
    except Exception as e:
        logger.exception("Delete job failed for job=%s: %s", job_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete job") from e


@router.post("/{job_id}/fill")
def toggle_job_filled(
    job_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    """Toggle filled; when newly filled, tell everyone who was not accepted."""
    job = _get_owned_job(db, job_id, profile)
    try:
        job = job_repo.toggle_filled(db, job)
        if job.is_filled:
            pending = application_repo.list_not_accepted_for_job(db, job.id)
            notify_job_filled(db, [a.applicant_id for a in pending], job.id, job.title)
            for a in pending:
                applicant = a.applicant
                if applicant is not None and applicant.email:
                    background_tasks.add_task(send_job_filled_email, applicant.email, applicant.full_name, job.title)
            message = "Job marked as filled. It will no longer appear in job listings."
        else:
            message = "Job reopened for applications."
        return {"job": job_to_response(job, include_creator=False), "message": message}
    except Exception as e:
        logger.exception("Fill toggle failed for job=%s: %s", job_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update job") from e


@router.post("/{job_id}/publish")
def publish_job(
    job_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    job = _get_owned_job(db, job_id, profile)
    if job.status != "APPROVED":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only approved jobs can be published")
    try:
        job = job_repo.publish(db, job)
        return {"job": job_to_response(job, include_creator=False)}
    except Exception as e:
        logger.exception("Publish failed for job=%s: %s", job_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update job") from e


@router.get("/{job_id}/applications")
def list_job_applications(
    job_id: str,
    status: str | None = None,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    job = _get_owned_job(db, job_id, profile)
    status_filter = status.upper() if status and status.upper() in application_repo.STATUSES else None
    items = application_repo.list_for_job(db, job.id, status_filter)
    return {
        "applications": [application_to_response(a, with_applicant=True) for a in items],
        "stats": application_repo.count_by_status_for_job(db, job.id),
        "job": job_to_response(job, include_creator=False),
    }


@router.post("/{job_id}/apply", status_code=status.HTTP_201_CREATED)
def apply_to_job(
    job_id: str,
    data: JobApplyRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    if not (data.proposal or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Proposal is required")
    try:
        application = submit_application(db, profile, job_id, data.proposal.strip(), data.resume_id, background_tasks)
        return {"application": application_to_response(application)}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Apply failed for profile=%s job=%s: %s", profile.id, job_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create application") from e


@router.post("/{job_id}/calculate-my-match")
def calculate_my_match(
    job_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    """Caller's own fit for the job; stored only when they already applied."""
    job = job_repo.get_by_id(db, job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    try:
        existing = application_repo.get_for_job_and_applicant(db, job.id, profile.id)
        proposal = existing.proposal if existing else None
        match = calculate_match_score(build_request(job, profile, proposal))
        if existing:
            application_repo.set_match(db, existing, match["score"], match)
        return {"matchScore": match["score"], "analysis": match, "saved": existing is not None}
    except Exception as e:
        logger.exception("Calculate-my-match failed for profile=%s job=%s: %s", profile.id, job_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to calculate match score") from e


@router.post("/{job_id}/payment")
def create_job_payment(
    job_id: str,
    data: JobPaymentRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_full_access),
    profile=Depends(get_current_profile),
):
    if data.amount is None or data.amount <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payment amount")
    job = job_repo.get_by_id(db, job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    if job.created_by_id != profile.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the job owner can make payments")
    if job.is_paid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This job has already been paid for")
    try:
        return create_job_payment_checkout(
            db,
            user,
            job_id=job.id,
            job_title=job.title,
            profile_id=profile.id,
            amount=data.amount,
        )
    except PaymentConfigError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Payment service is not configured") from e
    except Exception as e:
        logger.exception("Payment session failed for job=%s: %s", job_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create payment session") from e
