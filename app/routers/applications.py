import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_profile
from app.repos import application_repo, job_repo
from app.repos.resume_repo import get_for_user as get_resume_for_user
from app.routers.serializers import application_to_response
from app.schemas.application import ApplicationCreate, ApplicationStatusUpdate
from app.services.email_service import send_application_received_email, send_application_status_email
from app.services.match_scoring import build_request, calculate_match_score
from app.services.notification_service import notify_application_received, notify_application_status

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/applications", tags=["applications"])
my_router = APIRouter(prefix="/api/my-applications", tags=["applications"])


def submit_application(
    db: Session,
    profile,
    job_id: str,
    proposal: str,
    resume_id: str | None,
    background_tasks: BackgroundTasks,
):
    """Validate and create a PENDING application, then notify the job owner."""
    if resume_id and not get_resume_for_user(db, resume_id, profile.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid resume selected")
    job = job_repo.get_with_creator(db, job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    if job.created_by_id == profile.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot apply to your own job posting")
    if not job.is_published:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This job is not published yet")
    if job.is_filled:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This position has been filled")
    if application_repo.get_for_job_and_applicant(db, job_id, profile.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You have already applied to this job")

    match = calculate_match_score(build_request(job, profile, proposal))
    application = application_repo.create(
        db,
        job_id=job_id,
        applicant_id=profile.id,
        proposal=proposal,
        resume_id=resume_id,
        match_score=match["score"],
        match_analysis=match,
    )
    # Counter write is separate from the insert; drift on failure is tolerated.
    job_repo.increment_applications_count(db, job)
    logger.info("Application %s created job=%s applicant=%s score=%s", application.id, job_id, profile.id, match["score"])

    applicant_name = profile.full_name or "A user"
    notify_application_received(db, job.created_by_id, job.id, job.title, applicant_name)
    owner = job.created_by
    if owner is not None and owner.email:
        background_tasks.add_task(
            send_application_received_email,
            owner.email,
            owner.full_name,
            applicant_name,
            job.title,
            job.id,
        )
    return application


@router.post("", status_code=status.HTTP_201_CREATED)
def create_application(
    data: ApplicationCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    if not data.job_id or not (data.proposal or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Job ID and proposal are required")
    try:
        application = submit_application(db, profile, data.job_id, data.proposal.strip(), data.resume_id, background_tasks)
        return {"application": application_to_response(application)}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Create application failed for profile=%s job=%s: %s", profile.id, data.job_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create application") from e


@router.get("")
def list_applications(
    type: str = "sent",
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    """sent: applications I made. received: applications on jobs I own."""
    if type == "received":
        items = application_repo.list_received(db, profile.id)
        return {"applications": [application_to_response(a, with_job=True, with_applicant=True) for a in items]}
    items = application_repo.list_sent(db, profile.id)
    return {"applications": [application_to_response(a, with_job=True) for a in items]}


@router.patch("/{application_id}/status")
def update_application_status(
    application_id: str,
    data: ApplicationStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    new_status = (data.status or "").upper()
    if new_status not in application_repo.STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")
    try:
        application = application_repo.get_by_id(db, application_id)
        if not application:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
        job = application.job
        if job is None or job.created_by_id != profile.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the job owner can update application status",
            )
        application = application_repo.update_status(db, application, new_status)
        logger.info("Application %s -> %s by profile=%s", application.id, new_status, profile.id)

        if new_status != "PENDING":
            notify_application_status(db, application.applicant_id, job.id, job.title, new_status)
            applicant = application.applicant
            if applicant is not None and applicant.email:
                background_tasks.add_task(
                    send_application_status_email,
                    applicant.email,
                    applicant.full_name,
                    new_status,
                    job.title,
                    job.id,
                )
        return {"application": application_to_response(application)}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Status update failed for application=%s: %s", application_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update application status") from e


def _get_for_participant(db: Session, application_id: str, profile):
    application = application_repo.get_by_id(db, application_id)
    if not application:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
    is_owner = application.job is not None and application.job.created_by_id == profile.id
    if not is_owner and application.applicant_id != profile.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this application")
    return application


@router.post("/{application_id}/match-score")
def compute_match_score(
    application_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    try:
        application = _get_for_participant(db, application_id, profile)
        match = calculate_match_score(build_request(application.job, application.applicant, application.proposal))
        application_repo.set_match(db, application, match["score"], match)
        return {"matchScore": match["score"], "analysis": match}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Match score failed for application=%s: %s", application_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to calculate match score") from e


@router.get("/{application_id}/match-score")
def get_match_score(
    application_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    application = _get_for_participant(db, application_id, profile)
    return {"matchScore": application.match_score, "analysis": application.match_analysis}


@my_router.get("")
def my_applications(
    status: str | None = None,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    """The caller's applications with their jobs, plus counts per status."""
    status_filter = status.upper() if status and status.upper() in application_repo.STATUSES else None
    items = application_repo.list_sent(db, profile.id, status_filter)
    return {
        "applications": [application_to_response(a, with_job=True) for a in items],
        "stats": application_repo.count_by_status_for_applicant(db, profile.id),
    }
