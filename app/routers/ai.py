import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_profile
from app.repos.job_repo import get_with_creator
from app.schemas.ai import JobIdRequest, RefineJobRequest
from app.services.cover_letter import generate_cover_letter
from app.services.interview_tips import generate_interview_tips
from app.services.job_refiner import generate_job_from_role, refine_job

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/ai", tags=["ai"])


def _experience(profile) -> str:
    return f"{profile.year or ''} {profile.department or ''}".strip()


def _load_job(db: Session, data: JobIdRequest):
    if not data.job_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Job ID required")
    job = get_with_creator(db, data.job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return job


@router.post("/refine-job")
def refine_job_posting(
    data: RefineJobRequest,
    profile=Depends(get_current_profile),
):
    role = (data.role or "").strip()
    if not role:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Role is required")
    if data.generate_from_role:
        return generate_job_from_role(role, data.type)
    return refine_job(
        role,
        current_description=data.current_description,
        current_requirements=data.current_requirements,
        job_type=data.type,
        duration=data.duration,
        compensation=data.compensation,
    )


@router.post("/interview-tips")
def interview_tips(
    data: JobIdRequest,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    job = _load_job(db, data)
    return generate_interview_tips(
        job.title,
        job.description,
        job.requirements or "",
        list(profile.skills or []),
        _experience(profile) or None,
    )


@router.post("/generate-cover-letter")
def cover_letter(
    data: JobIdRequest,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    job = _load_job(db, data)
    creator = job.created_by
    return generate_cover_letter(
        job_title=job.title,
        company_name=(creator.full_name if creator is not None else None) or "the Company",
        job_description=job.description,
        requirements=job.requirements or "",
        applicant_name=profile.full_name or "Applicant",
        applicant_bio=profile.bio or "",
        skills=list(profile.skills or []),
        experience=_experience(profile) or None,
    )
