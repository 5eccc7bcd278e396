import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_profile
from app.repos import resume_repo
from app.repos.application_repo import resume_used_on_owner_job
from app.routers.serializers import resume_to_response
from app.services import storage
from app.services.resume_analyzer import analyze_resume
from app.services.resume_text import ResumeTextError, extract_text

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/resumes", tags=["resumes"])
MIN_RESUME_TEXT_LENGTH = 50


def _get_owned(db: Session, resume_id: str, profile):
    resume = resume_repo.get_by_id(db, resume_id)
    if not resume:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found")
    if resume.user_id != profile.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this resume")
    return resume


@router.post("", status_code=status.HTTP_201_CREATED)
def upload_resume(
    file: UploadFile = File(..., description="Resume file (PDF, DOC or DOCX)"),
    setAsDefault: bool = Form(False),
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    content = file.file.read()
    error = storage.validate_resume_file(file.filename, file.content_type, len(content))
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
    path = storage.build_resume_path(profile.id, file.filename)
    try:
        url = storage.upload_file(path, content, file.content_type)
    except storage.StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to upload file") from e
    try:
        is_first = resume_repo.count_for_user(db, profile.id) == 0
        resume = resume_repo.create(
            db,
            profile.id,
            file_name=file.filename,
            file_url=url,
            storage_path=path,
            file_size=len(content),
            mime_type=file.content_type,
            is_default=is_first or setAsDefault,
        )
    except Exception as e:
        logger.exception("Resume upload failed for profile=%s: %s", profile.id, e)
        # The row was never written; drop the stored object with it.
        storage.delete_file(path)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save resume") from e
    logger.info("Resume uploaded: %s profile=%s size=%d", resume.id, profile.id, len(content))
    return {"resume": resume_to_response(resume)}


@router.get("")
def list_resumes(
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    return {"resumes": [resume_to_response(r) for r in resume_repo.list_for_user(db, profile.id)]}


@router.post("/analyze")
def analyze_uploaded_resume(
    file: UploadFile = File(..., description="Resume file (PDF, DOCX or TXT)"),
    profile=Depends(get_current_profile),
):
    """Extract text and return AI analysis (keyword analysis when AI is unavailable)."""
    content = file.file.read()
    max_bytes = storage.settings.max_resume_upload_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File size must be less than {storage.settings.max_resume_upload_mb}MB",
        )
    try:
        text = extract_text(content, file.filename, file.content_type)
    except ResumeTextError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    if len(text.strip()) < MIN_RESUME_TEXT_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Could not extract enough text from the resume",
        )
    logger.info("Analyzing resume %s for profile=%s (%d chars)", file.filename, profile.id, len(text))
    return {"analysis": analyze_resume(text, file.filename or "resume")}


@router.get("/{resume_id}")
def get_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    """Owner, or the owner of a job this resume was submitted to."""
    resume = resume_repo.get_by_id(db, resume_id)
    if not resume:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found")
    if resume.user_id != profile.id and not resume_used_on_owner_job(db, resume.id, profile.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this resume")
    return {"resume": resume_to_response(resume)}


@router.patch("/{resume_id}")
def set_default_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    resume = _get_owned(db, resume_id, profile)
    resume = resume_repo.set_default(db, resume)
    return {"resume": resume_to_response(resume)}


@router.delete("/{resume_id}")
def delete_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    resume = _get_owned(db, resume_id, profile)
    try:
        resume_repo.delete(db, resume)
    except Exception as e:
        logger.exception("Resume delete failed for resume=%s: %s", resume_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete resume") from e
    if not storage.delete_file(resume.storage_path):
        logger.warning("Resume %s deleted but storage object %s remains", resume_id, resume.storage_path)
    return {"message": "Resume deleted"}
