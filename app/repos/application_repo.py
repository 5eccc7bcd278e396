from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.models.application import Application
from app.models.job import Job
from app.core.security import generate_id

STATUSES = ("PENDING", "SHORTLISTED", "ACCEPTED", "REJECTED")


def get_by_id(db: Session, application_id: str) -> Application | None:
    return (
        db.query(Application)
        .options(joinedload(Application.job), joinedload(Application.applicant))
        .filter(Application.id == application_id)
        .first()
    )


def get_for_job_and_applicant(db: Session, job_id: str, applicant_id: str) -> Application | None:
    return (
        db.query(Application)
        .filter(Application.job_id == job_id, Application.applicant_id == applicant_id)
        .first()
    )


def create(
    db: Session,
    *,
    job_id: str,
    applicant_id: str,
    proposal: str,
    resume_id: str | None = None,
    match_score: int | None = None,
    match_analysis: dict | None = None,
) -> Application:
    application = Application(
        id=generate_id(),
        job_id=job_id,
        applicant_id=applicant_id,
        proposal=proposal,
        resume_id=resume_id,
        status="PENDING",
        match_score=match_score,
        match_analysis=match_analysis,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


def update_status(db: Session, application: Application, status: str) -> Application:
    application.status = status
    db.commit()
    db.refresh(application)
    return application


def set_match(db: Session, application: Application, score: int, analysis: dict | None) -> Application:
    application.match_score = score
    application.match_analysis = analysis
    db.commit()
    db.refresh(application)
    return application


def list_sent(db: Session, applicant_id: str, status: str | None = None) -> list[Application]:
    q = (
        db.query(Application)
        .options(joinedload(Application.job).joinedload(Job.created_by))
        .filter(Application.applicant_id == applicant_id)
    )
    if status:
        q = q.filter(Application.status == status)
    return q.order_by(Application.created_at.desc()).all()


def list_received(db: Session, owner_profile_id: str) -> list[Application]:
    return (
        db.query(Application)
        .join(Job, Application.job_id == Job.id)
        .options(joinedload(Application.applicant), joinedload(Application.job))
        .filter(Job.created_by_id == owner_profile_id)
        .order_by(Application.created_at.desc())
        .all()
    )


def list_for_job(db: Session, job_id: str, status: str | None = None) -> list[Application]:
    q = (
        db.query(Application)
        .options(joinedload(Application.applicant), joinedload(Application.resume))
        .filter(Application.job_id == job_id)
    )
    if status:
        q = q.filter(Application.status == status)
    return q.order_by(Application.created_at.desc()).all()


def list_not_accepted_for_job(db: Session, job_id: str) -> list[Application]:
    return (
        db.query(Application)
        .options(joinedload(Application.applicant))
        .filter(Application.job_id == job_id, Application.status != "ACCEPTED")
        .all()
    )


def _status_counts(rows) -> dict[str, int]:
    counts = {s: 0 for s in STATUSES}
    for status, n in rows:
        counts[status] = int(n)
    counts["total"] = sum(counts[s] for s in STATUSES)
    return counts


def count_by_status_for_job(db: Session, job_id: str) -> dict[str, int]:
    rows = (
        db.query(Application.status, func.count(Application.id))
        .filter(Application.job_id == job_id)
        .group_by(Application.status)
        .all()
    )
    return _status_counts(rows)


def count_by_status_for_applicant(db: Session, applicant_id: str) -> dict[str, int]:
    rows = (
        db.query(Application.status, func.count(Application.id))
        .filter(Application.applicant_id == applicant_id)
        .group_by(Application.status)
        .all()
    )
    return _status_counts(rows)


def resume_used_on_owner_job(db: Session, resume_id: str, owner_profile_id: str) -> bool:
    """True when the resume was attached to an application on a job the profile owns."""
    hit = (
        db.query(Application.id)
        .join(Job, Application.job_id == Job.id)
        .filter(Application.resume_id == resume_id, Job.created_by_id == owner_profile_id)
        .first()
    )
    return hit is not None
