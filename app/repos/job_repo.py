from datetime import datetime, timezone

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from app.models.application import Application
from app.models.bookmark import Bookmark
from app.models.job import Job
from app.core.security import generate_id

EDITABLE_FIELDS = (
    "title",
    "type",
    "description",
    "requirements",
    "duration",
    "compensation",
    "location",
    "team_size",
    "tags",
    "is_draft",
)


def get_by_id(db: Session, job_id: str) -> Job | None:
    return db.query(Job).filter(Job.id == job_id).first()


def get_with_creator(db: Session, job_id: str) -> Job | None:
    return db.query(Job).options(joinedload(Job.created_by)).filter(Job.id == job_id).first()


def create(db: Session, created_by_id: str, **fields) -> Job:
    """New jobs start PENDING and unpublished until an admin approves them."""
    job = Job(
        id=generate_id(),
        created_by_id=created_by_id,
        status="PENDING",
        is_published=False,
        is_filled=False,
        views=0,
        applications_count=0,
        **{k: v for k, v in fields.items() if k in EDITABLE_FIELDS},
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def update_fields(db: Session, job: Job, **fields) -> Job:
    for key, value in fields.items():
        if key in EDITABLE_FIELDS and value is not None:
            setattr(job, key, value)
    db.commit()
    db.refresh(job)
    return job


def delete(db: Session, job: Job) -> None:
    db.delete(job)
    db.commit()


def list_public(
    db: Session,
    *,
    job_type: str | None = None,
    search: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Job], int]:
    """Published, unfilled jobs newest first. Returns (items, total)."""
    q = (
        db.query(Job)
        .options(joinedload(Job.created_by))
        .filter(Job.is_published == True, Job.is_filled == False)
    )
    if job_type:
        q = q.filter(Job.type == job_type)
    if search and search.strip():
        term = f"%{search.strip()}%"
        q = q.filter(or_(Job.title.ilike(term), Job.description.ilike(term)))
    total = q.count()
    items = q.order_by(Job.created_at.desc()).offset(offset).limit(limit).all()
    return items, total


def list_by_creator(db: Session, profile_id: str) -> list[Job]:
    return db.query(Job).filter(Job.created_by_id == profile_id).order_by(Job.created_at.desc()).all()


def list_recommendable(db: Session, exclude_profile_id: str, limit: int = 50) -> list[Job]:
    return (
        db.query(Job)
        .filter(
            Job.is_published == True,
            Job.is_filled == False,
            Job.created_by_id != exclude_profile_id,
        )
        .order_by(Job.created_at.desc())
        .limit(limit)
        .all()
    )


def list_for_admin(db: Session, *, status: str | None = None, job_type: str | None = None) -> list[Job]:
    q = db.query(Job).options(joinedload(Job.created_by))
    if status:
        q = q.filter(Job.status == status)
    if job_type:
        q = q.filter(Job.type == job_type)
    return q.order_by(Job.created_at.desc()).all()


def count_by_status(db: Session) -> dict[str, int]:
    rows = db.query(Job.status, func.count(Job.id)).group_by(Job.status).all()
    counts = {"PENDING": 0, "APPROVED": 0, "REJECTED": 0}
    for status, n in rows:
        counts[status] = int(n)
    return counts


def application_counts(db: Session, job_ids: list[str]) -> dict[str, int]:
    if not job_ids:
        return {}
    rows = (
        db.query(Application.job_id, func.count(Application.id))
        .filter(Application.job_id.in_(job_ids))
        .group_by(Application.job_id)
        .all()
    )
    return {job_id: int(n) for job_id, n in rows}


def bookmark_counts(db: Session, job_ids: list[str]) -> dict[str, int]:
    if not job_ids:
        return {}
    rows = (
        db.query(Bookmark.job_id, func.count(Bookmark.id))
        .filter(Bookmark.job_id.in_(job_ids))
        .group_by(Bookmark.job_id)
        .all()
    )
    return {job_id: int(n) for job_id, n in rows}


def increment_views(db: Session, job: Job) -> Job:
    job.views = (job.views or 0) + 1
    db.commit()
    db.refresh(job)
    return job


def increment_applications_count(db: Session, job: Job) -> Job:
    job.applications_count = (job.applications_count or 0) + 1
    db.commit()
    db.refresh(job)
    return job


def approve(db: Session, job: Job, approved_by: str) -> Job:
    now = datetime.now(timezone.utc)
    job.status = "APPROVED"
    job.approved_at = now
    job.approved_by = approved_by
    job.rejection_reason = None
    job.is_published = True
    job.published_at = now
    job.is_draft = False
    db.commit()
    db.refresh(job)
    return job


def reject(db: Session, job: Job, reason: str) -> Job:
    job.status = "REJECTED"
    job.rejection_reason = reason
    job.approved_at = None
    job.approved_by = None
    job.is_published = False
    job.published_at = None
    db.commit()
    db.refresh(job)
    return job


def publish(db: Session, job: Job) -> Job:
    job.is_published = True
    job.published_at = datetime.now(timezone.utc)
    job.is_draft = False
    db.commit()
    db.refresh(job)
    return job


def toggle_filled(db: Session, job: Job) -> Job:
    job.is_filled = not bool(job.is_filled)
    job.filled_at = datetime.now(timezone.utc) if job.is_filled else None
    db.commit()
    db.refresh(job)
    return job


def mark_paid(db: Session, job: Job, *, amount: float, currency: str, stripe_payment_id: str | None) -> Job:
    job.is_paid = True
    job.payment_amount = amount
    job.payment_currency = currency
    job.stripe_payment_id = stripe_payment_id
    job.paid_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(job)
    return job
