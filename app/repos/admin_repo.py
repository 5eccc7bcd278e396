"""Platform-wide counts for the admin dashboard."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.application import Application
from app.models.call_request import CallRequest
from app.models.enums import JobStatus
from app.models.job import Job
from app.models.profile import Profile
from app.models.user import User


def _count(query) -> int:
    return query.scalar() or 0


def get_stats(db: Session) -> dict:
    """Counts keyed the way the admin panel renders them; NULL aggregates read as 0."""
    def jobs():
        return db.query(func.count(Job.id))

    return {
        "users_total": _count(db.query(func.count(User.id))),
        "profiles": _count(db.query(func.count(Profile.id))),
        "jobs_total": _count(jobs()),
        "jobs_pending": _count(jobs().filter(Job.status == JobStatus.PENDING.value)),
        "jobs_live": _count(jobs().filter(Job.is_published == True, Job.is_filled == False)),
        "applications": _count(db.query(func.count(Application.id))),
        "call_requests": _count(db.query(func.count(CallRequest.id))),
    }
