"""Per-profile analytics for the seeker and finder dashboards."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.application import Application
from app.models.bookmark import Bookmark
from app.models.job import Job


def _rate(count: int, views: int) -> float:
    if not views:
        return 0.0
    return round(count / views * 100, 1)


def get_seeker_analytics(db: Session, profile_id: str) -> dict:
    applications_sent = (
        db.query(func.count(Application.id)).filter(Application.applicant_id == profile_id).scalar() or 0
    )
    saved_jobs = db.query(func.count(Bookmark.id)).filter(Bookmark.user_id == profile_id).scalar() or 0
    rows = (
        db.query(Application.status, func.count(Application.id))
        .filter(Application.applicant_id == profile_id)
        .group_by(Application.status)
        .all()
    )
    by_status = {"pending": 0, "shortlisted": 0, "accepted": 0, "rejected": 0}
    for status, n in rows:
        by_status[str(status).lower()] = int(n)
    return {
        "applicationsSent": applications_sent,
        "savedJobs": saved_jobs,
        "applicationsByStatus": by_status,
    }


def get_finder_analytics(db: Session, profile_id: str) -> dict:
    active_jobs = (
        db.query(func.count(Job.id))
        .filter(Job.created_by_id == profile_id, Job.status == "APPROVED", Job.is_published == True)
        .scalar()
        or 0
    )
    draft_jobs = (
        db.query(func.count(Job.id))
        .filter(Job.created_by_id == profile_id, Job.is_published == False, Job.status == "PENDING")
        .scalar()
        or 0
    )
    pending_jobs = (
        db.query(func.count(Job.id))
        .filter(Job.created_by_id == profile_id, Job.status == "PENDING")
        .scalar()
        or 0
    )
    applications_received = (
        db.query(func.count(Application.id))
        .join(Job, Application.job_id == Job.id)
        .filter(Job.created_by_id == profile_id)
        .scalar()
        or 0
    )
    total_views = (
        db.query(func.coalesce(func.sum(Job.views), 0)).filter(Job.created_by_id == profile_id).scalar() or 0
    )
    total_bookmarks = (
        db.query(func.count(Bookmark.id))
        .join(Job, Bookmark.job_id == Job.id)
        .filter(Job.created_by_id == profile_id)
        .scalar()
        or 0
    )

    recent = (
        db.query(Job)
        .filter(Job.created_by_id == profile_id)
        .order_by(Job.created_at.desc())
        .limit(10)
        .all()
    )
    job_ids = [j.id for j in recent]
    app_counts: dict[str, int] = {}
    bm_counts: dict[str, int] = {}
    if job_ids:
        for job_id, n in (
            db.query(Application.job_id, func.count(Application.id))
            .filter(Application.job_id.in_(job_ids))
            .group_by(Application.job_id)
            .all()
        ):
            app_counts[job_id] = int(n)
        for job_id, n in (
            db.query(Bookmark.job_id, func.count(Bookmark.id))
            .filter(Bookmark.job_id.in_(job_ids))
            .group_by(Bookmark.job_id)
            .all()
        ):
            bm_counts[job_id] = int(n)

    recent_jobs = []
    for j in recent:
        views = j.views or 0
        n_apps = app_counts.get(j.id, 0)
        n_bms = bm_counts.get(j.id, 0)
        recent_jobs.append(
            {
                "id": j.id,
                "title": j.title,
                "type": j.type,
                "status": j.status,
                "views": views,
                "createdAt": j.created_at.isoformat() if j.created_at else None,
                "applications": n_apps,
                "bookmarks": n_bms,
                "applicationRate": _rate(n_apps, views),
                "bookmarkRate": _rate(n_bms, views),
            }
        )
    avg_rate = (
        round(sum(r["applicationRate"] for r in recent_jobs) / len(recent_jobs), 1) if recent_jobs else 0.0
    )
    return {
        "activeJobs": active_jobs,
        "draftJobs": draft_jobs,
        "pendingJobs": pending_jobs,
        "applicationsReceived": applications_received,
        "totalViews": int(total_views),
        "totalBookmarks": total_bookmarks,
        "averageApplicationRate": avg_rate,
        "recentJobs": recent_jobs,
    }
