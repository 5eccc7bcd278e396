from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.models.application import Application
from app.models.job import Job
from app.models.profile import Profile
from app.core.security import generate_id


def get_by_id(db: Session, profile_id: str) -> Profile | None:
    return db.query(Profile).filter(Profile.id == profile_id).first()


def get_by_user_id(db: Session, user_id: str) -> Profile | None:
    return db.query(Profile).filter(Profile.user_id == user_id).first()


def create(
    db: Session,
    user_id: str,
    *,
    full_name: str,
    email: str,
    role: str,
    skills: list[str],
    interests: list[str],
    bio: str | None = None,
    department: str | None = None,
    year: str | None = None,
    avatar_url: str | None = None,
) -> Profile:
    profile = Profile(
        id=generate_id(),
        user_id=user_id,
        full_name=full_name,
        email=email,
        role=role,
        skills=skills,
        interests=interests,
        bio=bio,
        department=department,
        year=year,
        avatar_url=avatar_url,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def update(
    db: Session,
    profile: Profile,
    *,
    full_name: str | None = None,
    bio: str | None = None,
    skills: list[str] | None = None,
    interests: list[str] | None = None,
    role: str | None = None,
    department: str | None = None,
    year: str | None = None,
    avatar_url: str | None = None,
) -> Profile:
    if full_name is not None:
        profile.full_name = full_name
    if bio is not None:
        profile.bio = bio
    if skills is not None:
        profile.skills = skills
    if interests is not None:
        profile.interests = interests
    if role is not None:
        profile.role = role
    if department is not None:
        profile.department = department
    if year is not None:
        profile.year = year
    if avatar_url is not None:
        profile.avatar_url = avatar_url
    db.commit()
    db.refresh(profile)
    return profile


def find_matching_profiles(db: Session, tags: list[str], exclude_profile_id: str, limit: int = 100) -> list[Profile]:
    """Profiles whose skills or interests overlap the given tags."""
    if not tags:
        return []
    return (
        db.query(Profile)
        .filter(
            Profile.id != exclude_profile_id,
            or_(Profile.skills.overlap(tags), Profile.interests.overlap(tags)),
        )
        .limit(limit)
        .all()
    )


def list_with_stats(db: Session) -> list[tuple[Profile, int, int]]:
    """All profiles newest first with (jobs posted, applications sent) counts."""
    jobs_sq = (
        db.query(Job.created_by_id.label("pid"), func.count(Job.id).label("n"))
        .group_by(Job.created_by_id)
        .subquery()
    )
    apps_sq = (
        db.query(Application.applicant_id.label("pid"), func.count(Application.id).label("n"))
        .group_by(Application.applicant_id)
        .subquery()
    )
    rows = (
        db.query(Profile, func.coalesce(jobs_sq.c.n, 0), func.coalesce(apps_sq.c.n, 0))
        .outerjoin(jobs_sq, jobs_sq.c.pid == Profile.id)
        .outerjoin(apps_sq, apps_sq.c.pid == Profile.id)
        .order_by(Profile.created_at.desc())
        .all()
    )
    return [(p, int(j or 0), int(a or 0)) for p, j, a in rows]
