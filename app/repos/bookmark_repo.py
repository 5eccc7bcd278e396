from sqlalchemy.orm import Session, joinedload

from app.models.bookmark import Bookmark
from app.models.job import Job
from app.core.security import generate_id


def get(db: Session, user_id: str, job_id: str) -> Bookmark | None:
    return db.query(Bookmark).filter(Bookmark.user_id == user_id, Bookmark.job_id == job_id).first()


def list_for_user(db: Session, user_id: str) -> list[Bookmark]:
    return (
        db.query(Bookmark)
        .options(joinedload(Bookmark.job).joinedload(Job.created_by))
        .filter(Bookmark.user_id == user_id)
        .order_by(Bookmark.created_at.desc())
        .all()
    )


def create(db: Session, user_id: str, job_id: str) -> Bookmark:
    bookmark = Bookmark(id=generate_id(), user_id=user_id, job_id=job_id)
    db.add(bookmark)
    db.commit()
    db.refresh(bookmark)
    return bookmark


def delete(db: Session, bookmark: Bookmark) -> None:
    db.delete(bookmark)
    db.commit()
