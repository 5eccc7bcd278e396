from sqlalchemy.orm import Session

from app.models.resume import Resume
from app.core.security import generate_id


def create(
    db: Session,
    user_id: str,
    *,
    file_name: str,
    file_url: str,
    storage_path: str,
    file_size: int,
    mime_type: str,
    is_default: bool = False,
) -> Resume:
    if is_default:
        _clear_default(db, user_id)
    resume = Resume(
        id=generate_id(),
        user_id=user_id,
        file_name=file_name,
        file_url=file_url,
        storage_path=storage_path,
        file_size=file_size,
        mime_type=mime_type,
        is_default=is_default,
    )
    db.add(resume)
    db.commit()
    db.refresh(resume)
    return resume


def list_for_user(db: Session, user_id: str) -> list[Resume]:
    """Default resume first, then newest first."""
    return (
        db.query(Resume)
        .filter(Resume.user_id == user_id)
        .order_by(Resume.is_default.desc(), Resume.created_at.desc())
        .all()
    )


def count_for_user(db: Session, user_id: str) -> int:
    return db.query(Resume).filter(Resume.user_id == user_id).count()


def get_by_id(db: Session, resume_id: str) -> Resume | None:
    return db.query(Resume).filter(Resume.id == resume_id).first()


def get_for_user(db: Session, resume_id: str, user_id: str) -> Resume | None:
    return (
        db.query(Resume)
        .filter(Resume.id == resume_id, Resume.user_id == user_id)
        .first()
    )


def _clear_default(db: Session, user_id: str) -> None:
    db.query(Resume).filter(Resume.user_id == user_id, Resume.is_default == True).update(
        {Resume.is_default: False}, synchronize_session=False
    )


def set_default(db: Session, resume: Resume) -> Resume:
    _clear_default(db, resume.user_id)
    resume.is_default = True
    db.commit()
    db.refresh(resume)
    return resume


def delete(db: Session, resume: Resume) -> None:
    db.delete(resume)
    db.commit()
