from sqlalchemy.orm import Session

from app.models.notification import Notification
from app.core.security import generate_id


def build(
    user_id: str,
    type: str,
    title: str,
    content: str,
    link: str | None = None,
    metadata: dict | None = None,
) -> Notification:
    return Notification(
        id=generate_id(),
        user_id=user_id,
        type=type,
        title=title,
        content=content,
        link=link,
        extra=metadata,
        is_read=False,
    )


def add_many(db: Session, notifications: list[Notification]) -> int:
    for n in notifications:
        db.add(n)
    db.commit()
    return len(notifications)


def get_by_id(db: Session, notification_id: str) -> Notification | None:
    return db.query(Notification).filter(Notification.id == notification_id).first()


def list_for_user(db: Session, user_id: str, *, limit: int = 50, unread_only: bool = False) -> list[Notification]:
    q = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        q = q.filter(Notification.is_read == False)
    return q.order_by(Notification.created_at.desc()).limit(limit).all()


def unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read == False)
        .count()
    )


def mark_read(db: Session, notification: Notification) -> Notification:
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: str) -> int:
    count = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read == False)
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return count


def delete(db: Session, notification: Notification) -> None:
    db.delete(notification)
    db.commit()


def delete_read(db: Session, user_id: str) -> int:
    count = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read == True)
        .delete(synchronize_session=False)
    )
    db.commit()
    return count
