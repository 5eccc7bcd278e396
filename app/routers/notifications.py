import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_profile
from app.repos import notification_repo
from app.routers.serializers import notification_to_response
from app.services import notification_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _get_own(db: Session, notification_id: str, profile):
    notification = notification_repo.get_by_id(db, notification_id)
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    if notification.user_id != profile.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return notification


@router.get("")
def list_notifications(
    limit: int = 50,
    unread: bool = False,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    limit = min(max(1, limit), 100)
    result = notification_service.list_notifications(db, profile.id, limit=limit, unread_only=unread)
    return {
        "notifications": [notification_to_response(n) for n in result["notifications"]],
        "unreadCount": result["unreadCount"],
    }


@router.get("/unread-count")
def unread_count(
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    return {"unreadCount": notification_service.get_unread_count(db, profile.id)}


@router.patch("")
def mark_all_read(
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    count = notification_service.mark_all_as_read(db, profile.id)
    return {"message": "All notifications marked as read", "updated": count}


@router.delete("")
def clear_read(
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    count = notification_repo.delete_read(db, profile.id)
    return {"message": "Read notifications cleared", "deleted": count}


@router.patch("/{notification_id}")
def mark_read(
    notification_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    notification = _get_own(db, notification_id, profile)
    notification = notification_service.mark_as_read(db, notification)
    return {"notification": notification_to_response(notification)}


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    notification = _get_own(db, notification_id, profile)
    notification_repo.delete(db, notification)
    return {"message": "Notification deleted"}
