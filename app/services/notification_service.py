"""In-app notifications fired on every marketplace transition.

Notification writes are side effects: a failure is logged and rolled back,
never surfaced to the caller.
"""
import logging

from sqlalchemy.orm import Session

from app.models.enums import ApplicationStatus, NotificationType
from app.models.notification import Notification
from app.repos import notification_repo
from app.repos.profile_repo import get_by_user_id as get_profile_by_user_id

logger = logging.getLogger(__name__)

APPLICATION_STATUS_MESSAGES = {
    ApplicationStatus.SHORTLISTED.value: (
        NotificationType.APPLICATION_SHORTLISTED,
        "Application Shortlisted",
        'Great news! Your application for "{title}" has been shortlisted.',
    ),
    ApplicationStatus.ACCEPTED.value: (
        NotificationType.APPLICATION_ACCEPTED,
        "Application Accepted",
        'Congratulations! Your application for "{title}" has been accepted.',
    ),
    ApplicationStatus.REJECTED.value: (
        NotificationType.APPLICATION_REJECTED,
        "Application Update",
        'Your application for "{title}" was not selected this time.',
    ),
}


def _type_value(type) -> str:
    return type.value if isinstance(type, NotificationType) else str(type)


def create_notification(
    db: Session,
    user_id: str,
    type,
    title: str,
    content: str,
    link: str | None = None,
    metadata: dict | None = None,
) -> Notification | None:
    try:
        notification = notification_repo.build(user_id, _type_value(type), title, content, link, metadata)
        notification_repo.add_many(db, [notification])
        return notification
    except Exception as e:
        logger.exception("Create notification failed user=%s type=%s: %s", user_id, type, e)
        db.rollback()
        return None


def create_notifications(db: Session, items: list[dict]) -> int:
    """Bulk insert; each item carries user_id, type, title, content and optional link/metadata."""
    if not items:
        return 0
    try:
        rows = [
            notification_repo.build(
                item["user_id"],
                _type_value(item["type"]),
                item["title"],
                item["content"],
                item.get("link"),
                item.get("metadata"),
            )
            for item in items
        ]
        return notification_repo.add_many(db, rows)
    except Exception as e:
        logger.exception("Bulk notification insert failed (%d items): %s", len(items), e)
        db.rollback()
        return 0


def notify_job_approved(db: Session, owner_id: str, job_id: str, job_title: str):
    return create_notification(
        db,
        owner_id,
        NotificationType.JOB_APPROVED,
        "Job Approved!",
        f'Your job posting "{job_title}" has been approved by the admin and is now live.',
        f"/jobs/{job_id}",
        {"jobId": job_id},
    )


def notify_job_rejected(db: Session, owner_id: str, job_id: str, job_title: str, reason: str):
    return create_notification(
        db,
        owner_id,
        NotificationType.JOB_REJECTED,
        "Job Rejected",
        f'Your job posting "{job_title}" was rejected. Reason: {reason}',
        "/drafts",
        {"jobId": job_id, "reason": reason},
    )


def notify_application_received(db: Session, owner_id: str, job_id: str, job_title: str, applicant_name: str):
    return create_notification(
        db,
        owner_id,
        NotificationType.APPLICATION_RECEIVED,
        "New Application",
        f'{applicant_name} has applied to your job "{job_title}".',
        f"/jobs/{job_id}/applications",
        {"jobId": job_id, "applicantName": applicant_name},
    )


def notify_application_status(db: Session, applicant_id: str, job_id: str, job_title: str, new_status: str):
    """No-op for PENDING or unknown values."""
    message = APPLICATION_STATUS_MESSAGES.get(new_status)
    if message is None:
        return None
    type, title, template = message
    return create_notification(
        db,
        applicant_id,
        type,
        title,
        template.format(title=job_title),
        "/my-applications",
        {"jobId": job_id, "status": new_status},
    )


def notify_matching_users(db: Session, profile_ids: list[str], job_id: str, job_title: str, job_type: str) -> int:
    return create_notifications(
        db,
        [
            {
                "user_id": pid,
                "type": NotificationType.JOB_POSTED,
                "title": "New Job Match",
                "content": f'New job posting: "{job_title}" matches your skills and interests!',
                "link": f"/jobs/{job_id}",
                "metadata": {"jobId": job_id, "jobType": job_type},
            }
            for pid in profile_ids
        ],
    )


def notify_job_filled(db: Session, applicant_ids: list[str], job_id: str, job_title: str) -> int:
    return create_notifications(
        db,
        [
            {
                "user_id": pid,
                "type": NotificationType.JOB_FILLED,
                "title": "Position Filled",
                "content": f'The position "{job_title}" has been filled.',
                "link": "/my-applications",
                "metadata": {"jobId": job_id},
            }
            for pid in applicant_ids
        ],
    )


def notify_call_request_received(db: Session, receiver_id: str, requester_id: str, requester_name: str, job_id: str, job_title: str):
    return create_notification(
        db,
        receiver_id,
        NotificationType.CALL_REQUEST_RECEIVED,
        "Video Call Request",
        f'{requester_name} has requested a video call regarding "{job_title}".',
        "/messages",
        {"requesterId": requester_id, "jobId": job_id},
    )


def notify_call_request_response(db: Session, requester_id: str, call_request_id: str, job_title: str, accepted: bool):
    if accepted:
        return create_notification(
            db,
            requester_id,
            NotificationType.CALL_REQUEST_ACCEPTED,
            "Call Request Accepted",
            f'Your video call request for "{job_title}" has been accepted!',
            f"/video-call/{call_request_id}",
            {"callRequestId": call_request_id},
        )
    return create_notification(
        db,
        requester_id,
        NotificationType.CALL_REQUEST_REJECTED,
        "Call Request Declined",
        f'Your video call request for "{job_title}" was declined.',
        "/messages",
        {"callRequestId": call_request_id},
    )


def notify_job_bookmarked(db: Session, owner_id: str, job_id: str, job_title: str, bookmarker_name: str):
    return create_notification(
        db,
        owner_id,
        NotificationType.BOOKMARK_ADDED,
        "Job Bookmarked",
        f'{bookmarker_name} saved your job "{job_title}".',
        f"/jobs/{job_id}",
        {"jobId": job_id},
    )


def notify_payment_event(db: Session, user_id: str, title: str, content: str, link: str | None = "/billing"):
    """Billing events are keyed by account; notifications live on the profile."""
    try:
        profile = get_profile_by_user_id(db, user_id)
    except Exception as e:
        logger.exception("Profile lookup for payment notification failed user=%s: %s", user_id, e)
        return None
    if not profile:
        logger.info("Skipping payment notification: user %s has no profile", user_id)
        return None
    return create_notification(db, profile.id, NotificationType.PAYMENT, title, content, link)


def notify_job_payment_success(db: Session, owner_id: str, job_id: str, job_title: str, amount: float):
    return create_notification(
        db,
        owner_id,
        NotificationType.JOB_PAYMENT_SUCCESS,
        "Payment Received",
        f'Payment of ${amount:.2f} received for your job posting "{job_title}"!',
        f"/jobs/{job_id}",
        {"jobId": job_id, "amount": amount},
    )


def list_notifications(db: Session, profile_id: str, *, limit: int = 50, unread_only: bool = False) -> dict:
    return {
        "notifications": notification_repo.list_for_user(db, profile_id, limit=limit, unread_only=unread_only),
        "unreadCount": notification_repo.unread_count(db, profile_id),
    }


def mark_as_read(db: Session, notification: Notification) -> Notification:
    return notification_repo.mark_read(db, notification)


def mark_all_as_read(db: Session, profile_id: str) -> int:
    return notification_repo.mark_all_read(db, profile_id)


def get_unread_count(db: Session, profile_id: str) -> int:
    return notification_repo.unread_count(db, profile_id)
