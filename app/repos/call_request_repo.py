from datetime import datetime, timezone

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.models.call_request import CallRequest
from app.core.security import generate_id


def get_by_id(db: Session, request_id: str) -> CallRequest | None:
    return (
        db.query(CallRequest)
        .options(
            joinedload(CallRequest.job),
            joinedload(CallRequest.requester),
            joinedload(CallRequest.receiver),
        )
        .filter(CallRequest.id == request_id)
        .first()
    )


def get_open_for_job(db: Session, job_id: str, requester_id: str) -> CallRequest | None:
    """A PENDING or ACCEPTED request from this requester for the job, if any."""
    return (
        db.query(CallRequest)
        .filter(
            CallRequest.job_id == job_id,
            CallRequest.requester_id == requester_id,
            CallRequest.status.in_(("PENDING", "ACCEPTED")),
        )
        .first()
    )


def create(
    db: Session,
    *,
    job_id: str,
    requester_id: str,
    receiver_id: str,
    message: str | None = None,
) -> CallRequest:
    call_request = CallRequest(
        id=generate_id(),
        job_id=job_id,
        requester_id=requester_id,
        receiver_id=receiver_id,
        message=message,
        status="PENDING",
    )
    db.add(call_request)
    db.commit()
    db.refresh(call_request)
    return call_request


def list_for_profile(
    db: Session,
    profile_id: str,
    *,
    role: str = "all",
    status: str | None = None,
) -> list[CallRequest]:
    q = db.query(CallRequest).options(
        joinedload(CallRequest.job),
        joinedload(CallRequest.requester),
        joinedload(CallRequest.receiver),
    )
    if role == "sent":
        q = q.filter(CallRequest.requester_id == profile_id)
    elif role == "received":
        q = q.filter(CallRequest.receiver_id == profile_id)
    else:
        q = q.filter(or_(CallRequest.requester_id == profile_id, CallRequest.receiver_id == profile_id))
    if status:
        q = q.filter(CallRequest.status == status)
    return q.order_by(CallRequest.created_at.desc()).all()


def mark_accepted(
    db: Session,
    call_request: CallRequest,
    *,
    room_id: str,
    room_name: str,
    room_code: str | None = None,
    scheduled_time: datetime | None = None,
) -> CallRequest:
    call_request.status = "ACCEPTED"
    call_request.accepted_at = datetime.now(timezone.utc)
    call_request.room_id = room_id
    call_request.room_name = room_name
    if room_code:
        call_request.room_code = room_code
    if scheduled_time is not None:
        call_request.scheduled_time = scheduled_time
    db.commit()
    db.refresh(call_request)
    return call_request


def mark_rejected(db: Session, call_request: CallRequest, reason: str | None = None) -> CallRequest:
    call_request.status = "REJECTED"
    call_request.rejected_at = datetime.now(timezone.utc)
    call_request.reject_reason = reason
    db.commit()
    db.refresh(call_request)
    return call_request


def set_room(
    db: Session,
    call_request: CallRequest,
    *,
    room_id: str | None = None,
    room_code: str | None = None,
) -> CallRequest:
    if room_id is not None:
        call_request.room_id = room_id
    if room_code is not None:
        call_request.room_code = room_code
    db.commit()
    db.refresh(call_request)
    return call_request


def list_accepted_with_room(db: Session) -> list[CallRequest]:
    return (
        db.query(CallRequest)
        .filter(CallRequest.status == "ACCEPTED", CallRequest.room_id.isnot(None))
        .all()
    )


def delete_many(db: Session, call_requests: list[CallRequest]) -> int:
    for cr in call_requests:
        db.delete(cr)
    db.commit()
    return len(call_requests)
