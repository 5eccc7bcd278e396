import logging

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies import get_current_profile
from app.repos import call_request_repo
from app.repos.job_repo import get_by_id as get_job_by_id
from app.routers.serializers import call_request_to_response
from app.schemas.call_request import CallRequestAccept, CallRequestCreate, CallRequestReject
from app.services import hms_service
from app.services.email_service import (
    send_video_call_accepted_email,
    send_video_call_rejected_email,
    send_video_call_request_email,
)
from app.services.notification_service import notify_call_request_received, notify_call_request_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/call-requests", tags=["call-requests"])


def _load(db: Session, request_id: str):
    call_request = call_request_repo.get_by_id(db, request_id)
    if not call_request:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Call request not found")
    return call_request


def _require_receiver_pending(call_request, profile, verb: str) -> None:
    if call_request.receiver_id != profile.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only the job poster can {verb} this request",
        )
    if call_request.status != "PENDING":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"This request has already been {call_request.status.lower()}",
        )


def _require_joinable(call_request, profile) -> bool:
    """Participant check plus ACCEPTED-with-room. Returns True for the receiver (host)."""
    is_receiver = call_request.receiver_id == profile.id
    if not is_receiver and call_request.requester_id != profile.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not authorized to join this call")
    if call_request.status != "ACCEPTED":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Call request has not been accepted yet")
    if not call_request.room_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Room has not been created yet")
    return is_receiver


def _video_call_link(request_id: str) -> str:
    return f"{settings.app_url.rstrip('/')}/video-call/{request_id}"


@router.post("", status_code=status.HTTP_201_CREATED)
def create_call_request(
    data: CallRequestCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    if not data.job_id or not data.receiver_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Job ID and receiver ID are required")
    try:
        job = get_job_by_id(db, data.job_id)
        if not job:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
        if job.created_by_id != data.receiver_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Receiver must be the job creator")
        if job.created_by_id == profile.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot request a call for your own job")
        if call_request_repo.get_open_for_job(db, job.id, profile.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You already have a pending or accepted call request for this job",
            )
        call_request = call_request_repo.create(
            db,
            job_id=job.id,
            requester_id=profile.id,
            receiver_id=data.receiver_id,
            message=data.message,
        )
        call_request = call_request_repo.get_by_id(db, call_request.id) or call_request
        requester_name = profile.full_name or "Someone"
        notify_call_request_received(db, data.receiver_id, profile.id, requester_name, job.id, job.title)
        receiver = getattr(call_request, "receiver", None)
        if receiver is not None and receiver.email:
            background_tasks.add_task(
                send_video_call_request_email,
                receiver.email,
                receiver.full_name,
                requester_name,
                job.title,
                data.message,
            )
        logger.info("Call request %s created job=%s requester=%s", call_request.id, job.id, profile.id)
        return {"callRequest": call_request_to_response(call_request)}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Create call request failed for profile=%s: %s", profile.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create call request") from e


@router.get("")
def list_call_requests(
    role: str = "all",
    status: str | None = None,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    role = role if role in ("sent", "received") else "all"
    items = call_request_repo.list_for_profile(db, profile.id, role=role, status=status.upper() if status else None)
    payload = [call_request_to_response(cr) for cr in items]
    return {
        "callRequests": payload,
        "sent": [cr for cr in payload if cr["requesterId"] == profile.id],
        "received": [cr for cr in payload if cr["receiverId"] == profile.id],
        "total": len(payload),
    }


@router.post("/{request_id}/accept")
def accept_call_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    data: CallRequestAccept | None = Body(default=None),
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    """Accept and provision a video room (mock room when 100ms is unavailable)."""
    call_request = _load(db, request_id)
    _require_receiver_pending(call_request, profile, "accept")
    scheduled_time = data.scheduled_time if data else None
    try:
        room = hms_service.provision_room(call_request.job_id, call_request.requester_id)
        call_request = call_request_repo.mark_accepted(
            db,
            call_request,
            room_id=room.room_id,
            room_name=room.room_name,
            room_code=room.room_code,
            scheduled_time=scheduled_time,
        )
        job_title = call_request.job.title if call_request.job is not None else "your job"
        notify_call_request_response(db, call_request.requester_id, call_request.id, job_title, accepted=True)
        requester = call_request.requester
        if requester is not None and requester.email:
            background_tasks.add_task(
                send_video_call_accepted_email,
                requester.email,
                requester.full_name or "User",
                profile.full_name or "User",
                job_title,
                call_request.id,
                scheduled_time.isoformat() if scheduled_time else None,
            )
        logger.info("Call request %s accepted room=%s mock=%s", call_request.id, room.room_id, room.is_mock)
        return {
            "callRequest": call_request_to_response(call_request),
            "message": "Call request accepted successfully",
            "roomId": room.room_id,
            "roomName": room.room_name,
            "roomCode": room.room_code,
            "videoCallLink": _video_call_link(call_request.id),
            "isMockRoom": room.is_mock,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Accept failed for call request=%s: %s", request_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to accept call request") from e


@router.post("/{request_id}/reject")
def reject_call_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    data: CallRequestReject | None = Body(default=None),
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    call_request = _load(db, request_id)
    _require_receiver_pending(call_request, profile, "reject")
    reason = data.reason if data else None
    try:
        call_request = call_request_repo.mark_rejected(db, call_request, reason)
        job_title = call_request.job.title if call_request.job is not None else "your job"
        notify_call_request_response(db, call_request.requester_id, call_request.id, job_title, accepted=False)
        requester = call_request.requester
        if requester is not None and requester.email:
            background_tasks.add_task(
                send_video_call_rejected_email,
                requester.email,
                requester.full_name or "User",
                job_title,
                reason,
            )
        return {"callRequest": call_request_to_response(call_request), "message": "Call request rejected"}
    except Exception as e:
        logger.exception("Reject failed for call request=%s: %s", request_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to reject call request") from e


@router.get("/{request_id}/token")
def get_call_token(
    request_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    """Receiver joins as host, requester as guest."""
    call_request = _load(db, request_id)
    is_receiver = _require_joinable(call_request, profile)
    role = hms_service.HOST_ROLE if is_receiver else hms_service.GUEST_ROLE
    try:
        token = hms_service.generate_app_token(call_request.room_id, profile.id, role)
    except Exception as e:
        logger.exception("Token generation failed for call request=%s: %s", request_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate token") from e
    return {
        "token": token,
        "roomId": call_request.room_id,
        "role": role,
        "roomCode": call_request.room_code,
        "userName": profile.full_name or profile.email or "User",
        "isMockRoom": hms_service.is_mock_room_id(call_request.room_id),
    }


@router.post("/{request_id}/generate-room-code")
def generate_room_code(
    request_id: str,
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    call_request = _load(db, request_id)
    _require_joinable(call_request, profile)
    if call_request.room_code:
        return {"roomCode": call_request.room_code, "message": "Room code already exists"}

    room_created = False
    if hms_service.is_mock_room_id(call_request.room_id):
        logger.warning("Call request %s has a mock room; creating a real 100ms room", request_id)
        try:
            room = hms_service.create_room(call_request.job_id, call_request.requester_id)
        except hms_service.HmsError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={
                    "error": "Failed to create video call room. The existing room ID is invalid (old mock room).",
                    "code": "INVALID_ROOM_ID",
                    "details": str(e),
                },
            ) from e
        call_request.room_name = room.room_name
        call_request = call_request_repo.set_room(db, call_request, room_id=room.room_id, room_code=room.room_code)
        room_created = True
        if call_request.room_code:
            return {"roomCode": call_request.room_code, "message": "Room code generated successfully", "roomCreated": True}

    try:
        code = hms_service.create_room_code(call_request.room_id)
    except hms_service.RoomNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "The video call room does not exist. Please ask the job poster to accept the call request again.",
                "code": "ROOM_NOT_FOUND",
                "details": str(e),
            },
        ) from e
    except hms_service.HmsError as e:
        logger.error("Room code generation failed for call request=%s: %s", request_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to generate room code", "details": str(e)},
        ) from e
    call_request_repo.set_room(db, call_request, room_code=code)
    return {"roomCode": code, "message": "Room code generated successfully", "roomCreated": room_created}
