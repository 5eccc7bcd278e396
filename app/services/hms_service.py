"""
Video room provisioning on 100ms plus app-token signing.
When credentials are missing or the API fails, callers fall back to a locally
generated UUID "mock" room so a call request can still be accepted.
"""

import logging
import re
import time
from dataclasses import dataclass
from uuid import uuid4

import httpx

from app.config import settings
from app.core.security import generate_id, sign_hs256

logger = logging.getLogger(__name__)

HMS_TIMEOUT_SECONDS = 15.0
TOKEN_TTL_SECONDS = 24 * 3600
HOST_ROLE = "host"
GUEST_ROLE = "guest"

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


class HmsError(Exception):
    pass


class RoomNotFoundError(HmsError):
    pass


@dataclass
class RoomResult:
    room_id: str
    room_name: str
    room_code: str | None = None
    is_mock: bool = False


def has_credentials() -> bool:
    return bool(settings.hms_app_access_key and settings.hms_app_secret)


def generate_room_name(job_id: str, requester_id: str) -> str:
    return f"interview-{job_id[:8]}-{requester_id[:8]}-{int(time.time() * 1000)}"


def is_mock_room_id(room_id: str | None) -> bool:
    """Rooms created by 100ms have opaque hex ids; UUIDs are our local mocks."""
    return bool(room_id) and bool(_UUID_RE.match(room_id))


def mock_room(job_id: str, requester_id: str) -> RoomResult:
    return RoomResult(room_id=str(uuid4()), room_name=generate_room_name(job_id, requester_id), is_mock=True)


def management_token() -> str:
    if settings.hms_management_token:
        return settings.hms_management_token
    if not has_credentials():
        raise HmsError("100ms credentials not configured")
    now = int(time.time())
    payload = {
        "access_key": settings.hms_app_access_key,
        "type": "management",
        "version": 2,
        "jti": generate_id(),
        "iat": now,
        "nbf": now,
        "exp": now + TOKEN_TTL_SECONDS,
    }
    return sign_hs256(payload, settings.hms_app_secret)


def _headers() -> dict:
    return {
        "Authorization": f"Bearer {management_token()}",
        "Content-Type": "application/json",
    }


def _api(path: str) -> str:
    return f"{settings.hms_api_base.rstrip('/')}/{path.lstrip('/')}"


def _error_message(resp) -> str:
    try:
        data = resp.json()
        return data.get("message") or data.get("error") or resp.text
    except Exception:
        return resp.text or f"HTTP {resp.status_code}"


def _json_body(resp, what: str) -> dict:
    """Parsed JSON object from a 2xx reply; anything else is an HmsError."""
    try:
        data = resp.json()
    except ValueError as e:
        raise HmsError(f"{what} returned a non-JSON body") from e
    if not isinstance(data, dict):
        raise HmsError(f"{what} returned an unexpected body")
    return data


def _extract_guest_code(data) -> str | None:
    if not isinstance(data, dict):
        return None
    inner = data.get("data")
    if isinstance(inner, list):
        for item in inner:
            if isinstance(item, dict) and item.get("role") == GUEST_ROLE:
                return item.get("code")
        return None
    if isinstance(inner, dict):
        return inner.get("code")
    return data.get("code")


def room_exists(room_id: str) -> bool:
    try:
        resp = httpx.get(_api(f"rooms/{room_id}"), headers=_headers(), timeout=HMS_TIMEOUT_SECONDS)
    except httpx.HTTPError as e:
        logger.warning("100ms room lookup failed room=%s: %s", room_id, e)
        return False
    return resp.status_code < 400


def create_room_code(room_id: str) -> str:
    """Create (or fetch) the guest room code used by the prebuilt UI."""
    if not room_exists(room_id):
        raise RoomNotFoundError(f"Room {room_id} does not exist on 100ms")
    try:
        resp = httpx.post(
            _api(f"room-codes/room/{room_id}"),
            json={"role": GUEST_ROLE, "enabled": True},
            headers=_headers(),
            timeout=HMS_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        raise HmsError(f"Room code request failed: {e}") from e
    if resp.status_code == 404:
        raise RoomNotFoundError(f"Room {room_id} does not exist on 100ms")
    if resp.status_code >= 400:
        raise HmsError(f"Room code creation failed: {_error_message(resp)}")
    code = _extract_guest_code(_json_body(resp, "Room code API"))
    if not code:
        raise HmsError("Room code API returned no guest code")
    logger.info("Created 100ms room code for room=%s", room_id)
    return code


def create_room(job_id: str, requester_id: str) -> RoomResult:
    if not has_credentials():
        raise HmsError("100ms credentials not configured")
    room_name = generate_room_name(job_id, requester_id)
    try:
        resp = httpx.post(
            _api("rooms"),
            json={
                "name": room_name,
                "description": "Video call room for job interview",
                "template_id": settings.hms_template_id,
            },
            headers=_headers(),
            timeout=HMS_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        raise HmsError(f"Failed to create 100ms room: {e}") from e
    if resp.status_code in (401, 403):
        raise HmsError("100ms authentication failed; check HMS_APP_ACCESS_KEY and HMS_APP_SECRET")
    if resp.status_code >= 400:
        raise HmsError(f"Failed to create 100ms room: {_error_message(resp)}")
    data = _json_body(resp, "100ms room API")
    room_id = data.get("id")
    if not room_id:
        raise HmsError("100ms room response has no id")
    room = RoomResult(room_id=room_id, room_name=data.get("name") or room_name)
    try:
        room.room_code = create_room_code(room_id)
    except HmsError as e:
        # Token-based join still works without a code.
        logger.warning("Room %s created but room code failed: %s", room_id, e)
    logger.info("Created 100ms room id=%s name=%s", room.room_id, room.room_name)
    return room


def provision_room(job_id: str, requester_id: str) -> RoomResult:
    """Real room when possible, otherwise a mock room."""
    if not has_credentials():
        logger.warning("100ms credentials not configured; using mock room for job=%s", job_id)
        return mock_room(job_id, requester_id)
    try:
        return create_room(job_id, requester_id)
    except HmsError as e:
        logger.error("100ms room creation failed, falling back to mock room: %s", e)
        return mock_room(job_id, requester_id)


def generate_app_token(room_id: str, user_id: str, role: str) -> str:
    now = int(time.time())
    if not has_credentials():
        logger.warning("100ms credentials not configured; issuing mock token")
        return f"mock-token-{user_id}-{room_id}-{now * 1000}"
    payload = {
        "access_key": settings.hms_app_access_key,
        "room_id": room_id,
        "user_id": user_id,
        "role": HOST_ROLE if role == HOST_ROLE else GUEST_ROLE,
        "type": "app",
        "version": 2,
        "jti": f"{user_id}-{now}",
        "iat": now,
        "nbf": now,
        "exp": now + TOKEN_TTL_SECONDS,
    }
    return sign_hs256(payload, settings.hms_app_secret)
