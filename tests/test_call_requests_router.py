import app.routers.call_requests as calls_mod
from app.services.hms_service import HmsError, RoomNotFoundError, RoomResult

MOCK_ROOM_ID = "0f8fad5b-d9cb-469f-a165-70867728950e"


class _Row:
    def __init__(self, **kwargs):
        self.__dict__.update(kwargs)


def test_create_requires_ids(client):
    resp = client.post("/api/call-requests", json={"jobId": "job-1"})
    assert resp.status_code == 400


def test_create_receiver_must_be_job_creator(monkeypatch, client, make_job):
    monkeypatch.setattr(calls_mod, "get_job_by_id", lambda db, job_id: make_job())
    resp = client.post("/api/call-requests", json={"jobId": "job-1", "receiverId": "someone-else"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Receiver must be the job creator"


def test_create_rejects_duplicate_open_request(monkeypatch, client, make_job, make_call_request):
    monkeypatch.setattr(calls_mod, "get_job_by_id", lambda db, job_id: make_job())
    monkeypatch.setattr(calls_mod.call_request_repo, "get_open_for_job", lambda db, jid, pid: make_call_request())
    resp = client.post("/api/call-requests", json={"jobId": "job-1", "receiverId": "finder-1"})
    assert resp.status_code == 400


def test_create_notifies_receiver(monkeypatch, client, make_job, make_call_request):
    receiver = _Row(id="finder-1", email="finder@example.com", full_name="Fran Finder")
    cr = make_call_request(receiver=receiver)
    notified = []
    emailed = []
    monkeypatch.setattr(calls_mod, "get_job_by_id", lambda db, job_id: make_job())
    monkeypatch.setattr(calls_mod.call_request_repo, "get_open_for_job", lambda db, jid, pid: None)
    monkeypatch.setattr(calls_mod.call_request_repo, "create", lambda db, **kw: cr)
    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: cr)
    monkeypatch.setattr(calls_mod, "notify_call_request_received", lambda db, *a: notified.append(a))
    monkeypatch.setattr(calls_mod, "send_video_call_request_email", lambda *a: emailed.append(a))

    resp = client.post(
        "/api/call-requests",
        json={"jobId": "job-1", "receiverId": "finder-1", "message": "Can we talk about the role?"},
    )
    assert resp.status_code == 201
    assert resp.json()["callRequest"]["status"] == "PENDING"
    assert notified[0][0] == "finder-1"
    assert emailed[0][0] == "finder@example.com"


def test_list_splits_sent_and_received(monkeypatch, client, make_call_request):
    rows = [
        make_call_request(id="c1"),
        make_call_request(id="c2", requester_id="other", receiver_id="profile-1"),
    ]
    monkeypatch.setattr(calls_mod.call_request_repo, "list_for_profile", lambda db, pid, role, status: rows)
    resp = client.get("/api/call-requests?role=bogus")
    body = resp.json()
    assert body["total"] == 2
    assert [c["id"] for c in body["sent"]] == ["c1"]
    assert [c["id"] for c in body["received"]] == ["c2"]


def test_accept_only_receiver(monkeypatch, client, make_call_request):
    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: make_call_request())
    resp = client.post("/api/call-requests/call-1/accept")
    assert resp.status_code == 403


def test_accept_already_handled(monkeypatch, finder_client, make_call_request):
    monkeypatch.setattr(
        calls_mod.call_request_repo,
        "get_by_id",
        lambda db, rid: make_call_request(status="REJECTED"),
    )
    resp = finder_client.post("/api/call-requests/call-1/accept")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "This request has already been rejected"


def test_accept_with_mock_room(monkeypatch, finder_client, make_call_request):
    requester = _Row(id="profile-1", email="s@campus.edu", full_name="Sam Seeker")
    cr = make_call_request(job=_Row(id="job-1", title="Tutor", type="PART_TIME_JOB"), requester=requester)
    emailed = []

    def _accept(db, call_request, *, room_id, room_name, room_code=None, scheduled_time=None):
        call_request.status = "ACCEPTED"
        call_request.room_id = room_id
        call_request.room_name = room_name
        return call_request

    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: cr)
    monkeypatch.setattr(
        calls_mod.hms_service,
        "provision_room",
        lambda job_id, requester_id: RoomResult(room_id=MOCK_ROOM_ID, room_name="interview-x", is_mock=True),
    )
    monkeypatch.setattr(calls_mod.call_request_repo, "mark_accepted", _accept)
    monkeypatch.setattr(calls_mod, "notify_call_request_response", lambda *a, **kw: None)
    monkeypatch.setattr(calls_mod, "send_video_call_accepted_email", lambda *a: emailed.append(a))

    resp = finder_client.post("/api/call-requests/call-1/accept", json={"scheduledTime": "2026-11-02T15:00:00Z"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["isMockRoom"] is True
    assert body["roomId"] == MOCK_ROOM_ID
    assert body["videoCallLink"].endswith("/video-call/call-1")
    assert emailed[0][0] == "s@campus.edu"
    assert emailed[0][-1].startswith("2026-11-02T15:00:00")


def test_reject_records_reason(monkeypatch, finder_client, make_call_request):
    cr = make_call_request()

    def _reject(db, call_request, reason):
        call_request.status = "REJECTED"
        call_request.reject_reason = reason
        return call_request

    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: cr)
    monkeypatch.setattr(calls_mod.call_request_repo, "mark_rejected", _reject)
    monkeypatch.setattr(calls_mod, "notify_call_request_response", lambda *a, **kw: None)
    resp = finder_client.post("/api/call-requests/call-1/reject", json={"reason": "Position filled"})
    assert resp.status_code == 200
    assert resp.json()["callRequest"]["rejectReason"] == "Position filled"


def test_token_requires_accepted(monkeypatch, client, make_call_request):
    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: make_call_request())
    resp = client.get("/api/call-requests/call-1/token")
    assert resp.status_code == 400


def test_token_guest_for_requester(monkeypatch, client, make_call_request):
    cr = make_call_request(status="ACCEPTED", room_id="65f1c2d3e4", room_code="abc-defg-hij")
    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: cr)
    monkeypatch.setattr(calls_mod.hms_service, "generate_app_token", lambda room, user, role: f"tok-{role}")

    guest = client.get("/api/call-requests/call-1/token").json()
    assert guest["role"] == "guest"
    assert guest["token"] == "tok-guest"
    assert guest["isMockRoom"] is False


def test_token_host_for_receiver(monkeypatch, finder_client, make_call_request):
    cr = make_call_request(status="ACCEPTED", room_id="65f1c2d3e4")
    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: cr)
    monkeypatch.setattr(calls_mod.hms_service, "generate_app_token", lambda room, user, role: f"tok-{role}")
    body = finder_client.get("/api/call-requests/call-1/token").json()
    assert body["role"] == "host"
    assert body["userName"] == "Fran Finder"


def test_token_forbidden_for_outsider(monkeypatch, client, make_call_request):
    cr = make_call_request(requester_id="x", receiver_id="y", status="ACCEPTED", room_id="r")
    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: cr)
    assert client.get("/api/call-requests/call-1/token").status_code == 403


def test_generate_room_code_returns_existing(monkeypatch, client, make_call_request):
    cr = make_call_request(status="ACCEPTED", room_id="65f1c2d3e4", room_code="abc-defg-hij")
    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: cr)
    resp = client.post("/api/call-requests/call-1/generate-room-code")
    assert resp.status_code == 200
    assert resp.json() == {"roomCode": "abc-defg-hij", "message": "Room code already exists"}


def test_generate_room_code_replaces_mock_room(monkeypatch, client, make_call_request):
    cr = make_call_request(status="ACCEPTED", room_id=MOCK_ROOM_ID)

    def _set_room(db, call_request, room_id=None, room_code=None):
        if room_id is not None:
            call_request.room_id = room_id
        if room_code is not None:
            call_request.room_code = room_code
        return call_request

    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: cr)
    monkeypatch.setattr(
        calls_mod.hms_service,
        "create_room",
        lambda job_id, requester_id: RoomResult(room_id="65f1real", room_name="interview-y", room_code="new-code"),
    )
    monkeypatch.setattr(calls_mod.call_request_repo, "set_room", _set_room)
    resp = client.post("/api/call-requests/call-1/generate-room-code")
    assert resp.status_code == 200
    assert resp.json()["roomCreated"] is True
    assert cr.room_id == "65f1real"


def test_generate_room_code_mock_room_creation_fails(monkeypatch, client, make_call_request):
    cr = make_call_request(status="ACCEPTED", room_id=MOCK_ROOM_ID)
    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: cr)
    monkeypatch.setattr(
        calls_mod.hms_service,
        "create_room",
        lambda job_id, requester_id: (_ for _ in ()).throw(HmsError("100ms credentials not configured")),
    )
    resp = client.post("/api/call-requests/call-1/generate-room-code")
    assert resp.status_code == 500
    assert resp.json()["detail"]["code"] == "INVALID_ROOM_ID"


def test_generate_room_code_room_missing(monkeypatch, client, make_call_request):
    cr = make_call_request(status="ACCEPTED", room_id="65f1gone")
    monkeypatch.setattr(calls_mod.call_request_repo, "get_by_id", lambda db, rid: cr)
    monkeypatch.setattr(
        calls_mod.hms_service,
        "create_room_code",
        lambda room_id: (_ for _ in ()).throw(RoomNotFoundError("gone")),
    )
    resp = client.post("/api/call-requests/call-1/generate-room-code")
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "ROOM_NOT_FOUND"
