import app.routers.bookmarks as bm_mod
import app.routers.dashboard as dash_mod
import app.routers.notifications as notif_mod


class _Row:
    def __init__(self, **kwargs):
        self.__dict__.update(kwargs)


def _notification(**overrides):
    fields = {
        "id": "n1",
        "user_id": "profile-1",
        "type": "APPLICATION_STATUS",
        "title": "Application Update",
        "content": "You were shortlisted",
        "link": "/applications",
        "extra": {"jobId": "job-1"},
        "is_read": False,
        "created_at": None,
    }
    fields.update(overrides)
    return _Row(**fields)


def test_add_bookmark_requires_job_id(client):
    assert client.post("/api/bookmarks", json={}).status_code == 400


def test_add_bookmark_job_not_found(monkeypatch, client):
    monkeypatch.setattr(bm_mod, "get_job_by_id", lambda db, job_id: None)
    assert client.post("/api/bookmarks", json={"jobId": "nope"}).status_code == 404


def test_add_bookmark_duplicate(monkeypatch, client, make_job):
    monkeypatch.setattr(bm_mod, "get_job_by_id", lambda db, job_id: make_job())
    monkeypatch.setattr(bm_mod.bookmark_repo, "get", lambda db, pid, jid: object())
    resp = client.post("/api/bookmarks", json={"jobId": "job-1"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Job already bookmarked"


def test_add_bookmark_notifies_owner(monkeypatch, client, make_job):
    notified = []
    monkeypatch.setattr(bm_mod, "get_job_by_id", lambda db, job_id: make_job())
    monkeypatch.setattr(bm_mod.bookmark_repo, "get", lambda db, pid, jid: None)
    monkeypatch.setattr(
        bm_mod.bookmark_repo,
        "create",
        lambda db, pid, jid: _Row(id="b1", job_id=jid, created_at=None),
    )
    monkeypatch.setattr(bm_mod, "notify_job_bookmarked", lambda db, *a: notified.append(a))
    resp = client.post("/api/bookmarks", json={"jobId": "job-1"})
    assert resp.status_code == 201
    assert resp.json()["bookmark"]["jobId"] == "job-1"
    assert notified == [("finder-1", "job-1", "Backend Developer for Study App", "Riley Student")]


def test_bookmarking_own_job_is_silent(monkeypatch, finder_client, make_job):
    monkeypatch.setattr(bm_mod, "get_job_by_id", lambda db, job_id: make_job())
    monkeypatch.setattr(bm_mod.bookmark_repo, "get", lambda db, pid, jid: None)
    monkeypatch.setattr(bm_mod.bookmark_repo, "create", lambda db, pid, jid: _Row(id="b1", job_id=jid, created_at=None))
    monkeypatch.setattr(
        bm_mod,
        "notify_job_bookmarked",
        lambda *a: (_ for _ in ()).throw(AssertionError("owner should not be notified")),
    )
    assert finder_client.post("/api/bookmarks", json={"jobId": "job-1"}).status_code == 201


def test_remove_bookmark(monkeypatch, client):
    removed = []
    monkeypatch.setattr(bm_mod.bookmark_repo, "get", lambda db, pid, jid: _Row(id="b1"))
    monkeypatch.setattr(bm_mod.bookmark_repo, "delete", lambda db, b: removed.append(b.id))
    resp = client.delete("/api/bookmarks?jobId=job-1")
    assert resp.status_code == 200
    assert removed == ["b1"]


def test_remove_missing_bookmark(monkeypatch, client):
    monkeypatch.setattr(bm_mod.bookmark_repo, "get", lambda db, pid, jid: None)
    assert client.delete("/api/bookmarks?jobId=job-1").status_code == 404
    assert client.delete("/api/bookmarks").status_code == 400


def test_list_bookmarks_with_jobs(monkeypatch, client, make_job):
    monkeypatch.setattr(
        bm_mod.bookmark_repo,
        "list_for_user",
        lambda db, pid: [_Row(id="b1", job_id="job-1", created_at=None, job=make_job())],
    )
    resp = client.get("/api/bookmarks")
    assert resp.json()["bookmarks"][0]["job"]["id"] == "job-1"


def test_list_notifications(monkeypatch, client):
    seen = {}

    def _list(db, pid, limit=50, unread_only=False):
        seen.update(limit=limit, unread_only=unread_only)
        return {"notifications": [_notification()], "unreadCount": 1}

    monkeypatch.setattr(notif_mod.notification_service, "list_notifications", _list)
    resp = client.get("/api/notifications?limit=500&unread=true")
    assert resp.status_code == 200
    assert seen == {"limit": 100, "unread_only": True}
    body = resp.json()
    assert body["unreadCount"] == 1
    assert body["notifications"][0]["metadata"] == {"jobId": "job-1"}


def test_mark_read_other_users_notification(monkeypatch, client):
    monkeypatch.setattr(notif_mod.notification_repo, "get_by_id", lambda db, nid: _notification(user_id="other"))
    assert client.patch("/api/notifications/n1").status_code == 403


def test_mark_read_missing(monkeypatch, client):
    monkeypatch.setattr(notif_mod.notification_repo, "get_by_id", lambda db, nid: None)
    assert client.delete("/api/notifications/n1").status_code == 404


def test_mark_read(monkeypatch, client):
    def _mark(db, n):
        n.is_read = True
        return n

    monkeypatch.setattr(notif_mod.notification_repo, "get_by_id", lambda db, nid: _notification())
    monkeypatch.setattr(notif_mod.notification_service, "mark_as_read", _mark)
    resp = client.patch("/api/notifications/n1")
    assert resp.json()["notification"]["isRead"] is True


def test_mark_all_and_clear_read(monkeypatch, client):
    monkeypatch.setattr(notif_mod.notification_service, "mark_all_as_read", lambda db, pid: 4)
    monkeypatch.setattr(notif_mod.notification_repo, "delete_read", lambda db, pid: 2)
    assert client.patch("/api/notifications").json()["updated"] == 4
    assert client.delete("/api/notifications").json()["deleted"] == 2


def test_dashboard_seeker(monkeypatch, client):
    monkeypatch.setattr(dash_mod, "get_seeker_analytics", lambda db, pid: {"applicationsSent": 2})
    monkeypatch.setattr(
        dash_mod,
        "get_finder_analytics",
        lambda db, pid: (_ for _ in ()).throw(AssertionError("seekers get seeker analytics")),
    )
    body = client.get("/api/dashboard/analytics").json()
    assert body == {"role": "SEEKER", "analytics": {"applicationsSent": 2}}


def test_dashboard_finder(monkeypatch, finder_client):
    monkeypatch.setattr(dash_mod, "get_finder_analytics", lambda db, pid: {"activeJobs": 1})
    body = finder_client.get("/api/dashboard/analytics").json()
    assert body["role"] == "FINDER"
    assert body["analytics"]["activeJobs"] == 1


def test_dashboard_failure_sanitized(monkeypatch, client):
    monkeypatch.setattr(
        dash_mod,
        "get_seeker_analytics",
        lambda db, pid: (_ for _ in ()).throw(RuntimeError("sql error")),
    )
    resp = client.get("/api/dashboard/analytics")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to fetch analytics"


def test_unread_count(monkeypatch, client):
    seen = []
    monkeypatch.setattr(notif_mod.notification_service, "get_unread_count", lambda db, pid: seen.append(pid) or 3)
    resp = client.get("/api/notifications/unread-count")
    assert resp.status_code == 200
    assert resp.json() == {"unreadCount": 3}
    assert seen == ["profile-1"]
