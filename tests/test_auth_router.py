from datetime import datetime, timedelta, timezone

import app.routers.auth as auth_mod


class _User:
    def __init__(
        self,
        *,
        user_id="u1",
        email="u@example.com",
        is_active=True,
        is_admin=False,
        password_hash="hashed",
        temp_password_hash=None,
        temp_password_expires_at=None,
    ):
        self.id = user_id
        self.email = email
        self.is_active = is_active
        self.is_admin = is_admin
        self.password_hash = password_hash
        self.temp_password_hash = temp_password_hash
        self.temp_password_expires_at = temp_password_expires_at


class _Profile:
    def __init__(self, profile_id="p1", role="FINDER"):
        self.id = profile_id
        self.role = role


class _Resume:
    def __init__(self, path):
        self.storage_path = path


REGISTER = {"email": "new@example.com", "password": "password123", "confirm_password": "password123"}


def _no_profile(monkeypatch):
    monkeypatch.setattr(auth_mod, "get_profile_by_user_id", lambda db, uid: None)


def test_register_rejects_existing_email(monkeypatch, client):
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: _User())
    resp = client.post("/api/auth/register", json=REGISTER)
    assert resp.status_code == 400
    assert "already" in resp.json()["detail"].lower()


def test_register_success_has_no_profile_yet(monkeypatch, client):
    _no_profile(monkeypatch)
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: None)
    monkeypatch.setattr(auth_mod.user_repo, "create", lambda db, email, pw: _User(user_id="new1", email=email))
    monkeypatch.setattr(auth_mod, "create_access_token", lambda uid: "token-1")
    resp = client.post("/api/auth/register", json=REGISTER)
    assert resp.status_code == 200
    body = resp.json()
    assert body["access_token"] == "token-1"
    assert body["user"]["has_profile"] is False
    assert body["user"]["role"] is None


def test_login_invalid_credentials(monkeypatch, client):
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: None)
    resp = client.post("/api/auth/login", json={"email": "x@example.com", "password": "bad"})
    assert resp.status_code == 401


def test_login_disabled_user(monkeypatch, client):
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: _User(is_active=False))
    resp = client.post("/api/auth/login", json={"email": "x@example.com", "password": "bad"})
    assert resp.status_code == 403


def test_login_temp_password_requires_change(monkeypatch, client):
    exp = datetime.now(timezone.utc) + timedelta(minutes=5)
    user = _User(temp_password_hash="tmphash", temp_password_expires_at=exp)
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: user)
    monkeypatch.setattr(auth_mod, "verify_password", lambda plain, hashed: hashed == "tmphash")
    monkeypatch.setattr(auth_mod, "get_profile_by_user_id", lambda db, uid: _Profile())
    monkeypatch.setattr(auth_mod, "create_access_token", lambda uid: "temp-token")
    resp = client.post("/api/auth/login", json={"email": "u@example.com", "password": "anything"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["access_token"] == "temp-token"
    assert body["user"]["requires_password_change"] is True
    assert body["user"]["role"] == "FINDER"


def test_login_expired_temp_password_falls_back_to_normal(monkeypatch, client):
    exp = datetime.now(timezone.utc) - timedelta(minutes=1)
    user = _User(temp_password_hash="tmphash", temp_password_expires_at=exp, password_hash="normal-hash")
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: user)
    monkeypatch.setattr(auth_mod, "verify_password", lambda plain, hashed: hashed == "tmphash")
    resp = client.post("/api/auth/login", json={"email": "u@example.com", "password": "anything"})
    assert resp.status_code == 401


def test_login_normal_password_success(monkeypatch, client):
    _no_profile(monkeypatch)
    user = _User(password_hash="normal-hash")
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: user)
    monkeypatch.setattr(auth_mod, "verify_password", lambda plain, hashed: hashed == "normal-hash")
    monkeypatch.setattr(auth_mod, "create_access_token", lambda uid: "normal-token")
    resp = client.post("/api/auth/login", json={"email": "U@Example.com", "password": "good"})
    assert resp.status_code == 200
    assert resp.json()["access_token"] == "normal-token"


def test_forgot_password_generic_response_for_unknown(monkeypatch, client):
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: None)
    resp = client.post("/api/auth/forgot-password", json={"email": "none@example.com"})
    assert resp.status_code == 200
    assert resp.json()["message"] == auth_mod.RESET_MESSAGE


def test_forgot_password_emails_temp_password(monkeypatch, client):
    user = _User()
    sent = []
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: user)
    monkeypatch.setattr(auth_mod, "generate_temp_password", lambda: "TEMP1234")
    monkeypatch.setattr(auth_mod, "hash_password", lambda x: "hashed-temp")
    monkeypatch.setattr(auth_mod.user_repo, "set_temp_password", lambda db, uid, h, e: user)
    monkeypatch.setattr(auth_mod, "send_temp_password_email", lambda to, pw, minutes: sent.append((to, pw, minutes)))
    monkeypatch.setattr(auth_mod.settings, "expose_temp_password_in_response", False)
    resp = client.post("/api/auth/forgot-password", json={"email": "u@example.com"})
    assert resp.status_code == 200
    assert "temp_password" not in resp.json()
    assert sent == [("u@example.com", "TEMP1234", 10)]


def test_forgot_password_can_expose_temp_when_enabled(monkeypatch, client):
    user = _User()
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: user)
    monkeypatch.setattr(auth_mod, "generate_temp_password", lambda: "TEMP1234")
    monkeypatch.setattr(auth_mod, "hash_password", lambda x: "hashed-temp")
    monkeypatch.setattr(auth_mod.user_repo, "set_temp_password", lambda db, uid, h, e: user)
    monkeypatch.setattr(auth_mod, "send_temp_password_email", lambda to, pw, minutes: None)
    monkeypatch.setattr(auth_mod.settings, "expose_temp_password_in_response", True)
    resp = client.post("/api/auth/forgot-password", json={"email": "u@example.com"})
    assert resp.status_code == 200
    assert resp.json()["temp_password"] == "TEMP1234"


def test_forgot_password_returns_500_on_failure(monkeypatch, client):
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: _User())
    monkeypatch.setattr(auth_mod, "hash_password", lambda x: "hashed-temp")
    monkeypatch.setattr(
        auth_mod.user_repo, "set_temp_password", lambda db, uid, h, e: (_ for _ in ()).throw(RuntimeError("db"))
    )
    resp = client.post("/api/auth/forgot-password", json={"email": "u@example.com"})
    assert resp.status_code == 500


def test_change_password_requires_temp_mode(monkeypatch, client):
    monkeypatch.setattr(auth_mod.user_repo, "is_temp_password_mode", lambda u: False)
    resp = client.post("/api/auth/change-password", json={"new_password": "newpassword1", "confirm_password": "newpassword1"})
    assert resp.status_code == 400


def test_change_password_success(monkeypatch, client):
    _no_profile(monkeypatch)
    cleared = _User(user_id="user-1")
    monkeypatch.setattr(auth_mod.user_repo, "is_temp_password_mode", lambda u: u is not cleared)
    monkeypatch.setattr(auth_mod, "hash_password", lambda p: "new-hash")
    monkeypatch.setattr(auth_mod.user_repo, "update", lambda db, uid, **kwargs: cleared)
    monkeypatch.setattr(auth_mod.user_repo, "clear_temp_password", lambda db, uid: cleared)
    monkeypatch.setattr(auth_mod, "create_access_token", lambda uid: "tok-new")
    resp = client.post("/api/auth/change-password", json={"new_password": "newpassword1", "confirm_password": "newpassword1"})
    assert resp.status_code == 200
    assert resp.json()["access_token"] == "tok-new"
    assert resp.json()["user"]["requires_password_change"] is False


def test_change_password_returns_500_on_failure(monkeypatch, client):
    monkeypatch.setattr(auth_mod.user_repo, "is_temp_password_mode", lambda u: True)
    monkeypatch.setattr(auth_mod, "hash_password", lambda p: "new-hash")
    monkeypatch.setattr(auth_mod.user_repo, "update", lambda db, uid, **kwargs: (_ for _ in ()).throw(RuntimeError("db")))
    resp = client.post("/api/auth/change-password", json={"new_password": "newpassword1", "confirm_password": "newpassword1"})
    assert resp.status_code == 500


def test_get_me_reports_profile_and_role(monkeypatch, client):
    monkeypatch.setattr(auth_mod, "get_profile_by_user_id", lambda db, uid: _Profile(role="SEEKER"))
    resp = client.get("/api/auth/me")
    assert resp.status_code == 200
    body = resp.json()
    assert body["has_profile"] is True
    assert body["role"] == "SEEKER"
    assert body["is_admin"] is False


def test_update_account_email_conflict(monkeypatch, client):
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: _User(user_id="other"))
    resp = client.patch("/api/auth/me", json={"email": "other@example.com"})
    assert resp.status_code == 400


def test_update_account_wrong_current_password(monkeypatch, client):
    monkeypatch.setattr(auth_mod, "verify_password", lambda plain, hashed: False)
    resp = client.patch(
        "/api/auth/me",
        json={"current_password": "wrong", "new_password": "newpassword1", "confirm_new_password": "newpassword1"},
    )
    assert resp.status_code == 401


def test_update_account_success(monkeypatch, client):
    _no_profile(monkeypatch)
    updated = _User(user_id="user-1", email="next@example.com", password_hash="new-hash")
    calls = []
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: None)
    monkeypatch.setattr(auth_mod.user_repo, "update", lambda db, uid, **kwargs: calls.append(kwargs) or updated)
    monkeypatch.setattr(auth_mod, "verify_password", lambda plain, hashed: True)
    monkeypatch.setattr(auth_mod, "hash_password", lambda p: "new-hash")
    monkeypatch.setattr(auth_mod.user_repo, "get_by_id", lambda db, uid: updated)
    resp = client.patch(
        "/api/auth/me",
        json={
            "email": "Next@Example.com",
            "current_password": "oldpassword",
            "new_password": "newpassword1",
            "confirm_new_password": "newpassword1",
        },
    )
    assert resp.status_code == 200
    assert resp.json()["email"] == "next@example.com"
    assert calls == [{"email": "next@example.com"}, {"password_hash": "new-hash"}]


def test_delete_account_removes_stored_resumes(monkeypatch, client):
    deleted_paths = []
    monkeypatch.setattr(auth_mod, "get_profile_by_user_id", lambda db, uid: _Profile())
    monkeypatch.setattr(auth_mod, "list_resumes_for_profile", lambda db, pid: [_Resume("p1/a.pdf"), _Resume("p1/b.pdf")])
    monkeypatch.setattr(auth_mod.user_repo, "delete_user", lambda db, uid: True)
    monkeypatch.setattr(auth_mod.storage, "delete_file", lambda path: deleted_paths.append(path) or True)
    resp = client.delete("/api/auth/account")
    assert resp.status_code == 200
    assert "deleted" in resp.json()["message"].lower()
    assert deleted_paths == ["p1/a.pdf", "p1/b.pdf"]


def test_delete_account_returns_500_on_failure(monkeypatch, client):
    _no_profile(monkeypatch)
    monkeypatch.setattr(auth_mod.user_repo, "delete_user", lambda db, uid: (_ for _ in ()).throw(RuntimeError("db")))
    resp = client.delete("/api/auth/account")
    assert resp.status_code == 500
