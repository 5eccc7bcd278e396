import pytest
from fastapi import HTTPException

import app.dependencies as deps


class _Creds:
    def __init__(self, token: str):
        self.credentials = token


class _User:
    def __init__(self, user_id="u1", is_admin=False, email="u@example.com"):
        self.id = user_id
        self.is_admin = is_admin
        self.email = email


def test_get_current_user_missing_credentials():
    with pytest.raises(HTTPException) as ex:
        deps.get_current_user(db=object(), credentials=None)
    assert ex.value.status_code == 401
    assert ex.value.headers == {"WWW-Authenticate": "Bearer"}


def test_get_current_user_invalid_token(monkeypatch):
    monkeypatch.setattr(deps, "decode_access_token", lambda token: None)
    with pytest.raises(HTTPException) as ex:
        deps.get_current_user(db=object(), credentials=_Creds("bad"))
    assert ex.value.status_code == 401


def test_get_current_user_user_not_found(monkeypatch):
    monkeypatch.setattr(deps, "decode_access_token", lambda token: "u1")
    monkeypatch.setattr(deps, "get_by_id", lambda db, uid: None)
    with pytest.raises(HTTPException) as ex:
        deps.get_current_user(db=object(), credentials=_Creds("tok"))
    assert ex.value.status_code == 401


def test_get_current_user_success(monkeypatch):
    user = _User(user_id="u1")
    monkeypatch.setattr(deps, "decode_access_token", lambda token: "u1")
    monkeypatch.setattr(deps, "get_by_id", lambda db, uid: user)
    assert deps.get_current_user(db=object(), credentials=_Creds("tok")) is user


def test_get_current_user_disabled_account(monkeypatch):
    user = _User()
    user.is_active = False
    monkeypatch.setattr(deps, "decode_access_token", lambda token: "u1")
    monkeypatch.setattr(deps, "get_by_id", lambda db, uid: user)
    with pytest.raises(HTTPException) as ex:
        deps.get_current_user(db=object(), credentials=_Creds("tok"))
    assert ex.value.status_code == 403
    assert ex.value.detail == "Account is disabled"


def test_get_current_user_full_access_blocks_temp(monkeypatch):
    monkeypatch.setattr(deps, "is_temp_password_mode", lambda u: True)
    with pytest.raises(HTTPException) as ex:
        deps.get_current_user_full_access(user=_User())
    assert ex.value.status_code == 403


def test_get_current_profile_missing_is_404(monkeypatch):
    monkeypatch.setattr(deps, "get_profile_by_user_id", lambda db, uid: None)
    with pytest.raises(HTTPException) as ex:
        deps.get_current_profile(db=object(), user=_User())
    assert ex.value.status_code == 404
    assert ex.value.detail == "Profile not found"


def test_get_current_profile_success(monkeypatch):
    profile = object()
    monkeypatch.setattr(deps, "get_profile_by_user_id", lambda db, uid: profile)
    assert deps.get_current_profile(db=object(), user=_User()) is profile


def test_get_current_admin_requires_admin(monkeypatch):
    monkeypatch.setattr(deps.settings, "admin_emails", "")
    with pytest.raises(HTTPException) as ex:
        deps.get_current_admin(user=_User(is_admin=False))
    assert ex.value.status_code == 403


def test_get_current_admin_accepts_flag_or_allowlisted_email(monkeypatch):
    flagged = _User(is_admin=True)
    assert deps.get_current_admin(user=flagged) is flagged

    monkeypatch.setattr(deps.settings, "admin_emails", "Boss@Campus.edu, other@campus.edu")
    listed = _User(email="boss@campus.edu")
    assert deps.get_current_admin(user=listed) is listed
