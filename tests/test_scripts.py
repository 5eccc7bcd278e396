from contextlib import contextmanager

import app.scripts.cleanup_mock_rooms as cleanup
import app.scripts.ensure_tables as ensure
import app.scripts.promote_admin as promote
import app.scripts.seed_plans as seed


class _Session:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def _scope(session=None):
    session = session or _Session()

    @contextmanager
    def _cm():
        try:
            yield session
        finally:
            session.close()

    return _cm


class _User:
    def __init__(self, is_admin=False):
        self.id = "user-1"
        self.is_admin = is_admin


class _CallRequest:
    def __init__(self, room_id):
        self.room_id = room_id
        self.job_id = "job-1"
        self.requester_id = "seeker-1"
        self.receiver_id = "finder-1"
        self.job = None
        self.requester = None
        self.receiver = None


def _patch_promote(monkeypatch, user):
    session = _Session()
    calls = []
    monkeypatch.setattr(promote, "ensure_tables_exist", lambda: [])
    monkeypatch.setattr(promote, "session_scope", _scope(session))
    monkeypatch.setattr(promote, "get_by_email", lambda db, email: user)
    monkeypatch.setattr(promote, "get_profile_by_user_id", lambda db, user_id: None)
    monkeypatch.setattr(promote, "update", lambda db, user_id, **kw: calls.append(kw))
    return session, calls


def test_promote_admin_user_not_found(monkeypatch, capsys):
    session, calls = _patch_promote(monkeypatch, None)
    assert promote.main(["missing@example.com"]) == 1
    assert "User not found: missing@example.com" in capsys.readouterr().out
    assert calls == []
    assert session.closed


def test_promote_admin_grants_and_normalizes_email(monkeypatch, capsys):
    _, calls = _patch_promote(monkeypatch, _User(is_admin=False))
    assert promote.main(["  Dean@Campus.EDU "]) == 0
    assert calls == [{"is_admin": True}]
    assert "Promoted dean@campus.edu" in capsys.readouterr().out


def test_promote_admin_already_admin_is_noop(monkeypatch, capsys):
    _, calls = _patch_promote(monkeypatch, _User(is_admin=True))
    assert promote.main(["dean@campus.edu"]) == 0
    assert calls == []
    assert "already an admin" in capsys.readouterr().out


def test_promote_admin_revoke(monkeypatch):
    _, calls = _patch_promote(monkeypatch, _User(is_admin=True))
    assert promote.main(["dean@campus.edu", "--revoke"]) == 0
    assert calls == [{"is_admin": False}]


def test_cleanup_mock_rooms_dry_run_deletes_nothing(monkeypatch, capsys):
    rows = [_CallRequest("mock-room-abc"), _CallRequest("65f1c2real")]
    deleted = []
    monkeypatch.setattr(cleanup, "session_scope", _scope())
    monkeypatch.setattr(cleanup, "list_accepted_with_room", lambda db: rows)
    monkeypatch.setattr(cleanup, "is_mock_room_id", lambda room_id: room_id.startswith("mock-"))
    monkeypatch.setattr(cleanup, "delete_many", lambda db, items: deleted.extend(items) or len(items))

    assert cleanup.main(["--dry-run"]) == 0
    out = capsys.readouterr().out
    assert "Found 1 call request(s)" in out
    assert "Dry run" in out
    assert deleted == []


def test_cleanup_mock_rooms_deletes_only_mock_rooms(monkeypatch, capsys):
    rows = [_CallRequest("mock-room-abc"), _CallRequest("65f1c2real")]
    deleted = []
    monkeypatch.setattr(cleanup, "session_scope", _scope())
    monkeypatch.setattr(cleanup, "list_accepted_with_room", lambda db: rows)
    monkeypatch.setattr(cleanup, "is_mock_room_id", lambda room_id: room_id.startswith("mock-"))
    monkeypatch.setattr(cleanup, "delete_many", lambda db, items: deleted.extend(items) or len(items))

    assert cleanup.main([]) == 0
    assert [cr.room_id for cr in deleted] == ["mock-room-abc"]
    assert "Deleted 1 call request(s)." in capsys.readouterr().out


def test_cleanup_mock_rooms_nothing_found(monkeypatch, capsys):
    monkeypatch.setattr(cleanup, "session_scope", _scope())
    monkeypatch.setattr(cleanup, "list_accepted_with_room", lambda db: [])
    assert cleanup.main([]) == 0
    assert "No mock room ids found" in capsys.readouterr().out


def test_seed_plans_reports_created(monkeypatch, capsys):
    class _Plan:
        def __init__(self, name):
            self.name = name

    monkeypatch.setattr(seed, "ensure_tables_exist", lambda: [])
    monkeypatch.setattr(seed, "session_scope", _scope())
    monkeypatch.setattr(seed, "seed_default_plans", lambda db: [_Plan("PRO"), _Plan("BUSINESS")])
    seed.main()
    assert "Created 2 plan(s): PRO, BUSINESS" in capsys.readouterr().out


def test_seed_plans_when_present(monkeypatch, capsys):
    monkeypatch.setattr(seed, "ensure_tables_exist", lambda: [])
    monkeypatch.setattr(seed, "session_scope", _scope())
    monkeypatch.setattr(seed, "seed_default_plans", lambda db: [])
    seed.main()
    assert "Default plans already exist." in capsys.readouterr().out


def test_ensure_tables_prints_created(monkeypatch, capsys):
    monkeypatch.setattr(ensure, "setup_logging", lambda: None)
    monkeypatch.setattr(ensure, "ensure_tables_exist", lambda: ["bookmarks", "jobs"])
    assert ensure.main() == 0
    assert "Created 2 table(s): bookmarks, jobs" in capsys.readouterr().out


def test_ensure_tables_up_to_date(monkeypatch, capsys):
    monkeypatch.setattr(ensure, "setup_logging", lambda: None)
    monkeypatch.setattr(ensure, "ensure_tables_exist", lambda: [])
    assert ensure.main() == 0
    assert "Schema is up to date" in capsys.readouterr().out
