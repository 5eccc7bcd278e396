import app.core.rate_limiter as rl
import app.routers.ai as ai_mod
import app.routers.auth as auth_mod


def test_auth_rate_limit_blocks_excess_requests(monkeypatch, client):
    monkeypatch.setattr(rl.settings, "rate_limit_auth_per_min", 2)
    monkeypatch.setattr(auth_mod.user_repo, "get_by_email", lambda db, email: None)

    payload = {"email": "x@example.com", "password": "bad"}
    r1 = client.post("/api/auth/login", json=payload)
    r2 = client.post("/api/auth/login", json=payload)
    r3 = client.post("/api/auth/login", json=payload)

    assert r1.status_code == 401
    assert r2.status_code == 401
    assert r3.status_code == 429
    assert int(r3.headers["Retry-After"]) >= 1


def test_ai_rate_limit_applies_to_ai_routes(monkeypatch, client):
    monkeypatch.setattr(rl.settings, "rate_limit_ai_per_min", 1)
    monkeypatch.setattr(ai_mod, "refine_job", lambda role, **kwargs: {"title": role})

    assert client.post("/api/ai/refine-job", json={"role": "Designer"}).status_code == 200
    assert client.post("/api/ai/refine-job", json={"role": "Designer"}).status_code == 429
