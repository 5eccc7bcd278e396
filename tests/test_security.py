from jose import jwt

from app.core.security import (
    create_access_token,
    decode_access_token,
    generate_id,
    generate_temp_password,
    hash_password,
    sign_hs256,
    uses_placeholder_secret,
    verify_password,
)


def test_password_hash_and_verify_roundtrip():
    plain = "a very long passphrase " * 5
    hashed = hash_password(plain)
    assert hashed != plain
    assert verify_password(plain, hashed) is True
    assert verify_password("wrong", hashed) is False


def test_verify_password_rejects_missing_values():
    assert verify_password(None, "hash") is False
    assert verify_password("secret", None) is False


def test_access_token_subject_is_user_id():
    token = create_access_token("user-123")
    assert decode_access_token(token) == "user-123"
    assert decode_access_token("not-a-jwt") is None


def test_sign_hs256_claims_are_readable_with_secret():
    token = sign_hs256({"room_id": "r1", "role": "guest"}, "app-secret")
    claims = jwt.decode(token, "app-secret", algorithms=["HS256"])
    assert claims == {"room_id": "r1", "role": "guest"}


def test_generators_and_placeholder_check(monkeypatch):
    assert len(generate_id()) == 36
    tmp = generate_temp_password(16)
    assert len(tmp) == 16 and tmp.isalnum()
    monkeypatch.setattr("app.core.security.settings.secret_key", "replace-with-a-long-random-secret-key")
    assert uses_placeholder_secret() is True
    monkeypatch.setattr("app.core.security.settings.secret_key", "real-secret")
    assert uses_placeholder_secret() is False


def test_role_permissions():
    from app.core import permissions as perms

    assert perms.has_permission("finder", "job:create") is True
    assert perms.has_permission("SEEKER", "job:create") is False
    assert perms.has_permission(None, "job:create") is False
    assert perms.has_permission("ADMIN", "unknown:thing") is False
    assert perms.has_permission("ADMIN", "job:create") is True
