import hashlib
import secrets
import string
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import bcrypt
from jose import JWTError, jwt

from app.config import settings

PLACEHOLDER_SECRET_KEY = "replace-with-a-long-random-secret-key"


def _prehash(password: str) -> bytes:
    """sha256 first so long passphrases survive bcrypt's 72-byte cut-off."""
    return hashlib.sha256(password.encode()).digest()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode()


def verify_password(plain: str | None, hashed: str | None) -> bool:
    if not plain or not hashed:
        return False
    return bcrypt.checkpw(_prehash(plain), hashed.encode())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def sign_hs256(payload: dict, secret: str) -> str:
    """Sign an arbitrary claim set; used for our access tokens and 100ms tokens."""
    return jwt.encode(payload, secret, algorithm="HS256")


def create_access_token(subject: str) -> str:
    expire = utc_now() + timedelta(minutes=settings.access_token_expire_minutes)
    return jwt.encode({"sub": subject, "exp": expire}, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> str | None:
    """Subject (user id) of a valid token, else None."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    return payload.get("sub")


def uses_placeholder_secret() -> bool:
    return settings.secret_key == PLACEHOLDER_SECRET_KEY


def generate_id() -> str:
    return str(uuid4())


def generate_temp_password(length: int = 12) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
