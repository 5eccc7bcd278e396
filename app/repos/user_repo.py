from datetime import datetime

from sqlalchemy.orm import Session

from app.models.user import User
from app.core.security import generate_id, hash_password, utc_now


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _apply(db: Session, user: User, fields: dict, *, allow_none: tuple[str, ...] = ()) -> User:
    """Set the given fields (skipping None unless allowed) and commit."""
    for name, value in fields.items():
        if value is not None or name in allow_none:
            setattr(user, name, value)
    db.commit()
    db.refresh(user)
    return user


def get_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_by_stripe_customer_id(db: Session, customer_id: str) -> User | None:
    return db.query(User).filter(User.stripe_customer_id == customer_id).first()


def create(db: Session, email: str, password: str) -> User:
    user = User(id=generate_id(), email=normalize_email(email), password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update(
    db: Session,
    user_id: str,
    *,
    email: str | None = None,
    password_hash: str | None = None,
    is_admin: bool | None = None,
    is_active: bool | None = None,
) -> User | None:
    user = get_by_id(db, user_id)
    if not user:
        return None
    return _apply(
        db,
        user,
        {
            "email": normalize_email(email) if email is not None else None,
            "password_hash": password_hash,
            "is_admin": is_admin,
            "is_active": is_active,
        },
    )


def update_billing(
    db: Session,
    user: User,
    *,
    stripe_customer_id: str | None = None,
    stripe_subscription_id: str | None = None,
    stripe_price_id: str | None = None,
    stripe_current_period_end: datetime | None = None,
) -> User:
    """Mirror Stripe customer/subscription ids onto the user row."""
    return _apply(
        db,
        user,
        {
            "stripe_customer_id": stripe_customer_id,
            "stripe_subscription_id": stripe_subscription_id,
            "stripe_price_id": stripe_price_id,
            "stripe_current_period_end": stripe_current_period_end,
        },
    )


_TEMP_FIELDS = ("temp_password_hash", "temp_password_expires_at")


def set_temp_password(db: Session, user_id: str, temp_password_hash: str, expires_at: datetime) -> User | None:
    user = get_by_id(db, user_id)
    if not user:
        return None
    return _apply(db, user, dict(zip(_TEMP_FIELDS, (temp_password_hash, expires_at))))


def clear_temp_password(db: Session, user_id: str) -> User | None:
    user = get_by_id(db, user_id)
    if not user:
        return None
    return _apply(db, user, dict.fromkeys(_TEMP_FIELDS), allow_none=_TEMP_FIELDS)


def is_temp_password_mode(user: User) -> bool:
    """True while an unexpired temporary password is set; the user must change it before anything else."""
    expires_at = user.temp_password_expires_at
    return bool(user.temp_password_hash and expires_at and expires_at > utc_now())


def delete_user(db: Session, user_id: str) -> bool:
    """Delete user with profile, jobs and billing rows (CASCADE). Returns True if deleted."""
    user = get_by_id(db, user_id)
    if not user:
        return False
    db.delete(user)
    db.commit()
    return True
