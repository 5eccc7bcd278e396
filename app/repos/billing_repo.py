"""Plans, subscriptions, invoices and payments mirrored from Stripe."""

from sqlalchemy.orm import Session, joinedload

from app.models.billing import Invoice, Payment, Plan, Subscription
from app.core.security import generate_id

DEFAULT_PLANS = [
    {"name": "FREE", "description": "Browse and apply to campus jobs", "price": 0, "interval": "month"},
    {"name": "PRO", "description": "Unlimited postings and AI tools", "price": 999, "interval": "month"},
    {"name": "BUSINESS", "description": "Team accounts and priority review", "price": 2999, "interval": "month"},
]


def get_plan_by_price_id(db: Session, price_id: str) -> Plan | None:
    return db.query(Plan).filter(Plan.stripe_price_id == price_id).first()


def list_active_plans(db: Session) -> list[Plan]:
    return db.query(Plan).filter(Plan.is_active == True).order_by(Plan.price.asc()).all()


def seed_default_plans(db: Session) -> list[Plan]:
    """Insert default plans that are not present yet (matched by name)."""
    existing = {p.name for p in db.query(Plan).all()}
    created = []
    for fields in DEFAULT_PLANS:
        if fields["name"] in existing:
            continue
        plan = Plan(id=generate_id(), is_active=True, **fields)
        db.add(plan)
        created.append(plan)
    if created:
        db.commit()
    return created


def get_subscription_by_stripe_id(db: Session, stripe_subscription_id: str) -> Subscription | None:
    return (
        db.query(Subscription)
        .filter(Subscription.stripe_subscription_id == stripe_subscription_id)
        .first()
    )


def get_current_subscription(db: Session, user_id: str) -> Subscription | None:
    return (
        db.query(Subscription)
        .options(joinedload(Subscription.plan))
        .filter(Subscription.user_id == user_id)
        .order_by(Subscription.created_at.desc())
        .first()
    )


def upsert_subscription(db: Session, stripe_subscription_id: str, **fields) -> Subscription:
    """Create or update by Stripe subscription id."""
    sub = get_subscription_by_stripe_id(db, stripe_subscription_id)
    if sub is None:
        sub = Subscription(id=generate_id(), stripe_subscription_id=stripe_subscription_id, **fields)
        db.add(sub)
    else:
        for key, value in fields.items():
            setattr(sub, key, value)
    db.commit()
    db.refresh(sub)
    return sub


def get_invoice_by_stripe_id(db: Session, stripe_invoice_id: str) -> Invoice | None:
    return db.query(Invoice).filter(Invoice.stripe_invoice_id == stripe_invoice_id).first()


def list_invoices(db: Session, user_id: str, limit: int = 10) -> list[Invoice]:
    return (
        db.query(Invoice)
        .filter(Invoice.user_id == user_id)
        .order_by(Invoice.created_at.desc())
        .limit(limit)
        .all()
    )


def upsert_invoice(db: Session, stripe_invoice_id: str, **fields) -> Invoice:
    invoice = get_invoice_by_stripe_id(db, stripe_invoice_id)
    if invoice is None:
        invoice = Invoice(id=generate_id(), stripe_invoice_id=stripe_invoice_id, **fields)
        db.add(invoice)
    else:
        for key, value in fields.items():
            setattr(invoice, key, value)
    db.commit()
    db.refresh(invoice)
    return invoice


def get_payment_by_stripe_id(db: Session, stripe_payment_id: str) -> Payment | None:
    return db.query(Payment).filter(Payment.stripe_payment_id == stripe_payment_id).first()


def create_payment(db: Session, user_id: str, **fields) -> Payment:
    payment = Payment(id=generate_id(), user_id=user_id, **fields)
    db.add(payment)
    db.commit()
    db.refresh(payment)
    return payment
