"""Stripe Checkout, billing portal and webhook verification."""

import logging

import stripe
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import User
from app.repos.user_repo import update_billing

logger = logging.getLogger(__name__)

stripe.api_key = settings.stripe_secret_key


class PaymentConfigError(Exception):
    pass


def is_configured() -> bool:
    return bool(settings.stripe_secret_key)


def _require_configured() -> None:
    if not is_configured():
        raise PaymentConfigError("Stripe is not configured")
    stripe.api_key = settings.stripe_secret_key


def _app_url(path: str) -> str:
    return f"{settings.app_url.rstrip('/')}{path}"


def get_or_create_customer(db: Session, user: User) -> str:
    """Stripe customer id for the user, creating and storing one on first use."""
    if user.stripe_customer_id:
        return user.stripe_customer_id
    _require_configured()
    customer = stripe.Customer.create(email=user.email, metadata={"userId": user.id})
    update_billing(db, user, stripe_customer_id=customer["id"])
    logger.info("Created Stripe customer %s for user=%s", customer["id"], user.id)
    return customer["id"]


def create_subscription_checkout(db: Session, user: User, price_id: str) -> dict:
    _require_configured()
    customer_id = get_or_create_customer(db, user)
    session = stripe.checkout.Session.create(
        customer=customer_id,
        mode="subscription",
        payment_method_types=["card"],
        line_items=[{"price": price_id, "quantity": 1}],
        success_url=_app_url("/billing/success?session_id={CHECKOUT_SESSION_ID}"),
        cancel_url=_app_url("/billing"),
        metadata={"userId": user.id},
        subscription_data={"metadata": {"userId": user.id}},
    )
    return {"sessionId": session["id"], "url": session["url"]}


def create_job_payment_checkout(
    db: Session,
    user: User,
    *,
    job_id: str,
    job_title: str,
    profile_id: str,
    amount: float,
) -> dict:
    """One-time payment for a job posting; amount is in dollars."""
    _require_configured()
    customer_id = get_or_create_customer(db, user)
    session = stripe.checkout.Session.create(
        customer=customer_id,
        mode="payment",
        payment_method_types=["card"],
        line_items=[
            {
                "price_data": {
                    "currency": settings.stripe_currency,
                    "unit_amount": int(round(amount * 100)),
                    "product_data": {
                        "name": f"Job Posting: {job_title}",
                        "description": "Payment for job posting",
                    },
                },
                "quantity": 1,
            }
        ],
        success_url=_app_url(f"/jobs/{job_id}?payment=success"),
        cancel_url=_app_url(f"/jobs/{job_id}?payment=cancelled"),
        metadata={
            "jobId": job_id,
            "userId": user.id,
            "profileId": profile_id,
            "paymentAmount": str(amount),
        },
    )
    logger.info("Created job payment session %s job=%s amount=%s", session["id"], job_id, amount)
    return {"sessionId": session["id"], "url": session["url"]}


def create_portal_session(customer_id: str) -> str:
    _require_configured()
    session = stripe.billing_portal.Session.create(customer=customer_id, return_url=_app_url("/billing"))
    return session["url"]


def construct_webhook_event(payload: bytes, sig_header: str):
    """Verify the signature and parse the event. Raises on bad signatures."""
    if not settings.stripe_webhook_secret:
        raise PaymentConfigError("Stripe webhook secret is not configured")
    return stripe.Webhook.construct_event(
        payload=payload,
        sig_header=sig_header,
        secret=settings.stripe_webhook_secret,
    )
