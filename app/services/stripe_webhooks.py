"""
Stripe webhook event handlers.

Events are handled as plain dicts. Subscription and invoice rows are upserted
by their Stripe id, so redelivered events are harmless.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.models.enums import PaymentStatus, SubscriptionStatus
from app.repos import billing_repo, job_repo
from app.repos.user_repo import (
    get_by_id as get_user_by_id,
    get_by_stripe_customer_id as get_user_by_stripe_customer_id,
    update_billing,
)
from app.services import email_service, notification_service

logger = logging.getLogger(__name__)


class WebhookPayloadError(Exception):
    """Event is well-signed but lacks data we need."""


def _as_dict(obj) -> dict:
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


def _ts(value) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _subscription_status(raw: str | None) -> str:
    value = (raw or "").upper()
    try:
        return SubscriptionStatus(value).value
    except ValueError:
        return value or SubscriptionStatus.INCOMPLETE.value


def handle_event(db: Session, event, background_tasks=None) -> str:
    """Dispatch by event type. Returns the event type that was processed."""
    event = _as_dict(event)
    event_type = event.get("type") or ""
    obj = _as_dict((event.get("data") or {}).get("object"))
    logger.info("Stripe webhook received type=%s id=%s", event_type, event.get("id"))

    if event_type == "checkout.session.completed":
        metadata = obj.get("metadata") or {}
        if metadata.get("jobId"):
            handle_job_payment_completed(db, obj, background_tasks)
        else:
            handle_checkout_completed(db, obj)
    elif event_type in ("customer.subscription.created", "customer.subscription.updated"):
        handle_subscription_update(db, obj)
    elif event_type == "customer.subscription.deleted":
        handle_subscription_deleted(db, obj)
    elif event_type == "invoice.paid":
        handle_invoice_paid(db, obj)
    elif event_type == "invoice.payment_failed":
        handle_invoice_payment_failed(db, obj)
    else:
        logger.info("Unhandled Stripe event type: %s", event_type)
    return event_type


def handle_checkout_completed(db: Session, session: dict) -> None:
    user_id = (session.get("metadata") or {}).get("userId")
    if not user_id:
        logger.error("Checkout session %s has no userId metadata", session.get("id"))
        return
    user = get_user_by_id(db, user_id)
    if not user:
        logger.error("Checkout session %s references unknown user=%s", session.get("id"), user_id)
        return
    update_billing(
        db,
        user,
        stripe_customer_id=session.get("customer"),
        stripe_subscription_id=session.get("subscription"),
    )
    notification_service.notify_payment_event(
        db,
        user_id,
        "Subscription Activated",
        "Your subscription has been successfully activated!",
    )


def handle_job_payment_completed(db: Session, session: dict, background_tasks=None) -> None:
    metadata = session.get("metadata") or {}
    job_id = metadata.get("jobId")
    user_id = metadata.get("userId")
    raw_amount = metadata.get("paymentAmount")
    if not job_id or not user_id or not raw_amount:
        logger.error("Job payment session %s is missing metadata", session.get("id"))
        raise WebhookPayloadError("Invalid metadata")
    try:
        amount = float(raw_amount)
    except (TypeError, ValueError) as e:
        raise WebhookPayloadError("Invalid metadata") from e

    job = job_repo.get_with_creator(db, job_id)
    if not job:
        logger.error("Job payment session %s references unknown job=%s", session.get("id"), job_id)
        return
    job_repo.mark_paid(
        db,
        job,
        amount=amount,
        currency="USD",
        stripe_payment_id=session.get("payment_intent"),
    )
    logger.info("Job %s marked as paid with amount $%s", job_id, raw_amount)
    notification_service.notify_job_payment_success(db, job.created_by_id, job.id, job.title, amount)
    owner = job.created_by
    if background_tasks is not None and owner is not None and owner.email:
        background_tasks.add_task(
            email_service.send_payment_success_email,
            owner.email,
            owner.full_name,
            job.title,
            amount,
            job.id,
        )


def _subscription_user_id(db: Session, subscription: dict) -> str | None:
    user_id = (subscription.get("metadata") or {}).get("userId")
    if user_id:
        return user_id
    customer_id = subscription.get("customer")
    user = get_user_by_stripe_customer_id(db, customer_id) if customer_id else None
    return user.id if user else None


def handle_subscription_update(db: Session, subscription: dict) -> None:
    user_id = _subscription_user_id(db, subscription)
    if not user_id:
        logger.error("Subscription %s has no userId metadata or known customer", subscription.get("id"))
        return
    items = (subscription.get("items") or {}).get("data") or []
    price_id = ((items[0] or {}).get("price") or {}).get("id") if items else None
    if not price_id:
        logger.error("Subscription %s has no price", subscription.get("id"))
        return
    plan = billing_repo.get_plan_by_price_id(db, price_id)
    if not plan:
        logger.error("Plan not found for price: %s", price_id)
        return

    period_end = _ts(subscription.get("current_period_end"))
    billing_repo.upsert_subscription(
        db,
        subscription["id"],
        user_id=user_id,
        plan_id=plan.id,
        stripe_customer_id=subscription.get("customer"),
        stripe_price_id=price_id,
        status=_subscription_status(subscription.get("status")),
        current_period_start=_ts(subscription.get("current_period_start")),
        current_period_end=period_end,
        cancel_at_period_end=bool(subscription.get("cancel_at_period_end")),
        canceled_at=_ts(subscription.get("canceled_at")),
        trial_start=_ts(subscription.get("trial_start")),
        trial_end=_ts(subscription.get("trial_end")),
    )
    user = get_user_by_id(db, user_id)
    if user:
        update_billing(db, user, stripe_price_id=price_id, stripe_current_period_end=period_end)


def handle_subscription_deleted(db: Session, subscription: dict) -> None:
    sub = billing_repo.get_subscription_by_stripe_id(db, subscription.get("id") or "")
    if not sub:
        logger.info("Deleted subscription %s is not tracked", subscription.get("id"))
        return
    billing_repo.upsert_subscription(
        db,
        sub.stripe_subscription_id,
        status=SubscriptionStatus.CANCELED.value,
        canceled_at=datetime.now(timezone.utc),
    )
    notification_service.notify_payment_event(
        db,
        sub.user_id,
        "Subscription Canceled",
        "Your subscription has been canceled.",
    )


def _invoice_user_id(invoice: dict) -> str | None:
    user_id = (invoice.get("metadata") or {}).get("userId")
    if user_id:
        return user_id
    details = invoice.get("subscription_details") or {}
    return (details.get("metadata") or {}).get("userId")


def handle_invoice_paid(db: Session, invoice: dict) -> None:
    user_id = _invoice_user_id(invoice)
    if not user_id:
        return
    amount_due = invoice.get("amount_due") or 0
    amount_paid = invoice.get("amount_paid") or 0
    paid_at = _ts((invoice.get("status_transitions") or {}).get("paid_at"))
    existing = billing_repo.get_invoice_by_stripe_id(db, invoice["id"])
    if existing:
        billing_repo.upsert_invoice(
            db,
            invoice["id"],
            status=invoice.get("status"),
            amount_paid=amount_paid,
            paid_at=paid_at,
        )
    else:
        billing_repo.upsert_invoice(
            db,
            invoice["id"],
            user_id=user_id,
            stripe_customer_id=invoice.get("customer"),
            amount=amount_due,
            amount_paid=amount_paid,
            amount_due=amount_due - amount_paid,
            currency=invoice.get("currency") or "usd",
            status=invoice.get("status") or "paid",
            invoice_number=invoice.get("number"),
            invoice_pdf=invoice.get("invoice_pdf"),
            hosted_invoice_url=invoice.get("hosted_invoice_url"),
            period_start=_ts(invoice.get("period_start")),
            period_end=_ts(invoice.get("period_end")),
            due_date=_ts(invoice.get("due_date")),
            paid_at=paid_at,
        )

    payment_intent = invoice.get("payment_intent")
    if payment_intent and billing_repo.get_payment_by_stripe_id(db, payment_intent):
        logger.info("Payment %s already recorded for invoice %s", payment_intent, invoice["id"])
    elif payment_intent:
        billing_repo.create_payment(
            db,
            user_id,
            stripe_payment_id=payment_intent,
            amount=amount_paid,
            currency=invoice.get("currency") or "usd",
            status=PaymentStatus.SUCCEEDED.value,
            description=f"Payment for invoice {invoice.get('number')}",
            stripe_invoice_id=invoice["id"],
            receipt_url=invoice.get("hosted_invoice_url"),
        )


def handle_invoice_payment_failed(db: Session, invoice: dict) -> None:
    user_id = (invoice.get("metadata") or {}).get("userId")
    if not user_id:
        return
    if billing_repo.get_invoice_by_stripe_id(db, invoice["id"]):
        billing_repo.upsert_invoice(db, invoice["id"], status=invoice.get("status") or "open")
    notification_service.notify_payment_event(
        db,
        user_id,
        "Payment Failed",
        "Your payment failed. Please update your payment method.",
    )
