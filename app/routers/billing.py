import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user_full_access
from app.models.user import User
from app.repos.billing_repo import get_current_subscription, list_active_plans, list_invoices
from app.routers.serializers import iso
from app.schemas.billing import CheckoutSessionRequest
from app.services import stripe_service
from app.services.stripe_webhooks import WebhookPayloadError, handle_event

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/stripe", tags=["billing"])


def _subscription_to_response(s) -> dict | None:
    if s is None:
        return None
    plan = getattr(s, "plan", None)
    return {
        "id": s.id,
        "status": s.status,
        "stripePriceId": s.stripe_price_id,
        "currentPeriodStart": iso(s.current_period_start),
        "currentPeriodEnd": iso(s.current_period_end),
        "cancelAtPeriodEnd": bool(s.cancel_at_period_end),
        "canceledAt": iso(s.canceled_at),
        "plan": {"id": plan.id, "name": plan.name, "price": plan.price, "interval": plan.interval} if plan else None,
    }


def _invoice_to_response(i) -> dict:
    return {
        "id": i.id,
        "number": i.invoice_number,
        "amount": i.amount,
        "amountPaid": i.amount_paid,
        "currency": i.currency,
        "status": i.status,
        "invoicePdf": i.invoice_pdf,
        "hostedInvoiceUrl": i.hosted_invoice_url,
        "paidAt": iso(i.paid_at),
        "createdAt": iso(i.created_at),
    }


@router.get("/plans")
def list_plans(db: Session = Depends(get_db)):
    """Active plans, cheapest first, for the pricing page."""
    return {
        "plans": [
            {
                "id": p.id,
                "name": p.name,
                "description": p.description,
                "price": p.price,
                "interval": p.interval,
                "stripePriceId": p.stripe_price_id,
            }
            for p in list_active_plans(db)
        ]
    }


@router.post("/create-checkout-session")
def create_checkout_session(
    data: CheckoutSessionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_full_access),
):
    if not data.price_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Price ID is required")
    try:
        return stripe_service.create_subscription_checkout(db, user, data.price_id)
    except stripe_service.PaymentConfigError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Payment service is not configured") from e
    except Exception as e:
        logger.exception("Checkout session failed for user=%s: %s", user.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create checkout session") from e


@router.post("/create-portal-session")
def create_portal_session(user: User = Depends(get_current_user_full_access)):
    if not user.stripe_customer_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No billing account found")
    try:
        return {"url": stripe_service.create_portal_session(user.stripe_customer_id)}
    except stripe_service.PaymentConfigError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Payment service is not configured") from e
    except Exception as e:
        logger.exception("Portal session failed for user=%s: %s", user.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create portal session") from e


@router.get("/subscription")
def get_subscription(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_full_access),
):
    return {
        "subscription": _subscription_to_response(get_current_subscription(db, user.id)),
        "invoices": [_invoice_to_response(i) for i in list_invoices(db, user.id)],
    }


def _process_webhook(db: Session, payload: bytes, signature: str, background_tasks: BackgroundTasks) -> dict:
    try:
        event = stripe_service.construct_webhook_event(payload, signature)
    except stripe_service.PaymentConfigError as e:
        logger.error("Stripe webhook received but STRIPE_WEBHOOK_SECRET is not set")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Webhook secret not configured") from e
    except Exception as e:
        logger.warning("Webhook signature verification failed: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature") from e

    try:
        handle_event(db, event, background_tasks)
    except WebhookPayloadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        logger.exception("Error processing Stripe webhook: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Webhook handler failed") from e
    return {"received": True}


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Signed Stripe events: subscriptions, invoices and one-time job payments."""
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No signature")
    # Raw body is only readable here; verification and DB writes run in the threadpool.
    return await run_in_threadpool(_process_webhook, db, payload, signature, background_tasks)
