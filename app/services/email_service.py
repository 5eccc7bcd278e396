"""
Best-effort transactional email through the Resend REST API.
Senders never raise: failures are logged and returned as {"data": None, "error": ...}.
Routers schedule them with BackgroundTasks so responses never wait on delivery.
"""

import logging

import httpx

from app.config import settings
from app.services import email_templates as tpl

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
EMAIL_TIMEOUT_SECONDS = 10.0

_STATUS_SUBJECTS = {
    "SHORTLISTED": "Shortlisted",
    "ACCEPTED": "Accepted",
    "REJECTED": "Application Update",
}


def send_email(to: str, subject: str, html: str) -> dict:
    if not settings.resend_api_key:
        logger.warning("Email not sent to %s: RESEND_API_KEY is not configured.", to)
        return {"data": None, "error": "Email service not configured"}
    if not to:
        return {"data": None, "error": "Missing recipient"}
    payload = {
        "from": f"{settings.email_app_name} <{settings.email_sender}>",
        "to": [to],
        "subject": subject,
        "html": html,
    }
    try:
        resp = httpx.post(
            RESEND_API_URL,
            json=payload,
            headers={"Authorization": f"Bearer {settings.resend_api_key}"},
            timeout=EMAIL_TIMEOUT_SECONDS,
        )
        if resp.status_code >= 400:
            logger.error("Failed to send email to %s: HTTP %s %s", to, resp.status_code, resp.text[:300])
            return {"data": None, "error": f"Resend API rejected the request (HTTP {resp.status_code})"}
        data = resp.json()
        logger.info("Email sent to %s id=%s", to, data.get("id"))
        return {"data": data, "error": None}
    except Exception as e:
        logger.exception("Unexpected error sending email to %s: %s", to, e)
        return {"data": None, "error": str(e) or "Unknown error"}


def send_welcome_email(to: str, user_name: str) -> dict:
    return send_email(to, f"Welcome to {settings.email_app_name}!", tpl.welcome(user_name))


def send_job_approved_email(to: str, user_name: str, job_title: str, job_id: str) -> dict:
    return send_email(
        to,
        f'Your Job "{job_title}" has been Approved!',
        tpl.job_approved(user_name, job_title, tpl.app_link(f"/jobs/{job_id}")),
    )


def send_job_rejected_email(to: str, user_name: str, job_title: str, reason: str) -> dict:
    return send_email(
        to,
        f'Update on Your Job "{job_title}" - Action Required',
        tpl.job_rejected(user_name, job_title, reason),
    )


def send_application_received_email(to: str, poster_name: str, applicant_name: str, job_title: str, job_id: str) -> dict:
    return send_email(
        to,
        f'New Application for "{job_title}"',
        tpl.application_received(poster_name, applicant_name, job_title, tpl.app_link(f"/jobs/{job_id}/applications")),
    )


def send_application_status_email(to: str, applicant_name: str, status: str, job_title: str, job_id: str) -> dict:
    label = _STATUS_SUBJECTS.get(status, "Application Update")
    return send_email(
        to,
        f"{label} - {job_title}",
        tpl.application_status(applicant_name, status, job_title, tpl.app_link(f"/jobs/{job_id}")),
    )


def send_video_call_request_email(to: str, receiver_name: str, requester_name: str, job_title: str, message: str) -> dict:
    return send_email(
        to,
        f"Video Interview Request from {requester_name}",
        tpl.video_call_request(receiver_name, requester_name, job_title, message, tpl.app_link("/video-calls")),
    )


def send_video_call_accepted_email(
    to: str,
    requester_name: str,
    receiver_name: str,
    job_title: str,
    call_request_id: str,
    scheduled_time: str | None,
) -> dict:
    return send_email(
        to,
        f"Video Interview Accepted! - {job_title}",
        tpl.video_call_accepted(
            requester_name, receiver_name, job_title, tpl.app_link(f"/video-call/{call_request_id}"), scheduled_time
        ),
    )


def send_video_call_rejected_email(to: str, requester_name: str, job_title: str, reason: str) -> dict:
    return send_email(
        to,
        f"Video Interview Request Update - {job_title}",
        tpl.video_call_rejected(requester_name, job_title, reason),
    )


def send_payment_success_email(to: str, user_name: str, job_title: str, amount: float, job_id: str) -> dict:
    return send_email(
        to,
        f'Payment Confirmed for "{job_title}"',
        tpl.payment_success(user_name, job_title, amount, tpl.app_link(f"/jobs/{job_id}")),
    )


def send_job_filled_email(to: str, applicant_name: str, job_title: str) -> dict:
    return send_email(to, f"Position Filled: {job_title}", tpl.job_filled(applicant_name, job_title))


def send_temp_password_email(to: str, temp_password: str, expires_in_minutes: int) -> dict:
    return send_email(
        to,
        f"Your {settings.email_app_name} temporary password",
        tpl.temporary_password(temp_password, expires_in_minutes),
    )
