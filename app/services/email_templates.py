"""HTML bodies for transactional emails."""

from html import escape

from app.config import settings

_BASE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{app_name}</title>
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; background: #f5f5f5; margin: 0; padding: 0; }}
    .container {{ max-width: 600px; margin: 40px auto; background: white; border-radius: 12px; overflow: hidden; }}
    .header {{ background: linear-gradient(135deg, #1E3A8A, #3B82F6); padding: 30px; text-align: center; color: white; }}
    .content {{ padding: 40px 30px; }}
    .button {{ display: inline-block; padding: 14px 32px; background: #1E3A8A; color: white !important; text-decoration: none; border-radius: 8px; font-weight: 600; margin: 20px 0; }}
    .highlight {{ background: #EFF6FF; padding: 16px; border-left: 4px solid #3B82F6; border-radius: 4px; margin: 20px 0; }}
    .footer {{ background: #f9fafb; padding: 20px 30px; text-align: center; color: #6b7280; font-size: 14px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header"><h1>{app_name}</h1></div>
    <div class="content">{content}</div>
    <div class="footer">&copy; {app_name}. You are receiving this email because you have an account with us.</div>
  </div>
</body>
</html>"""


def _render(content: str) -> str:
    return _BASE.format(app_name=escape(settings.email_app_name), content=content)


def _button(url: str, label: str) -> str:
    return f'<p style="text-align:center"><a class="button" href="{escape(url)}">{escape(label)}</a></p>'


def app_link(path: str) -> str:
    return f"{settings.app_url.rstrip('/')}{path}"


def welcome(user_name: str) -> str:
    return _render(
        f"<h2>Welcome, {escape(user_name)}!</h2>"
        f"<p>Your {escape(settings.email_app_name)} profile is ready. Browse campus projects, startups, "
        "part-time jobs and hackathons, or post your own opportunity.</p>"
        + _button(app_link("/jobs"), "Explore Opportunities")
    )


def job_approved(user_name: str, job_title: str, job_link: str) -> str:
    return _render(
        f"<h2>Good news, {escape(user_name)}!</h2>"
        f'<p>Your job posting <strong>"{escape(job_title)}"</strong> has been approved and is now live.</p>'
        + _button(job_link, "View Job")
    )


def job_rejected(user_name: str, job_title: str, reason: str) -> str:
    return _render(
        f"<h2>Hi {escape(user_name)},</h2>"
        f'<p>Your job posting <strong>"{escape(job_title)}"</strong> was not approved.</p>'
        f'<div class="highlight"><strong>Reason:</strong> {escape(reason)}</div>'
        "<p>Please update the posting and submit it again.</p>"
    )


def application_received(poster_name: str, applicant_name: str, job_title: str, applications_link: str) -> str:
    return _render(
        f"<h2>Hi {escape(poster_name)},</h2>"
        f'<p><strong>{escape(applicant_name)}</strong> applied to <strong>"{escape(job_title)}"</strong>.</p>'
        + _button(applications_link, "Review Applications")
    )


_STATUS_MESSAGES = {
    "SHORTLISTED": "You have been shortlisted. The poster may reach out for next steps.",
    "ACCEPTED": "Congratulations! Your application has been accepted.",
    "REJECTED": "Unfortunately your application was not selected this time. Keep applying!",
}


def application_status(applicant_name: str, status: str, job_title: str, job_link: str) -> str:
    message = _STATUS_MESSAGES.get(status, f"Your application status changed to {status}.")
    return _render(
        f"<h2>Hi {escape(applicant_name)},</h2>"
        f'<p>Update on your application for <strong>"{escape(job_title)}"</strong>:</p>'
        f'<div class="highlight">{escape(message)}</div>'
        + _button(job_link, "View Job")
    )


def video_call_request(receiver_name: str, requester_name: str, job_title: str, message: str, calls_link: str) -> str:
    note = f'<div class="highlight">{escape(message)}</div>' if message else ""
    return _render(
        f"<h2>Hi {escape(receiver_name)},</h2>"
        f"<p><strong>{escape(requester_name)}</strong> requested a video interview for "
        f'<strong>"{escape(job_title)}"</strong>.</p>'
        + note
        + _button(calls_link, "Respond to Request")
    )


def video_call_accepted(
    requester_name: str, receiver_name: str, job_title: str, video_call_link: str, scheduled_time: str | None
) -> str:
    when = f"<p><strong>Scheduled:</strong> {escape(scheduled_time)}</p>" if scheduled_time else ""
    return _render(
        f"<h2>Hi {escape(requester_name)},</h2>"
        f"<p>{escape(receiver_name)} accepted your video interview request for "
        f'<strong>"{escape(job_title)}"</strong>.</p>'
        + when
        + _button(video_call_link, "Join Video Call")
    )


def video_call_rejected(requester_name: str, job_title: str, reason: str) -> str:
    return _render(
        f"<h2>Hi {escape(requester_name)},</h2>"
        f'<p>Your video interview request for <strong>"{escape(job_title)}"</strong> was declined.</p>'
        f'<div class="highlight"><strong>Reason:</strong> {escape(reason)}</div>'
    )


def payment_success(user_name: str, job_title: str, amount: float, job_link: str) -> str:
    return _render(
        f"<h2>Thanks, {escape(user_name)}!</h2>"
        f'<p>We received your payment of <strong>${amount:.2f}</strong> for <strong>"{escape(job_title)}"</strong>.</p>'
        + _button(job_link, "View Job")
    )


def job_filled(applicant_name: str, job_title: str) -> str:
    return _render(
        f"<h2>Hi {escape(applicant_name)},</h2>"
        f'<p>The position <strong>"{escape(job_title)}"</strong> has been filled. '
        "Thank you for applying, and keep an eye out for new opportunities.</p>"
        + _button(app_link("/jobs"), "Browse Jobs")
    )


def temporary_password(temp_password: str, expires_in_minutes: int) -> str:
    return _render(
        "<h2>Password reset</h2>"
        "<p>Use this temporary password to sign in. You will be asked to choose a new password right away.</p>"
        f'<div class="highlight"><strong>{escape(temp_password)}</strong></div>'
        f"<p>It expires in {expires_in_minutes} minutes. If you did not request a reset, you can ignore this email.</p>"
        + _button(app_link("/login"), "Sign In")
    )
