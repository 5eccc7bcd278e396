from app.models.user import User
from app.models.profile import Profile
from app.models.job import Job
from app.models.application import Application
from app.models.call_request import CallRequest
from app.models.bookmark import Bookmark
from app.models.notification import Notification
from app.models.resume import Resume
from app.models.billing import Plan, Subscription, Invoice, Payment

__all__ = [
    "User",
    "Profile",
    "Job",
    "Application",
    "CallRequest",
    "Bookmark",
    "Notification",
    "Resume",
    "Plan",
    "Subscription",
    "Invoice",
    "Payment",
]
