from enum import Enum


class ProfileRole(str, Enum):
    FINDER = "FINDER"
    SEEKER = "SEEKER"


class JobType(str, Enum):
    ACADEMIC_PROJECT = "ACADEMIC_PROJECT"
    STARTUP_COLLABORATION = "STARTUP_COLLABORATION"
    PART_TIME_JOB = "PART_TIME_JOB"
    COMPETITION_HACKATHON = "COMPETITION_HACKATHON"


class JobStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    SHORTLISTED = "SHORTLISTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class CallRequestStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class NotificationType(str, Enum):
    JOB_POSTED = "JOB_POSTED"
    JOB_APPROVED = "JOB_APPROVED"
    JOB_REJECTED = "JOB_REJECTED"
    APPLICATION_RECEIVED = "APPLICATION_RECEIVED"
    APPLICATION_SHORTLISTED = "APPLICATION_SHORTLISTED"
    APPLICATION_ACCEPTED = "APPLICATION_ACCEPTED"
    APPLICATION_REJECTED = "APPLICATION_REJECTED"
    JOB_FILLED = "JOB_FILLED"
    CALL_REQUEST_RECEIVED = "CALL_REQUEST_RECEIVED"
    CALL_REQUEST_ACCEPTED = "CALL_REQUEST_ACCEPTED"
    CALL_REQUEST_REJECTED = "CALL_REQUEST_REJECTED"
    MESSAGE_RECEIVED = "MESSAGE_RECEIVED"
    PROFILE_VIEW = "PROFILE_VIEW"
    BOOKMARK_ADDED = "BOOKMARK_ADDED"
    PAYMENT = "PAYMENT"
    JOB_PAYMENT_SUCCESS = "JOB_PAYMENT_SUCCESS"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"
    INCOMPLETE = "INCOMPLETE"
    INCOMPLETE_EXPIRED = "INCOMPLETE_EXPIRED"
    PAST_DUE = "PAST_DUE"
    TRIALING = "TRIALING"
    UNPAID = "UNPAID"
    PAUSED = "PAUSED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
