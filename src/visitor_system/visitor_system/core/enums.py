from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Who performs an action; recorded on every audit entry."""

    ADMIN = "admin"
    SECURITY = "security"
    HOST = "host"
    VISITOR = "visitor"
    SYSTEM = "system"


class CheckInStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    CANCELLED = "cancelled"
    CHECKED_OUT = "checked-out"

    @property
    def is_terminal(self) -> bool:
        return self in {CheckInStatus.DENIED, CheckInStatus.CANCELLED, CheckInStatus.CHECKED_OUT}


class PreApprovalStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AuditCategory(str, Enum):
    VISITOR_MANAGEMENT = "visitor_management"
    USER_MANAGEMENT = "user_management"
    SECURITY = "security"
    SYSTEM = "system"


class AuditAction(str, Enum):
    VISITOR_CREATED = "visitor_created"
    CHECK_IN_CREATED = "check_in_created"
    VISITOR_APPROVED = "visitor_approved"
    VISITOR_DENIED = "visitor_denied"
    VISITOR_CANCELLED = "visitor_cancelled"
    VISITOR_CHECKED_OUT = "visitor_checked_out"
    VISITOR_BLACKLISTED = "visitor_blacklisted"
    VISITOR_UNBLACKLISTED = "visitor_unblacklisted"

    PREAPPROVAL_CREATED = "preapproval_created"
    PREAPPROVAL_USED = "preapproval_used"
    PREAPPROVAL_CANCELLED = "preapproval_cancelled"
    PREAPPROVAL_EXPIRED = "preapproval_expired"

    HOST_REGISTRATION = "host_registration"
    HOST_APPROVED = "host_approved"
    HOST_DENIED = "host_denied"
    HOST_ACTIVATED = "host_activated"
    HOST_DEACTIVATED = "host_deactivated"

    SYSTEM_RULES_UPDATED = "system_rules_updated"
    NOTIFICATION_SENT_EMAIL = "notification_sent_email"
    NOTIFICATION_SENT_SMS = "notification_sent_sms"


class NotificationChannel(str, Enum):
    EMAIL = "email"
    SMS = "sms"


class NotificationPurpose(str, Enum):
    """What a delivered notification should be recorded against."""

    GENERAL = "general"
    PRE_APPROVAL_INVITE = "pre_approval_invite"
    PRE_APPROVAL_REMINDER = "pre_approval_reminder"
