from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PreApprovalStatus


@dataclass(frozen=True)
class VisitorContact:
    """Contact snapshot of an expected visitor (not linked to a Visitor yet)."""

    name: str
    phone: str
    email: Optional[str] = None
    company: Optional[str] = None


@dataclass(frozen=True)
class PreApproval:
    """A host-issued, time-bounded authorization for a future visit."""

    pre_approval_id: str
    visitor: VisitorContact
    host_id: str
    host_name: str
    scheduled_date: datetime
    purpose: str
    status: PreApprovalStatus
    expires_at: datetime
    created_at: datetime
    access_code: str
    qr_code: str
    used_at: Optional[datetime] = None
    approved_visitor_id: Optional[str] = None
    badge_number: Optional[str] = None
    email_sent: bool = False
    sms_sent: bool = False
    reminders_sent: tuple[datetime, ...] = ()

    def effective_status(self, now: datetime) -> PreApprovalStatus:
        """Status as seen by business logic: active records past expiry are expired."""
        if self.status == PreApprovalStatus.ACTIVE and now > self.expires_at:
            return PreApprovalStatus.EXPIRED
        return self.status

    def is_redeemable(self, now: datetime) -> bool:
        return self.effective_status(now) == PreApprovalStatus.ACTIVE

    def to_dict(self, *, now: Optional[datetime] = None) -> dict:
        status = self.effective_status(now) if now else self.status
        return {
            "id": self.pre_approval_id,
            "visitor_name": self.visitor.name,
            "visitor_email": self.visitor.email,
            "visitor_phone": self.visitor.phone,
            "visitor_company": self.visitor.company,
            "host_id": self.host_id,
            "host_name": self.host_name,
            "scheduled_date": self.scheduled_date.isoformat(),
            "purpose": self.purpose,
            "status": status.value,
            "expires_at": self.expires_at.isoformat(),
            "created_at": self.created_at.isoformat(),
            "used_at": self.used_at.isoformat() if self.used_at else None,
            "approved_visitor_id": self.approved_visitor_id,
            "badge_number": self.badge_number,
            "access_code": self.access_code,
            "qr_code": self.qr_code,
            "email_sent": self.email_sent,
            "sms_sent": self.sms_sent,
            "reminders_sent": [r.isoformat() for r in self.reminders_sent],
        }
