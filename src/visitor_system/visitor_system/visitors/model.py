from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from ..core.enums import CheckInStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class GovernmentId:
    id_type: str
    number: str
    verified: bool = False

    def to_dict(self) -> dict:
        return {"type": self.id_type, "number": self.number, "verified": self.verified}


@dataclass(frozen=True)
class VisitorCheckIn:
    """One visit instance, owned by exactly one Visitor.

    ``host_id``/``host_name`` are a snapshot taken at creation time.
    """

    check_in_id: str
    host_id: str
    host_name: str
    status: CheckInStatus
    check_in_time: datetime
    purpose: str
    check_out_time: Optional[datetime] = None
    badge_number: Optional[str] = None
    qr_code: Optional[str] = None
    estimated_wait_time: Optional[int] = None
    security_officer_id: Optional[str] = None
    security_officer_name: Optional[str] = None
    government_id: Optional[GovernmentId] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    denied_at: Optional[datetime] = None
    denied_by: Optional[str] = None
    denial_reason: Optional[str] = None
    is_pre_approved: bool = False
    pre_approval_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == CheckInStatus.APPROVED and self.check_out_time is None

    def to_dict(self) -> dict:
        return {
            "id": self.check_in_id,
            "host_id": self.host_id,
            "host_name": self.host_name,
            "status": self.status.value,
            "check_in_time": _iso(self.check_in_time),
            "check_out_time": _iso(self.check_out_time),
            "purpose": self.purpose,
            "badge_number": self.badge_number,
            "qr_code": self.qr_code,
            "estimated_wait_time": self.estimated_wait_time,
            "security_officer_id": self.security_officer_id,
            "security_officer_name": self.security_officer_name,
            "government_id": self.government_id.to_dict() if self.government_id else None,
            "approved_at": _iso(self.approved_at),
            "approved_by": self.approved_by,
            "denied_at": _iso(self.denied_at),
            "denied_by": self.denied_by,
            "denial_reason": self.denial_reason,
            "is_pre_approved": self.is_pre_approved,
            "pre_approval_id": self.pre_approval_id,
        }


@dataclass(frozen=True)
class Visitor:
    """A physical person, identified across visits."""

    visitor_id: str
    name: str
    phone: str
    created_at: datetime
    check_ins: tuple[VisitorCheckIn, ...] = ()
    email: Optional[str] = None
    company: Optional[str] = None
    photo_url: Optional[str] = None
    government_id: Optional[GovernmentId] = None
    last_visit: Optional[datetime] = None
    total_visits: int = 0
    is_blacklisted: bool = False
    blacklist_reason: Optional[str] = None

    def find_check_in(self, check_in_id: str) -> Optional[VisitorCheckIn]:
        for ci in self.check_ins:
            if ci.check_in_id == check_in_id:
                return ci
        return None

    def to_dict(self, *, with_check_ins: bool = True) -> dict:
        data = {
            "id": self.visitor_id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "company": self.company,
            "photo_url": self.photo_url,
            "government_id": self.government_id.to_dict() if self.government_id else None,
            "created_at": _iso(self.created_at),
            "last_visit": _iso(self.last_visit),
            "total_visits": self.total_visits,
            "is_blacklisted": self.is_blacklisted,
            "blacklist_reason": self.blacklist_reason,
        }
        if with_check_ins:
            data["check_ins"] = [ci.to_dict() for ci in self.check_ins]
        return data


@dataclass(frozen=True)
class VisitorData:
    """Front-desk form data for a check-in.

    ``visitor_id`` lets a returning visitor be addressed directly; otherwise the
    visitor is matched by phone number or government-ID number.
    """

    name: str
    phone: str
    email: Optional[str] = None
    company: Optional[str] = None
    photo_url: Optional[str] = None
    government_id: Optional[GovernmentId] = None
    visitor_id: Optional[str] = None


@dataclass(frozen=True)
class VisitEntry:
    """Read-model: a check-in together with its visitor."""

    visitor: Visitor
    check_in: VisitorCheckIn

    def to_dict(self) -> dict:
        return {
            "visitor": self.visitor.to_dict(with_check_ins=False),
            "check_in": self.check_in.to_dict(),
        }


# Tagged transition commands. Each names its target state, so a caller can
# never hand the lifecycle an arbitrary partial patch.


@dataclass(frozen=True)
class Approve:
    badge_number: Optional[str] = None
    target: CheckInStatus = field(default=CheckInStatus.APPROVED, init=False)


@dataclass(frozen=True)
class Deny:
    reason: str
    target: CheckInStatus = field(default=CheckInStatus.DENIED, init=False)


@dataclass(frozen=True)
class Cancel:
    target: CheckInStatus = field(default=CheckInStatus.CANCELLED, init=False)


@dataclass(frozen=True)
class CheckOut:
    target: CheckInStatus = field(default=CheckInStatus.CHECKED_OUT, init=False)


TransitionCommand = Union[Approve, Deny, Cancel, CheckOut]


VALID_TRANSITIONS: dict[CheckInStatus, set[CheckInStatus]] = {
    CheckInStatus.PENDING: {CheckInStatus.APPROVED, CheckInStatus.DENIED, CheckInStatus.CANCELLED},
    CheckInStatus.APPROVED: {CheckInStatus.CHECKED_OUT},
    CheckInStatus.DENIED: set(),
    CheckInStatus.CANCELLED: set(),
    CheckInStatus.CHECKED_OUT: set(),
}
