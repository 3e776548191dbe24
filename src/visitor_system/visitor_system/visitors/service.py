from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..audit.model import Actor
from ..audit.service import AuditTrail
from ..common.clock import Clock, IdGenerator
from ..common.datetime_utils import day_window
from ..common.validators import require_non_empty
from ..core.constants import CRITICAL_WAIT_MINUTES, MAX_STAY_HOURS
from ..core.enums import AuditAction, AuditCategory, CheckInStatus, NotificationChannel, Priority, Severity
from ..core.exceptions import InvalidTransition, NotFound, PolicyViolation, ValidationError
from ..database.store import VisitorStore
from ..hosts.model import Host
from ..hosts.repository import HostRepository
from ..notifications.outbox import Outbox
from ..preapprovals.model import PreApproval
from ..preapprovals.service import PreApprovalLifecycle
from ..rules.model import SystemRules
from .badges import BadgeIssuer, qr_payload
from .model import (
    VALID_TRANSITIONS,
    Approve,
    Cancel,
    CheckOut,
    Deny,
    TransitionCommand,
    VisitEntry,
    Visitor,
    VisitorCheckIn,
    VisitorData,
)
from .priority import classify_priority, exceeds_alert_threshold, wait_minutes
from .repository import VisitorRepository

logger = logging.getLogger(__name__)

_TRANSITION_ACTIONS = {
    CheckInStatus.APPROVED: AuditAction.VISITOR_APPROVED,
    CheckInStatus.DENIED: AuditAction.VISITOR_DENIED,
    CheckInStatus.CANCELLED: AuditAction.VISITOR_CANCELLED,
    CheckInStatus.CHECKED_OUT: AuditAction.VISITOR_CHECKED_OUT,
}

# Check-ins that still count against a host's daily cap.
_CAPPED_STATUSES = {CheckInStatus.PENDING, CheckInStatus.APPROVED, CheckInStatus.CHECKED_OUT}


@dataclass(frozen=True)
class PendingItem:
    """Read-model for the security priority view."""

    entry: VisitEntry
    wait_minutes: int
    priority: Priority
    needs_alert: bool

    def to_dict(self) -> dict:
        data = self.entry.to_dict()
        data.update(
            {
                "wait_minutes": self.wait_minutes,
                "priority": self.priority.value,
                "needs_alert": self.needs_alert,
            }
        )
        return data


@dataclass(frozen=True)
class SecurityAlert:
    level: str
    message: str
    action: str

    def to_dict(self) -> dict:
        return {"type": self.level, "message": self.message, "action": self.action}


class CheckInLifecycle:
    """State machine for visitor check-ins.

    pending -> approved | denied | cancelled, approved -> checked-out.
    Every mutation runs inside one store transaction, writes exactly one audit
    entry and only enqueues notifications (delivery happens later, from the
    outbox, and can never undo a committed transition).
    """

    def __init__(
        self,
        store: VisitorStore,
        visitors: VisitorRepository,
        hosts: HostRepository,
        pre_approvals: PreApprovalLifecycle,
        audit: AuditTrail,
        outbox: Outbox,
        *,
        clock: Clock,
        ids: IdGenerator,
        badges: Optional[BadgeIssuer] = None,
        security_email: str = "security@company.com",
    ):
        self._store = store
        self._visitors = visitors
        self._hosts = hosts
        self._pre_approvals = pre_approvals
        self._audit = audit
        self._outbox = outbox
        self._clock = clock
        self._ids = ids
        self._badges = badges or BadgeIssuer(visitors)
        self._security_email = security_email

    # -------- Creation --------
    def create_check_in(
        self,
        visitor_data: VisitorData,
        host_name: str,
        purpose: str,
        *,
        actor: Actor,
        estimated_wait_time: Optional[int] = None,
    ) -> VisitEntry:
        """Walk-in entry point used by the front desk."""
        host_name = require_non_empty(host_name, "Host")

        with self._store.transaction() as s:
            if not s.rules.allow_walk_in_visitors:
                raise PolicyViolation("Walk-in visitors are not allowed. Please use the pre-approval system.")
            if s.rules.require_pre_approval_for_external_visitors and (visitor_data.company or "").strip():
                raise PolicyViolation("External visitors need a pre-approval")

            host = self._hosts.find_by_name(host_name)
            if not host:
                raise NotFound(f"Host {host_name} not found")

            return self._open_check_in(
                visitor_data,
                host,
                purpose,
                rules=s.rules,
                actor=actor,
                estimated_wait_time=estimated_wait_time,
            )

    def create_pre_approved_check_in(
        self,
        access_code: str,
        visitor_data: VisitorData,
        *,
        actor: Actor,
        estimated_wait_time: Optional[int] = None,
    ) -> VisitEntry:
        """Checkpoint entry point for a visitor presenting an access code.

        The pre-approval is only validated here; it is consumed when the
        check-in is approved.
        """
        with self._store.transaction() as s:
            pa = self._pre_approvals.require_redeemable(self._pre_approvals.get_by_access_code(access_code))
            host = self._hosts.get_by_id(pa.host_id)
            if not host:
                raise NotFound(f"Host {pa.host_id} not found")

            return self._open_check_in(
                visitor_data,
                host,
                pa.purpose,
                rules=s.rules,
                actor=actor,
                estimated_wait_time=estimated_wait_time,
                pre_approval=pa,
            )

    def _open_check_in(
        self,
        data: VisitorData,
        host: Host,
        purpose: str,
        *,
        rules: SystemRules,
        actor: Actor,
        estimated_wait_time: Optional[int],
        pre_approval: Optional[PreApproval] = None,
    ) -> VisitEntry:
        name = require_non_empty(data.name, "Name")
        phone = require_non_empty(data.phone, "Phone")
        purpose = require_non_empty(purpose, "Purpose")

        gov = data.government_id
        if rules.require_government_id and (gov is None or not gov.number.strip() or not gov.verified):
            raise PolicyViolation("A verified government ID is required")

        if not host.is_visitable:
            raise PolicyViolation(f"Host {host.name} cannot receive visitors")

        if data.visitor_id:
            existing = self._visitors.get_by_id(data.visitor_id)
            if not existing:
                raise NotFound(f"Visitor {data.visitor_id} not found")
        else:
            existing = self._visitors.find_returning(phone=phone, id_number=gov.number if gov else None)
        if existing and existing.is_blacklisted:
            raise PolicyViolation(f"Visitor {existing.name} is blacklisted")

        now = self._clock.now()
        daily_cap = min(rules.max_visitors_per_host_per_day, host.max_visitors_per_day)
        if self._count_host_visits_on(host.host_id, now) >= daily_cap:
            raise PolicyViolation(f"Host {host.name} reached the daily limit of {daily_cap} visitors")

        check_in = VisitorCheckIn(
            check_in_id=self._ids.new_id(),
            host_id=host.host_id,
            host_name=host.name,
            status=CheckInStatus.PENDING,
            check_in_time=now,
            purpose=purpose,
            estimated_wait_time=int(estimated_wait_time) if estimated_wait_time is not None else None,
            security_officer_id=actor.actor_id,
            security_officer_name=actor.name,
            government_id=gov,
            is_pre_approved=pre_approval is not None,
            pre_approval_id=pre_approval.pre_approval_id if pre_approval else None,
        )

        if existing:
            visitor = replace(
                existing,
                name=name,
                phone=phone,
                email=data.email or existing.email,
                company=data.company or existing.company,
                photo_url=data.photo_url or existing.photo_url,
                government_id=gov or existing.government_id,
                check_ins=existing.check_ins + (check_in,),
                total_visits=existing.total_visits + 1,
                last_visit=now,
            )
            action = AuditAction.CHECK_IN_CREATED
            details = f"Returning visitor {visitor.name} checked in to visit {host.name}"
        else:
            visitor = Visitor(
                visitor_id=self._ids.new_id(),
                name=name,
                phone=phone,
                email=data.email,
                company=data.company,
                photo_url=data.photo_url,
                government_id=gov,
                check_ins=(check_in,),
                created_at=now,
                last_visit=now,
                total_visits=1,
            )
            action = AuditAction.VISITOR_CREATED
            details = f"New visitor {visitor.name} registered for check-in to visit {host.name}"

        if pre_approval is not None:
            details += f" (pre-approval {pre_approval.access_code})"

        self._visitors.save(visitor)
        self._audit.record(
            action=action,
            actor=actor,
            target_id=visitor.visitor_id,
            target_name=visitor.name,
            details=details,
            category=AuditCategory.VISITOR_MANAGEMENT,
        )
        return VisitEntry(visitor=visitor, check_in=check_in)

    def _count_host_visits_on(self, host_id: str, moment: datetime) -> int:
        start, end = day_window(moment)
        return sum(
            1
            for v in self._visitors.list_all()
            for ci in v.check_ins
            if ci.host_id == host_id and ci.status in _CAPPED_STATUSES and start <= ci.check_in_time < end
        )

    # -------- Transitions --------
    def transition(self, visitor_id: str, check_in_id: str, command: TransitionCommand, *, actor: Actor) -> VisitEntry:
        with self._store.transaction():
            visitor = self._require_visitor(visitor_id)
            check_in = visitor.find_check_in(check_in_id)
            if not check_in:
                raise NotFound(f"Check-in {check_in_id} not found")

            target = command.target
            if check_in.status.is_terminal:
                raise InvalidTransition(f"Check-in is already {check_in.status.value}")
            if target not in VALID_TRANSITIONS[check_in.status]:
                raise InvalidTransition(f"Cannot move check-in from {check_in.status.value} to {target.value}")

            now = self._clock.now()
            extra = ""
            if isinstance(command, Approve):
                updated, extra = self._apply_approve(visitor, check_in, command, actor, now)
            elif isinstance(command, Deny):
                reason = require_non_empty(command.reason, "Denial reason")
                updated = replace(
                    check_in,
                    status=CheckInStatus.DENIED,
                    denied_at=now,
                    denied_by=actor.name,
                    denial_reason=reason,
                )
                extra = f" - Reason: {reason}"
            elif isinstance(command, (Cancel, CheckOut)):
                updated = replace(check_in, status=target, check_out_time=now)
            else:
                raise ValidationError(f"Unsupported transition {command!r}")

            visitor = replace(
                visitor,
                check_ins=tuple(updated if ci.check_in_id == updated.check_in_id else ci for ci in visitor.check_ins),
            )
            self._visitors.save(visitor)
            self._audit.record(
                action=_TRANSITION_ACTIONS[target],
                actor=actor,
                target_id=visitor.visitor_id,
                target_name=visitor.name,
                details=f"Visitor status changed to {target.value}{extra}",
                severity=Severity.MEDIUM if target == CheckInStatus.DENIED else Severity.LOW,
                category=AuditCategory.VISITOR_MANAGEMENT,
            )

            if target in (CheckInStatus.APPROVED, CheckInStatus.DENIED):
                self._notify_decision(visitor, updated, actor)

        logger.info("Check-in %s of %s moved to %s by %s", check_in_id, visitor.name, target.value, actor.name)
        return VisitEntry(visitor=visitor, check_in=updated)

    def _apply_approve(
        self,
        visitor: Visitor,
        check_in: VisitorCheckIn,
        command: Approve,
        actor: Actor,
        now: datetime,
    ) -> tuple[VisitorCheckIn, str]:
        badge = self._badges.issue(command.badge_number or check_in.badge_number)
        extra = f" - Badge {badge}"
        if check_in.pre_approval_id:
            pa = self._pre_approvals.mark_used(check_in.pre_approval_id, visitor.visitor_id, badge_number=badge)
            extra += f" - Pre-approval {pa.access_code} used"

        updated = replace(
            check_in,
            status=CheckInStatus.APPROVED,
            badge_number=badge,
            qr_code=qr_payload(badge),
            approved_at=now,
            approved_by=actor.name,
        )
        return updated, extra

    def _notify_decision(self, visitor: Visitor, check_in: VisitorCheckIn, actor: Actor) -> None:
        if check_in.status == CheckInStatus.APPROVED:
            message = (
                f"Visitor {visitor.name} has been approved by {actor.name}. "
                f"Badge {check_in.badge_number} ready for issuance."
            )
        else:
            message = f"Visitor {visitor.name} has been denied by {actor.name}. Reason: {check_in.denial_reason}"

        self._outbox.enqueue(NotificationChannel.EMAIL, self._security_email, message)
        host = self._hosts.get_by_id(check_in.host_id)
        if host and host.email != self._security_email:
            self._outbox.enqueue(NotificationChannel.EMAIL, host.email, message)

    def approve(self, visitor_id: str, check_in_id: str, *, actor: Actor, badge_number: Optional[str] = None) -> VisitEntry:
        return self.transition(visitor_id, check_in_id, Approve(badge_number=badge_number), actor=actor)

    def deny(self, visitor_id: str, check_in_id: str, *, actor: Actor, reason: str) -> VisitEntry:
        return self.transition(visitor_id, check_in_id, Deny(reason=reason), actor=actor)

    def cancel(self, visitor_id: str, check_in_id: str, *, actor: Actor) -> VisitEntry:
        return self.transition(visitor_id, check_in_id, Cancel(), actor=actor)

    def check_out(self, visitor_id: str, check_in_id: str, *, actor: Actor) -> VisitEntry:
        return self.transition(visitor_id, check_in_id, CheckOut(), actor=actor)

    # -------- Blacklist --------
    def blacklist_visitor(self, visitor_id: str, *, reason: str, actor: Actor) -> Visitor:
        reason = require_non_empty(reason, "Reason")
        with self._store.transaction():
            visitor = replace(self._require_visitor(visitor_id), is_blacklisted=True, blacklist_reason=reason)
            self._visitors.save(visitor)
            self._audit.record(
                action=AuditAction.VISITOR_BLACKLISTED,
                actor=actor,
                target_id=visitor.visitor_id,
                target_name=visitor.name,
                details=f"Visitor blacklisted: {reason}",
                severity=Severity.HIGH,
                category=AuditCategory.SECURITY,
            )
        return visitor

    def remove_from_blacklist(self, visitor_id: str, *, actor: Actor) -> Visitor:
        with self._store.transaction():
            visitor = replace(self._require_visitor(visitor_id), is_blacklisted=False, blacklist_reason=None)
            self._visitors.save(visitor)
            self._audit.record(
                action=AuditAction.VISITOR_UNBLACKLISTED,
                actor=actor,
                target_id=visitor.visitor_id,
                target_name=visitor.name,
                details="Visitor removed from blacklist",
                severity=Severity.MEDIUM,
                category=AuditCategory.SECURITY,
            )
        return visitor

    # -------- Reads --------
    def _require_visitor(self, visitor_id: str) -> Visitor:
        visitor = self._visitors.get_by_id(visitor_id)
        if not visitor:
            raise NotFound(f"Visitor {visitor_id} not found")
        return visitor

    def get_visitor(self, visitor_id: str) -> Visitor:
        return self._require_visitor(visitor_id)

    def list_visitors(self) -> list[Visitor]:
        return sorted(self._visitors.list_all(), key=lambda v: v.created_at)

    def _entries(self, *, status: Optional[CheckInStatus] = None, host_id: Optional[str] = None) -> list[VisitEntry]:
        return [
            VisitEntry(visitor=v, check_in=ci)
            for v in self._visitors.list_all()
            for ci in v.check_ins
            if (status is None or ci.status == status) and (host_id is None or ci.host_id == host_id)
        ]

    def pending_queue(self, *, host_id: Optional[str] = None) -> list[VisitEntry]:
        """Host-facing queue: oldest check-in first."""
        entries = self._entries(status=CheckInStatus.PENDING, host_id=host_id)
        entries.sort(key=lambda e: e.check_in.check_in_time)
        return entries

    def priority_view(self) -> list[PendingItem]:
        """Security-facing view: longest wait first, with priority band and alert flag."""
        now = self._clock.now()
        with self._store.read() as s:
            alert_after = s.rules.max_wait_time_before_alert
            entries = self._entries(status=CheckInStatus.PENDING)

        items = []
        for entry in entries:
            waited = wait_minutes(entry.check_in, now)
            items.append(
                PendingItem(
                    entry=entry,
                    wait_minutes=int(waited),
                    priority=classify_priority(waited),
                    needs_alert=exceeds_alert_threshold(waited, alert_after),
                )
            )
        items.sort(key=lambda i: i.entry.check_in.check_in_time)
        return items

    def active_visitors(self) -> list[Visitor]:
        return [v for v in self._visitors.list_all() if any(ci.is_active for ci in v.check_ins)]

    def approved_visits(self) -> list[VisitEntry]:
        entries = self._entries(status=CheckInStatus.APPROVED)
        entries.sort(key=lambda e: e.check_in.check_in_time, reverse=True)
        return entries

    def history(self, *, host_id: Optional[str] = None) -> list[VisitEntry]:
        entries = self._entries(host_id=host_id)
        entries.sort(key=lambda e: e.check_in.check_in_time, reverse=True)
        return entries

    def get_badge(self, visitor_id: str, check_in_id: str) -> Optional[VisitEntry]:
        visitor = self._visitors.get_by_id(visitor_id)
        if not visitor:
            return None
        check_in = visitor.find_check_in(check_in_id)
        if not check_in or check_in.status != CheckInStatus.APPROVED:
            return None
        return VisitEntry(visitor=visitor, check_in=check_in)

    def security_alerts(self) -> list[SecurityAlert]:
        now = self._clock.now()
        alerts: list[SecurityAlert] = []

        long_waiting = [
            e for e in self._entries(status=CheckInStatus.PENDING) if wait_minutes(e.check_in, now) > CRITICAL_WAIT_MINUTES
        ]
        if long_waiting:
            alerts.append(
                SecurityAlert(
                    level="critical",
                    message=f"{len(long_waiting)} visitor(s) waiting over {CRITICAL_WAIT_MINUTES} minutes",
                    action="Review pending approvals",
                )
            )

        long_staying = [
            e
            for e in self._entries(status=CheckInStatus.APPROVED)
            if e.check_in.is_active and wait_minutes(e.check_in, now) > MAX_STAY_HOURS * 60
        ]
        if long_staying:
            alerts.append(
                SecurityAlert(
                    level="warning",
                    message=f"{len(long_staying)} visitor(s) in building over {MAX_STAY_HOURS} hours",
                    action="Contact visitors for check-out",
                )
            )
        return alerts
