from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from ..audit.model import Actor
from ..audit.service import AuditTrail
from ..common.clock import Clock, IdGenerator
from ..common.datetime_utils import to_naive_local
from ..common.validators import require_non_empty
from ..core.enums import (
    AuditAction,
    AuditCategory,
    NotificationChannel,
    NotificationPurpose,
    PreApprovalStatus,
    Role,
)
from ..core.exceptions import Expired, InvalidTransition, NotFound, PolicyViolation, ValidationError
from ..database.store import VisitorStore
from ..hosts.repository import HostRepository
from ..notifications.model import NotificationIntent
from ..notifications.outbox import Outbox
from ..visitors.badges import qr_payload
from . import messages
from .access_codes import derive_access_code
from .model import PreApproval, VisitorContact
from .repository import PreApprovalRepository

logger = logging.getLogger(__name__)


class PreApprovalLifecycle:
    """Scheduled visits: creation, redemption, cancellation and expiry.

    Expiry is evaluated lazily on every read path (see
    :meth:`PreApproval.effective_status`); :meth:`reconcile_expired` only makes
    it visible in the stored status.
    """

    def __init__(
        self,
        store: VisitorStore,
        pre_approvals: PreApprovalRepository,
        hosts: HostRepository,
        audit: AuditTrail,
        outbox: Outbox,
        *,
        clock: Clock,
        ids: IdGenerator,
    ):
        self._store = store
        self._pre_approvals = pre_approvals
        self._hosts = hosts
        self._audit = audit
        self._outbox = outbox
        self._clock = clock
        self._ids = ids

    # -------- Reads --------
    def get(self, pre_approval_id: str) -> PreApproval:
        pa = self._pre_approvals.get_by_id(pre_approval_id)
        if not pa:
            raise NotFound(f"Pre-approval {pre_approval_id} not found")
        return pa

    def get_by_access_code(self, access_code: str) -> PreApproval:
        pa = self._pre_approvals.get_by_access_code(access_code)
        if not pa:
            raise NotFound("Unknown access code")
        return pa

    def list_pre_approvals(self, *, host_id: Optional[str] = None) -> list[PreApproval]:
        return list(self._pre_approvals.list_all(host_id=host_id))

    def list_active(self, *, host_id: Optional[str] = None) -> list[PreApproval]:
        now = self._clock.now()
        return [pa for pa in self._pre_approvals.list_all(host_id=host_id) if pa.is_redeemable(now)]

    def is_redeemable(self, pre_approval_id: str) -> bool:
        return self.get(pre_approval_id).is_redeemable(self._clock.now())

    def require_redeemable(self, pa: PreApproval) -> PreApproval:
        """Raise unless ``pa`` can still be redeemed right now."""
        now = self._clock.now()
        status = pa.effective_status(now)
        if status == PreApprovalStatus.EXPIRED:
            raise Expired(f"Pre-approval {pa.access_code} expired at {pa.expires_at:%Y-%m-%d %H:%M}")
        if status != PreApprovalStatus.ACTIVE:
            raise InvalidTransition(f"Pre-approval {pa.access_code} is {status.value}")
        return pa

    def get_badge(self, pre_approval_id: str) -> Optional[PreApproval]:
        return self._pre_approvals.get_by_id(pre_approval_id)

    def _active_codes(self) -> set[str]:
        now = self._clock.now()
        return {pa.access_code for pa in self._pre_approvals.list_all() if pa.is_redeemable(now)}

    # -------- Mutations --------
    def create(
        self,
        visitor: VisitorContact,
        host_id: str,
        scheduled_date: datetime,
        purpose: str,
        *,
        actor: Optional[Actor] = None,
    ) -> PreApproval:
        name = require_non_empty(visitor.name, "Visitor name")
        phone = require_non_empty(visitor.phone, "Visitor phone")
        purpose = require_non_empty(purpose, "Purpose")
        if not isinstance(scheduled_date, datetime):
            raise ValidationError("Scheduled date is not valid")
        scheduled_date = to_naive_local(scheduled_date)

        with self._store.transaction() as s:
            host = self._hosts.get_by_id(host_id)
            if not host:
                raise NotFound(f"Host {host_id} not found")
            if not host.is_visitable:
                raise PolicyViolation(f"Host {host.name} cannot receive visitors")

            # Snapshot of the current policy; later rule changes do not move it.
            expires_at = scheduled_date + timedelta(hours=s.rules.auto_expire_pre_approvals_after)
            pre_approval_id = self._ids.new_id()
            access_code = derive_access_code(pre_approval_id, self._active_codes())

            pa = PreApproval(
                pre_approval_id=pre_approval_id,
                visitor=replace(visitor, name=name, phone=phone),
                host_id=host.host_id,
                host_name=host.name,
                scheduled_date=scheduled_date,
                purpose=purpose,
                status=PreApprovalStatus.ACTIVE,
                expires_at=expires_at,
                created_at=self._clock.now(),
                access_code=access_code,
                qr_code=qr_payload(access_code),
            )
            self._pre_approvals.save(pa)

            actor = actor or Actor(actor_id=host.host_id, name=host.name, role=Role.HOST)
            self._audit.record(
                action=AuditAction.PREAPPROVAL_CREATED,
                actor=actor,
                target_id=pa.pre_approval_id,
                target_name=pa.visitor.name,
                details=(
                    f"Pre-approval created for {pa.visitor.name}, "
                    f"expires at {pa.expires_at:%Y-%m-%d %H:%M}"
                ),
                category=AuditCategory.VISITOR_MANAGEMENT,
            )
            self._enqueue_invites(pa, email=True, sms=True)
        return pa

    def consume(
        self,
        pre_approval_id: str,
        visitor_id: str,
        *,
        badge_number: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> PreApproval:
        with self._store.transaction():
            pa = self.mark_used(pre_approval_id, visitor_id, badge_number=badge_number)
            self._audit.record(
                action=AuditAction.PREAPPROVAL_USED,
                actor=actor or Actor(actor_id=str(visitor_id), name="Visitor", role=Role.VISITOR),
                target_id=pa.pre_approval_id,
                target_name=pa.visitor.name,
                details=f"Pre-approval {pa.access_code} used for check-in",
                category=AuditCategory.VISITOR_MANAGEMENT,
            )
        return pa

    def mark_used(self, pre_approval_id: str, visitor_id: str, *, badge_number: Optional[str] = None) -> PreApproval:
        """Consume without an audit entry of its own.

        Used when the consumption is part of a larger transition (check-in
        approval) whose single audit entry already covers it.
        """
        with self._store.transaction():
            pa = self.require_redeemable(self.get(pre_approval_id))
            pa = replace(
                pa,
                status=PreApprovalStatus.USED,
                used_at=self._clock.now(),
                approved_visitor_id=str(visitor_id),
                badge_number=badge_number,
            )
            self._pre_approvals.save(pa)
        return pa

    def cancel(self, pre_approval_id: str, *, actor: Actor) -> PreApproval:
        with self._store.transaction():
            pa = self.require_redeemable(self.get(pre_approval_id))

            pa = replace(pa, status=PreApprovalStatus.CANCELLED)
            self._pre_approvals.save(pa)
            self._audit.record(
                action=AuditAction.PREAPPROVAL_CANCELLED,
                actor=actor,
                target_id=pa.pre_approval_id,
                target_name=pa.visitor.name,
                details=f"Pre-approval {pa.access_code} cancelled",
                category=AuditCategory.VISITOR_MANAGEMENT,
            )
        return pa

    def reconcile_expired(self) -> list[PreApproval]:
        """Write ``expired`` onto active records whose expiry has passed."""
        expired: list[PreApproval] = []
        with self._store.transaction():
            now = self._clock.now()
            for pa in self._pre_approvals.list_all():
                if pa.status != PreApprovalStatus.ACTIVE or pa.effective_status(now) != PreApprovalStatus.EXPIRED:
                    continue
                pa = replace(pa, status=PreApprovalStatus.EXPIRED)
                self._pre_approvals.save(pa)
                self._audit.record(
                    action=AuditAction.PREAPPROVAL_EXPIRED,
                    actor=Actor.system(),
                    target_id=pa.pre_approval_id,
                    target_name=pa.visitor.name,
                    details=f"Pre-approval {pa.access_code} expired at {pa.expires_at:%Y-%m-%d %H:%M}",
                    category=AuditCategory.VISITOR_MANAGEMENT,
                )
                expired.append(pa)
        if expired:
            logger.info("Expired %d pre-approval(s)", len(expired))
        return expired

    # -------- Notifications --------
    def _enqueue_invites(self, pa: PreApproval, *, email: bool, sms: bool) -> int:
        queued = 0
        if email and self._outbox.enqueue(
            NotificationChannel.EMAIL,
            pa.visitor.email,
            messages.invite_email(pa),
            purpose=NotificationPurpose.PRE_APPROVAL_INVITE,
            subject_id=pa.pre_approval_id,
        ):
            queued += 1
        if sms and self._outbox.enqueue(
            NotificationChannel.SMS,
            pa.visitor.phone,
            messages.invite_sms(pa),
            purpose=NotificationPurpose.PRE_APPROVAL_INVITE,
            subject_id=pa.pre_approval_id,
        ):
            queued += 1
        return queued

    def resend_notifications(self, pre_approval_id: str) -> int:
        """Queue the invite again on every channel not yet confirmed."""
        with self._store.transaction():
            pa = self.require_redeemable(self.get(pre_approval_id))
            return self._enqueue_invites(pa, email=not pa.email_sent, sms=not pa.sms_sent)

    def send_reminder(self, pre_approval_id: str) -> bool:
        with self._store.transaction():
            pa = self.require_redeemable(self.get(pre_approval_id))
            intent = self._outbox.enqueue(
                NotificationChannel.SMS,
                pa.visitor.phone,
                messages.reminder_sms(pa),
                purpose=NotificationPurpose.PRE_APPROVAL_REMINDER,
                subject_id=pa.pre_approval_id,
            )
        return intent is not None

    def record_delivery(self, intent: NotificationIntent) -> None:
        """Flip the "sent" flags once the dispatcher confirmed a delivery."""
        if not intent.subject_id or intent.purpose == NotificationPurpose.GENERAL:
            return

        with self._store.transaction():
            pa = self._pre_approvals.get_by_id(intent.subject_id)
            if not pa:
                logger.warning("Delivered notification for unknown pre-approval %s", intent.subject_id)
                return

            if intent.purpose == NotificationPurpose.PRE_APPROVAL_REMINDER:
                pa = replace(pa, reminders_sent=pa.reminders_sent + (self._clock.now(),))
            elif intent.channel == NotificationChannel.EMAIL:
                pa = replace(pa, email_sent=True)
            else:
                pa = replace(pa, sms_sent=True)
            self._pre_approvals.save(pa)
