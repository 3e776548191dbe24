from __future__ import annotations

from ..audit.model import Actor
from ..audit.service import AuditTrail
from ..core.enums import AuditAction, AuditCategory, NotificationChannel
from ..database.store import VisitorStore
from ..preapprovals.service import PreApprovalLifecycle
from .model import NotificationIntent

_SENT_ACTIONS = {
    NotificationChannel.EMAIL: AuditAction.NOTIFICATION_SENT_EMAIL,
    NotificationChannel.SMS: AuditAction.NOTIFICATION_SENT_SMS,
}


class DeliveryRecorder:
    """Outbox callback for confirmed deliveries.

    Flips the pre-approval "sent" flags and leaves a system audit entry, in one
    transaction.
    """

    def __init__(self, store: VisitorStore, pre_approvals: PreApprovalLifecycle, audit: AuditTrail):
        self._store = store
        self._pre_approvals = pre_approvals
        self._audit = audit

    def __call__(self, intent: NotificationIntent) -> None:
        with self._store.transaction():
            self._pre_approvals.record_delivery(intent)
            self._audit.record(
                action=_SENT_ACTIONS[intent.channel],
                actor=Actor.system("Notification Service"),
                target_id=intent.subject_id,
                target_name=intent.recipient,
                details=f"{intent.channel.value.upper()} sent to {intent.recipient}",
                category=AuditCategory.SYSTEM,
            )
