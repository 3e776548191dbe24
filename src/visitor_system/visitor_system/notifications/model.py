from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationChannel, NotificationPurpose


@dataclass(frozen=True)
class NotificationIntent:
    """A message waiting in the outbox.

    ``purpose``/``subject_id`` say what to record once the message is delivered
    (e.g. flip ``email_sent`` on the pre-approval ``subject_id``).
    """

    intent_id: str
    channel: NotificationChannel
    recipient: str
    message: str
    created_at: datetime
    purpose: NotificationPurpose = NotificationPurpose.GENERAL
    subject_id: Optional[str] = None


@dataclass(frozen=True)
class DeliveryResult:
    intent: NotificationIntent
    delivered: bool
    error: Optional[str] = None
