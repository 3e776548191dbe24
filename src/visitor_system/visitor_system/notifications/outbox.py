from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..common.clock import Clock, IdGenerator
from ..core.enums import NotificationChannel, NotificationPurpose
from ..database.store import VisitorStore
from .dispatcher import NotificationDispatcher
from .model import DeliveryResult, NotificationIntent

logger = logging.getLogger(__name__)

DeliveryCallback = Callable[[NotificationIntent], None]


class Outbox:
    """Notification intents enqueued alongside state changes.

    Intents live in the store, so they are rolled back together with the
    transition that enqueued them.
    """

    def __init__(self, store: VisitorStore, *, clock: Clock, ids: IdGenerator):
        self._store = store
        self._clock = clock
        self._ids = ids

    def enqueue(
        self,
        channel: NotificationChannel,
        recipient: Optional[str],
        message: str,
        *,
        purpose: NotificationPurpose = NotificationPurpose.GENERAL,
        subject_id: Optional[str] = None,
    ) -> Optional[NotificationIntent]:
        if not recipient or not recipient.strip():
            logger.debug("Skipping %s notification without recipient", channel.value)
            return None
        intent = NotificationIntent(
            intent_id=self._ids.new_id(),
            channel=channel,
            recipient=recipient.strip(),
            message=message,
            created_at=self._clock.now(),
            purpose=purpose,
            subject_id=subject_id,
        )
        with self._store.transaction() as s:
            s.outbox.append(intent)
        return intent

    def pending(self) -> list[NotificationIntent]:
        with self._store.read() as s:
            return list(s.outbox)

    def take_all(self) -> list[NotificationIntent]:
        with self._store.transaction() as s:
            taken = list(s.outbox)
            s.outbox.clear()
        return taken


class OutboxWorker:
    """Drains the outbox through the dispatcher.

    Each intent is attempted exactly once: failures are logged and dropped,
    retrying is the caller's decision (e.g. resend a pre-approval invite).
    """

    def __init__(
        self,
        outbox: Outbox,
        dispatcher: NotificationDispatcher,
        *,
        on_delivered: Optional[DeliveryCallback] = None,
        poll_interval: float = 1.0,
    ):
        self._outbox = outbox
        self._dispatcher = dispatcher
        self._on_delivered = on_delivered
        self._poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def set_delivery_callback(self, callback: DeliveryCallback) -> None:
        self._on_delivered = callback

    def drain(self) -> list[DeliveryResult]:
        results: list[DeliveryResult] = []
        for intent in self._outbox.take_all():
            results.append(self._deliver(intent))
        return results

    def _deliver(self, intent: NotificationIntent) -> DeliveryResult:
        try:
            ok = bool(self._dispatcher.send(intent.channel, intent.recipient, intent.message))
        except Exception as e:
            logger.warning("%s notification to %s failed: %s", intent.channel.value, intent.recipient, e)
            return DeliveryResult(intent=intent, delivered=False, error=str(e))

        if not ok:
            logger.warning("%s notification to %s was not accepted", intent.channel.value, intent.recipient)
            return DeliveryResult(intent=intent, delivered=False, error="rejected by dispatcher")

        if self._on_delivered is not None:
            try:
                self._on_delivered(intent)
            except Exception:
                logger.exception("Recording delivery of notification %s failed", intent.intent_id)
        return DeliveryResult(intent=intent, delivered=True)

    def start(self) -> None:
        """Drain on a background thread every ``poll_interval`` seconds."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name="notification-outbox")
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        self.drain()

    def _loop(self) -> None:
        while not self._stop.wait(self._poll_interval):
            self.drain()
