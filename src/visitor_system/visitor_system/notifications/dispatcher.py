from __future__ import annotations

import logging
from typing import Protocol

from ..core.enums import NotificationChannel

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    """Transport that actually delivers email/SMS. Returns True on success."""

    def send(self, channel: NotificationChannel, recipient: str, message: str) -> bool:
        raise NotImplementedError


class LoggingNotifier:
    """Default dispatcher: writes messages to the log instead of a gateway."""

    def __init__(self) -> None:
        self.sent: list[tuple[NotificationChannel, str, str]] = []

    def send(self, channel: NotificationChannel, recipient: str, message: str) -> bool:
        logger.info("Sending %s to %s: %s", channel.value.upper(), recipient, message)
        self.sent.append((channel, recipient, message))
        return True
