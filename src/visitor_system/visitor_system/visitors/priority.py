from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import minutes_between
from ..core.constants import HIGH_PRIORITY_WAIT_MINUTES, MEDIUM_PRIORITY_WAIT_MINUTES
from ..core.enums import Priority
from .model import VisitorCheckIn


def wait_minutes(check_in: VisitorCheckIn, now: datetime) -> float:
    return max(0.0, minutes_between(check_in.check_in_time, now))


def classify_priority(waited_minutes: float) -> Priority:
    """Fixed display bands; independent of the configurable alert threshold."""
    if waited_minutes > HIGH_PRIORITY_WAIT_MINUTES:
        return Priority.HIGH
    if waited_minutes > MEDIUM_PRIORITY_WAIT_MINUTES:
        return Priority.MEDIUM
    return Priority.LOW


def exceeds_alert_threshold(waited_minutes: float, max_wait_time_before_alert: int) -> bool:
    return waited_minutes > max_wait_time_before_alert
