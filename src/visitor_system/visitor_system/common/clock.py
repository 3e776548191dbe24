from __future__ import annotations

import itertools
import threading
import uuid
from datetime import datetime
from typing import Protocol

from .datetime_utils import now_local


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Wall clock in local time."""

    def now(self) -> datetime:
        return now_local()


class IdGenerator:
    """Unique record ids.

    Ids combine a process-wide sequence with a random suffix, so they sort by
    creation order and stay unique across restarts of the sequence.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            seq = next(self._counter)
        return f"{seq:08d}{uuid.uuid4().hex[:8]}"
