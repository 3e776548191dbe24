from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from ..audit.model import AuditEntry
from ..hosts.model import Host
from ..notifications.model import NotificationIntent
from ..preapprovals.model import PreApproval
from ..rules.model import SystemRules
from ..visitors.model import Visitor


@dataclass(frozen=True)
class _Snapshot:
    visitors: dict
    pre_approvals: dict
    hosts: dict
    audit_log: list
    outbox: list
    rules: SystemRules


class VisitorStore:
    """In-memory source of truth for one process run.

    Owned by the container and passed by reference to every repository; there
    is no module-level instance. Records are immutable dataclasses that are
    replaced wholesale, so copying the collections is enough to snapshot them.
    """

    def __init__(self, rules: Optional[SystemRules] = None):
        self.visitors: dict[str, Visitor] = {}
        self.pre_approvals: dict[str, PreApproval] = {}
        self.hosts: dict[str, Host] = {}
        self.audit_log: list[AuditEntry] = []
        self.outbox: list[NotificationIntent] = []
        self.rules: SystemRules = rules or SystemRules()
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["VisitorStore"]:
        """All-or-nothing scope for a mutation.

        Every collection is restored if the block raises. Re-entrant: a nested
        transaction that fails rolls back its own changes and re-raises, so the
        outer one rolls back too unless it handles the error.
        """
        with self._lock:
            snapshot = self._snapshot()
            try:
                yield self
            except BaseException:
                self._restore(snapshot)
                raise

    @contextmanager
    def read(self) -> Iterator["VisitorStore"]:
        """Consistent view for readers (no transaction is half-applied)."""
        with self._lock:
            yield self

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            visitors=dict(self.visitors),
            pre_approvals=dict(self.pre_approvals),
            hosts=dict(self.hosts),
            audit_log=list(self.audit_log),
            outbox=list(self.outbox),
            rules=self.rules,
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self.visitors = snapshot.visitors
        self.pre_approvals = snapshot.pre_approvals
        self.hosts = snapshot.hosts
        self.audit_log = snapshot.audit_log
        self.outbox = snapshot.outbox
        self.rules = snapshot.rules
