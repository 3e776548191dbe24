from __future__ import annotations

import csv
import io
from typing import Optional, Sequence

from ..common.clock import Clock, IdGenerator
from ..core.enums import AuditAction, AuditCategory, Severity
from .model import Actor, AuditEntry, AuditFilter
from .repository import AuditRepository

CSV_COLUMNS = [
    "id",
    "timestamp",
    "action",
    "actor_id",
    "actor_name",
    "actor_role",
    "target_id",
    "target_name",
    "details",
    "ip_address",
    "user_agent",
    "severity",
    "category",
]


class AuditTrail:
    """Append-only log of domain events.

    Storage order is insertion order; "most recent first" is only how
    :meth:`query` presents results. Timestamps never go backwards even if the
    clock does.
    """

    def __init__(self, entries: AuditRepository, *, clock: Clock, ids: IdGenerator):
        self._entries = entries
        self._clock = clock
        self._ids = ids

    def record(
        self,
        *,
        action: AuditAction,
        actor: Actor,
        details: str,
        category: AuditCategory,
        severity: Severity = Severity.LOW,
        target_id: Optional[str] = None,
        target_name: Optional[str] = None,
    ) -> AuditEntry:
        timestamp = self._clock.now()
        previous = self._entries.last()
        if previous and previous.timestamp > timestamp:
            timestamp = previous.timestamp

        entry = AuditEntry(
            entry_id=self._ids.new_id(),
            timestamp=timestamp,
            action=action,
            actor_id=actor.actor_id,
            actor_name=actor.name,
            actor_role=actor.role,
            target_id=target_id,
            target_name=target_name,
            details=details,
            ip_address=actor.ip_address,
            user_agent=actor.user_agent,
            severity=severity,
            category=category,
        )
        self._entries.append(entry)
        return entry

    def query(self, audit_filter: Optional[AuditFilter] = None) -> list[AuditEntry]:
        audit_filter = audit_filter or AuditFilter()
        matched = [e for e in self._entries.list_all() if audit_filter.matches(e)]
        matched.reverse()
        return matched

    def count(self) -> int:
        return self._entries.count()

    @staticmethod
    def to_csv(entries: Sequence[AuditEntry]) -> str:
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for entry in entries:
            writer.writerow(entry.to_dict())
        return out.getvalue()
