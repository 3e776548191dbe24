from __future__ import annotations

from typing import Optional, Sequence

from ..database.store import VisitorStore
from .model import AuditEntry
from .repository import AuditRepository


class InMemoryAuditRepository(AuditRepository):
    def __init__(self, store: VisitorStore):
        self._store = store

    def append(self, entry: AuditEntry) -> None:
        self._store.audit_log.append(entry)

    def last(self) -> Optional[AuditEntry]:
        log = self._store.audit_log
        return log[-1] if log else None

    def list_all(self) -> Sequence[AuditEntry]:
        with self._store.read() as s:
            return list(s.audit_log)

    def count(self) -> int:
        return len(self._store.audit_log)
