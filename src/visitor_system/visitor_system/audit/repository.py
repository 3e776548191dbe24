from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AuditEntry


class AuditRepository(Protocol):
    def append(self, entry: AuditEntry) -> None:
        raise NotImplementedError

    def last(self) -> Optional[AuditEntry]:
        raise NotImplementedError

    def list_all(self) -> Sequence[AuditEntry]:
        """Entries in insertion order (oldest first)."""

        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
