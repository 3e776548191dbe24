from __future__ import annotations

from typing import Optional, Sequence

from ..database.store import VisitorStore
from .model import Host
from .repository import HostRepository


class InMemoryHostRepository(HostRepository):
    def __init__(self, store: VisitorStore):
        self._store = store

    def get_by_id(self, host_id: str) -> Optional[Host]:
        return self._store.hosts.get(str(host_id))

    def get_by_email(self, email: str) -> Optional[Host]:
        key = (email or "").strip().lower()
        for host in self._store.hosts.values():
            if host.email.lower() == key:
                return host
        return None

    def find_by_name(self, name: str) -> Optional[Host]:
        """Prefer a visitable host when several share a name."""
        key = (name or "").strip().lower()
        matches = [h for h in self._store.hosts.values() if h.name.lower() == key]
        matches.sort(key=lambda h: (not h.is_visitable, h.created_at))
        return matches[0] if matches else None

    def list_all(self) -> Sequence[Host]:
        with self._store.read() as s:
            return sorted(s.hosts.values(), key=lambda h: h.created_at)

    def save(self, host: Host) -> None:
        self._store.hosts[host.host_id] = host

    def delete_by_id(self, host_id: str) -> bool:
        return self._store.hosts.pop(str(host_id), None) is not None
