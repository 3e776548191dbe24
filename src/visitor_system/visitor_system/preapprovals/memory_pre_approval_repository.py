from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import PreApprovalStatus
from ..database.store import VisitorStore
from .model import PreApproval
from .repository import PreApprovalRepository


class InMemoryPreApprovalRepository(PreApprovalRepository):
    def __init__(self, store: VisitorStore):
        self._store = store

    def get_by_id(self, pre_approval_id: str) -> Optional[PreApproval]:
        return self._store.pre_approvals.get(str(pre_approval_id))

    def get_by_access_code(self, access_code: str) -> Optional[PreApproval]:
        """Active records win, then the newest: codes are only unique among active records."""
        code = (access_code or "").strip().upper()
        found = [pa for pa in self._store.pre_approvals.values() if pa.access_code == code]
        found.sort(key=lambda pa: (pa.status != PreApprovalStatus.ACTIVE, -pa.created_at.timestamp()))
        return found[0] if found else None

    def list_all(self, *, host_id: Optional[str] = None) -> Sequence[PreApproval]:
        with self._store.read() as s:
            items = [pa for pa in s.pre_approvals.values() if host_id is None or pa.host_id == str(host_id)]
        items.sort(key=lambda pa: pa.scheduled_date)
        return items

    def save(self, pre_approval: PreApproval) -> None:
        self._store.pre_approvals[pre_approval.pre_approval_id] = pre_approval
