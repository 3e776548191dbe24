from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PreApproval


class PreApprovalRepository(Protocol):
    def get_by_id(self, pre_approval_id: str) -> Optional[PreApproval]:
        raise NotImplementedError

    def get_by_access_code(self, access_code: str) -> Optional[PreApproval]:
        raise NotImplementedError

    def list_all(self, *, host_id: Optional[str] = None) -> Sequence[PreApproval]:
        raise NotImplementedError

    def save(self, pre_approval: PreApproval) -> None:
        raise NotImplementedError
