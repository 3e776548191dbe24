from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Host


class HostRepository(Protocol):
    def get_by_id(self, host_id: str) -> Optional[Host]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Host]:
        raise NotImplementedError

    def find_by_name(self, name: str) -> Optional[Host]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Host]:
        raise NotImplementedError

    def save(self, host: Host) -> None:
        raise NotImplementedError

    def delete_by_id(self, host_id: str) -> bool:
        raise NotImplementedError
