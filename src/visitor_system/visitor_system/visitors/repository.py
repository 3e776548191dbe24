from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Visitor


class VisitorRepository(Protocol):
    def get_by_id(self, visitor_id: str) -> Optional[Visitor]:
        raise NotImplementedError

    def find_returning(self, *, phone: str, id_number: Optional[str] = None) -> Optional[Visitor]:
        """Match a returning visitor by phone or government-ID number."""

        raise NotImplementedError

    def list_all(self) -> Sequence[Visitor]:
        raise NotImplementedError

    def issued_badges(self) -> set[str]:
        """Badge numbers held by currently active (approved, not checked-out) visits."""

        raise NotImplementedError

    def save(self, visitor: Visitor) -> None:
        raise NotImplementedError
