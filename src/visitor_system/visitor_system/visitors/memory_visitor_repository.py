from __future__ import annotations

import re
from typing import Optional, Sequence

from ..database.store import VisitorStore
from .model import Visitor
from .repository import VisitorRepository


def _normalize_phone(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


class InMemoryVisitorRepository(VisitorRepository):
    def __init__(self, store: VisitorStore):
        self._store = store

    def get_by_id(self, visitor_id: str) -> Optional[Visitor]:
        return self._store.visitors.get(str(visitor_id))

    def find_returning(self, *, phone: str, id_number: Optional[str] = None) -> Optional[Visitor]:
        wanted_phone = _normalize_phone(phone)
        wanted_id = (id_number or "").strip().upper()
        for visitor in self._store.visitors.values():
            if wanted_phone and _normalize_phone(visitor.phone) == wanted_phone:
                return visitor
            gov = visitor.government_id
            if wanted_id and gov and gov.number.strip().upper() == wanted_id:
                return visitor
        return None

    def list_all(self) -> Sequence[Visitor]:
        with self._store.read() as s:
            return list(s.visitors.values())

    def issued_badges(self) -> set[str]:
        badges: set[str] = set()
        for visitor in self._store.visitors.values():
            for ci in visitor.check_ins:
                if ci.is_active and ci.badge_number:
                    badges.add(ci.badge_number)
        return badges

    def save(self, visitor: Visitor) -> None:
        self._store.visitors[visitor.visitor_id] = visitor
