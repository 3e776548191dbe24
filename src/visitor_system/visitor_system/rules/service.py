from __future__ import annotations

from ..audit.model import Actor
from ..audit.service import AuditTrail
from ..core.enums import AuditAction, AuditCategory, Severity
from ..core.exceptions import ValidationError
from ..database.store import VisitorStore
from .model import SystemRules


class RulesService:
    """Use case: read and update the process-wide SystemRules."""

    def __init__(self, store: VisitorStore, audit: AuditTrail):
        self._store = store
        self._audit = audit

    def current(self) -> SystemRules:
        with self._store.read() as s:
            return s.rules

    def can_create_walk_in_visit(self) -> bool:
        return self.current().allow_walk_in_visitors

    def update_rules(self, *, actor: Actor, **changes) -> SystemRules:
        if not changes:
            raise ValidationError("No rule changes given")

        with self._store.transaction() as s:
            updated = s.rules.with_updates(**changes)
            s.rules = updated
            self._audit.record(
                action=AuditAction.SYSTEM_RULES_UPDATED,
                actor=actor,
                details=f"System rules updated: {', '.join(sorted(changes))}",
                severity=Severity.MEDIUM,
                category=AuditCategory.SYSTEM,
            )
        return updated
