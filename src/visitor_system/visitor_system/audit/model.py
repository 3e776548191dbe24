from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import SYSTEM_IP
from ..core.enums import AuditAction, AuditCategory, Role, Severity


@dataclass(frozen=True)
class Actor:
    """Whoever triggered an operation (host, security officer, admin, system)."""

    actor_id: str
    name: str
    role: Role
    ip_address: str = SYSTEM_IP
    user_agent: Optional[str] = None

    @classmethod
    def system(cls, name: str = "System") -> "Actor":
        return cls(actor_id="system", name=name, role=Role.SYSTEM)


@dataclass(frozen=True)
class AuditEntry:
    """Immutable record of one logical state change."""

    entry_id: str
    timestamp: datetime
    action: AuditAction
    actor_id: str
    actor_name: str
    actor_role: Role
    details: str
    ip_address: str
    severity: Severity
    category: AuditCategory
    target_id: Optional[str] = None
    target_name: Optional[str] = None
    user_agent: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action.value,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "actor_role": self.actor_role.value,
            "target_id": self.target_id,
            "target_name": self.target_name,
            "details": self.details,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "severity": self.severity.value,
            "category": self.category.value,
        }


@dataclass(frozen=True)
class AuditFilter:
    """Query for the audit trail. ``None`` means "any"."""

    search: Optional[str] = None
    severity: Optional[Severity] = None
    action: Optional[AuditAction] = None
    category: Optional[AuditCategory] = None

    def matches(self, entry: AuditEntry) -> bool:
        if self.search:
            needle = self.search.lower()
            haystack = (entry.actor_name, entry.target_name or "", entry.details)
            if not any(needle in value.lower() for value in haystack):
                return False
        if self.severity is not None and entry.severity != self.severity:
            return False
        if self.action is not None and entry.action != self.action:
            return False
        if self.category is not None and entry.category != self.category:
            return False
        return True
