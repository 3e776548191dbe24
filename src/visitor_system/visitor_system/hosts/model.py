from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_MAX_VISITORS_PER_HOST_PER_DAY


@dataclass(frozen=True)
class Host:
    """Domain entity: a person who may receive visitors.

    Note: ``password_hash`` is opaque to the core and only set on approval.
    """

    host_id: str
    name: str
    email: str
    department: str
    created_at: datetime
    is_active: bool = True
    is_approved: bool = False
    max_visitors_per_day: int = DEFAULT_MAX_VISITORS_PER_HOST_PER_DAY
    password_hash: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None

    @property
    def is_visitable(self) -> bool:
        return self.is_approved and self.is_active

    def to_dict(self) -> dict:
        return {
            "id": self.host_id,
            "name": self.name,
            "email": self.email,
            "department": self.department,
            "is_active": self.is_active,
            "is_approved": self.is_approved,
            "max_visitors_per_day": self.max_visitors_per_day,
            "created_at": self.created_at.isoformat(),
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
        }


@dataclass(frozen=True)
class NewHost:
    """Self-registration form data."""

    name: str
    email: str
    department: str
    max_visitors_per_day: int = DEFAULT_MAX_VISITORS_PER_HOST_PER_DAY
