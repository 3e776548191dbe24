from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace

from ..core.constants import (
    DEFAULT_AUTO_EXPIRE_PRE_APPROVALS_AFTER,
    DEFAULT_MAX_VISITORS_PER_HOST_PER_DAY,
    DEFAULT_MAX_WAIT_TIME_BEFORE_ALERT,
)
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class SystemRules:
    """Process-wide policy consulted before policy-dependent transitions.

    Replaced wholesale on update; records created under an older value keep
    whatever they derived from it (e.g. a pre-approval's expiry).
    """

    max_visitors_per_host_per_day: int = DEFAULT_MAX_VISITORS_PER_HOST_PER_DAY
    require_pre_approval_for_external_visitors: bool = False
    max_wait_time_before_alert: int = DEFAULT_MAX_WAIT_TIME_BEFORE_ALERT  # minutes
    auto_expire_pre_approvals_after: int = DEFAULT_AUTO_EXPIRE_PRE_APPROVALS_AFTER  # hours
    require_government_id: bool = True
    allow_walk_in_visitors: bool = True

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def from_mapping(cls, data: dict) -> "SystemRules":
        return cls().with_updates(**dict(data or {}))

    def with_updates(self, **changes) -> "SystemRules":
        unknown = set(changes) - self.field_names()
        if unknown:
            raise ValidationError(f"Unknown rule(s): {', '.join(sorted(unknown))}")

        clean: dict[str, object] = {}
        for name, value in changes.items():
            current = getattr(self, name)
            if isinstance(current, bool):
                if not isinstance(value, bool):
                    raise ValidationError(f"{name} must be true or false")
                clean[name] = value
            else:
                try:
                    number = int(value)
                except (TypeError, ValueError):
                    raise ValidationError(f"{name} must be a number")
                if number <= 0 or isinstance(value, bool):
                    raise ValidationError(f"{name} must be a positive number")
                clean[name] = number
        return replace(self, **clean)

    def to_dict(self) -> dict:
        return asdict(self)
