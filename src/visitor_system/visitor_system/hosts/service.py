from __future__ import annotations

from dataclasses import replace
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..audit.model import Actor
from ..audit.service import AuditTrail
from ..common.clock import Clock, IdGenerator
from ..common.validators import require_min_length, require_non_empty, require_positive
from ..core.enums import AuditAction, AuditCategory, Role, Severity
from ..core.exceptions import AuthenticationError, InvalidTransition, NotFound, ValidationError
from ..database.store import VisitorStore
from .model import Host, NewHost
from .repository import HostRepository

MIN_CREDENTIAL_LENGTH = 6


class HostApprovalWorkflow:
    """Use case: host self-registration and admin approval.

    A host can receive visitors (and log in) only once approved with a
    credential and while active.
    """

    def __init__(
        self,
        store: VisitorStore,
        hosts: HostRepository,
        audit: AuditTrail,
        *,
        clock: Clock,
        ids: IdGenerator,
    ):
        self._store = store
        self._hosts = hosts
        self._audit = audit
        self._clock = clock
        self._ids = ids

    def _require(self, host_id: str) -> Host:
        host = self._hosts.get_by_id(host_id)
        if not host:
            raise NotFound(f"Host {host_id} not found")
        return host

    def register(self, host_data: NewHost) -> Host:
        name = require_non_empty(host_data.name, "Name")
        email = require_non_empty(host_data.email, "Email").lower()
        department = require_non_empty(host_data.department, "Department")
        max_per_day = require_positive(host_data.max_visitors_per_day, "Max visitors per day")
        if "@" not in email:
            raise ValidationError("Email is not valid")

        with self._store.transaction():
            if self._hosts.get_by_email(email):
                raise ValidationError("A host with this email already exists")

            host = Host(
                host_id=self._ids.new_id(),
                name=name,
                email=email,
                department=department,
                created_at=self._clock.now(),
                max_visitors_per_day=max_per_day,
            )
            self._hosts.save(host)
            self._audit.record(
                action=AuditAction.HOST_REGISTRATION,
                actor=Actor(actor_id=host.host_id, name=host.name, role=Role.HOST),
                target_id=host.host_id,
                target_name=host.name,
                details=f"New host {host.name} registered and pending approval",
                category=AuditCategory.USER_MANAGEMENT,
            )
        return host

    def approve(self, host_id: str, *, approved_by: Actor, credential: str) -> Host:
        require_min_length(credential, "Password", MIN_CREDENTIAL_LENGTH)

        with self._store.transaction():
            host = self._require(host_id)
            if host.is_approved:
                # Idempotent: the record is left as it is.
                self._audit.record(
                    action=AuditAction.HOST_APPROVED,
                    actor=approved_by,
                    target_id=host.host_id,
                    target_name=host.name,
                    details=f"Host {host.name} was already approved; no change",
                    category=AuditCategory.USER_MANAGEMENT,
                )
                return host

            host = replace(
                host,
                is_approved=True,
                password_hash=generate_password_hash(credential),
                approved_by=approved_by.name,
                approved_at=self._clock.now(),
            )
            self._hosts.save(host)
            self._audit.record(
                action=AuditAction.HOST_APPROVED,
                actor=approved_by,
                target_id=host.host_id,
                target_name=host.name,
                details=f"Host {host.name} approved by {approved_by.name}",
                category=AuditCategory.USER_MANAGEMENT,
            )
        return host

    def deny(self, host_id: str, *, denied_by: Actor) -> None:
        """Reject a pending registration. The candidate record is deleted."""
        with self._store.transaction():
            host = self._require(host_id)
            if host.is_approved:
                raise InvalidTransition("Approved hosts cannot be denied")

            self._hosts.delete_by_id(host.host_id)
            self._audit.record(
                action=AuditAction.HOST_DENIED,
                actor=denied_by,
                target_id=host.host_id,
                target_name=host.name,
                details=f"Host registration for {host.name} denied and removed",
                severity=Severity.MEDIUM,
                category=AuditCategory.USER_MANAGEMENT,
            )

    def set_active(self, host_id: str, *, active: bool, actor: Actor) -> Host:
        with self._store.transaction():
            host = self._require(host_id)
            host = replace(host, is_active=bool(active))
            self._hosts.save(host)
            self._audit.record(
                action=AuditAction.HOST_ACTIVATED if active else AuditAction.HOST_DEACTIVATED,
                actor=actor,
                target_id=host.host_id,
                target_name=host.name,
                details=f"Host {host.name} {'activated' if active else 'deactivated'}",
                severity=Severity.LOW if active else Severity.MEDIUM,
                category=AuditCategory.USER_MANAGEMENT,
            )
        return host

    def get(self, host_id: str) -> Host:
        return self._require(host_id)

    def list_hosts(self, *, approved: Optional[bool] = None) -> list[Host]:
        hosts = list(self._hosts.list_all())
        if approved is not None:
            hosts = [h for h in hosts if h.is_approved == approved]
        return hosts

    def list_pending(self) -> list[Host]:
        return self.list_hosts(approved=False)

    def list_visitable(self) -> list[Host]:
        return [h for h in self._hosts.list_all() if h.is_visitable]


class AuthService:
    """Use case: authenticate a host (login)."""

    def __init__(self, hosts: HostRepository):
        self._hosts = hosts

    def authenticate(self, email: str, password: str) -> Host:
        host = self._hosts.get_by_email(email or "")
        if not host or not host.is_visitable or not host.password_hash:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(host.password_hash, password or "")
        except Exception:
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return host
