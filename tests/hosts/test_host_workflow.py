from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash

from src.visitor_system.visitor_system.core.enums import AuditAction, AuditCategory
from src.visitor_system.visitor_system.core.exceptions import (
    AuthenticationError,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from src.visitor_system.visitor_system.hosts.model import NewHost


def _register(container, email="maria@company.com"):
    return container.host_workflow.register(NewHost(name="Maria Garcia", email=email, department="Sales"))


def test_register_creates_unapproved_host(container):
    host = _register(container, email="Maria@Company.com")

    assert host.is_approved is False
    assert host.is_visitable is False
    assert host.email == "maria@company.com"
    assert host.password_hash is None
    last = container.audit_trail.query()[0]
    assert last.action == AuditAction.HOST_REGISTRATION
    assert last.category == AuditCategory.USER_MANAGEMENT
    assert [h.host_id for h in container.host_workflow.list_pending()] == [host.host_id]


def test_register_rejects_duplicate_email(container):
    _register(container)
    before = container.audit_trail.count()

    with pytest.raises(ValidationError):
        _register(container, email="MARIA@company.com")
    assert container.audit_trail.count() == before


@pytest.mark.parametrize("field", ["name", "email", "department"])
def test_register_requires_fields(container, field):
    data = {"name": "Maria", "email": "maria@company.com", "department": "Sales"}
    data[field] = " "
    with pytest.raises(ValidationError):
        container.host_workflow.register(NewHost(**data))


def test_approve_hashes_credential_and_is_idempotent(container, admin, clock):
    host = _register(container)

    approved = container.host_workflow.approve(host.host_id, approved_by=admin, credential="s3cret!")
    assert approved.is_approved is True
    assert approved.approved_by == "Admin User"
    assert approved.approved_at == clock.now()
    assert approved.password_hash != "s3cret!"
    assert check_password_hash(approved.password_hash, "s3cret!")
    assert approved.is_visitable is True

    clock.advance(hours=1)
    before = container.audit_trail.count()
    again = container.host_workflow.approve(host.host_id, approved_by=admin, credential="another-one")

    assert again == approved
    assert container.audit_trail.count() == before + 1
    assert container.audit_trail.query()[0].action == AuditAction.HOST_APPROVED


def test_approve_requires_credential(container, admin):
    host = _register(container)

    with pytest.raises(ValidationError):
        container.host_workflow.approve(host.host_id, approved_by=admin, credential="123")
    assert container.host_workflow.get(host.host_id).is_approved is False


def test_deny_removes_pending_registration(container, admin):
    host = _register(container)

    container.host_workflow.deny(host.host_id, denied_by=admin)

    with pytest.raises(NotFound):
        container.host_workflow.get(host.host_id)
    assert container.audit_trail.query()[0].action == AuditAction.HOST_DENIED


def test_deny_rejects_approved_host(container, admin, host):
    with pytest.raises(InvalidTransition):
        container.host_workflow.deny(host.host_id, denied_by=admin)
    assert container.host_workflow.get(host.host_id).is_approved is True


def test_deactivated_host_is_not_visitable(container, admin, host):
    off = container.host_workflow.set_active(host.host_id, active=False, actor=admin)

    assert off.is_visitable is False
    assert container.host_workflow.list_visitable() == []
    assert container.audit_trail.query()[0].action == AuditAction.HOST_DEACTIVATED

    on = container.host_workflow.set_active(host.host_id, active=True, actor=admin)
    assert on.is_visitable is True


def test_authenticate(container, admin):
    host = _register(container)
    auth = container.auth_service

    with pytest.raises(AuthenticationError):
        auth.authenticate("maria@company.com", "s3cret!")

    container.host_workflow.approve(host.host_id, approved_by=admin, credential="s3cret!")
    assert auth.authenticate("MARIA@company.com", "s3cret!").host_id == host.host_id

    with pytest.raises(AuthenticationError):
        auth.authenticate("maria@company.com", "wrong-password")

    container.host_workflow.set_active(host.host_id, active=False, actor=admin)
    with pytest.raises(AuthenticationError):
        auth.authenticate("maria@company.com", "s3cret!")
