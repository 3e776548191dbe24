from __future__ import annotations

import csv
import io

from src.visitor_system.visitor_system.audit.memory_audit_repository import InMemoryAuditRepository
from src.visitor_system.visitor_system.audit.model import Actor, AuditFilter
from src.visitor_system.visitor_system.audit.service import CSV_COLUMNS, AuditTrail
from src.visitor_system.visitor_system.common.clock import IdGenerator
from src.visitor_system.visitor_system.core.enums import AuditAction, AuditCategory, Role, Severity
from src.visitor_system.visitor_system.database.store import VisitorStore


def _trail(clock):
    store = VisitorStore()
    return AuditTrail(InMemoryAuditRepository(store), clock=clock, ids=IdGenerator()), store


def _seed(trail):
    officer = Actor(actor_id="sec-1", name="Officer Lee", role=Role.SECURITY)
    admin = Actor(actor_id="admin-1", name="Admin User", role=Role.ADMIN)
    trail.record(
        action=AuditAction.VISITOR_CREATED,
        actor=officer,
        target_id="v1",
        target_name="Jane Visitor",
        details="New visitor Jane Visitor registered",
        category=AuditCategory.VISITOR_MANAGEMENT,
    )
    trail.record(
        action=AuditAction.VISITOR_BLACKLISTED,
        actor=admin,
        target_id="v2",
        target_name="Mallory",
        details="Visitor blacklisted: trespassing",
        severity=Severity.HIGH,
        category=AuditCategory.SECURITY,
    )
    trail.record(
        action=AuditAction.SYSTEM_RULES_UPDATED,
        actor=admin,
        details="System rules updated: allow_walk_in_visitors",
        severity=Severity.MEDIUM,
        category=AuditCategory.SYSTEM,
    )


def test_query_returns_newest_first(clock):
    trail, store = _trail(clock)
    _seed(trail)

    actions = [e.action for e in trail.query()]

    assert actions == [
        AuditAction.SYSTEM_RULES_UPDATED,
        AuditAction.VISITOR_BLACKLISTED,
        AuditAction.VISITOR_CREATED,
    ]
    # Storage stays in insertion order.
    assert store.audit_log[0].action == AuditAction.VISITOR_CREATED


def test_query_filters(clock):
    trail, _ = _trail(clock)
    _seed(trail)

    assert [e.target_id for e in trail.query(AuditFilter(search="jane"))] == ["v1"]
    assert [e.target_id for e in trail.query(AuditFilter(search="ADMIN user"))] == [None, "v2"]
    assert [e.target_id for e in trail.query(AuditFilter(severity=Severity.HIGH))] == ["v2"]
    assert [e.target_id for e in trail.query(AuditFilter(action=AuditAction.VISITOR_CREATED))] == ["v1"]
    assert len(trail.query(AuditFilter(category=AuditCategory.SYSTEM))) == 1
    assert trail.query(AuditFilter(search="jane", severity=Severity.HIGH)) == []


def test_timestamps_never_go_backwards(clock):
    trail, _ = _trail(clock)
    actor = Actor.system()

    first = trail.record(action=AuditAction.HOST_APPROVED, actor=actor, details="a", category=AuditCategory.SYSTEM)
    clock.advance(minutes=-5)
    second = trail.record(action=AuditAction.HOST_APPROVED, actor=actor, details="b", category=AuditCategory.SYSTEM)

    assert second.timestamp == first.timestamp
    assert second.entry_id != first.entry_id
    assert trail.count() == 2


def test_csv_export(clock):
    trail, _ = _trail(clock)
    _seed(trail)

    rows = list(csv.DictReader(io.StringIO(AuditTrail.to_csv(trail.query()))))

    assert list(rows[0].keys()) == CSV_COLUMNS
    assert len(rows) == 3
    assert rows[1]["action"] == "visitor_blacklisted"
    assert rows[1]["severity"] == "high"
    assert rows[1]["actor_role"] == "admin"
