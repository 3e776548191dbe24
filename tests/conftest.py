from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.visitor_system.visitor_system.audit.model import Actor
from src.visitor_system.visitor_system.container import build_container
from src.visitor_system.visitor_system.core.enums import Role
from src.visitor_system.visitor_system.hosts.model import NewHost
from src.visitor_system.visitor_system.notifications.dispatcher import LoggingNotifier
from src.visitor_system.visitor_system.visitors.model import GovernmentId, VisitorData

START = datetime(2026, 3, 2, 9, 0)


class FixedClock:
    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **delta) -> datetime:
        self._now += timedelta(**delta)
        return self._now

    def set(self, moment: datetime) -> None:
        self._now = moment


class FailingNotifier:
    def __init__(self):
        self.attempts = 0

    def send(self, channel, recipient, message):
        self.attempts += 1
        raise ConnectionError("gateway unavailable")


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def notifier():
    return LoggingNotifier()


@pytest.fixture
def container(clock, notifier):
    return build_container(clock=clock, dispatcher=notifier, security_email="security@test.local")


@pytest.fixture
def admin():
    return Actor(actor_id="admin-1", name="Admin User", role=Role.ADMIN)


@pytest.fixture
def officer():
    return Actor(actor_id="sec-1", name="Officer Lee", role=Role.SECURITY)


@pytest.fixture
def make_host(container, admin):
    def _make(name="John Doe", email="john@company.com", *, approve=True, max_per_day=5):
        host = container.host_workflow.register(
            NewHost(name=name, email=email, department="Engineering", max_visitors_per_day=max_per_day)
        )
        if approve:
            host = container.host_workflow.approve(host.host_id, approved_by=admin, credential="secret123")
        return host

    return _make


@pytest.fixture
def host(make_host):
    return make_host()


@pytest.fixture
def visitor_data():
    counter = iter(range(100, 1000))

    def _make(name="Jane Visitor", phone=None, *, company=None, verified=True, government_id=True, visitor_id=None):
        gov = GovernmentId(id_type="passport", number=f"P{next(counter)}", verified=verified) if government_id else None
        return VisitorData(
            name=name,
            phone=phone or f"555-0{next(counter)}",
            email=f"{name.split()[0].lower()}@example.com",
            company=company,
            government_id=gov,
            visitor_id=visitor_id,
        )

    return _make


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


@pytest.fixture
def failing_container(clock, failing_notifier, admin):
    """Container whose dispatcher always fails, with one visitable host "Jo"."""
    c = build_container(clock=clock, dispatcher=failing_notifier)
    jo = c.host_workflow.register(NewHost(name="Jo", email="jo@company.com", department="Ops"))
    c.host_workflow.approve(jo.host_id, approved_by=admin, credential="secret123")
    return c
