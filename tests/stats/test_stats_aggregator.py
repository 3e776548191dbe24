from __future__ import annotations

from datetime import datetime, timedelta

from src.visitor_system.visitor_system.preapprovals.model import VisitorContact


def _walk_in(container, officer, visitor_data, **kwargs):
    return container.check_in_lifecycle.create_check_in(visitor_data(**kwargs), "John Doe", "Meeting", actor=officer)


def test_empty_snapshot(container):
    snap = container.stats.snapshot()

    assert snap.to_dict() == {
        "total_today": 0,
        "active_now": 0,
        "pending_approval": 0,
        "pre_approved_today": 0,
        "average_wait_time": 0,
        "total_check_outs": 0,
    }


def test_counts_follow_the_records(container, officer, host, visitor_data, clock):
    lifecycle = container.check_in_lifecycle
    stats = container.stats
    a = _walk_in(container, officer, visitor_data)
    b = _walk_in(container, officer, visitor_data)
    c = _walk_in(container, officer, visitor_data)

    clock.advance(minutes=10)
    lifecycle.approve(a.visitor.visitor_id, a.check_in.check_in_id, actor=officer)
    clock.advance(minutes=4)
    lifecycle.approve(b.visitor.visitor_id, b.check_in.check_in_id, actor=officer)

    assert stats.total_today() == 3
    assert stats.pending_approval() == 1
    assert stats.active_now() == 2
    assert stats.average_wait_time() == 12

    lifecycle.check_out(a.visitor.visitor_id, a.check_in.check_in_id, actor=officer)
    lifecycle.cancel(c.visitor.visitor_id, c.check_in.check_in_id, actor=officer)

    snap = stats.snapshot()
    assert snap.active_now == 1
    assert snap.total_check_outs == 1
    assert snap.pending_approval == 0
    # Only visits still approved count towards the average wait.
    assert snap.average_wait_time == 14


def test_average_wait_ignores_checked_out_visits(container, officer, host, visitor_data, clock):
    lifecycle = container.check_in_lifecycle
    long_wait = _walk_in(container, officer, visitor_data)
    clock.advance(minutes=30)
    lifecycle.approve(long_wait.visitor.visitor_id, long_wait.check_in.check_in_id, actor=officer)
    lifecycle.check_out(long_wait.visitor.visitor_id, long_wait.check_in.check_in_id, actor=officer)

    short_wait = _walk_in(container, officer, visitor_data)
    clock.advance(minutes=2)
    lifecycle.approve(short_wait.visitor.visitor_id, short_wait.check_in.check_in_id, actor=officer)

    assert container.stats.average_wait_time() == 2

def test_active_now_counts_visitors_not_check_ins(container, officer, host, visitor_data):
    lifecycle = container.check_in_lifecycle
    first = _walk_in(container, officer, visitor_data, phone="555-0500")
    second = _walk_in(container, officer, visitor_data, phone="555-0500")
    assert first.visitor.visitor_id == second.visitor.visitor_id

    for entry in (first, second):
        lifecycle.approve(entry.visitor.visitor_id, entry.check_in.check_in_id, actor=officer)

    assert container.stats.active_now() == 1


def test_today_windows(container, officer, host, visitor_data, clock):
    _walk_in(container, officer, visitor_data)
    today = clock.now()
    lifecycle = container.pre_approval_lifecycle
    contact = VisitorContact(name="Bob", phone="555-0600")
    lifecycle.create(contact, host.host_id, today.replace(hour=15), "Later today")
    lifecycle.create(contact, host.host_id, today + timedelta(days=1), "Tomorrow")

    assert container.stats.total_today() == 1
    assert container.stats.pre_approved_today() == 1

    clock.advance(days=1)
    assert container.stats.total_today() == 0
    assert container.stats.pre_approved_today() == 1


def test_visitor_report(container, officer, admin, host, visitor_data, clock):
    lifecycle = container.check_in_lifecycle
    a = _walk_in(container, officer, visitor_data, company="Acme Corp")
    b = _walk_in(container, officer, visitor_data, company="Acme Corp")
    c = _walk_in(container, officer, visitor_data, company="Globex")

    lifecycle.approve(a.visitor.visitor_id, a.check_in.check_in_id, actor=officer)
    clock.advance(minutes=90)
    lifecycle.check_out(a.visitor.visitor_id, a.check_in.check_in_id, actor=officer)
    lifecycle.approve(b.visitor.visitor_id, b.check_in.check_in_id, actor=officer)
    lifecycle.deny(c.visitor.visitor_id, c.check_in.check_in_id, actor=officer, reason="No ID")
    lifecycle.blacklist_visitor(c.visitor.visitor_id, reason="Aggressive", actor=admin)

    report = container.stats.generate_visitor_report(datetime(2026, 3, 1), datetime(2026, 3, 31))

    assert report.total_visitors == 3
    assert report.total_check_ins == 3
    assert report.approved_visits == 1
    assert report.denied_visits == 1
    assert report.top_companies == {"Acme Corp": 2, "Globex": 1}
    assert report.average_visit_duration == 90
    assert report.security_incidents == 1

    empty = container.stats.generate_visitor_report(datetime(2026, 4, 1), datetime(2026, 4, 30))
    assert empty.total_visitors == 0
    assert empty.security_incidents == 0
