from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.clock import Clock
from ..common.datetime_utils import day_window, minutes_between
from ..core.enums import CheckInStatus, Severity
from ..core.exceptions import ValidationError
from ..database.store import VisitorStore

TOP_COMPANIES_LIMIT = 5


@dataclass(frozen=True)
class VisitorStats:
    total_today: int
    active_now: int
    pending_approval: int
    pre_approved_today: int
    average_wait_time: int
    total_check_outs: int

    def to_dict(self) -> dict:
        return {
            "total_today": self.total_today,
            "active_now": self.active_now,
            "pending_approval": self.pending_approval,
            "pre_approved_today": self.pre_approved_today,
            "average_wait_time": self.average_wait_time,
            "total_check_outs": self.total_check_outs,
        }


@dataclass(frozen=True)
class VisitorReport:
    start: datetime
    end: datetime
    total_visitors: int
    total_check_ins: int
    approved_visits: int
    denied_visits: int
    top_companies: dict[str, int]
    average_visit_duration: int
    security_incidents: int

    def to_dict(self) -> dict:
        return {
            "period": {"start": self.start.isoformat(), "end": self.end.isoformat()},
            "total_visitors": self.total_visitors,
            "total_check_ins": self.total_check_ins,
            "approved_visits": self.approved_visits,
            "denied_visits": self.denied_visits,
            "top_companies": self.top_companies,
            "average_visit_duration": self.average_visit_duration,
            "security_incidents": self.security_incidents,
        }


class StatsAggregator:
    """Dashboard numbers, recomputed from the store on every call.

    Each public method reads under the store lock, so a caller never sees a
    transition half-applied.
    """

    def __init__(self, store: VisitorStore, *, clock: Clock):
        self._store = store
        self._clock = clock

    def _check_ins(self):
        with self._store.read() as s:
            return [ci for v in s.visitors.values() for ci in v.check_ins]

    def total_today(self) -> int:
        start, end = day_window(self._clock.now())
        with self._store.read() as s:
            return sum(1 for v in s.visitors.values() if start <= v.created_at < end)

    def active_now(self) -> int:
        with self._store.read() as s:
            return sum(1 for v in s.visitors.values() if any(ci.is_active for ci in v.check_ins))

    def pending_approval(self) -> int:
        return sum(1 for ci in self._check_ins() if ci.status == CheckInStatus.PENDING)

    def pre_approved_today(self) -> int:
        start, end = day_window(self._clock.now())
        with self._store.read() as s:
            return sum(1 for pa in s.pre_approvals.values() if start <= pa.scheduled_date < end)

    def average_wait_time(self) -> int:
        """Mean minutes between check-in and approval, rounded."""
        waits = [
            minutes_between(ci.check_in_time, ci.approved_at)
            for ci in self._check_ins()
            if ci.status == CheckInStatus.APPROVED and ci.approved_at is not None
        ]
        if not waits:
            return 0
        return round(sum(waits) / len(waits))

    def total_check_outs(self) -> int:
        return sum(1 for ci in self._check_ins() if ci.status == CheckInStatus.CHECKED_OUT)

    def snapshot(self) -> VisitorStats:
        with self._store.read():
            return VisitorStats(
                total_today=self.total_today(),
                active_now=self.active_now(),
                pending_approval=self.pending_approval(),
                pre_approved_today=self.pre_approved_today(),
                average_wait_time=self.average_wait_time(),
                total_check_outs=self.total_check_outs(),
            )

    def generate_visitor_report(self, start: datetime, end: datetime, *, top: Optional[int] = None) -> VisitorReport:
        """Summary of visitors first seen between ``start`` and ``end`` (inclusive)."""
        if end < start:
            raise ValidationError("Report end must not be before its start")

        with self._store.read() as s:
            visitors = [v for v in s.visitors.values() if start <= v.created_at <= end]
            incidents = sum(
                1
                for e in s.audit_log
                if e.severity in (Severity.HIGH, Severity.CRITICAL) and start <= e.timestamp <= end
            )

        check_ins = [ci for v in visitors for ci in v.check_ins]
        companies = Counter(v.company.strip() for v in visitors if v.company and v.company.strip())
        durations = [
            minutes_between(ci.check_in_time, ci.check_out_time)
            for ci in check_ins
            if ci.status == CheckInStatus.CHECKED_OUT and ci.check_out_time is not None
        ]

        return VisitorReport(
            start=start,
            end=end,
            total_visitors=len(visitors),
            total_check_ins=len(check_ins),
            approved_visits=sum(1 for ci in check_ins if ci.status == CheckInStatus.APPROVED),
            denied_visits=sum(1 for ci in check_ins if ci.status == CheckInStatus.DENIED),
            top_companies=dict(companies.most_common(top or TOP_COMPANIES_LIMIT)),
            average_visit_duration=round(sum(durations) / len(durations)) if durations else 0,
            security_incidents=incidents,
        )
