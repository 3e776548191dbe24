from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .audit.memory_audit_repository import InMemoryAuditRepository
from .audit.service import AuditTrail
from .common.clock import Clock, IdGenerator, SystemClock
from .database.store import VisitorStore
from .hosts.memory_host_repository import InMemoryHostRepository
from .hosts.service import AuthService, HostApprovalWorkflow
from .notifications.dispatcher import LoggingNotifier, NotificationDispatcher
from .notifications.outbox import Outbox, OutboxWorker
from .notifications.recorder import DeliveryRecorder
from .preapprovals.memory_pre_approval_repository import InMemoryPreApprovalRepository
from .preapprovals.service import PreApprovalLifecycle
from .rules.model import SystemRules
from .rules.service import RulesService
from .stats.service import StatsAggregator
from .visitors.badges import BadgeIssuer
from .visitors.memory_visitor_repository import InMemoryVisitorRepository
from .visitors.service import CheckInLifecycle


@dataclass(frozen=True)
class Container:
    store: VisitorStore
    clock: Clock

    visitors_repo: InMemoryVisitorRepository
    pre_approvals_repo: InMemoryPreApprovalRepository
    hosts_repo: InMemoryHostRepository
    audit_repo: InMemoryAuditRepository

    audit_trail: AuditTrail
    rules_service: RulesService
    host_workflow: HostApprovalWorkflow
    auth_service: AuthService
    pre_approval_lifecycle: PreApprovalLifecycle
    check_in_lifecycle: CheckInLifecycle
    stats: StatsAggregator

    outbox: Outbox
    outbox_worker: OutboxWorker


def build_container(
    *,
    rules: Optional[SystemRules] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
    clock: Optional[Clock] = None,
    ids: Optional[IdGenerator] = None,
    security_email: str = "security@company.com",
    outbox_poll_seconds: float = 1.0,
) -> Container:
    store = VisitorStore(rules=rules)
    clock = clock or SystemClock()
    ids = ids or IdGenerator()

    visitors_repo = InMemoryVisitorRepository(store)
    pre_approvals_repo = InMemoryPreApprovalRepository(store)
    hosts_repo = InMemoryHostRepository(store)
    audit_repo = InMemoryAuditRepository(store)

    audit_trail = AuditTrail(audit_repo, clock=clock, ids=ids)
    outbox = Outbox(store, clock=clock, ids=ids)

    rules_service = RulesService(store, audit_trail)
    host_workflow = HostApprovalWorkflow(store, hosts_repo, audit_trail, clock=clock, ids=ids)
    auth_service = AuthService(hosts_repo)
    pre_approval_lifecycle = PreApprovalLifecycle(
        store,
        pre_approvals_repo,
        hosts_repo,
        audit_trail,
        outbox,
        clock=clock,
        ids=ids,
    )
    check_in_lifecycle = CheckInLifecycle(
        store,
        visitors_repo,
        hosts_repo,
        pre_approval_lifecycle,
        audit_trail,
        outbox,
        clock=clock,
        ids=ids,
        badges=BadgeIssuer(visitors_repo),
        security_email=security_email,
    )
    stats = StatsAggregator(store, clock=clock)

    outbox_worker = OutboxWorker(
        outbox,
        dispatcher or LoggingNotifier(),
        on_delivered=DeliveryRecorder(store, pre_approval_lifecycle, audit_trail),
        poll_interval=outbox_poll_seconds,
    )

    return Container(
        store=store,
        clock=clock,
        visitors_repo=visitors_repo,
        pre_approvals_repo=pre_approvals_repo,
        hosts_repo=hosts_repo,
        audit_repo=audit_repo,
        audit_trail=audit_trail,
        rules_service=rules_service,
        host_workflow=host_workflow,
        auth_service=auth_service,
        pre_approval_lifecycle=pre_approval_lifecycle,
        check_in_lifecycle=check_in_lifecycle,
        stats=stats,
        outbox=outbox,
        outbox_worker=outbox_worker,
    )
