from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, json_body, ok
from ..common.validators import optional_text
from ..core.exceptions import NotFound, ValidationError
from ..container import Container
from .model import GovernmentId, VisitorData


def _visitor_data(payload: dict) -> VisitorData:
    raw = payload.get("visitor")
    if not isinstance(raw, dict):
        raise ValidationError("Visitor details are required")

    gov = raw.get("government_id")
    government_id = None
    if gov:
        if not isinstance(gov, dict):
            raise ValidationError("Government ID is not valid")
        government_id = GovernmentId(
            id_type=str(gov.get("type") or ""),
            number=str(gov.get("number") or ""),
            verified=bool(gov.get("verified", False)),
        )

    return VisitorData(
        name=str(raw.get("name") or ""),
        phone=str(raw.get("phone") or ""),
        email=optional_text(raw.get("email")),
        company=optional_text(raw.get("company")),
        photo_url=optional_text(raw.get("photo_url")),
        government_id=government_id,
        visitor_id=optional_text(raw.get("id")),
    )


def _wait_time(payload: dict):
    value = payload.get("estimated_wait_time")
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Estimated wait time must be a number")


def register(app: Flask, container: Container) -> None:
    lifecycle = container.check_in_lifecycle

    @app.route("/api/visitors", methods=["GET"], endpoint="list_visitors")
    def list_visitors():
        return ok([v.to_dict() for v in lifecycle.list_visitors()])

    @app.route("/api/visitors/active", methods=["GET"], endpoint="active_visitors")
    def active_visitors():
        return ok([v.to_dict() for v in lifecycle.active_visitors()])

    @app.route("/api/visitors/<visitor_id>", methods=["GET"], endpoint="get_visitor")
    def get_visitor(visitor_id: str):
        return ok(lifecycle.get_visitor(visitor_id).to_dict())

    @app.route("/api/check-ins", methods=["POST"], endpoint="create_check_in")
    def create_check_in():
        payload = json_body()
        entry = lifecycle.create_check_in(
            _visitor_data(payload),
            str(payload.get("host_name") or ""),
            str(payload.get("purpose") or ""),
            actor=current_actor(payload),
            estimated_wait_time=_wait_time(payload),
        )
        return ok(entry.to_dict(), 201)

    @app.route("/api/check-ins/pre-approved", methods=["POST"], endpoint="create_pre_approved_check_in")
    def create_pre_approved_check_in():
        payload = json_body()
        entry = lifecycle.create_pre_approved_check_in(
            str(payload.get("access_code") or ""),
            _visitor_data(payload),
            actor=current_actor(payload),
            estimated_wait_time=_wait_time(payload),
        )
        return ok(entry.to_dict(), 201)

    @app.route("/api/check-ins/pending", methods=["GET"], endpoint="pending_check_ins")
    def pending_check_ins():
        host_id = request.args.get("host_id") or None
        return ok([e.to_dict() for e in lifecycle.pending_queue(host_id=host_id)])

    @app.route("/api/check-ins/priority", methods=["GET"], endpoint="priority_check_ins")
    def priority_check_ins():
        return ok([i.to_dict() for i in lifecycle.priority_view()])

    @app.route("/api/check-ins/approved", methods=["GET"], endpoint="approved_check_ins")
    def approved_check_ins():
        return ok([e.to_dict() for e in lifecycle.approved_visits()])

    @app.route("/api/check-ins/history", methods=["GET"], endpoint="check_in_history")
    def check_in_history():
        host_id = request.args.get("host_id") or None
        return ok([e.to_dict() for e in lifecycle.history(host_id=host_id)])

    @app.route("/api/visitors/<visitor_id>/check-ins/<check_in_id>/approve", methods=["POST"], endpoint="approve_check_in")
    def approve_check_in(visitor_id: str, check_in_id: str):
        payload = json_body()
        entry = lifecycle.approve(
            visitor_id,
            check_in_id,
            actor=current_actor(payload),
            badge_number=optional_text(payload.get("badge_number")),
        )
        return ok(entry.to_dict())

    @app.route("/api/visitors/<visitor_id>/check-ins/<check_in_id>/deny", methods=["POST"], endpoint="deny_check_in")
    def deny_check_in(visitor_id: str, check_in_id: str):
        payload = json_body()
        entry = lifecycle.deny(
            visitor_id,
            check_in_id,
            actor=current_actor(payload),
            reason=str(payload.get("reason") or ""),
        )
        return ok(entry.to_dict())

    @app.route("/api/visitors/<visitor_id>/check-ins/<check_in_id>/cancel", methods=["POST"], endpoint="cancel_check_in")
    def cancel_check_in(visitor_id: str, check_in_id: str):
        payload = json_body()
        entry = lifecycle.cancel(visitor_id, check_in_id, actor=current_actor(payload))
        return ok(entry.to_dict())

    @app.route("/api/visitors/<visitor_id>/check-ins/<check_in_id>/check-out", methods=["POST"], endpoint="check_out")
    def check_out(visitor_id: str, check_in_id: str):
        payload = json_body()
        entry = lifecycle.check_out(visitor_id, check_in_id, actor=current_actor(payload))
        return ok(entry.to_dict())

    @app.route("/api/visitors/<visitor_id>/check-ins/<check_in_id>/badge", methods=["GET"], endpoint="visitor_badge")
    def visitor_badge(visitor_id: str, check_in_id: str):
        entry = lifecycle.get_badge(visitor_id, check_in_id)
        if entry is None:
            raise NotFound("No badge issued for this check-in")
        return ok(entry.to_dict())

    @app.route("/api/visitors/<visitor_id>/blacklist", methods=["POST"], endpoint="blacklist_visitor")
    def blacklist_visitor(visitor_id: str):
        payload = json_body()
        visitor = lifecycle.blacklist_visitor(
            visitor_id,
            reason=str(payload.get("reason") or ""),
            actor=current_actor(payload),
        )
        return ok(visitor.to_dict(with_check_ins=False))

    @app.route("/api/visitors/<visitor_id>/blacklist", methods=["DELETE"], endpoint="unblacklist_visitor")
    def unblacklist_visitor(visitor_id: str):
        payload = json_body()
        visitor = lifecycle.remove_from_blacklist(visitor_id, actor=current_actor(payload))
        return ok(visitor.to_dict(with_check_ins=False))

    @app.route("/api/security/alerts", methods=["GET"], endpoint="security_alerts")
    def security_alerts():
        return ok([a.to_dict() for a in lifecycle.security_alerts()])
