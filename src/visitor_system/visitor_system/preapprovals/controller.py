from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import current_actor, json_body, ok, query_flag
from ..common.validators import optional_text
from ..core.exceptions import NotFound, ValidationError
from ..container import Container
from .model import VisitorContact


def register(app: Flask, container: Container) -> None:
    lifecycle = container.pre_approval_lifecycle

    def _dump(pa) -> dict:
        return pa.to_dict(now=container.clock.now())

    @app.route("/api/pre-approvals", methods=["GET"], endpoint="list_pre_approvals")
    def list_pre_approvals():
        host_id = request.args.get("host_id") or None
        if query_flag("active"):
            items = lifecycle.list_active(host_id=host_id)
        else:
            items = lifecycle.list_pre_approvals(host_id=host_id)
        return ok([_dump(pa) for pa in items])

    @app.route("/api/pre-approvals", methods=["POST"], endpoint="create_pre_approval")
    def create_pre_approval():
        payload = json_body()
        raw = payload.get("visitor")
        if not isinstance(raw, dict):
            raise ValidationError("Visitor details are required")
        try:
            scheduled_date = parse_iso_datetime(str(payload.get("scheduled_date") or ""))
        except ValueError:
            raise ValidationError("Scheduled date must be an ISO date and time")

        pa = lifecycle.create(
            VisitorContact(
                name=str(raw.get("name") or ""),
                phone=str(raw.get("phone") or ""),
                email=optional_text(raw.get("email")),
                company=optional_text(raw.get("company")),
            ),
            str(payload.get("host_id") or ""),
            scheduled_date,
            str(payload.get("purpose") or ""),
            actor=current_actor(payload, required=False),
        )
        return ok(_dump(pa), 201)

    @app.route("/api/pre-approvals/reconcile", methods=["POST"], endpoint="reconcile_pre_approvals")
    def reconcile_pre_approvals():
        expired = lifecycle.reconcile_expired()
        return ok([_dump(pa) for pa in expired])

    @app.route("/api/pre-approvals/code/<access_code>", methods=["GET"], endpoint="pre_approval_by_code")
    def pre_approval_by_code(access_code: str):
        return ok(_dump(lifecycle.get_by_access_code(access_code)))

    @app.route("/api/pre-approvals/<pre_approval_id>", methods=["GET"], endpoint="get_pre_approval")
    def get_pre_approval(pre_approval_id: str):
        return ok(_dump(lifecycle.get(pre_approval_id)))

    @app.route("/api/pre-approvals/<pre_approval_id>/badge", methods=["GET"], endpoint="pre_approval_badge")
    def pre_approval_badge(pre_approval_id: str):
        pa = lifecycle.get_badge(pre_approval_id)
        if pa is None:
            raise NotFound(f"Pre-approval {pre_approval_id} not found")
        return ok(_dump(pa))

    @app.route("/api/pre-approvals/<pre_approval_id>/consume", methods=["POST"], endpoint="consume_pre_approval")
    def consume_pre_approval(pre_approval_id: str):
        payload = json_body()
        pa = lifecycle.consume(
            pre_approval_id,
            str(payload.get("visitor_id") or ""),
            badge_number=optional_text(payload.get("badge_number")),
            actor=current_actor(payload, required=False),
        )
        return ok(_dump(pa))

    @app.route("/api/pre-approvals/<pre_approval_id>/cancel", methods=["POST"], endpoint="cancel_pre_approval")
    def cancel_pre_approval(pre_approval_id: str):
        payload = json_body()
        pa = lifecycle.cancel(pre_approval_id, actor=current_actor(payload))
        return ok(_dump(pa))

    @app.route("/api/pre-approvals/<pre_approval_id>/resend", methods=["POST"], endpoint="resend_pre_approval")
    def resend_pre_approval(pre_approval_id: str):
        queued = lifecycle.resend_notifications(pre_approval_id)
        return ok({"queued": queued})

    @app.route("/api/pre-approvals/<pre_approval_id>/remind", methods=["POST"], endpoint="remind_pre_approval")
    def remind_pre_approval(pre_approval_id: str):
        queued = lifecycle.send_reminder(pre_approval_id)
        return ok({"queued": queued})
