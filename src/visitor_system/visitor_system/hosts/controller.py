from __future__ import annotations

from flask import Flask, session

from ..common.http import current_actor, json_body, ok, query_flag
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .model import NewHost


def register(app: Flask, container: Container) -> None:
    workflow = container.host_workflow

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        payload = json_body()
        host = container.auth_service.authenticate(
            str(payload.get("email") or ""),
            str(payload.get("password") or ""),
        )
        session.clear()
        session["host_id"] = host.host_id
        session["name"] = host.name
        session["role"] = Role.HOST.value
        return ok(host.to_dict())

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/hosts/register", methods=["POST"], endpoint="register_host")
    def register_host():
        payload = json_body()
        try:
            max_per_day = int(payload.get("max_visitors_per_day") or container.rules_service.current().max_visitors_per_host_per_day)
        except (TypeError, ValueError):
            raise ValidationError("Max visitors per day must be a number")

        host = workflow.register(
            NewHost(
                name=str(payload.get("name") or ""),
                email=str(payload.get("email") or ""),
                department=str(payload.get("department") or ""),
                max_visitors_per_day=max_per_day,
            )
        )
        return ok(host.to_dict(), 201)

    @app.route("/api/hosts", methods=["GET"], endpoint="list_hosts")
    def list_hosts():
        return ok([h.to_dict() for h in workflow.list_hosts(approved=query_flag("approved"))])

    @app.route("/api/hosts/pending", methods=["GET"], endpoint="pending_hosts")
    def pending_hosts():
        return ok([h.to_dict() for h in workflow.list_pending()])

    @app.route("/api/hosts/visitable", methods=["GET"], endpoint="visitable_hosts")
    def visitable_hosts():
        return ok([h.to_dict() for h in workflow.list_visitable()])

    @app.route("/api/hosts/<host_id>", methods=["GET"], endpoint="get_host")
    def get_host(host_id: str):
        return ok(workflow.get(host_id).to_dict())

    @app.route("/api/hosts/<host_id>/approve", methods=["POST"], endpoint="approve_host")
    def approve_host(host_id: str):
        payload = json_body()
        host = workflow.approve(
            host_id,
            approved_by=current_actor(payload),
            credential=str(payload.get("password") or ""),
        )
        return ok(host.to_dict())

    @app.route("/api/hosts/<host_id>/deny", methods=["POST"], endpoint="deny_host")
    def deny_host(host_id: str):
        payload = json_body()
        workflow.deny(host_id, denied_by=current_actor(payload))
        return ok()

    @app.route("/api/hosts/<host_id>/activate", methods=["POST"], endpoint="activate_host")
    def activate_host(host_id: str):
        payload = json_body()
        return ok(workflow.set_active(host_id, active=True, actor=current_actor(payload)).to_dict())

    @app.route("/api/hosts/<host_id>/deactivate", methods=["POST"], endpoint="deactivate_host")
    def deactivate_host(host_id: str):
        payload = json_body()
        return ok(workflow.set_active(host_id, active=False, actor=current_actor(payload)).to_dict())
