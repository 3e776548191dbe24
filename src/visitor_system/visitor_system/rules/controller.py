from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    rules = container.rules_service

    @app.route("/api/admin/rules", methods=["GET"], endpoint="get_rules")
    def get_rules():
        return ok(rules.current().to_dict())

    @app.route("/api/admin/rules", methods=["PUT", "PATCH"], endpoint="update_rules")
    def update_rules():
        payload = json_body()
        actor = current_actor(payload)
        changes = {k: v for k, v in payload.items() if k != "actor"}
        return ok(rules.update_rules(actor=actor, **changes).to_dict())

    @app.route("/api/walk-ins/allowed", methods=["GET"], endpoint="walk_ins_allowed")
    def walk_ins_allowed():
        return ok({"allowed": rules.can_create_walk_in_visit()})
