from __future__ import annotations

from flask import Flask

from ..common.http import ok
from ..container import Container


def _intent_dict(intent) -> dict:
    return {
        "id": intent.intent_id,
        "channel": intent.channel.value,
        "recipient": intent.recipient,
        "message": intent.message,
        "created_at": intent.created_at.isoformat(),
        "purpose": intent.purpose.value,
        "subject_id": intent.subject_id,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/notifications/pending", methods=["GET"], endpoint="pending_notifications")
    def pending_notifications():
        return ok([_intent_dict(i) for i in container.outbox.pending()])

    @app.route("/api/admin/notifications/drain", methods=["POST"], endpoint="drain_notifications")
    def drain_notifications():
        results = container.outbox_worker.drain()
        return ok(
            [
                {"id": r.intent.intent_id, "delivered": r.delivered, "error": r.error}
                for r in results
            ]
        )
