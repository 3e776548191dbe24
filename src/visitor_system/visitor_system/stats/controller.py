from __future__ import annotations

from datetime import timedelta

from flask import Flask, request

from ..common.datetime_utils import parse_iso_datetime, start_of_day
from ..common.http import ok
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    stats = container.stats

    @app.route("/api/admin/stats", methods=["GET"], endpoint="visitor_stats")
    def visitor_stats():
        return ok(stats.snapshot().to_dict())

    @app.route("/api/admin/reports/visitors", methods=["GET"], endpoint="visitor_report")
    def visitor_report():
        # Defaults to the last 30 days.
        now = container.clock.now()
        try:
            start = parse_iso_datetime(request.args["start"]) if request.args.get("start") else start_of_day(now) - timedelta(days=30)
            end = parse_iso_datetime(request.args["end"]) if request.args.get("end") else now
        except ValueError:
            raise ValidationError("start/end must be ISO dates")
        return ok(stats.generate_visitor_report(start, end).to_dict())
