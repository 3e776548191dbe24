from __future__ import annotations

from flask import Flask, request

from ..common.http import ok
from ..core.enums import AuditAction, AuditCategory, Severity
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AuditFilter
from .service import AuditTrail


def _enum_arg(enum_cls, name: str):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown {name}: {value}")


def _filter_from_args() -> AuditFilter:
    return AuditFilter(
        search=request.args.get("search") or None,
        severity=_enum_arg(Severity, "severity"),
        action=_enum_arg(AuditAction, "action"),
        category=_enum_arg(AuditCategory, "category"),
    )


def register(app: Flask, container: Container) -> None:
    trail = container.audit_trail

    @app.route("/api/admin/audit", methods=["GET"], endpoint="audit_log")
    def audit_log():
        entries = trail.query(_filter_from_args())
        return ok([e.to_dict() for e in entries], total=trail.count())

    @app.route("/api/admin/audit.csv", methods=["GET"], endpoint="audit_log_csv")
    def audit_log_csv():
        entries = trail.query(_filter_from_args())
        filename = f"audit-log-{container.clock.now():%Y-%m-%d}.csv"
        return app.response_class(
            AuditTrail.to_csv(entries).encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
