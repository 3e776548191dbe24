from __future__ import annotations

import atexit
import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .container import Container, build_container
from .rules.model import SystemRules
from .audit.controller import register as register_audit
from .hosts.controller import register as register_hosts
from .notifications.controller import register as register_notifications
from .preapprovals.controller import register as register_pre_approvals
from .rules.controller import register as register_rules
from .stats.controller import register as register_stats
from .visitors.controller import register as register_visitors

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("Starting visitor system with settings=%s", settings_module)

    if container is None:
        container = build_container(
            rules=SystemRules.from_mapping(getattr(settings, "DEFAULT_RULES", {})),
            security_email=getattr(settings, "SECURITY_EMAIL", "security@company.com"),
            outbox_poll_seconds=float(getattr(settings, "OUTBOX_POLL_SECONDS", 1.0)),
        )
    app.extensions["visitor_container"] = container

    register_error_handlers(app)
    register_hosts(app, container)
    register_visitors(app, container)
    register_pre_approvals(app, container)
    register_rules(app, container)
    register_stats(app, container)
    register_audit(app, container)
    register_notifications(app, container)

    if bool(getattr(settings, "START_OUTBOX_WORKER", False)):
        container.outbox_worker.start()
        atexit.register(container.outbox_worker.stop)

    return app
