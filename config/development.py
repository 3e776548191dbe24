import os

from config import env_flag, rules_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Approval/denial notices go here in addition to the host.
SECURITY_EMAIL = os.getenv("SECURITY_EMAIL", "security@company.com")

DEFAULT_RULES = rules_from_env()

# Background delivery of queued email/SMS notifications
START_OUTBOX_WORKER = env_flag("START_OUTBOX_WORKER", "1")
OUTBOX_POLL_SECONDS = float(os.getenv("OUTBOX_POLL_SECONDS", "1.0"))
