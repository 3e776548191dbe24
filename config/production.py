import os

from config import env_flag, rules_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SECURITY_EMAIL = os.getenv("SECURITY_EMAIL", "security@company.com")

DEFAULT_RULES = rules_from_env()

START_OUTBOX_WORKER = env_flag("START_OUTBOX_WORKER", "1")
OUTBOX_POLL_SECONDS = float(os.getenv("OUTBOX_POLL_SECONDS", "5.0"))
