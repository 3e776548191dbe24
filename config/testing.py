SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SECURITY_EMAIL = "security@test.local"

DEFAULT_RULES: dict = {}

# Tests drain the outbox explicitly.
START_OUTBOX_WORKER = False
OUTBOX_POLL_SECONDS = 0.05
