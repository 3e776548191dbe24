"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Fixed UI priority bands for pending check-ins (minutes waited).
HIGH_PRIORITY_WAIT_MINUTES = 20
MEDIUM_PRIORITY_WAIT_MINUTES = 10

# Security dashboard alerts.
CRITICAL_WAIT_MINUTES = 30
MAX_STAY_HOURS = 8

DEFAULT_MAX_VISITORS_PER_HOST_PER_DAY = 5
DEFAULT_MAX_WAIT_TIME_BEFORE_ALERT = 15
DEFAULT_AUTO_EXPIRE_PRE_APPROVALS_AFTER = 24

BADGE_PREFIX = "VMS"
BADGE_TOKEN_LENGTH = 4
BADGE_MAX_ATTEMPTS = 50

ACCESS_CODE_PREFIX = "PA-"
ACCESS_CODE_LENGTH = 6

QR_PREFIX = "QR_"

SYSTEM_IP = "system"
