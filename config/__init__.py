import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unknown falls back to development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def rules_from_env() -> dict:
    """Initial SystemRules; unset variables keep the built-in defaults."""
    rules: dict = {}
    for name in (
        "MAX_VISITORS_PER_HOST_PER_DAY",
        "MAX_WAIT_TIME_BEFORE_ALERT",
        "AUTO_EXPIRE_PRE_APPROVALS_AFTER",
    ):
        value = os.getenv(name)
        if value:
            rules[name.lower()] = int(value)
    for name in (
        "REQUIRE_PRE_APPROVAL_FOR_EXTERNAL_VISITORS",
        "REQUIRE_GOVERNMENT_ID",
        "ALLOW_WALK_IN_VISITORS",
    ):
        if os.getenv(name) is not None:
            rules[name.lower()] = env_flag(name)
    return rules
