from __future__ import annotations

import os

_TRUTHY_VALUES = {"1", "true", "yes", "on"}
_FALSEY_VALUES = {"0", "false", "no", "off"}

PRETTY_ENV_KEY = "MP2JSON_PRETTY"
UNBUFFERED_ENV_KEY = "MP2JSON_UNBUFFERED"
READ_SIZE_ENV_KEY = "MP2JSON_READ_SIZE"
LOG_LEVEL_ENV_KEY = "MP2JSON_LOG_LEVEL"


def env_text(name: str, *, default: str = "") -> str:
    return os.getenv(name, default).strip()


def env_flag(name: str) -> bool | None:
    """Tri-state boolean: None when unset or not a recognized flag value."""
    value = env_text(name).lower()
    if value in _TRUTHY_VALUES:
        return True
    if value in _FALSEY_VALUES:
        return False
    return None


def stream_env_overrides() -> dict[str, object]:
    """Settings taken from the environment, keyed like the config table.

    Unset variables are reported as None so they never override lower
    precedence sources.
    """
    return {
        "pretty": env_flag(PRETTY_ENV_KEY),
        "unbuffered": env_flag(UNBUFFERED_ENV_KEY),
        "read_size": env_text(READ_SIZE_ENV_KEY) or None,
        "log_level": env_text(LOG_LEVEL_ENV_KEY) or None,
    }
