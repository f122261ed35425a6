"""Runtime configuration for the diagnostic hooks.

Settings come from the environment so test runners can tighten behavior
without code changes:
- WATCHDIAG_CALLBACK_ERRORS=log|raise  what publish does when a subscriber fails
- WATCHDIAG_LOG_LEVEL=DEBUG|INFO|WARNING|ERROR|CRITICAL
"""

import os
from dataclasses import dataclass
from typing import Literal

CallbackErrorPolicy = Literal["log", "raise"]

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class HooksConfig:
    """Configuration for a TestingHooks registry."""

    callback_error_policy: CallbackErrorPolicy = "log"
    log_level: str = "WARNING"


def get_callback_error_policy() -> CallbackErrorPolicy:
    """Get the subscriber failure policy from environment or default."""
    policy = os.environ.get("WATCHDIAG_CALLBACK_ERRORS", "log").lower()
    if policy not in ("log", "raise"):
        return "log"
    return policy


def get_log_level() -> str:
    """Get the log level name from environment or default."""
    level = os.environ.get("WATCHDIAG_LOG_LEVEL", "WARNING").upper()
    if level not in _LOG_LEVELS:
        return "WARNING"
    return level


def load_config() -> HooksConfig:
    """Build a HooksConfig from the current environment."""
    return HooksConfig(
        callback_error_policy=get_callback_error_policy(),
        log_level=get_log_level(),
    )
