"""Pytest configuration for watchdiag tests.

Every test gets a fresh process-wide TestingHooks registry built from a clean
environment, so subscriptions and env overrides never leak between tests.
"""

import pytest

from watchdiag.logging_config import set_log_level
from watchdiag.testing_hooks import TestingHooks


@pytest.fixture(autouse=True)
def fresh_testing_hooks(monkeypatch):
    """Reset the registry singleton and log level around each test."""
    monkeypatch.delenv("WATCHDIAG_CALLBACK_ERRORS", raising=False)
    monkeypatch.delenv("WATCHDIAG_LOG_LEVEL", raising=False)
    TestingHooks.reset_instance()
    yield
    TestingHooks.reset_instance()
    set_log_level("WARNING")
