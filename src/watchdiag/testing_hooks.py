"""Process-wide registry of diagnostic hooks.

The sync engine reports anomalies here without knowing who, if anyone, is
listening. Tests subscribe through ``on_existence_filter_mismatch`` (usually
indirectly via ``capture_existence_filter_mismatches``).

Publication is synchronous and broadcast: every subscriber registered at the
moment of ``notify_on_existence_filter_mismatch`` is called, in registration
order, on the publishing thread.
"""

import logging
import threading
from collections.abc import Callable

from .config import HooksConfig, load_config
from .logging_config import get_logger, set_log_level
from .models import ExistenceFilterMismatchInfoInternal

ExistenceFilterMismatchCallback = Callable[[ExistenceFilterMismatchInfoInternal], None]

logger = get_logger("testing_hooks")


class _Subscription:
    """One registry entry. Identity, not the callback, is what gets removed."""

    __slots__ = ("callback",)

    def __init__(self, callback: ExistenceFilterMismatchCallback):
        self.callback = callback


class Unregister:
    """Handle returned by ``on_existence_filter_mismatch``.

    Calling it removes the subscription. Later calls do nothing.
    """

    def __init__(self, hooks: "TestingHooks", subscription: _Subscription):
        self._hooks = hooks
        self._subscription: _Subscription | None = subscription

    @property
    def active(self) -> bool:
        return self._subscription is not None

    def __call__(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            self._hooks._remove(subscription)


class TestingHooks:
    """Registry of existence filter mismatch subscribers."""

    __test__ = False  # not a pytest test class

    _instance: "TestingHooks | None" = None
    _instance_lock = threading.Lock()

    def __init__(self, config: HooksConfig | None = None):
        self.config = config or load_config()
        set_log_level(self.config.log_level)
        self._lock = threading.Lock()
        self._subscriptions: list[_Subscription] = []

    @classmethod
    def get_or_create_instance(cls) -> "TestingHooks":
        """Return the process-wide registry, creating it on first use."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
                    logger.debug("Created TestingHooks instance")
        return cls._instance

    @classmethod
    def instance(cls) -> "TestingHooks | None":
        """Return the registry if one was created, without creating it."""
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the process-wide registry. For test fixtures."""
        with cls._instance_lock:
            cls._instance = None

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def on_existence_filter_mismatch(
        self, callback: ExistenceFilterMismatchCallback
    ) -> Unregister:
        """Register a callback for existence filter mismatches.

        Registering the same callback twice creates two entries, each with its
        own handle.

        Args:
            callback: Called with each ExistenceFilterMismatchInfoInternal

        Returns:
            A handle that unregisters the callback when called.
        """
        subscription = _Subscription(callback)
        with self._lock:
            self._subscriptions.append(subscription)
            count = len(self._subscriptions)
        logger.debug(f"Registered existence filter mismatch callback ({count} active)")
        return Unregister(self, subscription)

    def notify_on_existence_filter_mismatch(
        self, info: ExistenceFilterMismatchInfoInternal
    ) -> None:
        """Deliver a mismatch report to every registered callback.

        Callbacks run against a snapshot of the subscriber list, so a callback
        may register or unregister without disturbing this delivery. A failing
        callback never stops later ones; with the default "log" policy the
        failure is only logged, with "raise" the first failure is re-raised
        after all callbacks ran.
        """
        with self._lock:
            snapshot = list(self._subscriptions)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Existence filter mismatch: local_cache_count={info.local_cache_count}, "
                f"existence_filter_count={info.existence_filter_count}, "
                f"subscribers={len(snapshot)}"
            )

        first_error: Exception | None = None
        for subscription in snapshot:
            try:
                subscription.callback(info)
            except Exception as e:
                logger.exception("Existence filter mismatch callback failed")
                if first_error is None:
                    first_error = e

        if first_error is not None and self.config.callback_error_policy == "raise":
            raise first_error

    def _remove(self, subscription: _Subscription) -> None:
        with self._lock:
            try:
                self._subscriptions.remove(subscription)
            except ValueError:
                return
            count = len(self._subscriptions)
        logger.debug(f"Unregistered existence filter mismatch callback ({count} active)")
