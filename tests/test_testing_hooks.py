"""Tests for the TestingHooks subscriber registry."""

import logging
import threading

import pytest

from watchdiag.config import HooksConfig
from watchdiag.models import ExistenceFilterMismatchInfoInternal
from watchdiag.testing_hooks import TestingHooks


def make_info(local_cache_count=5, existence_filter_count=6):
    return ExistenceFilterMismatchInfoInternal(
        local_cache_count=local_cache_count,
        existence_filter_count=existence_filter_count,
        project_id="p",
        database_id="d",
    )


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def hooks_log():
    """Collect records from the registry logger."""
    handler = _ListHandler()
    hooks_logger = logging.getLogger("watchdiag.testing_hooks")
    hooks_logger.addHandler(handler)
    yield handler.records
    hooks_logger.removeHandler(handler)


class TestSingleton:
    """Tests for process-wide instance management."""

    def test_get_or_create_returns_same_instance(self):
        first = TestingHooks.get_or_create_instance()
        assert TestingHooks.get_or_create_instance() is first

    def test_instance_is_none_before_first_use(self):
        assert TestingHooks.instance() is None
        created = TestingHooks.get_or_create_instance()
        assert TestingHooks.instance() is created

    def test_reset_instance(self):
        first = TestingHooks.get_or_create_instance()
        TestingHooks.reset_instance()
        assert TestingHooks.get_or_create_instance() is not first

    def test_config_comes_from_environment(self, monkeypatch):
        monkeypatch.setenv("WATCHDIAG_CALLBACK_ERRORS", "raise")
        hooks = TestingHooks.get_or_create_instance()
        assert hooks.config.callback_error_policy == "raise"

    def test_log_level_from_environment_applied(self, monkeypatch):
        monkeypatch.setenv("WATCHDIAG_LOG_LEVEL", "DEBUG")
        TestingHooks.get_or_create_instance()

        assert logging.getLogger("watchdiag").getEffectiveLevel() == logging.DEBUG
        assert logging.getLogger("watchdiag.testing_hooks").isEnabledFor(logging.DEBUG)

    def test_log_level_from_config_applied(self):
        TestingHooks(config=HooksConfig(log_level="ERROR"))
        assert logging.getLogger("watchdiag").getEffectiveLevel() == logging.ERROR

        TestingHooks(config=HooksConfig(log_level="INFO"))
        assert logging.getLogger("watchdiag").getEffectiveLevel() == logging.INFO


class TestDelivery:
    """Tests for notify_on_existence_filter_mismatch."""

    def test_callbacks_called_in_registration_order(self):
        hooks = TestingHooks()
        calls = []
        for n in range(5):
            hooks.on_existence_filter_mismatch(lambda info, n=n: calls.append((n, info)))

        info = make_info()
        hooks.notify_on_existence_filter_mismatch(info)

        assert [n for n, _ in calls] == [0, 1, 2, 3, 4]
        assert all(received is info for _, received in calls)

    def test_publish_with_no_subscribers(self):
        hooks = TestingHooks()
        hooks.notify_on_existence_filter_mismatch(make_info())
        assert hooks.subscriber_count == 0

    def test_each_publish_delivered_once(self):
        hooks = TestingHooks()
        received = []
        hooks.on_existence_filter_mismatch(received.append)

        hooks.notify_on_existence_filter_mismatch(make_info(1, 2))
        hooks.notify_on_existence_filter_mismatch(make_info(3, 4))

        assert [i.local_cache_count for i in received] == [1, 3]

    def test_same_callback_registered_twice(self):
        hooks = TestingHooks()
        received = []
        unregister_a = hooks.on_existence_filter_mismatch(received.append)
        hooks.on_existence_filter_mismatch(received.append)

        hooks.notify_on_existence_filter_mismatch(make_info())
        assert len(received) == 2

        unregister_a()
        hooks.notify_on_existence_filter_mismatch(make_info())
        assert len(received) == 3
        assert hooks.subscriber_count == 1


class TestUnregister:
    """Tests for the handle returned by on_existence_filter_mismatch."""

    def test_unregister_stops_delivery(self):
        hooks = TestingHooks()
        received = []
        unregister = hooks.on_existence_filter_mismatch(received.append)
        unregister()

        hooks.notify_on_existence_filter_mismatch(make_info())
        assert received == []
        assert not unregister.active

    def test_unregister_twice_is_noop(self):
        hooks = TestingHooks()
        hooks.on_existence_filter_mismatch(lambda info: None)
        unregister = hooks.on_existence_filter_mismatch(lambda info: None)
        assert hooks.subscriber_count == 2

        unregister()
        assert hooks.subscriber_count == 1
        unregister()
        assert hooks.subscriber_count == 1

    def test_callback_unregisters_itself_mid_publish(self):
        hooks = TestingHooks()
        calls = []
        handles = {}

        def first(info):
            calls.append("first")
            handles["first"]()

        def second(info):
            calls.append("second")

        handles["first"] = hooks.on_existence_filter_mismatch(first)
        hooks.on_existence_filter_mismatch(second)

        hooks.notify_on_existence_filter_mismatch(make_info())
        assert calls == ["first", "second"]

        hooks.notify_on_existence_filter_mismatch(make_info())
        assert calls == ["first", "second", "second"]

    def test_callback_registered_mid_publish_waits_for_next(self):
        hooks = TestingHooks()
        late = []

        def register_late(info):
            hooks.on_existence_filter_mismatch(late.append)

        hooks.on_existence_filter_mismatch(register_late)
        hooks.notify_on_existence_filter_mismatch(make_info())
        assert late == []

        hooks.notify_on_existence_filter_mismatch(make_info())
        assert len(late) == 1


class TestCallbackFailures:
    """Tests for subscriber failures during publish."""

    def test_failure_logged_and_later_callbacks_run(self, hooks_log):
        hooks = TestingHooks(config=HooksConfig(callback_error_policy="log"))
        received = []

        def broken(info):
            raise RuntimeError("observer bug")

        hooks.on_existence_filter_mismatch(broken)
        hooks.on_existence_filter_mismatch(received.append)

        hooks.notify_on_existence_filter_mismatch(make_info())

        assert len(received) == 1
        errors = [r for r in hooks_log if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert errors[0].exc_info[0] is RuntimeError

    def test_raise_policy_reraises_first_failure_after_all_ran(self):
        hooks = TestingHooks(config=HooksConfig(callback_error_policy="raise"))
        received = []

        def broken_a(info):
            raise RuntimeError("a")

        def broken_b(info):
            raise KeyError("b")

        hooks.on_existence_filter_mismatch(broken_a)
        hooks.on_existence_filter_mismatch(broken_b)
        hooks.on_existence_filter_mismatch(received.append)

        with pytest.raises(RuntimeError, match="a"):
            hooks.notify_on_existence_filter_mismatch(make_info())
        assert len(received) == 1


class TestThreadSafety:
    """Registry use from several threads at once."""

    def test_concurrent_register_and_unregister(self):
        hooks = TestingHooks()
        barrier = threading.Barrier(8)

        def churn():
            barrier.wait()
            for _ in range(200):
                unregister = hooks.on_existence_filter_mismatch(lambda info: None)
                hooks.notify_on_existence_filter_mismatch(make_info())
                unregister()

        threads = [threading.Thread(target=churn) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert hooks.subscriber_count == 0
