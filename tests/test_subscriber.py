"""Tests for SingleValueSubscriber — demand gating and delivery order."""

import logging

from reactivex.disposable import Disposable

from rxpromise import SingleValueSubscriber
from conftest import UpstreamError


def _subscribed(**handlers):
    sub = SingleValueSubscriber(**handlers)
    sub.on_subscribe(Disposable())
    return sub


class TestDemand:
    """Exactly one value is ever requested."""

    def test_delivers_first_value(self):
        received = []
        sub = _subscribed(value_handler=received.append)
        sub.on_next(1)
        assert received == [1]

    def test_drops_values_beyond_demand(self):
        received = []
        sub = _subscribed(value_handler=received.append)
        sub.on_next(1)
        sub.on_next(2)
        sub.on_next(3)
        assert received == [1]

    def test_returns_no_further_demand(self):
        sub = _subscribed(value_handler=lambda v: None)
        assert sub.on_next("x") == 0

    def test_no_delivery_before_subscription(self):
        received = []
        sub = SingleValueSubscriber(value_handler=received.append)
        sub.on_next(1)
        assert received == []

    def test_second_subscription_ignored(self):
        received = []
        sub = _subscribed(value_handler=received.append)
        first = sub.subscription
        sub.on_subscribe(Disposable())
        sub.on_next(1)
        sub.on_next(2)
        assert received == [1]
        assert sub.subscription is first

    def test_missing_value_handler(self):
        sub = _subscribed()
        assert sub.on_next(1) == 0


class TestCompletion:
    """Terminal delivery: error (if any) then completion, exactly once."""

    def test_success_skips_error_handler(self):
        log = []
        sub = _subscribed(
            value_handler=lambda v: log.append(("value", v)),
            error_handler=lambda e: log.append(("error", e)),
        )
        sub.set_completion_handler(lambda: log.append("done"))
        sub.on_next(7)
        sub.on_completed()
        assert log == [("value", 7), "done"]

    def test_failure_orders_error_before_completion(self):
        log = []
        err = UpstreamError()
        sub = _subscribed(error_handler=lambda e: log.append(("error", e)))
        sub.set_completion_handler(lambda: log.append("done"))
        sub.on_error(err)
        assert log == [("error", err), "done"]

    def test_failure_without_error_handler_still_completes(self):
        log = []
        sub = _subscribed(value_handler=lambda v: log.append(v))
        sub.set_completion_handler(lambda: log.append("done"))
        sub.on_error(UpstreamError())
        assert log == ["done"]

    def test_zero_values_still_completes(self):
        log = []
        sub = _subscribed(value_handler=lambda v: log.append(v))
        sub.set_completion_handler(lambda: log.append("done"))
        sub.on_completed()
        assert log == ["done"]

    def test_completion_fires_once(self):
        count = [0]
        sub = _subscribed()
        sub.set_completion_handler(lambda: count.__setitem__(0, count[0] + 1))
        sub.on_completed()
        sub.on_completed()
        sub.on_error(UpstreamError())
        assert count[0] == 1
        assert sub.completed

    def test_values_after_completion_ignored(self):
        received = []
        sub = SingleValueSubscriber(value_handler=received.append)
        sub.on_completed()
        sub.on_subscribe(Disposable())
        sub.on_next(1)
        assert received == []


class TestHandlerMutation:
    def test_error_handler_replaced(self):
        seen = []
        sub = _subscribed(error_handler=lambda e: seen.append("old"))
        assert sub.set_error_handler(lambda e: seen.append("new"))
        sub.on_error(UpstreamError())
        assert seen == ["new"]

    def test_set_after_completion_is_rejected(self):
        seen = []
        sub = _subscribed()
        sub.on_error(UpstreamError())
        assert not sub.set_error_handler(lambda e: seen.append(e))
        assert not sub.set_completion_handler(lambda: seen.append("done"))
        assert seen == []


class TestHandlerFailures:
    """A raising handler is logged; completion still fires."""

    def test_value_handler_raises(self, caplog):
        log = []

        def boom(v):
            raise ValueError("boom")

        sub = _subscribed(value_handler=boom, error_handler=lambda e: log.append("error"))
        sub.set_completion_handler(lambda: log.append("done"))

        with caplog.at_level(logging.ERROR, logger="rxpromise.subscriber"):
            sub.on_next(1)
            sub.on_completed()

        assert log == ["done"]  # handler failures never reach the error handler
        assert "value handler" in caplog.text

    def test_error_handler_raises(self, caplog):
        log = []

        def boom(e):
            raise RuntimeError("boom")

        sub = _subscribed(error_handler=boom)
        sub.set_completion_handler(lambda: log.append("done"))

        with caplog.at_level(logging.ERROR, logger="rxpromise.subscriber"):
            sub.on_error(UpstreamError())

        assert log == ["done"]
        assert "error handler" in caplog.text
