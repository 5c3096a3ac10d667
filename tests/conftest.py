"""Shared fixtures: an isolated coordination scheduler per test, plus helpers
for delayed single-shot sources and running code on the coordination thread."""

import threading

import pytest
import reactivex as rx
from reactivex import operators as ops
from reactivex.scheduler import EventLoopScheduler

from rxpromise import set_scheduler

WAIT = 2.0


class UpstreamError(Exception):
    """Failure produced by test sources."""


@pytest.fixture(autouse=True)
def coordinator():
    """Fresh coordination event loop for every test, restored afterwards."""
    scheduler = EventLoopScheduler()
    set_scheduler(scheduler)
    try:
        yield scheduler
    finally:
        set_scheduler(None)
        scheduler.dispose()


@pytest.fixture
def on_coordinator(coordinator):
    """Run fn on the coordination thread, wait for it, return its result."""

    def _run(fn):
        ran = threading.Event()
        result = []

        def action(_scheduler, _state):
            result.append(fn())
            ran.set()

        coordinator.schedule(action)
        assert ran.wait(WAIT), "coordination thread never ran the action"
        return result[0]

    return _run


@pytest.fixture
def coordinator_thread(on_coordinator):
    return on_coordinator(threading.current_thread)


@pytest.fixture
def delayed():
    """Build a source that resolves with `result` (or fails with `error`) after `after` seconds."""

    def _delayed(result=None, *, error=None, after=0.1):
        def resolve(_):
            return rx.throw(error) if error is not None else rx.return_value(result)

        return rx.timer(after).pipe(ops.flat_map(resolve))

    return _delayed
