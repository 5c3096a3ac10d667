"""Dispatch contexts — where upstream work runs and where handlers run.

Two schedulers are involved in every chain:

- the work scheduler, on which the upstream source executes
  (default: a shared ThreadPoolScheduler), and
- the coordination scheduler, on which the deferred subscribe step runs and
  every value/error/completion handler is invoked
  (default: a shared EventLoopScheduler, one serial daemon thread).

Call set_scheduler() once at startup to coordinate on a UI thread instead:
    rxpromise.set_scheduler(TextualScheduler(app))
"""

from __future__ import annotations

import threading

from reactivex.abc import SchedulerBase
from reactivex.scheduler import EventLoopScheduler, ThreadPoolScheduler

_lock = threading.Lock()
_scheduler: SchedulerBase | None = None
_work_scheduler: SchedulerBase | None = None


def set_scheduler(scheduler: SchedulerBase | None) -> None:
    """Set the coordination scheduler. None restores the default event loop."""
    global _scheduler
    with _lock:
        _scheduler = scheduler


def get_scheduler() -> SchedulerBase:
    """The coordination scheduler, created on first use."""
    global _scheduler
    with _lock:
        if _scheduler is None:
            _scheduler = EventLoopScheduler()
        return _scheduler


def set_work_scheduler(scheduler: SchedulerBase | None) -> None:
    """Set the default work scheduler. None restores the default thread pool."""
    global _work_scheduler
    with _lock:
        _work_scheduler = scheduler


def get_work_scheduler() -> SchedulerBase:
    """The default work scheduler, created on first use."""
    global _work_scheduler
    with _lock:
        if _work_scheduler is None:
            _work_scheduler = ThreadPoolScheduler()
        return _work_scheduler
