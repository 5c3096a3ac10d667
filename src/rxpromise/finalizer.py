"""PromiseFinalizer — the object a promise chain hands back to its caller.

Gives reactivex Observables a PromiseKit-like surface:

    source.pipe(then(fetch_user), done(show_user)).catch(show_error)

Construction is two-phase. __init__ only wires the SingleValueSubscriber;
start() queues the subscribe step on the coordination scheduler. Handlers
passed to run/done as keywords (catch=, finally_=) are installed between
the two phases, so they are in place before the subscribe step whatever
thread builds the chain.

catch()/finally_() called after start() may lose the race with a fast
source, most often when the caller is not on the coordination thread. They
are never lost: a handler attached after the terminal event is replayed on
the coordination scheduler with the recorded outcome (catch only when the
source failed). Attach catch() before finally_() so the replay keeps the
error -> completion order.

Lifecycle:
    CONSTRUCTED -> (start) -> SUBSCRIBED -> COMPLETED
No transition leaves COMPLETED.

There is no cancellation: the upstream subscription stays live until the
source terminates, even if every reference to the finalizer is dropped.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Generic, TypeVar

import reactivex as rx
from reactivex import operators as ops
from reactivex.abc import DisposableBase, SchedulerBase
from reactivex.disposable import SingleAssignmentDisposable

from rxpromise._scheduling import get_scheduler, get_work_scheduler
from rxpromise.errors import ensure_handler
from rxpromise.subscriber import SingleValueSubscriber

T = TypeVar("T")

logger = logging.getLogger("rxpromise.finalizer")


class FinalizerState(enum.Enum):
    CONSTRUCTED = "constructed"
    SUBSCRIBED = "subscribed"
    COMPLETED = "completed"


class PromiseFinalizer(Generic[T]):
    """Owns one SingleValueSubscriber and performs its one deferred subscribe."""

    __slots__ = ("_source", "_scheduler", "_subscriber", "_started", "_lock")

    def __init__(
        self,
        source: rx.Observable[T],
        scheduler: SchedulerBase | None = None,
        handler: Callable[[T], None] | None = None,
    ) -> None:
        self._source = source
        self._scheduler = scheduler
        self._subscriber: SingleValueSubscriber[T] = SingleValueSubscriber(
            value_handler=ensure_handler("value", handler)
        )
        self._started = False
        self._lock = threading.Lock()

    @property
    def state(self) -> FinalizerState:
        if self._subscriber.completed:
            return FinalizerState.COMPLETED
        if self._subscriber.subscription is not None:
            return FinalizerState.SUBSCRIBED
        return FinalizerState.CONSTRUCTED

    def start(self) -> PromiseFinalizer[T]:
        """Queue the subscribe step on the coordination scheduler. Idempotent."""
        with self._lock:
            if self._started:
                return self
            self._started = True
        # The scheduled action holds self, keeping the chain alive until it runs.
        get_scheduler().schedule(self._subscribe)
        return self

    def catch(self, handler: Callable[[Exception], None]) -> PromiseFinalizer[T]:
        """Attach a closure to handle the upstream failure.

        Runs on the coordination scheduler. Returns self so finally_() can follow.
        """
        ensure_handler("error", handler)
        if not self._subscriber.set_error_handler(handler):
            failure = self._subscriber.failure
            if failure is not None:
                self._replay("error", handler, failure)
        return self

    def finally_(self, handler: Callable[[], None]) -> None:
        """Attach a closure to run once the chain has completed, whatever the outcome."""
        ensure_handler("completion", handler)
        if not self._subscriber.set_completion_handler(handler):
            self._replay("completion", handler)

    def cauterize(self) -> None:
        """Deliberately end the chain, swallowing any failure along the way."""
        return

    def _replay(self, kind: str, handler: Callable, *args) -> None:
        """Run a handler attached after the terminal event, with the recorded outcome."""
        logger.debug("Replaying %s handler on %r", kind, self)

        def action(_scheduler: SchedulerBase, _state=None) -> None:
            self._subscriber._invoke(kind, handler, *args)

        get_scheduler().schedule(action)

    def _subscribe(self, _scheduler: SchedulerBase, _state=None) -> DisposableBase:
        work = self._scheduler or get_work_scheduler()
        pipeline = self._source.pipe(
            ops.subscribe_on(work),
            ops.observe_on(get_scheduler()),
        )
        # Hand the subscription over before events can flow, so demand is
        # already outstanding when the first value arrives.
        subscription = SingleAssignmentDisposable()
        self._subscriber.on_subscribe(subscription)
        subscription.disposable = pipeline.subscribe(self._subscriber)
        logger.debug("Subscribed %r on %r", self, work)
        return subscription

    def __repr__(self) -> str:
        return f"PromiseFinalizer({self.state.value})"
