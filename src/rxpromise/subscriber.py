"""SingleValueSubscriber — the demand-gated end of a promise chain.

Requests exactly one value from its upstream, hands that value (or the
upstream failure) to its handlers, then fires the completion handler exactly
once. Owned by a PromiseFinalizer; not meant to be shared between sources.

Delivery order per subscription:
    value? -> error? -> completion
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, TypeVar

from reactivex.abc import DisposableBase, ObserverBase

T = TypeVar("T")

ValueHandler = Callable[[T], None]
ErrorHandler = Callable[[Exception], None]
CompletionHandler = Callable[[], None]

logger = logging.getLogger("rxpromise.subscriber")


class SingleValueSubscriber(ObserverBase[T]):
    """Observer that accepts at most one value, then waits for the terminal event."""

    __slots__ = (
        "_value_handler",
        "_error_handler",
        "_completion_handler",
        "_subscription",
        "_demand",
        "_completed",
        "_failure",
        "_lock",
    )

    def __init__(
        self,
        value_handler: ValueHandler | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self._value_handler = value_handler
        self._error_handler = error_handler
        self._completion_handler: CompletionHandler | None = None
        self._subscription: DisposableBase | None = None
        self._demand = 0
        self._completed = False
        self._failure: Exception | None = None
        self._lock = threading.Lock()

    @property
    def completed(self) -> bool:
        """True once the completion handler has been (or is being) delivered."""
        return self._completed

    @property
    def failure(self) -> Exception | None:
        """The upstream failure, once the subscription terminated with one."""
        return self._failure

    @property
    def subscription(self) -> DisposableBase | None:
        return self._subscription

    def set_error_handler(self, handler: ErrorHandler | None) -> bool:
        """Replace the error handler. Returns False if the terminal event already fired."""
        with self._lock:
            if self._completed:
                return False
            self._error_handler = handler
            return True

    def set_completion_handler(self, handler: CompletionHandler | None) -> bool:
        """Replace the completion handler. Returns False if the terminal event already fired."""
        with self._lock:
            if self._completed:
                return False
            self._completion_handler = handler
            return True

    # --- Subscriber protocol ---

    def on_subscribe(self, subscription: DisposableBase) -> None:
        """Accept the upstream subscription and ask for exactly one value."""
        with self._lock:
            if self._subscription is not None:
                logger.debug("Ignoring second subscription for %r", self)
                return
            self._subscription = subscription
        self.request(1)

    def request(self, demand: int) -> None:
        with self._lock:
            self._demand += demand

    def on_next(self, value: T) -> int:
        """Deliver value if demand is outstanding. Always returns 0 further demand."""
        with self._lock:
            accepted = not self._completed and self._demand > 0
            if accepted:
                self._demand -= 1
            handler = self._value_handler
        if not accepted:
            logger.debug("Dropped value with no outstanding demand: %r", value)
            return 0
        if handler is not None:
            self._invoke("value", handler, value)
        return 0

    def on_error(self, error: Exception) -> None:
        self._finish(error)

    def on_completed(self) -> None:
        self._finish(None)

    # --- Internals ---

    def _finish(self, error: Exception | None) -> None:
        with self._lock:
            if self._completed:
                return
            self._completed = True
            self._failure = error
            self._demand = 0
            on_error = self._error_handler
            on_complete = self._completion_handler

        if error is not None and on_error is not None:
            self._invoke("error", on_error, error)
        if on_complete is not None:
            self._invoke("completion", on_complete)

    def _invoke(self, kind: str, handler: Callable, *args) -> None:
        # Handlers run on the coordination scheduler; an escaping exception
        # would take its thread down with it.
        try:
            handler(*args)
        except Exception:
            logger.exception("%s handler %r raised", kind, handler)

    def __repr__(self) -> str:
        state = "completed" if self._completed else f"demand={self._demand}"
        return f"SingleValueSubscriber({state})"
