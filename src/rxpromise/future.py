"""Single-value sources ("futures") and transforms between them.

    from rxpromise import future

    future.value(42)                   # emits 42, completes
    future.error(KeyError("missing"))  # fails immediately
    source.pipe(future.map_to_future(str.upper))
"""

from __future__ import annotations

import threading
from typing import Callable, TypeVar

import reactivex as rx
from reactivex.abc import DisposableBase, ObserverBase, SchedulerBase
from reactivex.disposable import Disposable

from rxpromise.errors import ensure_handler
from rxpromise.finalizer import PromiseFinalizer

T = TypeVar("T")
U = TypeVar("U")


def value(v: T) -> rx.Observable[T]:
    """A source that immediately resolves with v."""
    return rx.return_value(v)


def error(e: Exception) -> rx.Observable:
    """A source that immediately fails with e."""
    return rx.throw(e)


def map_to_future(
    transform: Callable[[T], U],
    on: SchedulerBase | None = None,
) -> Callable[[rx.Observable[T]], rx.Observable[U]]:
    """Apply transform to a single-value source, producing another single-value source.

    The source is driven through a PromiseFinalizer, so it executes on `on`
    (default: the work scheduler) and transform runs on the coordination
    scheduler. A failure upstream, or raised by transform, becomes the new
    source's failure.
    """
    ensure_handler("transform", transform)

    def _map_to_future(source: rx.Observable[T]) -> rx.Observable[U]:
        def subscribe(observer: ObserverBase[U], _scheduler: SchedulerBase | None = None) -> DisposableBase:
            failed = threading.Event()

            def on_value(v: T) -> None:
                try:
                    result = transform(v)
                except Exception as exc:
                    failed.set()
                    observer.on_error(exc)
                    return
                observer.on_next(result)

            def on_error(exc: Exception) -> None:
                failed.set()
                observer.on_error(exc)

            def on_complete() -> None:
                if not failed.is_set():
                    observer.on_completed()

            finalizer = PromiseFinalizer(source, on, on_value)
            finalizer.catch(on_error).finally_(on_complete)
            finalizer.start()
            return Disposable()

        return rx.create(subscribe)

    return _map_to_future
