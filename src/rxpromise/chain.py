"""Chain-entry operations — the border between Observables and promises.

Each function returns a callable that takes a source, so they compose with
Observable.pipe like any reactivex operator:

    source.pipe(
        then(lambda user: load_profile(user)),
        then(lambda profile: load_avatar(profile)),
        done(show_avatar),
    ).catch(show_error).finally_(hide_spinner)

then() stays in Observable land; run() and done() leave it and return a
started PromiseFinalizer. Pass catch=/finally_= to run/done to install those
handlers before the subscribe step is queued:

    source.pipe(done(show_avatar, catch=show_error, finally_=hide_spinner))
"""

from __future__ import annotations

from typing import Callable, TypeVar

import reactivex as rx
from reactivex import operators as ops
from reactivex.abc import SchedulerBase

from rxpromise.errors import ensure_handler
from rxpromise.finalizer import PromiseFinalizer

T = TypeVar("T")
U = TypeVar("U")


def run(
    on: SchedulerBase | None = None,
    *,
    catch: Callable[[Exception], None] | None = None,
    finally_: Callable[[], None] | None = None,
) -> Callable[[rx.Observable[T]], PromiseFinalizer[T]]:
    """Start the source without a value handler.

    on: scheduler on which the source executes (default: the work scheduler).
    catch/finally_: handlers installed before the subscribe step is queued.
    Returns a PromiseFinalizer that can be used to handle any failure.
    """
    ensure_handler("error", catch)
    ensure_handler("completion", finally_)

    def _run(source: rx.Observable[T]) -> PromiseFinalizer[T]:
        return _started(PromiseFinalizer(source, on, None), catch, finally_)

    return _run


def done(
    handler: Callable[[T], None],
    on: SchedulerBase | None = None,
    *,
    catch: Callable[[Exception], None] | None = None,
    finally_: Callable[[], None] | None = None,
) -> Callable[[rx.Observable[T]], PromiseFinalizer[T]]:
    """Run handler with the single value the source emits.

    handler runs on the coordination scheduler; the source executes on `on`.
    catch/finally_: handlers installed before the subscribe step is queued.
    Returns a PromiseFinalizer that can be used to handle any failure.
    """
    ensure_handler("value", handler)
    ensure_handler("error", catch)
    ensure_handler("completion", finally_)

    def _done(source: rx.Observable[T]) -> PromiseFinalizer[T]:
        return _started(PromiseFinalizer(source, on, handler), catch, finally_)

    return _done


def _started(finalizer: PromiseFinalizer[T], catch, finally_) -> PromiseFinalizer[T]:
    if catch is not None:
        finalizer.catch(catch)
    if finally_ is not None:
        finalizer.finally_(finally_)
    return finalizer.start()


def then(
    handler: Callable[[T], rx.Observable[U]],
    on: SchedulerBase | None = None,
) -> Callable[[rx.Observable[T]], rx.Observable[U]]:
    """Continue with the source handler returns for each emitted value.

    A failing upstream never calls handler; the failure skips straight to
    the next catch(). When `on` is given the composed source executes there.
    """
    ensure_handler("then", handler)

    def _then(source: rx.Observable[T]) -> rx.Observable[U]:
        chained = source.pipe(ops.flat_map(handler))
        if on is not None:
            chained = chained.pipe(ops.subscribe_on(on))
        return chained

    return _then
