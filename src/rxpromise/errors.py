"""Exception hierarchy for rxpromise.

Upstream failures are never raised; they flow to catch() handlers as data.
These types cover misuse of the library itself.
"""

from __future__ import annotations


class RxPromiseError(Exception):
    """Base exception for all rxpromise usage errors."""


class HandlerTypeError(RxPromiseError, TypeError):
    """A non-callable was passed where a handler is expected."""

    def __init__(self, name: str, handler: object) -> None:
        super().__init__(f"{name} handler must be callable, got {type(handler).__name__}")
        self.handler = handler


def ensure_handler(name: str, handler):
    """Return handler unchanged, or raise HandlerTypeError if it can't be called."""
    if handler is not None and not callable(handler):
        raise HandlerTypeError(name, handler)
    return handler
