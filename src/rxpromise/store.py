"""SubscriptionStore — an explicit home for subscriptions an object keeps alive.

Owners hold a store as a field and dispose it on teardown:

    class ProfileScreen:
        def __init__(self):
            self.subscriptions = SubscriptionStore()

        def on_mount(self):
            self.subscriptions.add(user_updates.subscribe(self.render))

        def on_unmount(self):
            self.subscriptions.dispose()

Or scope it to a block:

    with SubscriptionStore() as store:
        store.add(ticks.subscribe(print))
    # everything disposed here
"""

from __future__ import annotations

from typing import TypeVar

from reactivex.abc import DisposableBase
from reactivex.disposable import CompositeDisposable

D = TypeVar("D", bound=DisposableBase)


class SubscriptionStore:
    """Set of live subscriptions with a single teardown point."""

    __slots__ = ("_disposables",)

    def __init__(self) -> None:
        self._disposables = CompositeDisposable()

    @property
    def disposed(self) -> bool:
        return self._disposables.is_disposed

    def add(self, disposable: D) -> D:
        """Keep disposable alive until dispose(). Disposed at once if the store already is."""
        self._disposables.add(disposable)
        return disposable

    def remove(self, disposable: DisposableBase) -> bool:
        """Dispose and forget one entry. Returns False if it wasn't held."""
        return self._disposables.remove(disposable)

    def dispose(self) -> None:
        """Dispose every held subscription. Later additions are disposed immediately."""
        self._disposables.dispose()

    def __len__(self) -> int:
        return len(self._disposables)

    def __enter__(self) -> SubscriptionStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else f"{len(self)} live"
        return f"SubscriptionStore({state})"
