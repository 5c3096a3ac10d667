"""rxpromise: promise-style continuations for reactivex Observables."""

from importlib.metadata import version as _version

__version__ = _version("rxpromise")

from rxpromise._scheduling import (
    get_scheduler,
    get_work_scheduler,
    set_scheduler,
    set_work_scheduler,
)
from rxpromise.errors import RxPromiseError, HandlerTypeError
from rxpromise.subscriber import SingleValueSubscriber
from rxpromise.finalizer import PromiseFinalizer, FinalizerState
from rxpromise.chain import run, done, then
from rxpromise.future import map_to_future
from rxpromise.store import SubscriptionStore
# textual NOT auto-imported — opt-in only

__all__ = [
    "run",
    "done",
    "then",
    "map_to_future",
    "PromiseFinalizer",
    "FinalizerState",
    "SingleValueSubscriber",
    "SubscriptionStore",
    "RxPromiseError",
    "HandlerTypeError",
    "set_scheduler",
    "get_scheduler",
    "set_work_scheduler",
    "get_work_scheduler",
]
