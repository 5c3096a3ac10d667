"""Textual integration for rxpromise. Opt-in — requires textual.

Makes a Textual app's UI thread the coordination scheduler, so every
done/catch/finally_ handler may touch widgets directly:

    class MyApp(App):
        def on_mount(self):
            rxpromise.textual.install(self)
            fetch_weather().pipe(done(self.show_weather)).catch(self.show_error)

Call install() from the app thread (on_mount is a good place). Work posted
from that thread is queued with call_later; work posted from any other thread
is marshaled via call_from_thread.

// [LAW:locality-or-seam] Textual coupling isolated in this module — the rxpromise core
//   only ever sees a reactivex scheduler.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from reactivex.disposable import CompositeDisposable, Disposable, SingleAssignmentDisposable
from reactivex.scheduler.periodicscheduler import PeriodicScheduler
from textual.css.query import NoMatches

from rxpromise._scheduling import set_scheduler

if TYPE_CHECKING:
    from textual.app import App

logger = logging.getLogger("rxpromise.textual")


class TextualScheduler(PeriodicScheduler):
    """reactivex scheduler that runs actions on a Textual app's thread.

    Actions posted while the app is not running are dropped with a warning.
    That includes the subscribe step and terminal events of any chain still in
    flight, so such a chain never reaches its done/catch/finally_ handlers.
    Install only while the app runs, and restore a thread scheduler with
    set_scheduler() before it exits if chains may still be pending.

    NoMatches raised by an action (a widget query racing a screen change) is
    swallowed; anything else propagates. This guards actions that call user
    code directly, such as a plain reactivex observe_on(scheduler) subscriber.
    Handlers of an rxpromise chain never get here: SingleValueSubscriber
    already catches and logs whatever they raise, NoMatches included.
    """

    def __init__(self, app: App) -> None:
        super().__init__()
        self._app = app
        self._main = threading.get_ident()

    def schedule(self, action, state=None):
        sad = SingleAssignmentDisposable()

        def invoke_action() -> None:
            if sad.is_disposed:
                return
            try:
                sad.disposable = self.invoke_action(action, state=state)
            except NoMatches:
                pass

        self._post(invoke_action)
        return sad

    def schedule_relative(self, duetime, action, state=None):
        seconds = max(0.0, self.to_seconds(duetime))
        if seconds == 0:
            return self.schedule(action, state=state)

        sad = SingleAssignmentDisposable()

        def invoke_action() -> None:
            if sad.is_disposed:
                return
            try:
                sad.disposable = self.invoke_action(action, state=state)
            except NoMatches:
                pass

        timer = threading.Timer(seconds, self._post, args=[invoke_action])
        timer.daemon = True
        timer.start()
        return CompositeDisposable(sad, Disposable(timer.cancel))

    def schedule_absolute(self, duetime, action, state=None):
        duetime = self.to_datetime(duetime)
        return self.schedule_relative(duetime - self.now, action, state=state)

    def _post(self, callback) -> None:
        if not self._app.is_running:
            logger.warning("Dropping scheduled action: %r is not running", self._app)
            return
        if threading.get_ident() != self._main:
            self._app.call_from_thread(callback)
        else:
            self._app.call_later(callback)


def install(app: App) -> TextualScheduler:
    """Make app's thread the coordination scheduler. Call from the app thread."""
    scheduler = TextualScheduler(app)
    set_scheduler(scheduler)
    return scheduler
