"""Application bridge: owns the views, the managers and the UI event loop."""

from __future__ import annotations

import enum
import logging
import threading
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, Mapping, Optional

from evento.message_manager import MessageManager, TimerScheduler
from evento.view_manager import ViewManager
from evento.views import BasicView, ViewName, log_view_action

logger = logging.getLogger(__name__)

_ORIGIN = "UiBridge"
_MAX_WAIT = 0.1


class Lifecycle(str, enum.Enum):
    """View hooks that the bridge can dispatch; values are the method names."""

    CREATE = "on_create"
    START = "on_start"
    LOGIN = "on_login"
    SHOW = "on_show"
    HIDE = "on_hide"
    LOGOUT = "on_logout"
    STOP = "on_stop"
    DESTROY = "on_destroy"


class EventLoop:
    """A UI-thread loop running invoked callbacks and due timers.

    ``invoke`` and ``quit`` may be called from any thread. Callbacks queued
    before ``quit`` still run before ``run`` returns.
    """

    def __init__(
        self,
        scheduler: Optional[TimerScheduler] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._scheduler = scheduler
        self._clock = clock
        self._queue: Deque[Callable[[], Any]] = deque()
        self._condition = threading.Condition()
        self._quit = False
        self._running = False

    def invoke(self, callback: Callable[[], Any]) -> None:
        with self._condition:
            self._queue.append(callback)
            self._condition.notify()

    def quit(self) -> None:
        with self._condition:
            self._quit = True
            self._condition.notify()

    @property
    def running(self) -> bool:
        return self._running

    def run(self) -> None:
        """Process callbacks and timers until ``quit`` is called."""
        with self._condition:
            if self._running:
                raise RuntimeError("event loop is already running")
            self._running = True
            self._quit = False
        start = self._scheduler.now if self._scheduler is not None else 0.0
        offset = self._clock() - start
        try:
            while True:
                if self._scheduler is not None:
                    self._scheduler.advance_to(self._clock() - offset)
                with self._condition:
                    if self._queue:
                        callback = self._queue.popleft()
                    elif self._quit:
                        break
                    else:
                        self._condition.wait(self._wait_time(offset))
                        continue
                callback()
        finally:
            with self._condition:
                self._running = False

    def _wait_time(self, offset: float) -> float:
        if self._scheduler is None or self._scheduler.next_due is None:
            return _MAX_WAIT
        remaining = self._scheduler.next_due - (self._clock() - offset)
        return min(max(remaining, 0.0), _MAX_WAIT)


class UiBridge:
    """Ties the views to the view and message managers and drives their hooks."""

    def __init__(
        self,
        views: Optional[Mapping[ViewName, BasicView]] = None,
        logged_in: bool = False,
        minimal_to_tray: bool = False,
        scheduler: Optional[TimerScheduler] = None,
    ) -> None:
        self.minimal_to_tray = minimal_to_tray
        self.scheduler = scheduler if scheduler is not None else TimerScheduler()
        self.loop = EventLoop(self.scheduler)
        self._views: Dict[ViewName, BasicView] = {}
        self._event_loop_running = False
        self.view_manager = ViewManager(self)
        self.message_manager = MessageManager(self.scheduler)

        if views is None:
            views = {name: BasicView(self) for name in ViewName}
        for name, view in views.items():
            self.attach_view(name, view)

        self.loop.invoke(self._on_enter_event_loop)

        self.view_manager.init_stack(ViewName.DISCOVERY_PAGE)
        if not logged_in:
            self.view_manager.init_stack(ViewName.LOGIN_OVERLAY)

    def attach_view(self, name: ViewName, view: BasicView) -> None:
        """Register ``view`` under ``name``; an existing registration is kept."""
        self._views.setdefault(name, view)

    def view(self, name: ViewName) -> BasicView:
        return self._views[name]

    def run(self) -> None:
        """Create the views, run the event loop until exit, then destroy them."""
        log_view_action(_ORIGIN, "onCreate")
        self.call(Lifecycle.CREATE)

        logger.debug("--- enter event loop ---")
        self._event_loop_running = True
        try:
            self.loop.run()
        finally:
            self._event_loop_running = False
        logger.debug("--- exit event loop ---")

        log_view_action(_ORIGIN, "onDestroy")
        self.call(Lifecycle.DESTROY)

    def exit(self) -> None:
        """Stop the event loop; safe to call from any thread."""
        if self._event_loop_running:
            self.loop.invoke(self._on_exit_event_loop)
            self.loop.quit()

    def close_requested(self) -> bool:
        """Handle a window close; returns whether the application exits."""
        if self.minimal_to_tray:
            return False
        self.exit()
        return True

    def in_event_loop(self) -> bool:
        return self._event_loop_running

    def call(self, action: Any, target: Optional[ViewName] = None) -> None:
        """Run the hook ``action`` on ``target``, or on every view if none is given."""
        hook = Lifecycle(action).value
        if target is None:
            for view in list(self._views.values()):
                getattr(view, hook)()
        else:
            getattr(self._views[target], hook)()

    def _on_enter_event_loop(self) -> None:
        log_view_action(_ORIGIN, "onStart")
        self.call(Lifecycle.START)
        self.view_manager.on_enter_event_loop()

    def _on_exit_event_loop(self) -> None:
        self.view_manager.on_exit_event_loop()
        log_view_action(_ORIGIN, "onStop")
        self.call(Lifecycle.STOP)