"""Navigation stack of views and the visibility derived from it."""

from __future__ import annotations

import logging
from typing import Any, List, Protocol, Set, Tuple, FrozenSet

from evento.views import ViewName, is_transparent, log_view_action, log_visibility, view_name

logger = logging.getLogger(__name__)

_ORIGIN = "ViewManager"
_SHOW = "on_show"
_HIDE = "on_hide"


class _Bridge(Protocol):
    def in_event_loop(self) -> bool: ...

    def call(self, action: Any, target: Any = None) -> None: ...


class ViewManager:
    """Keeps the stack of open views and shows or hides views as it changes.

    The topmost view is always visible; views below it stay visible only as
    long as everything above them is a transparent overlay. Each entry on the
    stack carries a piece of data handed over by the navigation call.
    """

    def __init__(self, bridge: _Bridge) -> None:
        self._bridge = bridge
        self._stack: List[ViewName] = []
        self._data: List[Any] = []
        self._visible: Set[ViewName] = set()
        self._sync_scheduled = False
        self._sync_pending = False

    def init_stack(self, view: ViewName, data: Any = None) -> None:
        """Push ``view`` before the event loop runs; visibility syncs once it starts."""
        if self._bridge.in_event_loop():
            raise RuntimeError("init_stack must be called before the event loop runs")
        self._push(view, data)
        if not self._sync_scheduled:
            self._sync_scheduled = True
            self._sync_pending = True

    def navigate_to(self, view: ViewName, data: Any = None) -> None:
        """Push ``view`` on top; an overlay leaves the view below it visible."""
        self._check_navigation()
        if view == self._stack[-1]:
            return
        self._push(view, data)
        self._sync()

    def clean_navigate_to(self, view: ViewName, data: Any = None) -> None:
        """Drop everything above the initial view, then push ``view``."""
        self._check_navigation()
        if view == self._stack[-1]:
            return
        while len(self._stack) > 1:
            self._pop()
        if view == self._stack[-1]:
            self._sync()
            return
        self._push(view, data)
        self._sync()

    def replace_navigate_to(self, view: ViewName, data: Any = None) -> None:
        """Replace the current view with ``view``."""
        self._check_navigation()
        self._pop()
        if self._stack and view == self._stack[-1]:
            return
        self._push(view, data)
        self._sync()

    def prior_view(self) -> None:
        """Pop the current view unless it is the only one left."""
        self._check_navigation()
        if len(self._stack) <= 1:
            logger.debug("ViewManager: pop action canceled: only one view left")
            return
        self._pop()
        self._sync()

    def is_visible(self, target: ViewName) -> bool:
        return target in self._visible

    def data(self) -> Any:
        """Return the data attached to the current view."""
        if not self._data:
            raise LookupError("no view data")
        return self._data[-1]

    @property
    def stack(self) -> Tuple[ViewName, ...]:
        """The open views, bottom first."""
        return tuple(self._stack)

    @property
    def visible_views(self) -> FrozenSet[ViewName]:
        return frozenset(self._visible)

    def on_enter_event_loop(self) -> None:
        """Apply the visibility of the views pushed by ``init_stack``."""
        if self._sync_pending:
            self._sync_pending = False
            self._sync()

    def on_exit_event_loop(self) -> None:
        """Hide every view on the stack, top first, and empty it."""
        logger.debug("ViewManager: --- onExitEventLoop: clean up all pages ---")
        while self._stack:
            top = self._stack[-1]
            log_view_action(_ORIGIN, "onHide", view_name(top))
            self._bridge.call(_HIDE, top)
            self._pop()
        self._visible.clear()

    def _check_navigation(self) -> None:
        if not self._stack:
            raise RuntimeError("init_stack must add at least one view before navigating")
        if not self._bridge.in_event_loop():
            raise RuntimeError("navigation requires a running event loop")

    def _push(self, view: ViewName, data: Any) -> None:
        self._stack.append(view)
        self._data.append(data)

    def _pop(self) -> None:
        self._stack.pop()
        if self._data:
            self._data.pop()

    def _sync(self) -> None:
        new_visible: Set[ViewName] = set()
        for view in reversed(self._stack):
            new_visible.add(view)
            if not is_transparent(view):
                break

        for item in sorted(new_visible | self._visible):
            in_new = item in new_visible
            in_old = item in self._visible
            if in_new and not in_old:
                self._show(item)
            elif in_old and not in_new:
                self._hide(item)

    def _show(self, target: ViewName) -> None:
        log_visibility(_ORIGIN, "show", view_name(target))
        self._visible.add(target)
        log_view_action(_ORIGIN, "onShow", view_name(target))
        self._bridge.call(_SHOW, target)

    def _hide(self, target: ViewName) -> None:
        log_view_action(_ORIGIN, "onHide", view_name(target))
        self._bridge.call(_HIDE, target)
        log_visibility(_ORIGIN, "hide", view_name(target))
        self._visible.discard(target)