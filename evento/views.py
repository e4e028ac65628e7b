"""View identifiers, the view lifecycle base class and UI log helpers."""

from __future__ import annotations

import enum
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class ViewName(enum.IntEnum):
    DISCOVERY_PAGE = 0
    SEARCH_PAGE = 1
    HISTORY_PAGE = 2
    MY_EVENT_PAGE = 3
    DETAIL_PAGE = 4
    ABOUT_PAGE = 5
    SETTING_PAGE = 6
    LOGIN_OVERLAY = 7
    MENU_OVERLAY = 8


_VIEW_NAMES = {
    ViewName.DISCOVERY_PAGE: "DiscoveryPage",
    ViewName.SEARCH_PAGE: "SearchPage",
    ViewName.HISTORY_PAGE: "HistoryPage",
    ViewName.MY_EVENT_PAGE: "MyEventPage",
    ViewName.DETAIL_PAGE: "DetailPage",
    ViewName.ABOUT_PAGE: "AboutPage",
    ViewName.SETTING_PAGE: "SettingPage",
    ViewName.LOGIN_OVERLAY: "LoginOverlay",
    ViewName.MENU_OVERLAY: "MenuOverlay",
}

# Overlays that leave the view beneath them visible.
_TRANSPARENT_VIEWS = frozenset({ViewName.MENU_OVERLAY})


def view_name(target: Any) -> str:
    return _VIEW_NAMES.get(target, "[Unknown View]")


def is_transparent(target: Any) -> bool:
    return target in _TRANSPARENT_VIEWS


def log_general(origin: str, content: str) -> None:
    logger.debug("%s: %s", origin, content)


def log_view_action(origin: str, action: str, view: str = "All-View") -> None:
    logger.debug("%s: %s: triggered %s", origin, view, action)


def log_visibility(origin: str, action: str, view: str) -> None:
    logger.debug("%s: %s visibility changed: %s", origin, view, action)


def log_message_operation(origin: str, message_id: int, content: str) -> None:
    logger.debug("%s: message [%s]: %s", origin, message_id, content)


class BasicView:
    """Base of every view; the hooks run on the UI thread.

    The default hooks keep track of the view's lifecycle state in the
    ``created``, ``running``, ``logged_in`` and ``shown`` attributes.
    """

    def __init__(self, bridge: Optional[Any] = None) -> None:
        self.bridge = bridge
        self.created = False
        self.running = False
        self.logged_in = False
        self.shown = False

    def on_create(self) -> None:
        """Called before the event loop starts."""
        self.created = True

    def on_start(self) -> None:
        """Called once the event loop is running."""
        self.running = True

    def on_login(self) -> None:
        """Called after a successful login or a resumed session."""
        self.logged_in = True

    def on_show(self) -> None:
        """Called after the view becomes visible."""
        self.shown = True

    def on_hide(self) -> None:
        """Called before the view is hidden."""
        self.shown = False

    def on_logout(self) -> None:
        """Called when the user logs out."""
        self.logged_in = False

    def on_stop(self) -> None:
        """Called when the event loop begins to stop."""
        self.running = False

    def on_destroy(self) -> None:
        """Called after the event loop has stopped."""
        self.created = False