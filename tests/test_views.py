import logging

import pytest

from evento.views import (
    BasicView,
    ViewName,
    is_transparent,
    log_general,
    log_message_operation,
    log_view_action,
    log_visibility,
    view_name,
)


@pytest.mark.parametrize(
    "target, expected",
    [
        (ViewName.DISCOVERY_PAGE, "DiscoveryPage"),
        (ViewName.SEARCH_PAGE, "SearchPage"),
        (ViewName.HISTORY_PAGE, "HistoryPage"),
        (ViewName.MY_EVENT_PAGE, "MyEventPage"),
        (ViewName.DETAIL_PAGE, "DetailPage"),
        (ViewName.ABOUT_PAGE, "AboutPage"),
        (ViewName.SETTING_PAGE, "SettingPage"),
        (ViewName.LOGIN_OVERLAY, "LoginOverlay"),
        (ViewName.MENU_OVERLAY, "MenuOverlay"),
    ],
)
def test_view_name(target, expected):
    assert view_name(target) == expected


def test_view_name_unknown():
    assert view_name("nowhere") == "[Unknown View]"


def test_view_names_are_distinct():
    names = [view_name(member) for member in ViewName]
    assert len(set(names)) == len(ViewName)


def test_only_menu_overlay_is_transparent():
    assert [member for member in ViewName if is_transparent(member)] == [ViewName.MENU_OVERLAY]


def test_log_view_action_default_view(caplog):
    with caplog.at_level(logging.DEBUG, logger="evento.views"):
        log_view_action("UiBridge", "onCreate")
    assert caplog.records[-1].getMessage() == "UiBridge: All-View: triggered onCreate"


def test_log_message_operation(caplog):
    with caplog.at_level(logging.DEBUG, logger="evento.views"):
        log_message_operation("MessageManager", 3, "show")
    assert caplog.records[-1].getMessage() == "MessageManager: message [3]: show"


def test_log_visibility_mentions_all_parts(caplog):
    with caplog.at_level(logging.DEBUG, logger="evento.views"):
        log_visibility("ViewManager", "hide", "DetailPage")
    message = caplog.records[-1].getMessage()
    assert message.startswith("ViewManager: DetailPage")
    assert message.endswith("hide")


def test_log_general(caplog):
    with caplog.at_level(logging.DEBUG, logger="evento.views"):
        log_general("origin", "content")
    assert caplog.records[-1].getMessage() == "origin: content"
    assert caplog.records[-1].levelno == logging.DEBUG


class _Recorder(BasicView):
    def __init__(self, bridge=None):
        super().__init__(bridge)
        self.calls = []

    def on_login(self):
        self.calls.append("login")

    def on_show(self):
        self.calls.append("show")


def test_basic_view_keeps_bridge():
    marker = object()
    assert BasicView(marker).bridge is marker


def test_base_hooks_do_nothing():
    view = _Recorder()
    results = [
        BasicView.on_create(view),
        BasicView.on_start(view),
        BasicView.on_login(view),
        BasicView.on_show(view),
        BasicView.on_hide(view),
        BasicView.on_logout(view),
        BasicView.on_stop(view),
        BasicView.on_destroy(view),
    ]
    assert results == [None] * 8
    assert view.calls == []


def test_only_overridden_hooks_act():
    marker = object()
    view = _Recorder(marker)
    view.on_create()
    view.on_start()
    view.on_login()
    view.on_show()
    view.on_hide()
    view.on_logout()
    view.on_stop()
    view.on_destroy()
    BasicView.on_login(view)
    assert view.calls == ["login", "show"]
    assert view.bridge is marker