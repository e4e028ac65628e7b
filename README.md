# evento

The core of a desktop client for browsing, subscribing to and giving feedback
on scheduled events. The package uses only the standard library.

## Modules

- `evento.executor`: `AsyncExecutor` runs coroutines on a private asyncio loop
  in a background thread. `execute(task, callback)` passes the result of
  `task` to `callback` through the `dispatch` function given to the
  constructor. Without a `dispatch` function, the callback runs on the
  executor thread. Failures are logged, and their callbacks are skipped.
  `schedule(factory, callback, interval, flag)` runs coroutines made by
  `factory` according to a `TimerFlag` value. The value must combine exactly
  two flags: `IMMEDIATE` or `DELAY`, together with `ONCE` or `PERIODIC`. Any
  other combination raises `ValueError`. `schedule` returns a handle whose
  `cancel()` method stops further runs. The executor is a context manager.
  `executor()` returns a shared process-wide instance.
- `evento.convert`: record types (`EventEntity`, `FeedbackEntity`) and display
  types (`EventStruct`, `FeedbackStruct`, `ContributorStruct`), with these
  functions:
  - `parse_iso8601_utc` parses an ISO 8601 timestamp.
  - `convert_time_range` formats a start and an end compactly.
  - `first_unicode` returns the first character of a summary.
  - `event_from_entity`, `events_from_entities`, `feedback_from_entity` and
    `contributor_from` build the display types.
- `evento.views`: defines these names:
  - `ViewName` lists the views.
  - `view_name` and `is_transparent` give a view's display name and whether it
    is a transparent overlay. Only the menu overlay is transparent.
  - `BasicView` has the lifecycle hooks `on_create`, `on_start`, `on_login`,
    `on_show`, `on_hide`, `on_logout`, `on_stop` and `on_destroy`.
  - There are also small debug-logging helpers.
- `evento.view_manager`: `ViewManager` keeps a navigation stack and shows or
  hides views as the stack changes. It offers `init_stack`, `navigate_to`,
  `clean_navigate_to`, `replace_navigate_to` and `prior_view`, and reports
  `is_visible`, `data()`, `stack` and `visible_views`. The top view is always
  visible. A view lower in the stack is visible only while every view above it
  is transparent. Navigating before the event loop runs raises `RuntimeError`.
- `evento.message_manager`: `MessageManager` manages toast messages.
  `show_message(content, type, timeout)` returns an id. The toast appears a
  moment later and hides after `timeout` (3 s by default) plus a 0.2 s
  animation. It is deleted after another 0.2 s. Timers are kept by a
  `TimerScheduler`, whose clock moves only when it is advanced.
- `evento.bridge`: `UiBridge` joins the views with a `ViewManager`, a
  `MessageManager` and an `EventLoop`. By default it creates a `BasicView` for
  every `ViewName`. It opens the discovery page, and the login overlay on top
  of it if the user is not logged in. `run()` calls `on_create`, runs the loop
  until `exit()` is called, then calls `on_destroy`. `close_requested()` exits
  unless `minimal_to_tray` is set, and returns whether it exited.
- `evento.cache`: `CacheManager` is an in-memory cache of `CacheEntry`
  values. Entries expire after their time to live. When the total size passes
  64 MiB, the oldest inserted entries are evicted first. `generate_key` and
  `generate_stem` derive cache keys and file stems from requests.
  `cache_dir()` finds, and creates if needed, the per-user cache directory.
- `evento.ipc`: `SocketClient` is a TCP client for a tray helper on
  `127.0.0.1`:
  - It runs the action registered for each command it receives (see
    `TrayMessage`).
  - `show_or_update_message` sends a notification at a given time through
    the executor.
  - `cancel_message` and `delete_all_messages` withdraw pending
    notifications.
  - `ipc()` returns the first client that was created.

## Installation

```
pip install .
```

For development, with the test dependencies:

```
pip install .[test]
pytest
```

## Example

```python
from evento.convert import convert_time_range, first_unicode

convert_time_range("2024-03-01T10:00:00Z", "2024-03-01T12:00:00Z")
# '03.01 10:00 - 12:00'

first_unicode("活动")
# '活'
```

```python
from evento.cache import CacheEntry, CacheManager

cache = CacheManager()
key = CacheManager.generate_key("GET", "https://example.com/events", [("page", "1")])
# 'https://example.com/events|2|page=1'
cache.insert(key, CacheEntry(data={"events": []}, ttl=60, size=128))
cache.get(key).data
# {'events': []}
```

## What it does not do

The package draws no windows or widgets. Views are plain objects with
lifecycle hooks. It has no client for the events backend and no login or
account handling. It does not start the tray helper: `SocketClient.connect`
expects one to be listening already. There is no command-line entry point.