"""Background coroutine executor that hands results back to the UI thread."""

from __future__ import annotations

import asyncio
import enum
import functools
import logging
import threading
from datetime import timedelta
from typing import Any, Callable, Coroutine, Optional, Union

logger = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[], Any]], Any]
Callback = Optional[Callable[[Any], Any]]
Interval = Union[float, int, timedelta]


class TimerFlag(enum.IntFlag):
    """Strategies for scheduled execution; combine exactly two of them."""

    IMMEDIATE = 1
    DELAY = 2
    ONCE = 4
    PERIODIC = 8


_ALL_FLAGS = int(TimerFlag.IMMEDIATE | TimerFlag.DELAY | TimerFlag.ONCE | TimerFlag.PERIODIC)


def _validate_flag(flag: int) -> TimerFlag:
    value = int(flag)
    if value & ~_ALL_FLAGS:
        raise ValueError(f"unknown timer flag bits: {value:#x}")
    if bin(value).count("1") != 2:
        raise ValueError("timer flag must combine exactly two strategies")
    checked = TimerFlag(value)
    if TimerFlag.IMMEDIATE in checked and TimerFlag.DELAY in checked:
        raise ValueError("IMMEDIATE and DELAY cannot be combined")
    if TimerFlag.PERIODIC in checked and TimerFlag.ONCE in checked:
        raise ValueError("PERIODIC and ONCE cannot be combined")
    return checked


def _seconds(interval: Interval) -> float:
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


def _call_now(function: Callable[[], Any]) -> None:
    function()


class _Schedule:
    """Handle for a timer-driven execution; cancelling stops further runs."""

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class AsyncExecutor:
    """Runs coroutines on a private event loop in a background thread.

    Completion callbacks are handed to ``dispatch``, which is expected to run
    them on the UI thread. Failures are logged and the callback is skipped.
    """

    def __init__(self, dispatch: Optional[Dispatch] = None) -> None:
        self._dispatch: Dispatch = dispatch or _call_now
        self._loop = asyncio.new_event_loop()
        self._closed = False
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name="evento-executor", daemon=True)
        self._thread.start()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self._loop.close()

    def _ensure_open(self, coroutine: Optional[Coroutine[Any, Any, Any]] = None) -> None:
        if self._closed:
            if coroutine is not None:
                coroutine.close()
            raise RuntimeError("executor is closed")

    def _complete(self, callback: Callback, future: Any) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("%s", error)
            return
        if callback is not None:
            self._dispatch(functools.partial(callback, future.result()))

    def execute(self, task: Coroutine[Any, Any, Any], callback: Callback = None):
        """Run ``task`` and pass its result to ``callback`` through dispatch."""
        self._ensure_open(task)
        future = asyncio.run_coroutine_threadsafe(task, self._loop)
        future.add_done_callback(functools.partial(self._complete, callback))
        return future

    def schedule(
        self,
        factory: Callable[[], Coroutine[Any, Any, Any]],
        callback: Callback = None,
        interval: Interval = 0.0,
        flag: int = TimerFlag.PERIODIC | TimerFlag.IMMEDIATE,
    ) -> _Schedule:
        """Run coroutines made by ``factory`` according to the timer ``flag``."""
        checked = _validate_flag(flag)
        self._ensure_open()
        seconds = _seconds(interval)
        handle = _Schedule()
        if TimerFlag.IMMEDIATE in checked:
            self.execute(factory(), callback)
        if checked & (TimerFlag.PERIODIC | TimerFlag.DELAY):
            self._loop.call_soon_threadsafe(self._arm, factory, callback, seconds, checked, handle)
        return handle

    def _arm(self, factory, callback, seconds: float, flag: TimerFlag, handle: _Schedule) -> None:
        if handle.cancelled:
            return
        self._loop.call_later(seconds, self._fire, factory, callback, seconds, flag, handle)

    def _fire(self, factory, callback, seconds: float, flag: TimerFlag, handle: _Schedule) -> None:
        if handle.cancelled:
            return
        try:
            task = self._loop.create_task(factory())
        except Exception as error:  # a broken factory must not kill the loop
            logger.error("%s", error)
        else:
            task.add_done_callback(functools.partial(self._complete, callback))
        if TimerFlag.PERIODIC in flag:
            self._arm(factory, callback, seconds, flag, handle)

    def close(self) -> None:
        """Stop the loop and wait for its thread to finish."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._loop.call_soon_threadsafe(self._loop.stop)
        if threading.current_thread() is not self._thread:
            self._thread.join()

    def __enter__(self) -> "AsyncExecutor":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


@functools.lru_cache(maxsize=None)
def executor() -> AsyncExecutor:
    """Return the process-wide executor."""
    return AsyncExecutor()