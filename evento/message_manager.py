"""Toast messages with timed show, hide and removal."""

from __future__ import annotations

import dataclasses
import enum
import heapq
import itertools
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Dict, List, Optional, Tuple, Union

from evento.views import log_general, log_message_operation

Delay = Union[float, int, timedelta]

_ORIGIN = "MessageManager"
ANIMATION_LENGTH = 0.2
DEFAULT_TIMEOUT = 3.0
_SHOW_DELAY = 0.001


def _seconds(delay: Delay) -> float:
    if isinstance(delay, timedelta):
        return delay.total_seconds()
    return float(delay)


class MessageType(enum.IntEnum):
    INFO = 0
    SUCCESS = 1
    ERROR = 2


@dataclass(frozen=True)
class MessageData:
    content: str
    type: MessageType = MessageType.INFO


@dataclass(frozen=True)
class Toast:
    """One toast on screen; elevation 0 means not yet shown."""

    id: int
    elevation: int = 0
    removed: bool = False


class TimerScheduler:
    """Single-shot timers on a clock that moves only when advanced.

    The event loop advances the clock in real time; tests advance it by hand.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: List[Tuple[float, int, Callable[[], object]]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def next_due(self) -> Optional[float]:
        return self._queue[0][0] if self._queue else None

    @property
    def pending(self) -> int:
        return len(self._queue)

    def single_shot(self, delay: Delay, callback: Callable[[], object]) -> None:
        """Call ``callback`` once, ``delay`` after the current time."""
        due = self._now + max(0.0, _seconds(delay))
        heapq.heappush(self._queue, (due, next(self._counter), callback))

    def advance(self, delay: Delay) -> None:
        self.advance_to(self._now + _seconds(delay))

    def advance_to(self, moment: float) -> None:
        """Fire, in due order, every timer due at or before ``moment``."""
        while self._queue and self._queue[0][0] <= moment:
            due, _, callback = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            callback()
        self._now = max(self._now, moment)


class MessageManager:
    """Shows toast messages and retires them after a timeout.

    A toast is created invisible, shown a moment later, marked removed when
    its time is up and deleted once the hide animation has finished.
    """

    def __init__(self, scheduler: Optional[TimerScheduler] = None) -> None:
        self._scheduler = scheduler if scheduler is not None else TimerScheduler()
        self._next_id = 0
        self._toasts: List[Toast] = []
        self._messages: Dict[int, MessageData] = {}

    @property
    def scheduler(self) -> TimerScheduler:
        return self._scheduler

    def show_message(
        self,
        content: str,
        type: MessageType = MessageType.INFO,
        timeout: Delay = DEFAULT_TIMEOUT,
    ) -> int:
        """Show a toast and return its id; it hides itself after ``timeout``."""
        message_id = self._next_id
        self._next_id += 1
        log_general(_ORIGIN, f'new message [{message_id}] content = "{content}"')
        self._new_toast(message_id, MessageData(content=content, type=MessageType(type)))
        self._scheduler.single_shot(
            _seconds(timeout) + ANIMATION_LENGTH, lambda: self.hide_message(message_id)
        )
        return message_id

    def hide_message(self, message_id: int) -> None:
        """Hide a toast early; does nothing if it is already hidden or gone."""
        index = self._index(message_id)
        if index is not None and not self._toasts[index].removed:
            self._hide_toast(message_id)
        else:
            log_message_operation(
                _ORIGIN, message_id, "scheduled hide cancelled: already hidden or deleted"
            )

    def get_message(self, message_id: int) -> MessageData:
        return self._messages[message_id]

    def toasts(self) -> Tuple[Toast, ...]:
        return tuple(self._toasts)

    def _index(self, message_id: int) -> Optional[int]:
        return next(
            (index for index, toast in enumerate(self._toasts) if toast.id == message_id), None
        )

    def _update(self, message_id: int, **changes: object) -> None:
        index = self._index(message_id)
        if index is None:
            return
        self._toasts[index] = dataclasses.replace(self._toasts[index], **changes)

    def _new_toast(self, message_id: int, data: MessageData) -> None:
        self._messages[message_id] = data
        self._toasts.append(Toast(id=message_id))
        log_message_operation(_ORIGIN, message_id, "instantiate toast, data added")
        self._scheduler.single_shot(_SHOW_DELAY, lambda: self._show_toast(message_id))

    def _show_toast(self, message_id: int) -> None:
        if self._index(message_id) is None:
            return
        for toast in list(self._toasts):
            self._update(toast.id, elevation=toast.elevation + 1)
        log_message_operation(_ORIGIN, message_id, "show")

    def _hide_toast(self, message_id: int) -> None:
        self._update(message_id, removed=True)
        log_message_operation(_ORIGIN, message_id, "hide")
        self._scheduler.single_shot(ANIMATION_LENGTH, lambda: self._delete_toast(message_id))

    def _delete_toast(self, message_id: int) -> None:
        index = self._index(message_id)
        if index is None:
            return
        removed_elevation = self._toasts[index].elevation
        self._toasts = [
            dataclasses.replace(toast, elevation=toast.elevation - 1)
            if toast.elevation > removed_elevation
            else toast
            for toast in self._toasts
            if toast.id != message_id
        ]
        self._messages.pop(message_id, None)
        log_general(_ORIGIN, f"delete message [{message_id}]")