"""Socket client talking to the tray helper and scheduling its notifications."""

from __future__ import annotations

import asyncio
import enum
import functools
import logging
import threading
import time
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Union

from evento.executor import AsyncExecutor, TimerFlag
from evento.executor import executor as default_executor

logger = logging.getLogger(__name__)

_HOST = "127.0.0.1"
_CHUNK = 1024

When = Union[datetime, float, int]


class TrayMessage(str, enum.Enum):
    """Commands the tray sends to the application."""

    SHOW_WINDOW = "SHOW"
    SHOW_ABOUT_PAGE = "ABOUT"
    EXIT_APP = "EXIT"


def _key(name: Any) -> str:
    return name.value if isinstance(name, enum.Enum) else str(name)


def _delay_until(when: When) -> float:
    if isinstance(when, datetime):
        now = datetime.now(when.tzinfo) if when.tzinfo is not None else datetime.now()
        return (when - now).total_seconds()
    return float(when) - time.time()


class SocketClient:
    """Connects to the tray, runs the actions it asks for and sends it messages.

    Actions run on the executor thread as messages arrive; wrap them to hand
    them to another thread. The first client created is returned by ``ipc()``.
    """

    _instance: Optional["SocketClient"] = None

    def __init__(
        self,
        actions: Optional[Mapping[Any, Callable[[], Any]]] = None,
        executor: Optional[AsyncExecutor] = None,
    ) -> None:
        self._actions: Dict[str, Callable[[], Any]] = {
            _key(name): action for name, action in (actions or {}).items()
        }
        self._executor = executor
        self._messages: Dict[int, str] = {}
        self._lock = threading.Lock()
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        if SocketClient._instance is None:
            SocketClient._instance = self

    @property
    def executor(self) -> AsyncExecutor:
        if self._executor is None:
            self._executor = default_executor()
        return self._executor

    @property
    def connected(self) -> bool:
        return self._writer is not None

    async def connect(self, port: int) -> None:
        """Connect to the tray on ``port`` and handle its messages until it hangs up."""
        reader, writer = await asyncio.open_connection(_HOST, int(port))
        self._loop = asyncio.get_running_loop()
        self._reader, self._writer = reader, writer
        while True:
            message = await self.receive()
            if not message:
                break
            await self.handle_receive(message)

    async def receive(self) -> str:
        """Read one chunk from the tray; an empty string means nothing more comes."""
        reader = self._reader
        if reader is None:
            logger.error("Socket is not connected")
            return ""
        try:
            data = await reader.read(_CHUNK)
        except (ConnectionError, OSError) as error:
            logger.error("%s", error)
            return ""
        return data.decode("utf-8", errors="replace")

    async def send(self, message: str) -> None:
        writer = self._writer
        if writer is None:
            logger.error("Socket is not connected")
            return
        logger.info("IPC Send: %s", message)
        writer.write(message.encode("utf-8"))
        await writer.drain()

    async def handle_receive(self, message: str) -> None:
        logger.info("IPC Received: %s", message)
        action = self._actions.get(message)
        if action is None:
            logger.warning("Unknown message: %s", message)
            return
        action()

    def show_or_update_message(self, message_id: int, message: str, when: When) -> None:
        """Send ``message`` to the tray at ``when``, replacing any pending text for the id."""
        if message_id == 0:
            logger.warning("Invalid message id")
            return
        with self._lock:
            self._messages[message_id] = message
        self.executor.schedule(
            functools.partial(self._deliver, message_id),
            None,
            _delay_until(when),
            TimerFlag.DELAY | TimerFlag.ONCE,
        )

    def _deliver(self, message_id: int):
        with self._lock:
            message = self._messages.pop(message_id, None)
        if message is None:
            # cancelled or replaced meanwhile: hand back an awaitable that sends nothing
            return asyncio.sleep(0)
        return self.send(message)

    def cancel_message(self, message_id: int) -> None:
        if message_id == 0:
            logger.warning("Invalid message id")
            return
        with self._lock:
            self._messages.pop(message_id, None)

    def delete_all_messages(self) -> None:
        with self._lock:
            self._messages.clear()

    def pending_messages(self) -> Dict[int, str]:
        """Messages scheduled but not yet sent, by id."""
        with self._lock:
            return dict(self._messages)

    def close(self) -> None:
        """Shut the connection down; safe to call from any thread."""
        writer = self._writer
        self._reader = None
        self._writer = None
        if writer is None:
            return
        loop = self._loop
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None
        try:
            if loop is not None and loop is not current and loop.is_running():
                loop.call_soon_threadsafe(writer.close)
            else:
                writer.close()
        except RuntimeError as error:
            logger.debug("closing socket: %s", error)


def ipc() -> Optional[SocketClient]:
    """Return the first socket client created, if any."""
    return SocketClient._instance