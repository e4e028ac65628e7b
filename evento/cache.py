"""In-memory LRU cache of response data and the on-disk cache directory."""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
import sys
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

_APP_DIR = "evento"

# Numeric codes of the HTTP verbs, as they appear inside cache keys.
_VERB_CODES = {
    "UNKNOWN": 0,
    "DELETE": 1,
    "GET": 2,
    "HEAD": 3,
    "POST": 4,
    "PUT": 5,
    "CONNECT": 6,
    "OPTIONS": 7,
    "TRACE": 8,
    "PATCH": 29,
}

Params = Union[Mapping[str, Any], Iterable[Tuple[str, Any]], None]


def _verb_code(verb: Union[int, str]) -> int:
    if isinstance(verb, str):
        try:
            return _VERB_CODES[verb.upper()]
        except KeyError:
            raise ValueError(f"unknown HTTP verb: {verb!r}") from None
    return int(verb)


@dataclass
class CacheEntry:
    """Cached data with the moment it was stored, its lifetime and its size."""

    data: Any
    ttl: Union[float, timedelta] = 0.0
    size: int = 0
    insert_time: float = field(default_factory=time.monotonic)

    def __post_init__(self) -> None:
        if isinstance(self.ttl, timedelta):
            self.ttl = self.ttl.total_seconds()
        else:
            self.ttl = float(self.ttl)


class CacheManager:
    """Least-recently-inserted cache bounded by the total size of its entries."""

    MAX_CACHE_SIZE = 64 * 1024 * 1024

    def __init__(self) -> None:
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._size = 0

    @staticmethod
    def generate_key(verb: Union[int, str], url: str, params: Params = None) -> str:
        """Build the cache key for a request from its URL, verb and parameters."""
        key = f"{url}|{_verb_code(verb)}"
        if params is None:
            return key
        items = params.items() if isinstance(params, Mapping) else params
        return key + "".join(f"|{name}={value}" for name, value in items)

    @staticmethod
    def generate_stem(url: str) -> str:
        """Return a stable decimal file stem derived from ``url``."""
        digest = hashlib.blake2b(url.encode("utf-8"), digest_size=8).digest()
        return str(int.from_bytes(digest, "big"))

    @staticmethod
    def cache_dir() -> Optional[Path]:
        """Return the application cache directory, creating it if needed."""
        if sys.platform.startswith("win"):
            local = os.environ.get("LOCALAPPDATA")
            if not local:
                logger.warning("LOCALAPPDATA environment variable not found")
                return None
            directory = Path(local) / _APP_DIR
        elif sys.platform == "darwin":
            home = os.environ.get("HOME")
            if not home:
                logger.warning("HOME environment variable not found")
                return None
            directory = Path(home) / "Library" / "Caches" / _APP_DIR
        else:
            xdg = os.environ.get("XDG_CACHE_HOME")
            if xdg:
                directory = Path(xdg) / _APP_DIR
            else:
                home = os.environ.get("HOME")
                if not home:
                    logger.warning("HOME environment variable not found")
                    return None
                directory = Path(home) / ".cache" / _APP_DIR

        directory.mkdir(parents=True, exist_ok=True)
        return directory.absolute()

    @staticmethod
    def is_expired(entry: CacheEntry) -> bool:
        return time.monotonic() - entry.insert_time >= entry.ttl

    def insert(self, key: str, entry: CacheEntry) -> None:
        """Store ``entry`` as the newest one, evicting the oldest while over budget."""
        previous = self._entries.pop(key, None)
        if previous is not None:
            self._size -= previous.size
        self._entries[key] = entry
        self._size += entry.size

        while self._size > self.MAX_CACHE_SIZE and self._entries:
            _, oldest = self._entries.popitem(last=False)
            self._size -= oldest.size

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry under ``key``; expired entries are dropped."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.is_expired(entry):
            del self._entries[key]
            self._size -= entry.size
            return None
        return entry

    def clear(self) -> None:
        """Drop every entry and delete the on-disk cache directory."""
        self.clear_memory_cache()
        directory = self.cache_dir()
        if directory is not None:
            shutil.rmtree(directory, ignore_errors=True)

    def clear_memory_cache(self) -> None:
        self._entries.clear()
        self._size = 0

    def current_size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries