"""
Thread-safe result cache for CityTZ searches.

The cache stores whatever result sequence a caller hands it under a caller-built
key; it knows nothing about query semantics. Entries never expire and there is
no capacity bound, so the cache grows with the number of distinct keys until
``clear()`` is called.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Tuple

from CityTZ.utils.logging import get_logger

logger = get_logger(__name__)

class ReadWriteLock:
    """
    Many-readers / single-writer lock.

    Readers share the lock with each other; a writer waits for active readers
    to drain and blocks new readers while it is waiting, so writers are not
    starved by a steady stream of lookups.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()

class SearchCache:
    """
    In-memory memo of search results keyed by normalized query text.

    ``get`` returns a ``(value, found)`` pair so that a cached empty result is
    distinguishable from a miss.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._entries: Dict[str, Any] = {}

    def get(self, key: str) -> Tuple[Optional[Any], bool]:
        with self._lock.read():
            if key in self._entries:
                return self._entries[key], True
        return None, False

    def set(self, key: str, value: Any) -> None:
        with self._lock.write():
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock.write():
            count = len(self._entries)
            self._entries = {}
        logger.debug(f"Cleared {count} cached search results")

    def size(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()
