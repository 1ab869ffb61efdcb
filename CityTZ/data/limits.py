"""
Admission control primitives: a sliding-window rate limiter and a
memory/concurrency budget.

Neither is consulted by the search engine itself. Callers that want
rate-limited, resource-bounded searches compose them around their own calls
(see CityTZ.services.city_service.CityService).
"""

import threading
import time
from collections import deque
from contextlib import contextmanager
from typing import Callable, Deque, Dict, Iterator, Optional

from CityTZ.exceptions import ResourceError
from CityTZ.utils.logging import get_logger

logger = get_logger(__name__)

class RateLimiter:
    """
    Sliding-window rate limiter keyed by caller identity.

    Each key keeps the timestamps of its admitted requests within the trailing
    window. A call first drops timestamps at or before ``now - window`` and is
    admitted only if fewer than ``limit`` remain; rejected calls are not
    recorded. Keys are fully independent.

    Args:
        limit: Requests admitted per window
        window: Window length in seconds
        clock: Monotonic time source (defaults to time.monotonic)
    """

    def __init__(self, limit: int, window: float,
                 clock: Optional[Callable[[], float]] = None) -> None:
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")

        self.limit = limit
        self.window = window
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._requests: Dict[str, Deque[float]] = {}

    def allow(self, key: str) -> bool:
        """Return True and record the request if ``key`` is under its limit."""
        # Prune, count and append form one critical section.
        with self._lock:
            now = self._clock()
            cutoff = now - self.window

            timestamps = self._requests.setdefault(key, deque())
            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()

            if len(timestamps) < self.limit:
                timestamps.append(now)
                return True

        logger.debug(f"Rate limit reached for key '{key}' ({self.limit} per {self.window}s)")
        return False

    def pending(self, key: str) -> int:
        """Number of requests recorded for ``key`` in the current window."""
        with self._lock:
            cutoff = self._clock() - self.window
            return sum(1 for ts in self._requests.get(key, ()) if ts > cutoff)

    def reset(self, key: Optional[str] = None) -> None:
        """Forget the history of one key, or of every key."""
        with self._lock:
            if key is None:
                self._requests.clear()
            else:
                self._requests.pop(key, None)

class ResourceManager:
    """
    Memory and concurrency budget for search execution.

    Invariants: ``0 <= current_mb <= max_memory_mb`` and
    ``0 <= active_searches <= max_concurrent_searches``. Every successful
    ``allocate(n)`` must be matched by exactly one ``release(n)``; prefer the
    ``allocation`` context manager, which guarantees it.

    Args:
        max_memory_mb: Memory budget in MB
        max_concurrent_searches: Maximum number of searches running at once
    """

    def __init__(self, max_memory_mb: int, max_concurrent_searches: int) -> None:
        self.max_memory_mb = max_memory_mb
        self.max_concurrent_searches = max_concurrent_searches
        self._lock = threading.Lock()
        self._current_mb = 0
        self._active_searches = 0

    @property
    def current_mb(self) -> int:
        with self._lock:
            return self._current_mb

    @property
    def active_searches(self) -> int:
        with self._lock:
            return self._active_searches

    def can_allocate(self) -> bool:
        """Non-mutating probe: is there headroom for at least one more search?"""
        with self._lock:
            return (self._current_mb < self.max_memory_mb
                    and self._active_searches < self.max_concurrent_searches)

    def allocate(self, memory_mb: int) -> bool:
        """
        Reserve ``memory_mb`` and one search slot.

        Returns:
            True if both fit within the budget; False (and nothing reserved)
            otherwise.
        """
        if memory_mb < 0:
            raise ValueError(f"memory_mb must not be negative, got {memory_mb}")

        with self._lock:
            if (self._current_mb + memory_mb > self.max_memory_mb
                    or self._active_searches >= self.max_concurrent_searches):
                return False

            self._current_mb += memory_mb
            self._active_searches += 1
            return True

    def release(self, memory_mb: int) -> None:
        """Return ``memory_mb`` and one search slot to the budget (clamped at zero)."""
        with self._lock:
            self._current_mb = max(0, self._current_mb - memory_mb)
            if self._active_searches > 0:
                self._active_searches -= 1

    @contextmanager
    def allocation(self, memory_mb: int) -> Iterator[None]:
        """
        Hold ``memory_mb`` and a search slot for the duration of a block.

        Raises:
            ResourceError: If the budget cannot accommodate the request

        Example:
            >>> with resource_manager.allocation(1):
            ...     results = engine.find_partial("springfield")
        """
        if not self.allocate(memory_mb):
            logger.warning(
                f"Search budget exhausted: requested {memory_mb}MB "
                f"(limits: {self.max_memory_mb}MB, {self.max_concurrent_searches} searches)"
            )
            raise ResourceError(
                message=f"could not allocate {memory_mb}MB for search",
                context={
                    'requested_mb': memory_mb,
                    'max_memory_mb': self.max_memory_mb,
                    'max_concurrent_searches': self.max_concurrent_searches,
                }
            )
        try:
            yield
        finally:
            self.release(memory_mb)
