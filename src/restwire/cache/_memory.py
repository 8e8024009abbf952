import threading
import time
from logging import getLogger
from typing import Callable, Dict, Optional

from ..models.http import Response
from ._base import CacheEntry

logger = getLogger(__name__)


class InMemoryCache:
    """Process-local cache with lazy expiry.

    Expired entries are dropped when they are read and swept on every write,
    not in the background. With ``max_entries`` set, writing a new key to a
    full cache evicts the entry that was written longest ago.

    Args:
        clock: Monotonic time source in seconds.
        max_entries: Upper bound on stored entries; ``None`` is unbounded.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: Optional[int] = None,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._clock = clock
        self._max_entries = max_entries
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Response]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None
            return entry.response

    def set(self, key: str, response: Response, ttl: float) -> None:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            # re-inserting moves the key to the end of the eviction order
            self._entries.pop(key, None)
            if self._max_entries is not None:
                while len(self._entries) >= self._max_entries:
                    oldest = next(iter(self._entries))
                    del self._entries[oldest]
                    logger.debug(f"Cache full, evicted: {oldest}")
            self._entries[key] = CacheEntry(response=response, expires_at=now + ttl)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
