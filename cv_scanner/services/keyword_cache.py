"""
In-process TTL cache for the active keyword list.

Shields the match engine from re-reading the keyword table on every scan.
One instance is created by the app factory and handed to the services that
need it; keyword mutations clear it.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

ACTIVE_KEYWORDS_KEY = "active_keywords"
DEFAULT_TTL_SECONDS = 5 * 60


@dataclass(frozen=True)
class _CacheItem:
    data: Any
    stored_at: float


class KeywordCache:
    """Thread-safe key/value cache with a single TTL for every entry."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: Dict[str, _CacheItem] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return cached data, or None when missing or older than the TTL."""
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            if self._clock() - item.stored_at > self.ttl_seconds:
                del self._items[key]
                logger.debug("Cache entry %s expired", key)
                return None
            return item.data

    def set(self, key: str, data: Any) -> None:
        with self._lock:
            self._items[key] = _CacheItem(data=data, stored_at=self._clock())

    def clear(self, key: Optional[str] = None) -> None:
        """Drop one key, or every key when ``key`` is None."""
        with self._lock:
            if key is None:
                self._items.clear()
            else:
                self._items.pop(key, None)
