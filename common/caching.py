"""
In-memory caching for explain results (can be extended to Redis later).
"""
from collections import OrderedDict
from typing import Optional, Any
import threading

from .config import config


class SimpleCache:
    """Thread-safe in-memory LRU cache."""

    def __init__(self, max_size: int = 100):
        self._cache: "OrderedDict[str, Any]" = OrderedDict()
        self._lock = threading.Lock()
        self.max_size = max_size

    def get(self, key: str) -> Optional[Any]:
        """Get item from cache."""
        with self._lock:
            if key not in self._cache:
                return None
            self._cache.move_to_end(key)
            return self._cache[key]

    def set(self, key: str, value: Any):
        """Set item in cache, evicting the least recently used entry when full."""
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            elif len(self._cache) >= self.max_size:
                self._cache.popitem(last=False)
            self._cache[key] = value

    def clear(self):
        """Clear all cache."""
        with self._lock:
            self._cache.clear()

    def __len__(self):
        with self._lock:
            return len(self._cache)


# Global cache instance
explain_cache = SimpleCache(max_size=config.cache_size)
