"""Thread-safe in-memory caches owned by the objects that use them."""

import threading
import time
from collections import OrderedDict
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar('T')


class LRUCache(Generic[T]):
    """LRU cache with a size limit, hit/miss counters and thread safety."""

    def __init__(self, max_size: int = 1000):
        """
        Initialize LRU cache.

        Args:
            max_size: Maximum number of items to cache
        """
        self._items: "OrderedDict[str, T]" = OrderedDict()
        self.max_size = max_size
        self.hits = 0
        self.misses = 0
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None, and record a hit or miss."""
        with self._lock:
            if key in self._items:
                self._items.move_to_end(key)
                self.hits += 1
                return self._items[key]
            self.misses += 1
        return None

    def set(self, key: str, value: T) -> None:
        """Insert or refresh an item, evicting the least recently used one when full."""
        with self._lock:
            if key in self._items:
                self._items.move_to_end(key)
            self._items[key] = value
            if len(self._items) > self.max_size:
                self._items.popitem(last=False)

    def values(self):
        """Snapshot of the cached values, most recently used last."""
        with self._lock:
            return list(self._items.values())

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._items


class TTLValue(Generic[T]):
    """A single value refreshed by a loader once it is older than ``ttl_seconds``.

    The stored value is replaced, never mutated, so readers holding an older
    value keep a consistent snapshot. If the loader fails and a previous
    value exists, that value is kept and the error is passed to ``on_error``.
    """

    def __init__(
        self,
        loader: Callable[[], T],
        ttl_seconds: float,
        on_error: Optional[Callable[[Exception], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self.ttl_seconds = ttl_seconds
        self._on_error = on_error
        self._clock = clock
        self._value: Optional[T] = None
        self._loaded_at: Optional[float] = None
        self._has_value = False
        self._lock = threading.Lock()

    def is_fresh(self) -> bool:
        if self._loaded_at is None:
            return False
        return (self._clock() - self._loaded_at) < self.ttl_seconds

    def get(self) -> T:
        with self._lock:
            if self.is_fresh():
                return self._value
            try:
                self._value = self._loader()
                self._loaded_at = self._clock()
                self._has_value = True
            except Exception as e:
                if not self._has_value:
                    raise
                if self._on_error:
                    self._on_error(e)
            return self._value

    def invalidate(self) -> None:
        with self._lock:
            self._loaded_at = None
