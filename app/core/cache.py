"""In-process cache used for the page listing"""

import threading
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Optional, Tuple


class MemoryCache:
    """Thread-safe key/value cache with absolute expiration.

    An entry expires ``ttl`` after it was set, whatever the read traffic.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: timedelta) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl.total_seconds(), value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)


class NullCache:
    """Cache qui ne garde rien (tests, debug)"""

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any, ttl: timedelta) -> None:
        pass

    def remove(self, key: str) -> None:
        pass
