from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Optional


class TTLMap:
    """In-memory TTL map for small, process-local caches.

    - get(key) -> Optional[Any]
    - set(key, value, ttl_seconds)
    - pop(key)   (explicit invalidation)
    """

    def __init__(self, maxsize: int = 4096, *, clock: Callable[[], float] = time.time):
        self.maxsize = maxsize
        self._clock = clock
        self._data: Dict[str, Any] = {}
        self._exp: Dict[str, float] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            exp = self._exp.get(key)
            if exp is None:
                return None
            if self._clock() >= exp:
                self._data.pop(key, None)
                self._exp.pop(key, None)
                return None
            return self._data.get(key)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        with self._lock:
            if key not in self._data and len(self._data) >= self.maxsize:
                try:
                    old_key = next(iter(self._data))
                    del self._data[old_key]
                    self._exp.pop(old_key, None)
                except StopIteration:
                    pass
            self._data[key] = value
            self._exp[key] = self._clock() + ttl_seconds

    def pop(self, key: str) -> Optional[Any]:
        with self._lock:
            self._exp.pop(key, None)
            return self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._exp.clear()

    def __len__(self) -> int:
        return len(self._data)
