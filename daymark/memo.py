"""Single-slot memoization keyed on input versions."""
from __future__ import annotations

import threading
from typing import Callable, Generic, Hashable, TypeVar

T = TypeVar("T")

_MISSING = object()


class VersionedMemo(Generic[T]):
    """Holds the last computed value and the version key it was built from.

    ``get(key, compute)`` returns the cached value while *key* is unchanged
    and recomputes as soon as it differs, so callers always see results for
    the current inputs without recomputing on every read.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._key: Hashable = _MISSING
        self._value: T | None = None
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable, compute: Callable[[], T]) -> T:
        with self._lock:
            if self._key is not _MISSING and self._key == key:
                self.hits += 1
                return self._value  # type: ignore[return-value]
        value = compute()
        with self._lock:
            self._key = key
            self._value = value
            self.misses += 1
        return value

    def invalidate(self) -> None:
        with self._lock:
            self._key = _MISSING
            self._value = None
