"""In-process repository used by tests and the ``memory`` storage backend."""

from __future__ import annotations

import copy
import threading
from typing import Any


class InMemoryRepository:
    """Dictionary-backed key-value store.

    Values are deep-copied on the way in and out, so callers never share
    mutable state with the store.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            if key not in self._data:
                return None
            return copy.deepcopy(self._data[key])

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def list_by_prefix(self, prefix: str) -> list[str]:
        with self._lock:
            return sorted(key for key in self._data if key.startswith(prefix))

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
