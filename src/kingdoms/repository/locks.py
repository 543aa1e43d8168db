"""Per-entity mutual exclusion for read-modify-write sequences."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager


class EntityLocks:
    """Registry handing out one :class:`threading.Lock` per repository key.

    Holding the lock for ``battle:<id>`` while loading, transforming and
    saving that battle prevents two commands from overwriting each other.
    """

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        """Acquire the locks for ``keys`` in sorted order and release them on exit."""

        with ExitStack() as stack:
            for key in sorted(set(keys)):
                stack.enter_context(self._lock_for(key))
            yield
