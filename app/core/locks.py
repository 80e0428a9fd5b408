# app/core/locks.py
import threading
from collections.abc import Iterator
from contextlib import contextmanager


class KeyedLock:
    """
    One mutex per key, created on demand and dropped when unused.

    Sync FastAPI handlers run in a threadpool, so a goat upsert and
    its image replacement are serialized per RFID tag with this.
    Only coordinates threads of a single process.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._waiters: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
