"""Time-bounded cache of repository metadata, keyed by path."""

from __future__ import annotations

import contextlib
import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import replace

from pygit_push.models import RepoInfo

CACHE_TTL = 5 * 60.0


class ReadWriteLock:
    """Many concurrent readers or one writer. Writers wait for readers to drain."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextlib.contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextlib.contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class RepoCache:
    """RepoInfo entries that expire CACHE_TTL seconds after they were set.

    Expired entries are removed lazily, when read.
    """

    def __init__(self, ttl: float = CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, RepoInfo] = {}
        self._lock = ReadWriteLock()

    def get(self, path: str) -> RepoInfo | None:
        """Return the entry for path, or None if absent or expired."""
        with self._lock.read():
            info = self._entries.get(path)
            if info is None:
                return None
            if self._clock() - info.updated_at <= self.ttl:
                return info

        with self._lock.write():
            # another writer may have refreshed the entry in between
            info = self._entries.get(path)
            if info is not None and self._clock() - info.updated_at > self.ttl:
                del self._entries[path]
                return None
            return info

    def set(self, path: str, info: RepoInfo) -> RepoInfo:
        """Store info for path, stamped with the current time."""
        stamped = replace(info, updated_at=self._clock())
        with self._lock.write():
            self._entries[path] = stamped
        return stamped

    def invalidate(self, path: str) -> None:
        """Drop the entry for path, if any."""
        with self._lock.write():
            self._entries.pop(path, None)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)
