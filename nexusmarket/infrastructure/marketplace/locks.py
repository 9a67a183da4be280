"""
Adapter: In-process keyed locks.

Implements the LockManager port. Each key maps to a lock that lives
only while someone holds or waits for it. Keys are always acquired in
sorted order, so two operations asking for overlapping key sets cannot
deadlock each other.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from nexusmarket.domain.marketplace.ports import LockManager


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class KeyedLockRegistry(LockManager):
    """Mutual exclusion per string key, shared by every thread in the process."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def _checkout(self, key: str) -> _Entry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1
            return entry

    def _checkin(self, key: str, entry: _Entry) -> None:
        with self._guard:
            entry.holders -= 1
            if entry.holders == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        """Hold every key until the block exits.

        Args:
            keys: Lock keys; duplicates are collapsed.
        """
        acquired: list[tuple[str, _Entry]] = []
        try:
            for key in sorted(set(keys)):
                entry = self._checkout(key)
                entry.lock.acquire()
                acquired.append((key, entry))
            yield
        finally:
            for key, entry in reversed(acquired):
                entry.lock.release()
                self._checkin(key, entry)

    def active_keys(self) -> int:
        """Number of keys currently held or awaited."""
        with self._guard:
            return len(self._entries)
