"""Per-key mutual exclusion for in-process callers."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class _Slot:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0  # holders plus waiters


class KeyedLocks:
    """A registry of ``threading.Lock`` objects, one per key.

    Holding the lock for one key never blocks callers working on another key.
    A key's lock is dropped as soon as nobody holds or waits for it, so the
    registry only grows with the number of keys in flight.
    """

    def __init__(self) -> None:
        self._slots: dict[str, _Slot] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._slots)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        key = str(key)
        with self._registry_lock:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.users += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._registry_lock:
                slot.users -= 1
                if slot.users == 0:
                    del self._slots[key]
