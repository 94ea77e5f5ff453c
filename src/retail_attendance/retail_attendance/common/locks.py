from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator

from ..core.exceptions import PersistenceError


class _Slot:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class KeyedLocks:
    """At most one in-flight mutation per key, e.g. (employee_id, work_date).

    A key's lock exists only while some thread holds or waits for it.
    """

    def __init__(self, *, timeout: float = 5.0):
        self._timeout = float(timeout)
        self._guard = threading.Lock()
        self._slots: dict[Hashable, _Slot] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    def _checkout(self, key: Hashable) -> _Slot:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.holders += 1
            return slot

    def _checkin(self, key: Hashable, slot: _Slot) -> None:
        with self._guard:
            slot.holders -= 1
            if slot.holders == 0:
                del self._slots[key]

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        slot = self._checkout(key)
        try:
            if not slot.lock.acquire(timeout=self._timeout):
                raise PersistenceError(f"Timed out waiting for record {key!r}, please retry")
            try:
                yield
            finally:
                slot.lock.release()
        finally:
            self._checkin(key, slot)
