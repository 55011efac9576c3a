# oasis/game/locks.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class ProfileLocks:
    """One mutex per profile id.

    Actions on the same profile run one at a time; different profiles never
    contend. Entries are reference counted and dropped when the last holder
    leaves, so the table only ever holds profiles with work in flight.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, tuple[threading.Lock, int]] = {}

    @contextmanager
    def hold(self, profile_id: str) -> Iterator[None]:
        with self._guard:
            lock, users = self._locks.get(profile_id, (threading.Lock(), 0))
            self._locks[profile_id] = (lock, users + 1)

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                lock, users = self._locks[profile_id]
                if users <= 1:
                    del self._locks[profile_id]
                else:
                    self._locks[profile_id] = (lock, users - 1)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


profile_locks = ProfileLocks()
