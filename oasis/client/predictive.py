# oasis/client/predictive.py
"""Client-side resource counters that tick between server refreshes."""
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from oasis.game.catalog import RESOURCES
from oasis.game.resources import accrue

# Capacity shown before the first server snapshot arrives
DEFAULT_CAPACITY = 2000


@dataclass(frozen=True)
class DisplayResources:
    water: int
    dates: int
    gold: int
    stone: int
    water_rate: float
    dates_rate: float
    gold_rate: float
    stone_rate: float
    storage_capacity: int


class PredictiveResources:
    """
    Extrapolates the last server snapshot forward for smooth counters.

    Advisory only: nothing computed here is sent back to the server. Every
    ``replace`` throws the previous baseline away, so stale or racing data is
    harmless. Safe to read from a render thread while a network thread
    replaces the baseline.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[dict] = None
        self._synced_at: float = 0.0

    @property
    def has_snapshot(self) -> bool:
        with self._lock:
            return self._snapshot is not None

    def replace(self, snapshot: dict) -> None:
        """Install a fresh server snapshot (the resources payload) as the baseline."""
        with self._lock:
            self._snapshot = dict(snapshot)
            self._synced_at = self._clock()

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None

    def display(self) -> DisplayResources:
        with self._lock:
            data = self._snapshot
            elapsed = max(0.0, self._clock() - self._synced_at)

        if data is None:
            return DisplayResources(
                **{r: 0 for r in RESOURCES},
                **{f"{r}_rate": 0.0 for r in RESOURCES},
                storage_capacity=DEFAULT_CAPACITY,
            )

        cap = data.get("storage_capacity") or DEFAULT_CAPACITY
        stocks = {
            r: math.floor(accrue(float(data.get(r, 0)), float(data.get(f"{r}_rate", 0)), elapsed, cap))
            for r in RESOURCES
        }
        return DisplayResources(
            **stocks,
            **{f"{r}_rate": float(data.get(f"{r}_rate", 0)) for r in RESOURCES},
            storage_capacity=int(cap),
        )
