# oasis/game/resources.py
"""
Resource accrual.

Stocks grow continuously at their hourly rate and are capped by a single
storage capacity shared by all four resources. Nothing here touches the
database: ``reconcile`` works on an immutable snapshot and the helpers at the
bottom copy a snapshot onto / off a Profile row.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Mapping

from oasis.game.catalog import RESOURCES
from oasis.game.errors import InsufficientResources

SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True)
class ResourceSnapshot:
    water: float
    dates: float
    gold: float
    stone: float
    water_rate: float
    dates_rate: float
    gold_rate: float
    stone_rate: float
    storage_capacity: int
    last_resource_update: datetime

    def stock(self, resource: str) -> float:
        return getattr(self, resource)

    def rate(self, resource: str) -> float:
        return getattr(self, f"{resource}_rate")

    def stocks(self) -> dict[str, float]:
        return {r: self.stock(r) for r in RESOURCES}

    def rates(self) -> dict[str, float]:
        return {r: self.rate(r) for r in RESOURCES}


def accrue(stock: float, rate: float, elapsed_seconds: float, capacity: float) -> float:
    grown = stock + rate * elapsed_seconds / SECONDS_PER_HOUR
    return max(0.0, min(grown, float(capacity)))


def reconcile(snapshot: ResourceSnapshot, now: datetime) -> ResourceSnapshot:
    """Bring stocks current as of ``now``.

    Time never runs backwards here: if ``now`` is earlier than the snapshot
    (clock skew between workers) no time elapses and the timestamp is kept.
    """
    last = snapshot.last_resource_update
    if now <= last:
        elapsed = 0.0
        now = last
    else:
        elapsed = (now - last).total_seconds()

    cap = snapshot.storage_capacity
    return replace(
        snapshot,
        last_resource_update=now,
        **{r: accrue(snapshot.stock(r), snapshot.rate(r), elapsed, cap) for r in RESOURCES},
    )


def missing_resources(stocks: Mapping[str, float], cost: Mapping[str, float]) -> dict[str, dict]:
    """Per-resource shortfall; empty when ``stocks`` cover ``cost``."""
    insufficient = {}
    for r in RESOURCES:
        need = cost.get(r, 0)
        have = stocks.get(r, 0)
        if have < need:
            insufficient[r] = {"need": need, "have": int(have)}
    return insufficient


def debit(snapshot: ResourceSnapshot, cost: Mapping[str, float]) -> ResourceSnapshot:
    short = missing_resources(snapshot.stocks(), cost)
    if short:
        raise InsufficientResources(cost=dict(cost), insufficient=short)
    return replace(snapshot, **{r: snapshot.stock(r) - cost.get(r, 0) for r in RESOURCES})


# ----------------------------
# Profile <-> snapshot
# ----------------------------

_SNAPSHOT_FIELDS = (
    *RESOURCES,
    *(f"{r}_rate" for r in RESOURCES),
    "storage_capacity",
    "last_resource_update",
)


def snapshot_of(profile) -> ResourceSnapshot:
    return ResourceSnapshot(**{f: getattr(profile, f) for f in _SNAPSHOT_FIELDS})


def stock_fields(snapshot: ResourceSnapshot) -> dict:
    """Fields a reconcile or a spend changes (stocks + timestamp)."""
    fields = snapshot.stocks()
    fields["last_resource_update"] = snapshot.last_resource_update
    return fields


def resources_payload(snapshot: ResourceSnapshot) -> dict:
    return {
        **snapshot.stocks(),
        **{f"{r}_rate": snapshot.rate(r) for r in RESOURCES},
        "storage_capacity": snapshot.storage_capacity,
        "last_resource_update": snapshot.last_resource_update.isoformat(),
    }
