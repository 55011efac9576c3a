# oasis/game/construction.py
"""
Building lifecycle and the single build queue.

    PLANNED -> UNDER_CONSTRUCTION -> ACTIVE -> (UNDER_CONSTRUCTION -> ACTIVE)* -> MAX_LEVEL

PLANNED only exists inside ``start_build``: the row is created already under
construction. A profile owns one queue slot, so at most one of its buildings
is under construction at any time.

The functions here validate and mutate; they expect the caller to hold the
profile lock and to have caught the profile up (see ``reconciler``) so stocks
and building levels are current.
"""
from __future__ import annotations

import enum
import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from oasis.config import CITY_SLOT_COUNT
from oasis.game import catalog
from oasis.game.errors import (
    AlreadyUpgrading,
    MaxLevelReached,
    QueueBusy,
    SlotOccupied,
    StorageConflict,
    UnknownBuildingType,
    ValidationError,
)
from oasis.game.resources import debit, snapshot_of, stock_fields
from oasis.models.building import Building
from oasis.models.profile import Profile
from oasis.repository import GameRepository

logger = logging.getLogger(__name__)


class BuildingState(str, enum.Enum):
    PLANNED = "planned"
    UNDER_CONSTRUCTION = "under_construction"
    ACTIVE = "active"
    MAX_LEVEL = "max_level"


def building_state(building: Building) -> BuildingState:
    if building.is_upgrading:
        return BuildingState.UNDER_CONSTRUCTION
    entry = catalog.get_entry(building.building_type)
    if entry is not None and building.level >= entry.max_level:
        return BuildingState.MAX_LEVEL
    return BuildingState.ACTIVE


def queue_holder(buildings: Iterable[Building]) -> Optional[Building]:
    return next((b for b in buildings if b.is_upgrading), None)


def is_due(building: Building, now: datetime) -> bool:
    # Closed upper bound: a building exactly at its end time is complete
    return (
        building.is_upgrading
        and building.upgrade_end_time is not None
        and now >= building.upgrade_end_time
    )


def _queue_busy(holder: Building) -> QueueBusy:
    return QueueBusy(
        building_id=holder.id,
        building_type=holder.building_type,
        completes_at=holder.upgrade_end_time.isoformat() if holder.upgrade_end_time else None,
    )


def _spend(repo: GameRepository, profile: Profile, cost: dict[str, int]) -> None:
    # debit raises InsufficientResources before anything is written
    repo.update_profile(profile.id, **stock_fields(debit(snapshot_of(profile), cost)))


def _schedule(building_type: str, level: int, now: datetime) -> dict:
    seconds = catalog.build_time_seconds(building_type, level)
    return {
        "is_upgrading": True,
        "upgrade_start_time": now,
        "upgrade_end_time": now + timedelta(seconds=seconds),
    }


# ----------------------------
# Actions
# ----------------------------

def start_build(
    repo: GameRepository,
    profile: Profile,
    buildings: list[Building],
    *,
    building_type: str,
    slot_index: int,
    now: datetime,
) -> Building:
    entry = catalog.get_entry(building_type)
    if entry is None:
        raise UnknownBuildingType(building_type=building_type)

    if not 0 <= slot_index < CITY_SLOT_COUNT:
        raise ValidationError(
            "Slot index out of range",
            slot_index=slot_index,
            slot_count=CITY_SLOT_COUNT,
        )

    holder = queue_holder(buildings)
    if holder is not None:
        raise _queue_busy(holder)

    if any(b.slot_index == slot_index for b in buildings):
        raise SlotOccupied(slot_index=slot_index)

    _spend(repo, profile, catalog.building_cost(entry.key, 0))

    try:
        building = repo.create_building(profile.id, entry.key, 0, slot_index)
        building = repo.update_building(building.id, **_schedule(entry.key, 0, now))
    except StorageConflict:
        # Another writer won the race past our lock (e.g. a second process)
        current = repo.get_buildings(profile.id)
        holder = queue_holder(current)
        if holder is not None:
            raise _queue_busy(holder) from None
        raise SlotOccupied(slot_index=slot_index) from None

    logger.info(
        "profile=%s started %s at slot %s (done %s)",
        profile.id, entry.key, slot_index, building.upgrade_end_time.isoformat(),
    )
    return building


def start_upgrade(
    repo: GameRepository,
    profile: Profile,
    building: Building,
    buildings: list[Building],
    *,
    now: datetime,
) -> Building:
    entry = catalog.get_entry(building.building_type)
    if entry is None:
        raise UnknownBuildingType(building_type=building.building_type)

    if building.level >= entry.max_level:
        raise MaxLevelReached(building_id=building.id, max_level=entry.max_level)

    if building.is_upgrading:
        raise AlreadyUpgrading(
            building_id=building.id,
            completes_at=building.upgrade_end_time.isoformat() if building.upgrade_end_time else None,
        )

    holder = queue_holder(b for b in buildings if b.id != building.id)
    if holder is not None:
        raise _queue_busy(holder)

    _spend(repo, profile, catalog.building_cost(entry.key, building.level))

    from_level = building.level
    try:
        updated = repo.update_building(building.id, **_schedule(entry.key, from_level, now))
    except StorageConflict:
        holder = queue_holder(repo.get_buildings(profile.id))
        raise QueueBusy(
            building_id=holder.id if holder else None,
            building_type=holder.building_type if holder else None,
        ) from None

    logger.info(
        "profile=%s upgrading building=%s %s %s->%s (done %s)",
        profile.id, updated.id, entry.key, from_level, from_level + 1,
        updated.upgrade_end_time.isoformat(),
    )
    return updated


def complete_upgrade(repo: GameRepository, building: Building, *, now: datetime) -> bool:
    """Finish ``building`` if its timer has run out.

    Returns False when there was nothing to do. The ``is_upgrading`` flag is
    the guard: once cleared, the level bump and the rate/capacity delta cannot
    be applied a second time.
    """
    if not is_due(building, now):
        return False

    new_level = building.level + 1
    repo.update_building(
        building.id,
        level=new_level,
        is_upgrading=False,
        upgrade_start_time=None,
        upgrade_end_time=None,
    )

    entry = catalog.get_entry(building.building_type)
    if entry is None:
        return True

    profile = repo.get_profile(building.profile_id)
    if profile is None:
        return True

    delta = catalog.production_delta(entry.key, new_level)
    fields: dict = {
        f"{r}_rate": getattr(profile, f"{r}_rate") + delta[r]
        for r in catalog.RESOURCES
        if delta[r]
    }
    if entry.storage_bonus:
        fields["storage_capacity"] = profile.storage_capacity + entry.storage_bonus

    if fields:
        repo.update_profile(profile.id, **fields)

    logger.info(
        "profile=%s building=%s %s reached level %s",
        profile.id, building.id, entry.key, new_level,
    )
    return True
