# oasis/game/reconciler.py
"""
Catch-up on read.

There is no scheduler: a profile only advances when someone looks at it.
``catch_up`` replays what happened since the last observation, in event
order:

  1. for each upgrade whose end time has passed (earliest first), accrue
     resources up to that end time at the rates in force *before* it, then
     apply the completion (level bump, rate delta, storage bonus);
  2. accrue the remaining stretch up to ``now`` at the final rates.

Running it twice at the same ``now`` is a no-op the second time.
"""
from __future__ import annotations

import logging
from datetime import datetime

from oasis.game.construction import complete_upgrade, is_due
from oasis.game.errors import NotFound
from oasis.game.resources import ResourceSnapshot, reconcile, snapshot_of, stock_fields
from oasis.models.building import Building
from oasis.models.profile import Profile
from oasis.repository import GameRepository

logger = logging.getLogger(__name__)


def advance_resources(repo: GameRepository, profile: Profile, at: datetime) -> ResourceSnapshot:
    snap = reconcile(snapshot_of(profile), at)
    repo.update_profile(profile.id, **stock_fields(snap))
    return snap


def due_upgrades(buildings: list[Building], now: datetime) -> list[Building]:
    due = [b for b in buildings if is_due(b, now)]
    due.sort(key=lambda b: (b.upgrade_end_time, b.id))
    return due


def catch_up(repo: GameRepository, profile_id: str, now: datetime) -> tuple[Profile, list[Building]]:
    """Apply due completions and accrual; return the current profile and buildings."""
    profile = repo.get_profile(profile_id)
    if profile is None:
        raise NotFound("Profile not found", profile_id=profile_id)

    buildings = repo.get_buildings(profile_id)

    completed = 0
    for b in due_upgrades(buildings, now):
        advance_resources(repo, profile, b.upgrade_end_time)
        if complete_upgrade(repo, b, now=now):
            completed += 1

    advance_resources(repo, profile, now)

    if completed:
        logger.debug("profile=%s caught up %s completion(s)", profile_id, completed)

    return profile, buildings
