# oasis/game/actions.py
"""
Action surface of the game core.

Every action that touches a profile runs as one unit of work under that
profile's lock: catch up (completions + accrual), validate, mutate, commit.
Business rejections still commit the catch-up, because accrual is true
whether or not the action goes through. Storage failures roll everything
back.
"""
from __future__ import annotations

import logging
import random
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from oasis.config import MAP_SIZE, STARTING_STOCK, STORAGE_CAPACITY
from oasis.game import catalog, construction
from oasis.game.clock import utcnow
from oasis.game.errors import (
    GameError,
    NotFound,
    RepositoryFailure,
    StorageConflict,
    UnknownBuildingType,
    ValidationError,
)
from oasis.game.locks import profile_locks
from oasis.game.reconciler import catch_up
from oasis.game.resources import ResourceSnapshot, snapshot_of
from oasis.models.building import Building
from oasis.models.profile import Profile
from oasis.repository import GameRepository

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(repo: GameRepository, profile_id: str) -> Iterator[None]:
    with profile_locks.hold(profile_id):
        # Rows read before the lock may predate another writer's commit
        repo.expire()
        try:
            yield
        except RepositoryFailure:
            repo.rollback()
            raise
        except GameError as exc:
            logger.info("profile=%s rejected: %s", profile_id, exc.code)
            repo.commit()
            raise
        except Exception:
            repo.rollback()
            raise
        repo.commit()


def _require(**fields: object) -> None:
    missing = [k for k, v in fields.items() if v is None or (isinstance(v, str) and not v.strip())]
    if missing:
        raise ValidationError("Missing required fields", missing=missing)


# ----------------------------
# Profiles
# ----------------------------

def _seed_profile(
    repo: GameRepository,
    *,
    profile_id: str,
    username: str,
    email: str,
    now: datetime,
    rng: random.Random,
) -> Profile:
    rates = catalog.starter_rates()
    profile = repo.create_profile(
        profile_id,
        username,
        email,
        water=STARTING_STOCK,
        dates=STARTING_STOCK,
        gold=STARTING_STOCK,
        stone=STARTING_STOCK,
        storage_capacity=STORAGE_CAPACITY,
        map_x=rng.randrange(MAP_SIZE),
        map_y=rng.randrange(MAP_SIZE),
        last_resource_update=now,
        **{f"{r}_rate": rates[r] for r in catalog.RESOURCES},
    )

    for building_type, slot_index in catalog.STARTER_BUILDINGS:
        repo.create_building(profile_id, building_type, 1, slot_index)

    logger.info("profile=%s created (%s) at map %s,%s", profile_id, username, profile.map_x, profile.map_y)
    return profile


def create_or_fetch_profile(
    repo: GameRepository,
    *,
    profile_id: str,
    username: str,
    email: str,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> Profile:
    """Return the profile for ``profile_id``, creating and seeding it on first call.

    Repeat calls never reseed; they catch the existing profile up instead.
    """
    _require(id=profile_id, username=username, email=email)
    now = now or utcnow()

    with unit_of_work(repo, profile_id):
        if repo.get_profile(profile_id) is None:
            try:
                _seed_profile(
                    repo,
                    profile_id=profile_id,
                    username=username,
                    email=email,
                    now=now,
                    rng=rng or random.Random(),
                )
            except StorageConflict:
                # Created concurrently by another process; fall through to fetch
                logger.info("profile=%s already created elsewhere", profile_id)
        profile, _ = catch_up(repo, profile_id, now)

    return profile


def fetch_profile(repo: GameRepository, profile_id: str, *, now: Optional[datetime] = None) -> Profile:
    now = now or utcnow()
    with unit_of_work(repo, profile_id):
        profile, _ = catch_up(repo, profile_id, now)
    return profile


def fetch_resources(repo: GameRepository, profile_id: str, *, now: Optional[datetime] = None) -> ResourceSnapshot:
    now = now or utcnow()
    with unit_of_work(repo, profile_id):
        profile, _ = catch_up(repo, profile_id, now)
        snap = snapshot_of(profile)
    return snap


def fetch_buildings(repo: GameRepository, profile_id: str, *, now: Optional[datetime] = None) -> list[Building]:
    now = now or utcnow()
    with unit_of_work(repo, profile_id):
        _, buildings = catch_up(repo, profile_id, now)
    return buildings


# ----------------------------
# Construction
# ----------------------------

def start_build(
    repo: GameRepository,
    profile_id: str,
    *,
    building_type: Optional[str],
    slot_index: Optional[int],
    now: Optional[datetime] = None,
) -> Building:
    _require(building_type=building_type, slot_index=slot_index)

    canonical = catalog.normalize_building_type(building_type)
    if not catalog.is_known_type(canonical):
        raise UnknownBuildingType(building_type=building_type)

    now = now or utcnow()
    with unit_of_work(repo, profile_id):
        profile, buildings = catch_up(repo, profile_id, now)
        building = construction.start_build(
            repo,
            profile,
            buildings,
            building_type=canonical,
            slot_index=int(slot_index),
            now=now,
        )
    return building


def start_upgrade(repo: GameRepository, building_id: int, *, now: Optional[datetime] = None) -> Building:
    now = now or utcnow()

    found = repo.get_building(building_id)
    if found is None:
        raise NotFound("Building not found", building_id=building_id)
    profile_id = found.profile_id

    with unit_of_work(repo, profile_id):
        # Catch-up may finish this very building, so validate the fresh row
        profile, buildings = catch_up(repo, profile_id, now)
        current = next((b for b in buildings if b.id == building_id), None)
        if current is None:
            raise NotFound("Building not found", building_id=building_id)

        building = construction.start_upgrade(repo, profile, current, buildings, now=now)
    return building


# ----------------------------
# Catalog
# ----------------------------

def fetch_catalog() -> dict[str, dict]:
    return catalog.catalog_payload()
