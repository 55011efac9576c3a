# oasis/repository.py
"""
Record store contract for the game core.

The core only talks to ``GameRepository``. Mutating methods flush but never
commit: the caller owns the transaction (one unit of work per action) and
finishes it with ``commit()`` or ``rollback()``.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, Protocol, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from oasis.game.errors import RepositoryFailure, StorageConflict
from oasis.models.building import Building
from oasis.models.profile import Profile
from oasis.models.world_map_cell import WorldMapCell

logger = logging.getLogger(__name__)

PROFILE_FIELDS = frozenset({
    "username", "email",
    "water", "dates", "gold", "stone",
    "water_rate", "dates_rate", "gold_rate", "stone_rate",
    "storage_capacity", "map_x", "map_y", "last_resource_update",
})

BUILDING_FIELDS = frozenset({
    "building_type", "level", "slot_index",
    "is_upgrading", "upgrade_start_time", "upgrade_end_time",
})


class GameRepository(Protocol):
    def get_profile(self, profile_id: str) -> Optional[Profile]: ...

    def create_profile(self, profile_id: str, username: str, email: str, **fields: Any) -> Profile: ...

    def update_profile(self, profile_id: str, **fields: Any) -> Optional[Profile]: ...

    def get_buildings(self, profile_id: str) -> list[Building]: ...

    def get_building(self, building_id: int) -> Optional[Building]: ...

    def create_building(self, profile_id: str, building_type: str, level: int, slot_index: int) -> Building: ...

    def update_building(self, building_id: int, **fields: Any) -> Optional[Building]: ...

    def expire(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


F = TypeVar("F", bound=Callable[..., Any])


def _guarded(fn: F) -> F:
    """Translate driver errors into the core's error taxonomy.

    The session is rolled back first; after a failed flush it is unusable.
    """

    @functools.wraps(fn)
    def wrapper(self: "SqlAlchemyRepository", *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(self, *args, **kwargs)
        except IntegrityError as exc:
            self.db.rollback()
            logger.info("%s rejected by constraint: %s", fn.__name__, exc.orig)
            raise StorageConflict(constraint=str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("%s failed", fn.__name__)
            raise RepositoryFailure() from exc

    return wrapper  # type: ignore[return-value]


def _apply_fields(row: Any, fields: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown fields for {type(row).__name__}: {sorted(unknown)}")
    for name, value in fields.items():
        setattr(row, name, value)


class SqlAlchemyRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    # ----------------------------
    # Profiles
    # ----------------------------

    @_guarded
    def get_profile(self, profile_id: str) -> Optional[Profile]:
        return self.db.get(Profile, profile_id)

    @_guarded
    def create_profile(self, profile_id: str, username: str, email: str, **fields: Any) -> Profile:
        profile = Profile(id=profile_id, username=username, email=email)
        _apply_fields(profile, fields, PROFILE_FIELDS)
        self.db.add(profile)
        self.db.flush()
        return profile

    @_guarded
    def update_profile(self, profile_id: str, **fields: Any) -> Optional[Profile]:
        profile = self.db.get(Profile, profile_id)
        if profile is None:
            return None
        _apply_fields(profile, fields, PROFILE_FIELDS)
        self.db.flush()
        return profile

    # ----------------------------
    # Buildings
    # ----------------------------

    @_guarded
    def get_buildings(self, profile_id: str) -> list[Building]:
        stmt = (
            select(Building)
            .where(Building.profile_id == profile_id)
            .order_by(Building.slot_index.asc())
        )
        return list(self.db.scalars(stmt).all())

    @_guarded
    def get_building(self, building_id: int) -> Optional[Building]:
        return self.db.get(Building, building_id)

    @_guarded
    def create_building(self, profile_id: str, building_type: str, level: int, slot_index: int) -> Building:
        building = Building(
            profile_id=profile_id,
            building_type=building_type,
            level=level,
            slot_index=slot_index,
            is_upgrading=False,
        )
        self.db.add(building)
        self.db.flush()
        return building

    @_guarded
    def update_building(self, building_id: int, **fields: Any) -> Optional[Building]:
        building = self.db.get(Building, building_id)
        if building is None:
            return None
        _apply_fields(building, fields, BUILDING_FIELDS)
        self.db.flush()
        return building

    # ----------------------------
    # World map (stored and queried only)
    # ----------------------------

    @_guarded
    def get_world_map_cells(self, min_x: int, max_x: int, min_y: int, max_y: int) -> list[WorldMapCell]:
        stmt = (
            select(WorldMapCell)
            .where(
                WorldMapCell.x >= min_x,
                WorldMapCell.x <= max_x,
                WorldMapCell.y >= min_y,
                WorldMapCell.y <= max_y,
            )
            .order_by(WorldMapCell.y.asc(), WorldMapCell.x.asc())
        )
        return list(self.db.scalars(stmt).all())

    @_guarded
    def create_world_map_cell(
        self,
        x: int,
        y: int,
        *,
        profile_id: Optional[str] = None,
        terrain_type: str = "desert",
        is_occupied: bool = False,
    ) -> WorldMapCell:
        cell = WorldMapCell(
            x=x,
            y=y,
            profile_id=profile_id,
            terrain_type=terrain_type,
            is_occupied=is_occupied,
        )
        self.db.add(cell)
        self.db.flush()
        return cell

    # ----------------------------
    # Transaction
    # ----------------------------

    @_guarded
    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def expire(self) -> None:
        """Drop cached row state; the next read goes back to the database."""
        self.db.expire_all()
