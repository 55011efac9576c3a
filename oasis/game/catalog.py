# oasis/game/catalog.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

RESOURCES: tuple[str, ...] = ("water", "dates", "gold", "stone")

# Build time used when a type is not in the catalog
FALLBACK_BUILD_SECONDS = 60


def _per_resource(**values: float) -> Mapping[str, float]:
    return MappingProxyType({r: values.get(r, 0) for r in RESOURCES})


def zero_resources() -> dict[str, int]:
    return {r: 0 for r in RESOURCES}


@dataclass(frozen=True)
class CatalogEntry:
    key: str
    name: str
    name_ar: str
    icon: str
    max_level: int
    base_cost: Mapping[str, float]
    base_time_s: int
    base_production: Mapping[str, float] = field(default_factory=_per_resource)
    cost_multiplier: float = 1.5
    time_multiplier: float = 1.4
    production_multiplier: float = 1.0
    # Added to the shared storage cap each time a level completes
    storage_bonus: int = 0

    @property
    def produces(self) -> bool:
        return any(self.base_production[r] for r in RESOURCES)


# ----------------------------
# Catalog
# ----------------------------

_ENTRIES = (
    # Resource buildings
    CatalogEntry(
        "well", "Well", "بئر ماء", "water-outline", 10,
        base_cost=_per_resource(water=0, dates=50, gold=30, stone=80),
        base_time_s=60,
        base_production=_per_resource(water=10),
        cost_multiplier=1.5, time_multiplier=1.4, production_multiplier=1.3,
    ),
    CatalogEntry(
        "date_farm", "Date Farm", "مزرعة تمور", "leaf-outline", 10,
        base_cost=_per_resource(water=80, dates=0, gold=20, stone=60),
        base_time_s=90,
        base_production=_per_resource(dates=8),
        cost_multiplier=1.5, time_multiplier=1.4, production_multiplier=1.3,
    ),
    CatalogEntry(
        "gold_mine", "Gold Mine", "منجم ذهب", "diamond-outline", 10,
        base_cost=_per_resource(water=100, dates=60, gold=0, stone=120),
        base_time_s=120,
        base_production=_per_resource(gold=5),
        cost_multiplier=1.6, time_multiplier=1.5, production_multiplier=1.25,
    ),
    CatalogEntry(
        "quarry", "Quarry", "محجر حجر", "cube-outline", 10,
        base_cost=_per_resource(water=60, dates=40, gold=50, stone=0),
        base_time_s=80,
        base_production=_per_resource(stone=7),
        cost_multiplier=1.5, time_multiplier=1.4, production_multiplier=1.3,
    ),

    # City buildings (no production)
    CatalogEntry(
        "barracks", "Barracks", "ثكنة عسكرية", "shield-outline", 10,
        base_cost=_per_resource(water=120, dates=80, gold=100, stone=150),
        base_time_s=180,
        cost_multiplier=1.7, time_multiplier=1.5,
    ),
    CatalogEntry(
        "wall", "Wall", "سور المدينة", "grid-outline", 10,
        base_cost=_per_resource(water=50, dates=30, gold=60, stone=200),
        base_time_s=150,
        cost_multiplier=1.6, time_multiplier=1.5,
    ),
    CatalogEntry(
        "storage", "Storage", "مخزن", "archive-outline", 10,
        base_cost=_per_resource(water=80, dates=60, gold=40, stone=100),
        base_time_s=100,
        cost_multiplier=1.5, time_multiplier=1.3,
        storage_bonus=500,
    ),
    CatalogEntry(
        "market", "Market", "سوق", "storefront-outline", 10,
        base_cost=_per_resource(water=100, dates=80, gold=80, stone=80),
        base_time_s=140,
        cost_multiplier=1.5, time_multiplier=1.4,
    ),
)

CATALOG: Mapping[str, CatalogEntry] = MappingProxyType({e.key: e for e in _ENTRIES})

# Starter buildings seeded on a new profile: (building_type, slot_index)
STARTER_BUILDINGS: tuple[tuple[str, int], ...] = (
    ("well", 0),
    ("date_farm", 1),
)


# ----------------------------
# Names / lookup
# ----------------------------

def normalize_building_type(t: str) -> str:
    return (t or "").strip().lower().replace("-", "_").replace(" ", "_")


def get_entry(building_type: str) -> Optional[CatalogEntry]:
    return CATALOG.get(normalize_building_type(building_type))


def is_known_type(building_type: str) -> bool:
    return get_entry(building_type) is not None


# ----------------------------
# Formulas
# ----------------------------

def building_cost(building_type: str, level: int) -> dict[str, int]:
    """Cost of advancing a building from ``level`` to ``level + 1``."""
    entry = get_entry(building_type)
    if entry is None:
        return zero_resources()

    mult = entry.cost_multiplier ** level
    return {r: math.floor(entry.base_cost[r] * mult) for r in RESOURCES}


def build_time_seconds(building_type: str, level: int) -> int:
    """Seconds needed to advance from ``level``; level 0 is initial construction."""
    entry = get_entry(building_type)
    if entry is None:
        return FALLBACK_BUILD_SECONDS

    return math.floor(entry.base_time_s * entry.time_multiplier ** level)


def building_production(building_type: str, level: int) -> dict[str, int]:
    """Hourly production of a building sitting at ``level``."""
    entry = get_entry(building_type)
    if entry is None or level <= 0:
        return zero_resources()

    mult = entry.production_multiplier ** (level - 1)
    return {r: math.floor(entry.base_production[r] * mult) for r in RESOURCES}


def production_delta(building_type: str, new_level: int) -> dict[str, int]:
    """Rate change caused by reaching ``new_level`` from ``new_level - 1``."""
    after = building_production(building_type, new_level)
    before = building_production(building_type, new_level - 1)
    return {r: after[r] - before[r] for r in RESOURCES}


def starter_rates() -> dict[str, int]:
    rates = zero_resources()
    for building_type, _slot in STARTER_BUILDINGS:
        prod = building_production(building_type, 1)
        for r in RESOURCES:
            rates[r] += prod[r]
    return rates


# ----------------------------
# Client payload
# ----------------------------

def entry_payload(entry: CatalogEntry) -> dict:
    levels = range(entry.max_level + 1)
    return {
        "key": entry.key,
        "name": entry.name,
        "name_ar": entry.name_ar,
        "icon": entry.icon,
        "max_level": entry.max_level,
        "produces": entry.produces,
        "base_production": dict(entry.base_production),
        "base_cost": dict(entry.base_cost),
        "base_time": entry.base_time_s,
        "cost_multiplier": entry.cost_multiplier,
        "time_multiplier": entry.time_multiplier,
        "production_multiplier": entry.production_multiplier,
        "storage_bonus": entry.storage_bonus,
        # Precomputed so the client never re-implements the curves.
        # cost/time are indexed by the level being left, production by the level held.
        "levels": [
            {
                "level": lvl,
                "upgrade_cost": building_cost(entry.key, lvl) if lvl < entry.max_level else None,
                "upgrade_seconds": build_time_seconds(entry.key, lvl) if lvl < entry.max_level else None,
                "production": building_production(entry.key, lvl),
            }
            for lvl in levels
        ],
    }


def catalog_payload() -> dict[str, dict]:
    return {key: entry_payload(entry) for key, entry in CATALOG.items()}
