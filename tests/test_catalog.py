"""Tests for the building catalog: lookup, formulas, client payload."""

import pytest

from oasis.game import catalog

ALL_TYPES = ["well", "date_farm", "gold_mine", "quarry", "barracks", "wall", "storage", "market"]


def test_catalog_has_exactly_the_eight_building_types():
    assert sorted(catalog.CATALOG) == sorted(ALL_TYPES)


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        catalog.CATALOG["castle"] = catalog.CATALOG["well"]  # type: ignore[index]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("well", "well"),
        ("Date Farm", "date_farm"),
        ("  GOLD-MINE ", "gold_mine"),
        ("", ""),
    ],
)
def test_normalize_building_type(raw, expected):
    assert catalog.normalize_building_type(raw) == expected


def test_level_zero_cost_is_base_cost():
    assert catalog.building_cost("well", 0) == {"water": 0, "dates": 50, "gold": 30, "stone": 80}
    assert catalog.building_cost("gold_mine", 0) == {"water": 100, "dates": 60, "gold": 0, "stone": 120}


def test_cost_scales_by_multiplier_and_floors():
    # well: cost multiplier 1.5
    assert catalog.building_cost("well", 1) == {"water": 0, "dates": 75, "gold": 45, "stone": 120}
    # 50 * 1.5^2 = 112.5 -> 112
    assert catalog.building_cost("well", 2)["dates"] == 112


@pytest.mark.parametrize("building_type", ALL_TYPES)
def test_cost_never_decreases_with_level(building_type):
    entry = catalog.CATALOG[building_type]
    for level in range(entry.max_level):
        lower = catalog.building_cost(building_type, level)
        higher = catalog.building_cost(building_type, level + 1)
        assert all(higher[r] >= lower[r] for r in catalog.RESOURCES)


def test_build_time_level_zero_is_base_time():
    assert catalog.build_time_seconds("well", 0) == 60
    assert catalog.build_time_seconds("date_farm", 0) == 90
    assert catalog.build_time_seconds("barracks", 0) == 180


@pytest.mark.parametrize("building_type", ALL_TYPES)
def test_build_time_grows_with_level(building_type):
    times = [catalog.build_time_seconds(building_type, lvl) for lvl in range(10)]
    assert times == sorted(times)
    assert times[-1] > times[0]


def test_production_is_zero_under_initial_construction():
    assert catalog.building_production("well", 0) == {"water": 0, "dates": 0, "gold": 0, "stone": 0}


def test_production_by_level():
    assert catalog.building_production("well", 1)["water"] == 10
    assert catalog.building_production("date_farm", 1)["dates"] == 8
    assert catalog.building_production("gold_mine", 1)["gold"] == 5
    assert catalog.building_production("quarry", 1)["stone"] == 7
    # 10 * 1.3 = 13
    assert catalog.building_production("well", 2)["water"] == 13


def test_non_producing_buildings_produce_nothing():
    for t in ("barracks", "wall", "storage", "market"):
        assert not catalog.CATALOG[t].produces
        assert sum(catalog.building_production(t, 5).values()) == 0


def test_production_delta_between_levels():
    assert catalog.production_delta("well", 1) == {"water": 10, "dates": 0, "gold": 0, "stone": 0}
    assert catalog.production_delta("well", 2)["water"] == 3


def test_unknown_type_falls_back():
    assert catalog.get_entry("castle") is None
    assert catalog.building_cost("castle", 3) == {"water": 0, "dates": 0, "gold": 0, "stone": 0}
    assert catalog.build_time_seconds("castle", 3) == catalog.FALLBACK_BUILD_SECONDS == 60
    assert catalog.building_production("castle", 3) == {"water": 0, "dates": 0, "gold": 0, "stone": 0}


def test_storage_is_the_only_storage_bonus():
    bonuses = {k: e.storage_bonus for k, e in catalog.CATALOG.items() if e.storage_bonus}
    assert bonuses == {"storage": 500}


def test_starter_rates_sum_level_one_production():
    assert catalog.starter_rates() == {"water": 10, "dates": 8, "gold": 0, "stone": 0}


def test_catalog_payload_precomputes_levels():
    payload = catalog.catalog_payload()
    assert sorted(payload) == sorted(ALL_TYPES)

    well = payload["well"]
    assert well["max_level"] == 10
    assert well["produces"] is True
    assert payload["barracks"]["produces"] is False
    assert well["name_ar"]
    assert len(well["levels"]) == 11
    assert well["levels"][0]["upgrade_cost"] == catalog.building_cost("well", 0)
    assert well["levels"][1]["production"]["water"] == 10
    # Nothing to pay at max level
    assert well["levels"][10]["upgrade_cost"] is None
    assert well["levels"][10]["upgrade_seconds"] is None
