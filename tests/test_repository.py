"""Tests for SqlAlchemyRepository: partial updates, schema guards, failure mapping."""

import pytest
from sqlalchemy.exc import OperationalError

from oasis.game.errors import RepositoryFailure, StorageConflict
from oasis.repository import SqlAlchemyRepository

from conftest import T0


def test_update_profile_changes_only_given_fields(seed, repo):
    seed("u1")
    repo.update_profile("u1", water=42.0)
    repo.commit()

    profile = repo.get_profile("u1")
    assert profile.water == 42.0
    assert profile.dates == 500
    assert profile.water_rate == 10
    assert profile.last_resource_update == T0


def test_update_rejects_unknown_fields(seed, repo):
    seed("u1")
    with pytest.raises(ValueError):
        repo.update_profile("u1", mana=5)
    with pytest.raises(ValueError):
        repo.update_building(repo.get_buildings("u1")[0].id, profile_id="someone-else")


def test_absent_rows_are_none(repo):
    assert repo.get_profile("ghost") is None
    assert repo.get_building(999) is None
    assert repo.update_profile("ghost", water=1.0) is None
    assert repo.update_building(999, level=3) is None
    assert repo.get_buildings("ghost") == []


def test_changes_are_invisible_to_other_sessions_until_commit(seed, repo, session_factory):
    seed("u1")
    repo.update_profile("u1", gold=1.0)

    other = SqlAlchemyRepository(session_factory())
    assert other.get_profile("u1").gold == 500

    repo.commit()
    other.db.expire_all()
    assert other.get_profile("u1").gold == 1.0
    other.db.close()


def test_rollback_discards_pending_changes(seed, repo):
    seed("u1")
    repo.update_profile("u1", stone=3.0)
    repo.rollback()
    assert repo.get_profile("u1").stone == 500


def test_one_building_per_slot(seed, repo):
    seed("u1")
    with pytest.raises(StorageConflict) as exc:
        repo.create_building("u1", "quarry", 0, 0)
    assert exc.value.status_code == 409
    assert "constraint" in exc.value.detail


def test_same_slot_allowed_in_different_profiles(seed, repo):
    seed("u1")
    seed("u2")
    assert [b.slot_index for b in repo.get_buildings("u2")] == [0, 1]


def test_schema_allows_only_one_upgrading_building_per_profile(seed, repo):
    seed("u1")
    well, farm = repo.get_buildings("u1")
    repo.update_building(well.id, is_upgrading=True)
    repo.commit()

    with pytest.raises(StorageConflict):
        repo.update_building(farm.id, is_upgrading=True)

    # The failed flush rolled the session back; the committed state survives
    assert repo.get_building(well.id).is_upgrading is True
    assert repo.get_building(farm.id).is_upgrading is False


def test_other_profiles_may_upgrade_at_the_same_time(seed, repo):
    seed("u1")
    seed("u2")
    repo.update_building(repo.get_buildings("u1")[0].id, is_upgrading=True)
    repo.update_building(repo.get_buildings("u2")[0].id, is_upgrading=True)
    repo.commit()

    assert repo.get_buildings("u1")[0].is_upgrading
    assert repo.get_buildings("u2")[0].is_upgrading


def test_driver_errors_become_repository_failure(repo, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    monkeypatch.setattr(repo.db, "get", broken)

    with pytest.raises(RepositoryFailure) as exc:
        repo.get_profile("u1")
    assert exc.value.status_code == 500
    assert not isinstance(exc.value, StorageConflict)


def test_world_map_window_query(seed, repo):
    seed("u1")
    for x, y in [(0, 0), (1, 0), (0, 1), (5, 5), (30, 2)]:
        repo.create_world_map_cell(x, y, terrain_type="oasis" if x == 5 else "desert")
    repo.create_world_map_cell(2, 2, profile_id="u1", is_occupied=True)
    repo.commit()

    cells = repo.get_world_map_cells(0, 5, 0, 5)
    assert [(c.x, c.y) for c in cells] == [(0, 0), (1, 0), (0, 1), (2, 2), (5, 5)]
    occupied = next(c for c in cells if c.is_occupied)
    assert occupied.profile_id == "u1"


def test_world_map_cells_are_unique_per_coordinate(repo):
    repo.create_world_map_cell(3, 4)
    with pytest.raises(StorageConflict):
        repo.create_world_map_cell(3, 4)
