"""Concurrent actions on one profile, each thread with its own DB session."""

import threading
from datetime import timedelta

import pytest

from oasis.game import actions, catalog
from oasis.game.errors import AlreadyUpgrading, GameError, QueueBusy
from oasis.repository import SqlAlchemyRepository

from conftest import T0


def _run_concurrently(session_factory, calls):
    """Run each ``call(repo)`` in its own thread, released together by a barrier."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def worker(i, call):
        session = session_factory()
        try:
            barrier.wait()
            results[i] = call(SqlAlchemyRepository(session))
        except GameError as exc:
            results[i] = exc
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(i, c)) for i, c in enumerate(calls)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    return results


def test_two_builds_at_once_only_one_wins(seed, session_factory):
    seed("u1")

    results = _run_concurrently(
        session_factory,
        [
            lambda repo: actions.start_build(repo, "u1", building_type="quarry", slot_index=2, now=T0),
            lambda repo: actions.start_build(repo, "u1", building_type="gold_mine", slot_index=3, now=T0),
        ],
    )

    failures = [r for r in results if isinstance(r, QueueBusy)]
    successes = [r for r in results if not isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 1

    check = SqlAlchemyRepository(session_factory())
    buildings = check.get_buildings("u1")
    assert len(buildings) == 3
    assert sum(1 for b in buildings if b.is_upgrading) == 1
    check.db.close()


def test_build_and_upgrade_at_once_only_one_wins(seed, repo, session_factory):
    seed("u1")
    well_id = repo.get_buildings("u1")[0].id

    results = _run_concurrently(
        session_factory,
        [
            lambda r: actions.start_build(r, "u1", building_type="quarry", slot_index=2, now=T0),
            lambda r: actions.start_upgrade(r, well_id, now=T0),
        ],
    )

    assert sum(1 for r in results if isinstance(r, QueueBusy)) == 1
    assert sum(1 for r in results if not isinstance(r, Exception)) == 1


def test_concurrent_reads_apply_a_completion_once(seed, session_factory):
    seed("u1")
    repo = SqlAlchemyRepository(session_factory())
    actions.start_build(repo, "u1", building_type="quarry", slot_index=2, now=T0)
    repo.db.close()

    later = T0 + timedelta(hours=1)
    results = _run_concurrently(
        session_factory,
        [lambda r: actions.fetch_resources(r, "u1", now=later) for _ in range(6)],
    )

    assert all(not isinstance(r, Exception) for r in results)
    assert {r.stone_rate for r in results} == {7}

    check = SqlAlchemyRepository(session_factory())
    assert check.get_profile("u1").stone_rate == 7
    check.db.close()


def test_upgrading_one_building_from_many_threads_charges_once(seed, repo, session_factory):
    seed("u1")
    well_id = repo.get_buildings("u1")[0].id

    results = _run_concurrently(
        session_factory,
        [lambda r: actions.start_upgrade(r, well_id, now=T0) for _ in range(4)],
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(rejected) == 3
    assert all(isinstance(r, (AlreadyUpgrading, QueueBusy)) for r in rejected)

    cost = catalog.building_cost("well", 1)
    check = SqlAlchemyRepository(session_factory())
    profile = check.get_profile("u1")
    assert profile.dates == 500 - cost["dates"]
    assert profile.gold == 500 - cost["gold"]
    assert profile.stone == 500 - cost["stone"]
    assert check.get_building(well_id).is_upgrading is True
    check.db.close()


def test_row_loaded_before_the_lock_is_reread(seed, repo, session_factory):
    seed("u1")
    well_id = repo.get_buildings("u1")[0].id

    # This session caches the well as idle, then another session upgrades it
    stale = SqlAlchemyRepository(session_factory())
    assert stale.get_building(well_id).is_upgrading is False
    other = SqlAlchemyRepository(session_factory())
    actions.start_upgrade(other, well_id, now=T0)
    other.db.close()

    with pytest.raises(AlreadyUpgrading):
        actions.start_upgrade(stale, well_id, now=T0)
    assert stale.get_profile("u1").stone == 500 - catalog.building_cost("well", 1)["stone"]
    stale.db.close()
