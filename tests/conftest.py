import os
import random
import tempfile
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from oasis.database import Base, get_db
from oasis.game import actions
from oasis.main import app
from oasis.models.building import Building  # noqa: F401 - registers table on Base.metadata
from oasis.models.profile import Profile  # noqa: F401
from oasis.models.world_map_cell import WorldMapCell  # noqa: F401
from oasis.repository import SqlAlchemyRepository

# Fixed "now" for engine tests; naive UTC like everything the server stores
T0 = datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def engine():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)
    eng = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repo(db) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(db)


@pytest.fixture
def seed(repo):
    """Factory: create (or fetch) a profile with the starter city."""

    def _seed(profile_id: str = "u1", now: datetime = T0):
        return actions.create_or_fetch_profile(
            repo,
            profile_id=profile_id,
            username=f"{profile_id}-player",
            email=f"{profile_id}@example.com",
            now=now,
            rng=random.Random(7),
        )

    return _seed


@pytest.fixture
def client(session_factory):
    """HTTP client with the DB dependency pointed at the test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
