"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite database file under tmp_path
    - get_db dependency overridden to use the test session factory
    - db_manager patched so the readiness probe sees the test engine
    - Seed fixtures go through the services, so derived columns are consistent

Design Decisions:
    - File-backed SQLite over :memory:: concurrent requests each get their own
      connection, which the roster race test needs
    - pysqlite SAVEPOINT workaround: driver-level transaction handling disabled and
      BEGIN emitted by SQLAlchemy, otherwise begin_nested() cannot work on SQLite
"""

from datetime import date
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import devstep.infrastructure.database as db_module
from devstep.db.base import Base
from devstep.infrastructure.database import DatabaseSessionManager, get_db
from devstep.main import app
from devstep.services.challenges import ChallengeService
from devstep.services.roster import RosterService
from devstep.services.step_ledger import utc_today
from devstep.services.users import UserService
import devstep.models  # noqa: F401
from tests.services.factories import make_draft


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'devstep.db'}", echo=False,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Seed fixtures ───────────────────────────────────────────────

@pytest.fixture
def create_challenge(test_session_factory):
    async def _create(**overrides):
        async with test_session_factory() as db:
            return await ChallengeService(db).create(make_draft(**overrides))
    return _create


@pytest.fixture
def create_user(test_session_factory):
    async def _create(username: str | None = None):
        username = username or f"user-{uuid4().hex[:8]}"
        async with test_session_factory() as db:
            return await UserService(db).register(username, f"{username}@devoteam.com")
    return _create


@pytest.fixture
def create_team(test_session_factory):
    async def _create(challenge_id, name: str | None = None):
        async with test_session_factory() as db:
            return await RosterService(db).create_team(
                name or f"Team {uuid4().hex[:6]}", None, challenge_id,
            )
    return _create


@pytest.fixture
def add_member(test_session_factory):
    async def _add(team_id, user_id):
        async with test_session_factory() as db:
            return await RosterService(db).add_member(team_id, user_id)
    return _add


@pytest.fixture
async def challenge(create_challenge):
    return await create_challenge()


@pytest.fixture
async def team(challenge, create_team):
    return await create_team(challenge.id, "Team Alpha")


@pytest.fixture
async def member(team, create_user, add_member):
    """A user already on `team`."""
    user = await create_user("walker")
    await add_member(team.id, user.id)
    return user


@pytest.fixture
def today() -> date:
    return utc_today()
