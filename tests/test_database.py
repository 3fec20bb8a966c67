import asyncio

import pytest
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import configure_mappers

from app.core.database import Database, is_connection_error
from app.models.post import Post
from app.models.user import User
from app.models.vocabulary import FirstName, Line
from app.utils.exceptions import DatabaseUnavailableError
from tests.conftest import make_settings


async def test_connect_with_retry_gives_up_after_bounded_attempts(tmp_path, monkeypatch):
    db = Database(make_settings(tmp_path, DB_CONNECT_MAX_ATTEMPTS=3))
    attempts = []

    async def unreachable():
        attempts.append(1)
        raise OSError("connection refused")

    monkeypatch.setattr(db, "ping", unreachable)

    with pytest.raises(DatabaseUnavailableError):
        await db.connect_with_retry()
    assert len(attempts) == 3
    await db.dispose()


async def test_connect_with_retry_recovers_from_transient_failure(tmp_path, monkeypatch):
    db = Database(make_settings(tmp_path, DB_CONNECT_MAX_ATTEMPTS=3))
    attempts = []

    async def flaky():
        attempts.append(1)
        if len(attempts) < 2:
            raise OSError("connection refused")

    monkeypatch.setattr(db, "ping", flaky)

    await db.ensure_connected()
    await db.ensure_connected()
    assert len(attempts) == 2
    await db.dispose()


async def test_warm_up_gives_up_at_deadline(tmp_path, monkeypatch):
    db = Database(make_settings(tmp_path))

    async def hanging():
        await asyncio.sleep(5)

    monkeypatch.setattr(db, "ping", hanging)

    assert await db.warm_up(0.05) is False
    assert await db.warm_up(0) is False
    await db.dispose()


async def test_warm_up_succeeds_against_live_database(database):
    assert await database.warm_up(1.0) is True


async def test_init_schema_seeds_once(database):
    await database.init_schema()

    async with database.session() as session:
        first_names = (await session.execute(select(func.count()).select_from(FirstName))).scalar_one()
        lines = (await session.execute(select(func.count()).select_from(Line))).scalar_one()

    assert first_names == 40
    assert lines == 20


def _wrapped(error):
    try:
        raise error
    except DBAPIError:
        try:
            raise RuntimeError("저장소 오류")
        except RuntimeError as outer:
            return outer


def test_connection_errors_are_recognised_through_wrapping():
    lost = OperationalError("select 1", {}, ConnectionResetError("reset"))
    invalidated = DBAPIError("select 1", {}, Exception("gone"), connection_invalidated=True)
    duplicate = IntegrityError("insert", {}, Exception("duplicate key"))

    assert is_connection_error(lost)
    assert is_connection_error(_wrapped(lost))
    assert is_connection_error(invalidated)
    assert is_connection_error(OSError("refused"))
    assert not is_connection_error(_wrapped(duplicate))
    assert not is_connection_error(ValueError("bad"))
    assert not is_connection_error(None)


async def test_reconnect_pings_again_after_connection_was_confirmed(database, monkeypatch):
    await database.ensure_connected()
    pings = []

    async def counting():
        pings.append(1)

    monkeypatch.setattr(database, "ping", counting)

    await database.ensure_connected()
    assert pings == []

    await database.reconnect()
    assert pings == [1]


def test_models_map_without_relationships():
    configure_mappers()

    assert not inspect(User).relationships
    assert not inspect(Post).relationships
