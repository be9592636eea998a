"""
Test configuration and fixtures
"""

import asyncio
from collections.abc import Callable
import itertools

import pytest
import pytest_asyncio
from sqlalchemy import create_engine, event
from sqlalchemy.ext.asyncio import create_async_engine

from sozluk.domain.models import Base, Entry, EntryComment, User
from sozluk.infrastructure.database import (
    DatabaseSettings,
    build_engine_kwargs,
    create_async_context_factory,
    create_context_factory,
)

# In-memory SQLite databases shared through StaticPool
SYNC_DATABASE_URL = "sqlite://"
ASYNC_DATABASE_URL = "sqlite+aiosqlite://"

_counter = itertools.count(1)


@pytest.fixture
def engine():
    """Sync engine with all tables created"""
    settings = DatabaseSettings(url=SYNC_DATABASE_URL)
    engine = create_engine(settings.url, **build_engine_kwargs(settings))
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def statements(engine) -> list[str]:
    """SQL statements executed on the sync engine"""
    executed: list[str] = []

    @event.listens_for(engine, "before_cursor_execute")
    def _record(conn, cursor, statement, parameters, context, executemany):
        executed.append(statement)

    return executed


@pytest.fixture
def session_factory(engine):
    return create_context_factory(engine)


@pytest.fixture
def session(session_factory):
    """Sync storage context for a single test"""
    with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def async_engine():
    """Async engine with all tables created"""
    settings = DatabaseSettings(url=ASYNC_DATABASE_URL)
    engine = create_async_engine(settings.url, **build_engine_kwargs(settings))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def async_session_factory(async_engine):
    return create_async_context_factory(async_engine)


@pytest_asyncio.fixture
async def async_session(async_session_factory):
    """Async storage context for a single test"""
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def make_user() -> Callable[..., User]:
    """Build transient users with unique email addresses"""

    def _make(**overrides) -> User:
        n = next(_counter)
        data = {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email_address": f"user{n}@sozluk.test",
            "user_name": f"user{n}",
            "password": "not-a-real-hash",
            "email_confirmed": True,
        }
        data.update(overrides)
        return User(**data)

    return _make


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    """Build transient entries owned by a user"""

    def _make(user: User, **overrides) -> Entry:
        n = next(_counter)
        data = {
            "subject": f"subject {n}",
            "content": f"content {n}",
            "created_by_id": user.id,
        }
        data.update(overrides)
        return Entry(**data)

    return _make


@pytest.fixture
def make_comment() -> Callable[..., EntryComment]:
    """Build transient comments on an entry"""

    def _make(entry: Entry, user: User, **overrides) -> EntryComment:
        data = {
            "content": "comment",
            "entry_id": entry.id,
            "created_by_id": user.id,
        }
        data.update(overrides)
        return EntryComment(**data)

    return _make


@pytest.fixture
def stall_after_flush(monkeypatch) -> Callable[..., asyncio.Event]:
    """Make a session's save_changes flush and then hang until cancelled.

    Returns an event that is set once the flush has reached the database.
    """

    def _stall(session, flushed: asyncio.Event | None = None) -> asyncio.Event:
        flushed = flushed or asyncio.Event()

        async def save_changes() -> int:
            await session.flush()
            flushed.set()
            await asyncio.Event().wait()
            return 0

        monkeypatch.setattr(session, "save_changes", save_changes)
        return flushed

    return _stall
