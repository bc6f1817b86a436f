"""Shared pytest fixtures for lunch_api tests."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.db import Database, DatabaseConfig, create_schema
from lunch_api.settings import Settings

from tests.utils import FrozenClock

# Monday, inside the default 09:00-11:00 voting window.
DEFAULT_NOW = datetime(2026, 10, 19, 10, 0, tzinfo=UTC)


def pytest_collection_modifyitems(config, items) -> None:
    for item in items:
        if "/tests/unit/" in str(Path(str(item.fspath))):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo ``setup_logging`` calls made by the app and CLI under test."""

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        yield
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)


@pytest.fixture
def settings() -> Settings:
    """In-memory database settings with the default voting window in UTC."""

    return Settings(
        _env_file=None,
        database_dsn="sqlite+aiosqlite:///:memory:",
        timezone="UTC",
        logging_level="DEBUG",
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(DEFAULT_NOW)


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    """A fresh in-memory database with every table created."""

    database = Database()
    database.init(DatabaseConfig.from_settings(settings))
    await create_schema(database.engine)
    try:
        yield database
    finally:
        await database.dispose()


@pytest_asyncio.fixture
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    async with database.sessionmaker() as session:
        try:
            yield session
        finally:
            await session.rollback()
