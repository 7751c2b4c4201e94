"""Pytest configuration and fixtures for authz.

Unit tests run against the in-memory fakes in tests.fakes. Repository tests
marked requires_db use a real Postgres session from
authz.infrastructure.persistence.database.
"""

from collections.abc import AsyncIterator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from authz.infrastructure.cache import SessionPermissionCache
from authz.infrastructure.persistence import database
from tests.fakes import InMemoryStore, Services, build_services


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def cache() -> SessionPermissionCache:
    return SessionPermissionCache()


@pytest.fixture
def services(store: InMemoryStore) -> Services:
    """Ungated services over the in-memory store, without a cache."""
    return build_services(store)


@pytest.fixture
def cached_services(store: InMemoryStore, cache: SessionPermissionCache) -> Services:
    """Ungated services sharing one session cache."""
    return build_services(store, cache)


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Database session for repository tests. Everything is rolled back afterwards.

    Requires DATABASE_URL and a migrated schema (alembic upgrade head). Skips
    when Postgres is not configured. Use @pytest.mark.requires_db on tests
    that need this fixture; run without DB via: pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.engine is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL, then run: alembic upgrade head"
        )
    async with database.engine.connect() as conn:
        await conn.begin()
        session = AsyncSession(
            bind=conn,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )
        try:
            yield session
        finally:
            await session.close()
            await conn.rollback()
    # The pool is bound to this test's event loop.
    await database.dispose_engine()
