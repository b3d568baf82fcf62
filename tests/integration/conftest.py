"""
Shared fixtures for integration tests.

Tests run against a real PostgreSQL database (DATABASE_URL) and are skipped
when it cannot be reached.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.postgres import PostgresAccountRepository, run_migrations
from src.config.settings import get_settings


def open_pool(max_size: int = 10) -> ConnectionPool:
    """Open a migrated pool, or skip the requesting tests if PostgreSQL is down."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=max_size,
        open=True,
    )
    try:
        pool.wait(timeout=5)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")
    run_migrations(pool)
    return pool


def clean_tables(pool: ConnectionPool) -> None:
    with pool.connection() as conn:
        conn.execute("DELETE FROM accounts")
        conn.commit()


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests."""
    pool = open_pool()
    yield pool
    pool.close()


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresAccountRepository:
    """Create repository instance for each test."""
    return PostgresAccountRepository(pool)


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Remove all accounts (content cascades) before each test."""
    clean_tables(pool)
    yield
