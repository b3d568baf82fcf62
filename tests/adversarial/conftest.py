"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition and timing tests,
backed by a real PostgreSQL database. Tests are skipped when it cannot be
reached.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.postgres import PostgresAccountRepository, run_migrations
from src.adapters.smtp.console import ConsoleEmailSender
from src.config.settings import get_settings
from src.domain.accounts import AccountLifecycleManager
from src.domain.admin import AdminPolicy
from src.domain.credentials import CredentialHasher


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=20,
        open=True,
    )
    try:
        pool.wait(timeout=5)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresAccountRepository:
    """Create repository instance for each test."""
    return PostgresAccountRepository(pool)


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Remove all accounts (content cascades) before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM accounts")
        conn.commit()
    yield


@pytest.fixture
def service(repository: PostgresAccountRepository) -> AccountLifecycleManager:
    """Account service over PostgreSQL with the production scrypt hasher."""
    return AccountLifecycleManager(
        repository=repository,
        email_sender=ConsoleEmailSender(),
        admin_policy=AdminPolicy(admin_email=get_settings().admin_email),
        hasher=CredentialHasher(),
    )
