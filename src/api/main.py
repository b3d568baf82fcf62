"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, lifespan events and the admin seed.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresAccountRepository, run_migrations
from src.api.dependencies import get_admin_policy, get_credential_hasher, get_email_sender
from src.api.v1 import router as v1_router
from src.config.settings import Settings, get_settings
from src.domain.accounts import AccountLifecycleManager

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "SportConnect Accounts API v1 - Signup, email verification, "
        "credentials and admin account moderation",
    },
]


def seed_admin(pool: ConnectionPool, settings: Settings) -> None:
    """Create or re-verify the admin account when an admin password is configured."""
    if not settings.admin_password:
        logger.info("ADMIN_PASSWORD not set, skipping admin seed")
        return

    service = AccountLifecycleManager(
        repository=PostgresAccountRepository(pool),
        email_sender=get_email_sender(),
        admin_policy=get_admin_policy(),
        hasher=get_credential_hasher(),
    )
    admin = service.seed_admin_account(password=settings.admin_password, name=settings.admin_name)
    logger.info("Admin account ready: %s", admin.id)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup
    - Runs migrations and seeds the admin account on startup
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )

    logger.info("Running database migrations...")
    run_migrations(pool)
    seed_admin(pool, settings)

    # Store pool in app state for dependency injection
    app.state.pool = pool

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="sportconnect-accounts",
    description="SportConnect Accounts API - Account identity and credential lifecycle",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    with pool.connection() as conn:
        conn.execute("SELECT 1")

    return {"status": "healthy"}
