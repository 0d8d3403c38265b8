"""
Database Session Management

This module handles the database connection lifecycle and session management.

Architecture Flow:
------------------
Application Start → Create Engine → Connection Pool Ready
↓
API Request → Get Session → Execute Queries → Commit/Rollback → Close Session
↓
Application Shutdown → Dispose Engine → Close All Connections

Production runs on PostgreSQL through asyncpg
(``postgresql+asyncpg://...``). Tests and local demos can point
DATABASE_URL at ``sqlite+aiosqlite://``; pool options that SQLite does not
understand are skipped in that case.

Learning Resources:
- SQLAlchemy Engine: https://docs.sqlalchemy.org/en/20/core/engines.html
- Async Sessions: https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from parkadmin.core.config import settings
from parkadmin.core.logging import get_logger

logger = get_logger(__name__)


# ================================
# Database Engine Configuration
# ================================

def get_engine_config() -> dict[str, Any]:
    """
    Configure the database engine based on environment.

    Pool Types:
    -----------
    1. AsyncAdaptedQueuePool (development/production):
       - Keeps DB_POOL_SIZE connections open
       - Can open DB_MAX_OVERFLOW extra connections under load
    2. NullPool (staging/test, and always for SQLite):
       - New connection per checkout, closed right after

    Our Configuration:
    ------------------
    - pool_pre_ping=True: Test connection before using (detect dead connections)
    - pool_recycle=3600: Recycle connections after 1 hour
    - pool_timeout=30: Wait up to 30s for a free connection
    """
    config: dict[str, Any] = {"echo": settings.DB_ECHO}

    if settings.is_sqlite:
        logger.info("configuring_database_engine", driver="sqlite", pool_type="NullPool")
        config["poolclass"] = NullPool
        return config

    config.update({
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": {
            "server_settings": {
                "application_name": settings.APP_NAME,
            }
        },
    })

    if settings.is_development or settings.is_production:
        logger.info(
            "configuring_database_engine",
            environment=settings.APP_ENV,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
        config.update({
            "poolclass": AsyncAdaptedQueuePool,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": 30,
        })
        if settings.is_production:
            config["pool_recycle"] = 7200
    else:
        logger.info(
            "configuring_database_engine",
            environment=settings.APP_ENV,
            pool_type="NullPool",
        )
        config["poolclass"] = NullPool

    return config


def create_engine() -> AsyncEngine:
    """
    Create the async database engine.

    Returns:
        AsyncEngine: The database engine instance
    """
    engine_config = get_engine_config()

    engine = create_async_engine(
        settings.DATABASE_URL,
        **engine_config
    )

    logger.info(
        "database_engine_created",
        dialect=engine.dialect.name,
        pool_size=engine_config.get("pool_size", "NullPool"),
    )

    return engine


# ================================
# Global Engine Instance
# ================================
# One engine per process; it owns the connection pool.
engine: AsyncEngine = create_engine()


# ================================
# Session Factory
# ================================
# expire_on_commit=False keeps loaded attributes usable after commit, which
# the routes rely on when they serialize a record they just saved.
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


# ================================
# Session Dependency
# ================================

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session for a single request.

    - Code before yield: Setup (create session)
    - yield: Return session to the route
    - Code after yield: Cleanup (close session)

    If the route raises, the session is rolled back before the exception
    propagates to FastAPI's error handlers.

    Yields:
        AsyncSession: A database session for this request
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(
                "database_session_error",
                error=str(e),
                error_type=type(e).__name__,
            )
            await session.rollback()
            raise


# ================================
# Lifecycle Management
# ================================

async def init_db() -> None:
    """
    Initialize the database.

    Verifies connectivity and, outside production and staging, creates any
    missing tables. Production schemas are managed by Alembic migrations.

    Called from: parkadmin.main.lifespan() startup event
    """
    logger.info("initializing_database")

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

        logger.info("database_connection_successful")

        if settings.APP_ENV in ("development", "test"):
            # Import models so they are registered on the metadata
            from parkadmin import models  # noqa: F401
            from parkadmin.db.base import Base

            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

            logger.info("database_tables_created")

    except Exception as e:
        logger.error(
            "database_initialization_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise


async def close_db() -> None:
    """
    Close the database connection pool.

    Called from: parkadmin.main.lifespan() shutdown event
    """
    logger.info("closing_database_connections")

    await engine.dispose()

    logger.info("database_connections_closed")


async def check_db_health() -> bool:
    """
    Check if the database is reachable.

    Used by the /health endpoint.

    Returns:
        True if a trivial query succeeds, False otherwise
    """
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        return False
