"""
Alembic Migration Environment

What happens here:
------------------
1. Load application settings (DATABASE_URL)
2. Import every model so Base.metadata knows all tables
3. Run migrations offline (emit SQL) or online (async engine)

The application talks to the database through async drivers (asyncpg in
production, aiosqlite for local SQLite files), so online migrations open
an async engine and hand a sync connection to Alembic via run_sync().
"""

import asyncio
import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

# Add the repository root to the Python path so we can import parkadmin
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from parkadmin.core.config import settings  # noqa: E402
from parkadmin.db.base import Base  # noqa: E402

# Registers every table on Base.metadata
from parkadmin.models import (  # noqa: E402,F401
    Category,
    Highlight,
    PressRelease,
    SequenceCounter,
    Subscriber,
    User,
)

config = context.config

# The URL in alembic.ini is a placeholder; settings win.
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode: print the SQL instead of executing it.

    Useful to review a migration before a DBA applies it by hand.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        # SQLite cannot ALTER most things in place
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Create an async engine (no pooling) and run migrations on it."""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
