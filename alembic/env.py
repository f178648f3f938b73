"""
Alembic environment for the asset-ledger database.

- Async migrations (aiosqlite by default, any async driver via DB_URL)
- Batch mode for SQLite (required for ALTER TABLE operations)
- Same SQLite PRAGMAs as the application engine
"""

import asyncio
from logging.config import fileConfig
from sqlalchemy import pool, event
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from app.core.config import config as settings
from app.core.db.base import Base
from app.core.db.engine import _ensure_sqlite_directory, configure_sqlite_connection

# Import models so that autogenerate sees every table
from app.modules.warehouses.models import Branch, Warehouse  # noqa: F401
from app.modules.assets.models import Asset  # noqa: F401
from app.modules.transactions.models import Transaction, AssetTransaction  # noqa: F401

# this is the Alembic Config object
config = context.config

db_url = settings.database_url
_ensure_sqlite_directory(db_url)
config.set_main_option("sqlalchemy.url", db_url)

is_sqlite = db_url.startswith("sqlite")

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.

    This generates SQL without connecting to the database.
    """
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=is_sqlite,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=is_sqlite,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations in 'online' mode with an async engine."""
    url = config.get_main_option("sqlalchemy.url")
    if not url:
        raise RuntimeError("No database URL configured")

    connectable = create_async_engine(url, poolclass=pool.NullPool)

    if is_sqlite:
        event.listen(connectable.sync_engine, "connect", configure_sqlite_connection)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
