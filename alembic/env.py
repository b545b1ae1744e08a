"""Migrations for the enrollment tables.

Runs over the same asyncpg driver and DATABASE_URL as the service, so a
deploy needs no second (sync) Postgres driver.  Offline mode renders SQL
from the URL alone.
"""

from __future__ import annotations

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context
from coursetrack.core.config import SETTINGS
from coursetrack.db import tables  # noqa: F401  (registers every table on Base)
from coursetrack.db.engine import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    """DATABASE_URL wins over the placeholder in alembic.ini."""
    return SETTINGS.database_url or config.get_main_option("sqlalchemy.url") or ""


def _configure(**options) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        **options,
    )


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


def main() -> None:
    url = _database_url()
    if context.is_offline_mode():
        _configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
        with context.begin_transaction():
            context.run_migrations()
        return
    asyncio.run(_migrate_online(url))


main()
