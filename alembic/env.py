"""Alembic environment — migrations for the CARAMEL schema over asyncpg.

The target URL is resolved by caramel.config.Settings, so migrations and the
running API agree on DATABASE_URL (including postgres:// rewriting). The
alembic.ini URL is only a fallback for when DATABASE_URL is unset.
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

import caramel.models  # noqa: F401
from caramel.config import Settings
from caramel.db.base import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    if os.environ.get("DATABASE_URL"):
        return Settings().database_url
    return Settings(
        database_url=config.get_main_option("sqlalchemy.url"),
    ).database_url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        **kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)


async def _migrate_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(_migrate_online(_database_url()))
