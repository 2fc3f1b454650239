"""Alembic async env — migrations for every rgaa_audit/domain/* model.

The URL defaults to ``settings.database_url``; ``sqlalchemy.url`` in the
Alembic config (ini file or ``Config.set_main_option``) overrides it.
"""

from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.ext.asyncio import create_async_engine

from rgaa_audit.core.config import settings
from rgaa_audit.db.base import Base, enable_sqlite_foreign_keys

# Load all ORM models so Alembic can detect them
import rgaa_audit.domain  # noqa: F401

config = context.config
if config.config_file_name:
    # Keep application loggers alive when migrations run in-process
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or settings.database_url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=True,  # required for SQLite ALTER support
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(_database_url())
    enable_sqlite_foreign_keys(engine)
    async with engine.connect() as connection:
        await connection.run_sync(lambda sync_conn: _configure(connection=sync_conn))
        async with connection.begin():
            await connection.run_sync(lambda _: context.run_migrations())
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
