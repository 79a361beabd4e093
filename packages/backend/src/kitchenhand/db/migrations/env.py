"""Alembic environment for the catalog schema.

Learn: The database URL always comes from Settings (DATABASE_URL), never
from alembic.ini, so `alembic upgrade head` migrates the same database
the app connects to. Autogenerate also compares column types, and on
SQLite (local dev) operations are rendered in batch mode because SQLite
cannot ALTER most columns in place.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine

from kitchenhand.config import load_settings
from kitchenhand.db.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

DATABASE_URL = load_settings().database_url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=make_url(DATABASE_URL).get_backend_name() == "sqlite",
        **kwargs,
    )


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def migrate_online() -> None:
    # One-shot process: no pooling.
    engine = create_async_engine(DATABASE_URL, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    # `alembic upgrade head --sql` prints the DDL instead of running it.
    _configure(url=DATABASE_URL, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()
else:
    asyncio.run(migrate_online())
