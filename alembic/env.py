import asyncio
import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sportshub.core.config import settings
from sportshub.db.base import Base  # importing registers every media-owner model

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

# MIGRATIONS_DATABASE_URL lets CI point at a throwaway database
DATABASE_URL = os.getenv("MIGRATIONS_DATABASE_URL") or settings.ASYNC_DATABASE_URL
config.set_main_option("sqlalchemy.url", DATABASE_URL)

VERSION_TABLE = "sportshub_media_alembic_version"
OWNED_TABLES = frozenset(Base.metadata.tables)


def include_object(obj, name, type_, reflected, compare_to):
    # the database is shared with the main API; only diff our own tables
    if type_ == "table":
        return name in OWNED_TABLES
    table = getattr(obj, "table", None)
    return table is None or table.name in OWNED_TABLES


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        version_table=VERSION_TABLE,
        include_object=include_object,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL for the pending revisions without a connection."""
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(DATABASE_URL, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
