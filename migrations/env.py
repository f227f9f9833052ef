import nest_asyncio
import asyncio
nest_asyncio.apply()
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from bhn.config.config import settings
from bhn.db.base import Base
from bhn.db.ddl import SEARCH_INDEXES
from bhn.db.session import utc_connect_args
import bhn.models  # noqa: F401  registers every table on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

# BHN_DATABASE_URL wins over anything written in alembic.ini
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)


def include_object(obj, name, type_, reflected, compare_to):
    """
    Keep autogenerate away from objects created with raw SQL.

    The full-text GIN indexes live only in the database, so autogenerate
    would otherwise emit a drop for each of them.
    """
    if type_ == "index" and reflected and name in SEARCH_INDEXES:
        return False
    return True


def configure_context(**kwargs):
    context.configure(
        target_metadata=target_metadata,
        include_object=include_object,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def run_migrations_offline():
    """Emit the migration SQL without a database connection."""
    configure_context(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection):
    configure_context(connection=connection)

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online():
    """Run migrations against the configured database over asyncpg."""
    url = config.get_main_option("sqlalchemy.url")
    connectable = create_async_engine(
        url,
        poolclass=pool.NullPool,
        connect_args=utc_connect_args(url),
    )

    try:
        async with connectable.connect() as connection:
            await connection.run_sync(do_run_migrations)
    finally:
        await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
