from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from bhn.config.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES/ON DELETE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def utc_connect_args(url: str, connect_args: Optional[dict] = None) -> dict:
    """
    Driver arguments that pin an asyncpg session's TimeZone to UTC.

    Timestamps are naive UTC. ``CURRENT_TIMESTAMP`` in server defaults and the
    ``updated_at`` trigger must produce the same clock as the ORM hooks.
    Other drivers get ``connect_args`` back unchanged.
    """
    connect_args = dict(connect_args or {})
    if make_url(url).get_driver_name() == "asyncpg":
        server_settings = dict(connect_args.get("server_settings") or {})
        server_settings["timezone"] = "UTC"
        connect_args["server_settings"] = server_settings
    return connect_args


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """
    Create an async engine for ``url``.

    SQLite engines get foreign key enforcement switched on so cascades and
    NO ACTION references behave as they do on PostgreSQL. Other backends get
    the pool sizing from settings unless the caller overrides it, and asyncpg
    connections run in UTC.
    """
    kwargs.setdefault("echo", settings.DATABASE_ECHO)

    if make_url(url).get_backend_name() == "sqlite":
        engine = create_async_engine(url, **kwargs)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    if "poolclass" not in kwargs:
        kwargs.setdefault("pool_size", settings.DATABASE_POOL_SIZE)
        kwargs.setdefault("max_overflow", settings.DATABASE_MAX_OVERFLOW)
    kwargs.setdefault("pool_pre_ping", True)
    kwargs["connect_args"] = utc_connect_args(url, kwargs.get("connect_args"))
    return create_async_engine(url, **kwargs)


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
