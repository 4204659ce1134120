# wl_app/db/base.py
import logging
from typing import List

from fastapi import Request
from sqlalchemy import Index, inspect, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import CreateIndex, CreateTable

from wl_app.core.config import Settings
from wl_app.core.errors import DatabaseConfigError

log = logging.getLogger(__name__)

# bare schemes from hosting providers -> async drivers
ASYNC_DRIVERS = {
    "mysql": "mysql+asyncmy",
    "mariadb": "mysql+asyncmy",
    "sqlite": "sqlite+aiosqlite",
}


class Base(DeclarativeBase):
    pass


def build_database_url(settings: Settings) -> URL:
    """Resolve the connection URL.

    ``DATABASE_URL`` takes priority. Without it every discrete MySQL field
    except the port must be set, otherwise :class:`DatabaseConfigError` is
    raised instead of connecting with partial configuration.
    """
    if settings.database_url:
        try:
            url = make_url(settings.database_url)
        except ArgumentError as e:
            raise DatabaseConfigError(f"DATABASE_URL is not a valid database URL: {e}") from e
        driver = ASYNC_DRIVERS.get(url.drivername)
        return url.set(drivername=driver) if driver else url

    fields = {
        "MYSQLHOST": settings.mysql_host,
        "MYSQLUSER": settings.mysql_user,
        "MYSQLPASSWORD": settings.mysql_password,
        "MYSQLDATABASE": settings.mysql_database,
    }
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise DatabaseConfigError(
            f"Missing MySQL settings: {', '.join(missing)}. "
            "Set DATABASE_URL or MYSQLHOST/MYSQLUSER/MYSQLPASSWORD/MYSQLDATABASE (and MYSQLPORT)."
        )
    return URL.create(
        "mysql+asyncmy",
        username=settings.mysql_user,
        password=settings.mysql_password,
        host=settings.mysql_host,
        port=settings.mysql_port,
        database=settings.mysql_database,
    )


class Database:
    """Owns the pooled engine for the life of the process."""

    def __init__(self, settings: Settings):
        self.url = build_database_url(settings)
        kwargs = {"pool_pre_ping": True}
        if self.url.get_backend_name() != "sqlite":
            kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=0,
                pool_timeout=settings.db_pool_timeout_sec,
                pool_recycle=3600,
            )
        self.engine: AsyncEngine = create_async_engine(self.url, future=True, echo=False, **kwargs)
        self.session = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.db


def _supports_index_if_not_exists(dialect) -> bool:
    # MySQL has no CREATE INDEX IF NOT EXISTS; MariaDB does
    return dialect.name in ("sqlite", "postgresql") or getattr(dialect, "is_mariadb", False)


async def _has_index(engine: AsyncEngine, table: str, index: str) -> bool:
    async with engine.connect() as conn:
        return await conn.run_sync(lambda c: inspect(c).has_index(table, index))


async def _ensure_index(engine: AsyncEngine, index: Index) -> bool:
    table = index.table.name
    if await _has_index(engine, table, index.name):
        return False

    if _supports_index_if_not_exists(engine.dialect):
        async with engine.begin() as conn:
            await conn.execute(CreateIndex(index, if_not_exists=True))
        return True

    # check-then-create; a concurrent starter may create it between the two
    try:
        async with engine.begin() as conn:
            await conn.execute(CreateIndex(index))
    except DBAPIError:
        if await _has_index(engine, table, index.name):
            log.info("index %s was created concurrently; skipping", index.name)
            return False
        raise
    return True


async def init_db(engine: AsyncEngine) -> List[str]:
    """Create the waitlist table and its indexes if missing.

    Safe to run on every start. Returns the names of indexes created by
    this call.
    """
    from wl_app.db.models import WaitlistEntry

    table = WaitlistEntry.__table__
    async with engine.begin() as conn:
        await conn.execute(CreateTable(table, if_not_exists=True))

    created = []
    for index in sorted(table.indexes, key=lambda i: i.name):
        if await _ensure_index(engine, index):
            created.append(index.name)
    if created:
        log.info("created indexes on %s: %s", table.name, ", ".join(created))
    return created
