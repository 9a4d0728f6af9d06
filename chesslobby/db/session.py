from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .base import Base
from . import models_auth, models_game, models_user  # noqa: F401  (register tables)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores REFERENCES clauses unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ───────────────────────── engine & session factory ─────────────────────────
def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    engine = create_async_engine(url, echo=echo)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


# ───────────────────────── schema initialisation ────────────────────────────
async def init_models(engine: AsyncEngine) -> None:
    """
    Creates every table registered in Base.metadata that does not exist yet.
    Safe to run repeatedly (idempotent).
    """
    async with engine.begin() as conn:
        # create_all is synchronous → run it via run_sync
        await conn.run_sync(Base.metadata.create_all)
