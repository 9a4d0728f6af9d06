"""
Storage backends for the lobby.

`build_stores` picks the backend once, from the settings, and returns a StoreSet that
the LobbyService owns for its whole lifetime.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from chesslobby.config import Settings
from chesslobby.db.session import build_engine, build_sessionmaker, init_models
from chesslobby.errors import Unavailable
from chesslobby.rules.engine import ChessRulesEngine, RulesEngine
from chesslobby.stores.base import GameStore, TokenStore, UserStore
from chesslobby.stores.memory import MemoryGameStore, MemoryTokenStore, MemoryUserStore
from chesslobby.stores.sql import SqlGameStore, SqlTokenStore, SqlUserStore

logger = logging.getLogger(__name__)


@dataclass
class StoreSet:
    users: UserStore
    tokens: TokenStore
    games: GameStore
    db_engine: Optional[AsyncEngine] = None

    async def open(self) -> None:
        """Create the schema when backed by a database."""
        if self.db_engine is None:
            return
        try:
            await init_models(self.db_engine)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Unable to initialise database: {e}", exc_info=True)
            raise Unavailable("unable to initialise database") from e

    async def clear(self) -> None:
        # tokens reference users, so they go first
        await self.tokens.clear()
        await self.games.clear()
        await self.users.clear()

    async def close(self) -> None:
        if self.db_engine is not None:
            await self.db_engine.dispose()


def memory_stores(engine: Optional[RulesEngine] = None) -> StoreSet:
    users = MemoryUserStore()
    return StoreSet(
        users=users,
        tokens=MemoryTokenStore(users),
        games=MemoryGameStore(engine or ChessRulesEngine()),
    )


def sql_stores(database_url: str, engine: Optional[RulesEngine] = None, echo: bool = False) -> StoreSet:
    db_engine = build_engine(database_url, echo=echo)
    sessionmaker = build_sessionmaker(db_engine)
    return StoreSet(
        users=SqlUserStore(sessionmaker),
        tokens=SqlTokenStore(sessionmaker),
        games=SqlGameStore(sessionmaker, engine or ChessRulesEngine()),
        db_engine=db_engine,
    )


def build_stores(settings: Settings, engine: Optional[RulesEngine] = None) -> StoreSet:
    if settings.storage == "sql":
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for the sql backend")
        logger.info("Using SQL storage backend")
        return sql_stores(settings.database_url, engine, echo=settings.db_echo)
    logger.info("Using in-memory storage backend")
    return memory_stores(engine)
