"""
Relational backend on SQLAlchemy's async ORM.
Each call runs in its own short session; atomicity comes from single conditional
statements and primary-key constraints rather than from in-process locks.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chesslobby.auth.auth_util import new_token
from chesslobby.db.models_auth import AuthTokenRecord
from chesslobby.db.models_game import GameRecord
from chesslobby.db.models_user import UserRecord
from chesslobby.errors import AlreadyExists, AlreadyTaken, InvalidArgument, NotFound, Unauthorized, Unavailable
from chesslobby.models import TeamColor, Table, User, is_blank
from chesslobby.rules.engine import RulesEngine
from chesslobby.stores.base import GameStore, TokenStore, UserStore

logger = logging.getLogger(__name__)

TOKEN_INSERT_ATTEMPTS = 3


class _SqlStore:

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self._sessionmaker = sessionmaker

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        """Yields a session; driver and connection errors leave as Unavailable."""
        async with self._sessionmaker() as session:
            try:
                yield session
            # asyncpg raises unwrapped OSError when the server cannot be reached
            except (SQLAlchemyError, OSError) as e:
                logger.error(f"Unable to {action}: {e}", exc_info=True)
                await session.rollback()
                raise Unavailable(f"unable to {action}") from e


class SqlUserStore(_SqlStore, UserStore):

    async def create(self, user: User) -> None:
        if user is None or is_blank(user.username) or is_blank(user.password) or is_blank(user.email):
            raise InvalidArgument("bad request")
        async with self._session("create user") as session:
            session.add(UserRecord(username=user.username, password=user.password, email=user.email))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise AlreadyExists("already taken")

    async def get(self, username: str) -> Optional[User]:
        if username is None:
            return None
        async with self._session("get user") as session:
            record = await session.get(UserRecord, username)
            if record is None:
                return None
            return User(username=record.username, password=record.password, email=record.email)

    async def clear(self) -> None:
        async with self._session("clear users") as session:
            await session.execute(delete(UserRecord))
            await session.commit()


class SqlTokenStore(_SqlStore, TokenStore):

    async def issue(self, username: str) -> str:
        if is_blank(username):
            raise InvalidArgument("bad request")
        async with self._session("create auth token") as session:
            for _ in range(TOKEN_INSERT_ATTEMPTS):
                if await session.get(UserRecord, username) is None:
                    raise NotFound("user not found")
                token = new_token()
                session.add(AuthTokenRecord(token=token, username=username))
                try:
                    await session.commit()
                    return token
                except IntegrityError as e:
                    # a token collision; a vanished owner is caught by the lookup above
                    await session.rollback()
                    logger.warning(f"Token insert rejected, retrying: {e}")
            raise Unavailable("unable to create auth token")

    async def validate(self, token: Optional[str]) -> str:
        if not token:
            raise Unauthorized("unauthorized")
        async with self._session("get auth token") as session:
            record = await session.get(AuthTokenRecord, token)
            if record is None:
                raise Unauthorized("unauthorized")
            return record.username

    async def revoke(self, token: Optional[str]) -> None:
        if not token:
            raise Unauthorized("unauthorized")
        async with self._session("delete auth token") as session:
            result = await session.execute(
                delete(AuthTokenRecord).where(AuthTokenRecord.token == token)
            )
            await session.commit()
            if result.rowcount == 0:
                raise Unauthorized("unauthorized")

    async def clear(self) -> None:
        async with self._session("clear auth tokens") as session:
            await session.execute(delete(AuthTokenRecord))
            await session.commit()


class SqlGameStore(_SqlStore, GameStore):

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession], engine: RulesEngine):
        super().__init__(sessionmaker)
        self._engine = engine

    def _to_table(self, record: GameRecord) -> Table:
        return Table(
            id=record.id,
            name=record.name,
            white_username=record.white_username,
            black_username=record.black_username,
            rules_state=self._engine.loads(record.rules_state),
        )

    async def create(self, name: str) -> Table:
        if is_blank(name):
            raise InvalidArgument("bad request")
        record = GameRecord(
            name=name,
            white_username=None,
            black_username=None,
            rules_state=self._engine.dumps(self._engine.new_state()),
        )
        async with self._session("create game") as session:
            session.add(record)
            await session.commit()
        return self._to_table(record)

    async def get(self, table_id: int) -> Table:
        async with self._session("get game") as session:
            record = await session.get(GameRecord, table_id)
            if record is None:
                raise NotFound("game not found")
            return self._to_table(record)

    async def list(self) -> List[Table]:
        async with self._session("list games") as session:
            res = await session.execute(select(GameRecord).order_by(GameRecord.id))
            return [self._to_table(r) for r in res.scalars().all()]

    async def update(self, table: Table) -> None:
        if table is None:
            raise InvalidArgument("bad request")
        async with self._session("update game") as session:
            result = await session.execute(
                update(GameRecord)
                .where(GameRecord.id == table.id)
                .values(
                    name=table.name,
                    white_username=table.white_username,
                    black_username=table.black_username,
                    rules_state=self._engine.dumps(table.rules_state),
                )
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            if result.rowcount == 0:
                raise NotFound("game not found")

    async def claim_seat(self, table_id: int, color: TeamColor, username: str) -> Table:
        seat = "white_username" if color is TeamColor.WHITE else "black_username"
        async with self._session("update game") as session:
            # compare-and-set: only an empty seat matches the WHERE clause
            result = await session.execute(
                update(GameRecord)
                .where(GameRecord.id == table_id, getattr(GameRecord, seat).is_(None))
                .values(**{seat: username})
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            record = await session.get(GameRecord, table_id, populate_existing=True)
            if record is None:
                raise NotFound("game not found")
            if result.rowcount == 0:
                raise AlreadyTaken("already taken")
            return self._to_table(record)

    async def clear(self) -> None:
        async with self._session("clear games") as session:
            await session.execute(delete(GameRecord))
            if session.bind.dialect.name == "postgresql":
                # DELETE keeps the serial counter; numbering restarts at 1 after a reset
                await session.execute(
                    text("SELECT setval(pg_get_serial_sequence('games', 'id'), 1, false)")
                )
            await session.commit()
