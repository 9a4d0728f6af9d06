"""
In-process backend. State lives in dicts owned by each store instance and is lost on restart.
Every mutation runs under the store's asyncio.Lock.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from chesslobby.auth.auth_util import new_token
from chesslobby.errors import AlreadyExists, AlreadyTaken, InvalidArgument, NotFound, Unauthorized
from chesslobby.models import AuthToken, TeamColor, Table, User, is_blank
from chesslobby.rules.engine import RulesEngine
from chesslobby.stores.base import GameStore, TokenStore, UserStore

logger = logging.getLogger(__name__)


class MemoryUserStore(UserStore):

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._lock = asyncio.Lock()

    async def create(self, user: User) -> None:
        if user is None or is_blank(user.username) or is_blank(user.password) or is_blank(user.email):
            raise InvalidArgument("bad request")
        async with self._lock:
            if user.username in self._users:
                raise AlreadyExists("already taken")
            self._users[user.username] = user

    async def get(self, username: str) -> Optional[User]:
        if username is None:
            return None
        return self._users.get(username)

    async def clear(self) -> None:
        async with self._lock:
            self._users.clear()


class MemoryTokenStore(TokenStore):

    def __init__(self, users: MemoryUserStore):
        self._users = users
        self._tokens: Dict[str, AuthToken] = {}
        self._lock = asyncio.Lock()

    async def issue(self, username: str) -> str:
        if is_blank(username):
            raise InvalidArgument("bad request")
        if await self._users.get(username) is None:
            raise NotFound("user not found")
        async with self._lock:
            token = new_token()
            while token in self._tokens:
                token = new_token()
            self._tokens[token] = AuthToken(token=token, username=username)
        return token

    async def validate(self, token: Optional[str]) -> str:
        auth = self._tokens.get(token) if token else None
        if auth is None:
            raise Unauthorized("unauthorized")
        return auth.username

    async def revoke(self, token: Optional[str]) -> None:
        async with self._lock:
            if not token or self._tokens.pop(token, None) is None:
                raise Unauthorized("unauthorized")

    async def clear(self) -> None:
        async with self._lock:
            self._tokens.clear()


@dataclass
class _TableRecord:
    id: int
    name: str
    white_username: Optional[str]
    black_username: Optional[str]
    rules_state: str


class MemoryGameStore(GameStore):
    """
    Tables are kept with their rules state in serialized form, so each read hands out a
    fresh value and callers never share mutable state with the store.
    """

    def __init__(self, engine: RulesEngine):
        self._engine = engine
        self._tables: Dict[int, _TableRecord] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    def _to_table(self, record: _TableRecord) -> Table:
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
        state = self._engine.dumps(self._engine.new_state())
        async with self._lock:
            record = _TableRecord(self._next_id, name, None, None, state)
            self._tables[record.id] = record
            self._next_id += 1
        return self._to_table(record)

    async def get(self, table_id: int) -> Table:
        record = self._tables.get(table_id)
        if record is None:
            raise NotFound("game not found")
        return self._to_table(record)

    async def list(self) -> List[Table]:
        return [self._to_table(r) for r in sorted(self._tables.values(), key=lambda r: r.id)]

    async def update(self, table: Table) -> None:
        if table is None:
            raise InvalidArgument("bad request")
        state = self._engine.dumps(table.rules_state)
        async with self._lock:
            if table.id not in self._tables:
                raise NotFound("game not found")
            self._tables[table.id] = _TableRecord(
                table.id, table.name, table.white_username, table.black_username, state
            )

    async def claim_seat(self, table_id: int, color: TeamColor, username: str) -> Table:
        async with self._lock:
            record = self._tables.get(table_id)
            if record is None:
                raise NotFound("game not found")
            if color is TeamColor.WHITE:
                if record.white_username is not None:
                    raise AlreadyTaken("already taken")
                record.white_username = username
            else:
                if record.black_username is not None:
                    raise AlreadyTaken("already taken")
                record.black_username = username
            return self._to_table(record)

    async def clear(self) -> None:
        async with self._lock:
            self._tables.clear()
            self._next_id = 1
