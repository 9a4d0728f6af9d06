"""
Session orchestration for the chess lobby.
The only entry point of the HTTP layer: composes the user, token and game stores.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional

from passlib.context import CryptContext

from chesslobby.auth.auth_util import build_crypt_context, hash_password, verify_password
from chesslobby.errors import AlreadyExists, AlreadyTaken, InvalidArgument, Unauthorized
from chesslobby.models import TeamColor, Table, User, is_blank
from chesslobby.stores import StoreSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    token: str
    username: str


class ResetGate:
    """
    Lets any number of operations run together, but a reset only runs alone:
    it waits for in-flight operations to drain and holds new ones back.
    """

    def __init__(self):
        self._condition = asyncio.Condition()
        self._active = 0
        self._resetting = False

    @asynccontextmanager
    async def operation(self) -> AsyncIterator[None]:
        async with self._condition:
            await self._condition.wait_for(lambda: not self._resetting)
            self._active += 1
        try:
            yield
        finally:
            async with self._condition:
                self._active -= 1
                self._condition.notify_all()

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        async with self._condition:
            await self._condition.wait_for(lambda: not self._resetting)
            self._resetting = True
            await self._condition.wait_for(lambda: self._active == 0)
        try:
            yield
        finally:
            async with self._condition:
                self._resetting = False
                self._condition.notify_all()


class LobbyService:
    """
    Register/login/logout, table listing, creation and seating, and the full reset.

    Every instance owns its StoreSet; two services never share state unless they are
    handed the same stores.
    """

    def __init__(self, stores: StoreSet, crypt_context: Optional[CryptContext] = None):
        self.stores = stores
        self._crypt = crypt_context or build_crypt_context("plaintext")
        self._gate = ResetGate()

    # ───────────────────────── users & sessions ─────────────────────────
    async def register(self, username: Optional[str], password: Optional[str], email: Optional[str]) -> AuthResult:
        if is_blank(username) or is_blank(password) or is_blank(email):
            raise InvalidArgument("bad request")

        async with self._gate.operation():
            if await self.stores.users.get(username) is not None:
                logger.info(f"Registration rejected, username taken: {username}")
                raise AlreadyExists("already taken")
            # a concurrent registration of the same name loses here with AlreadyExists
            await self.stores.users.create(
                User(username=username, password=hash_password(self._crypt, password), email=email)
            )
            token = await self.stores.tokens.issue(username)

        logger.info(f"Registered user {username}")
        return AuthResult(token=token, username=username)

    async def login(self, username: Optional[str], password: Optional[str]) -> AuthResult:
        if is_blank(username) or is_blank(password):
            raise InvalidArgument("bad request")

        async with self._gate.operation():
            user = await self.stores.users.get(username)
            if user is None or not verify_password(self._crypt, password, user.password):
                logger.info(f"Login failed for {username}")
                raise Unauthorized("unauthorized")
            token = await self.stores.tokens.issue(username)

        logger.info(f"User {username} logged in")
        return AuthResult(token=token, username=username)

    async def logout(self, token: Optional[str]) -> None:
        async with self._gate.operation():
            username = await self.stores.tokens.validate(token)
            await self.stores.tokens.revoke(token)
        logger.info(f"User {username} logged out")

    async def authenticate(self, token: Optional[str]) -> str:
        """Username behind a bearer token."""
        return await self.stores.tokens.validate(token)

    # ───────────────────────── tables ─────────────────────────
    async def list_tables(self, token: Optional[str]) -> List[Table]:
        async with self._gate.operation():
            await self.stores.tokens.validate(token)
            return await self.stores.games.list()

    async def create_table(self, token: Optional[str], name: Optional[str]) -> Table:
        async with self._gate.operation():
            username = await self.stores.tokens.validate(token)
            table = await self.stores.games.create(name)
        logger.info(f"{username} created table {table.id} ({table.name})")
        return table

    async def join_table(self, token: Optional[str], table_id: int, color: Optional[str]) -> Table:
        """
        Seat the token's owner at a table.

        State per table only moves forward: empty → one seat → both seats.

        Raises:
            Unauthorized: bad token, checked before anything else
            InvalidArgument: color is not WHITE or BLACK
            NotFound: unknown table
            AlreadyTaken: the seat is occupied
        """
        async with self._gate.operation():
            username = await self.stores.tokens.validate(token)
            seat = TeamColor.parse(color)
            table = await self.stores.games.get(table_id)
            if table.occupant(seat) is not None:
                logger.info(f"{username} denied {seat.value} at table {table_id}: seat taken")
                raise AlreadyTaken("already taken")
            try:
                table = await self.stores.games.claim_seat(table_id, seat, username)
            except AlreadyTaken:
                logger.info(f"{username} lost the race for {seat.value} at table {table_id}")
                raise

        logger.info(f"{username} took {seat.value} at table {table_id}")
        if table.is_full():
            logger.info(f"Table {table_id} is full: {table.white_username} vs {table.black_username}")
        return table

    # ───────────────────────── administration ─────────────────────────
    async def reset_all(self) -> None:
        async with self._gate.exclusive():
            await self.stores.clear()
        logger.warning("All users, tokens and tables were cleared")
