"""
Interface definitions for the lobby stores.
Each store has one in-memory and one SQL implementation; both must behave the same.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from chesslobby.models import TeamColor, Table, User


class UserStore(ABC):
    """Credential store keyed by username."""

    @abstractmethod
    async def create(self, user: User) -> None:
        """
        Persist a new user.

        Raises:
            InvalidArgument: username, password or email is empty
            AlreadyExists: the username is taken
        """

    @abstractmethod
    async def get(self, username: str) -> Optional[User]:
        """Return the stored user, or None if there is none."""

    @abstractmethod
    async def clear(self) -> None:
        ...


class TokenStore(ABC):
    """Bearer tokens mapped to their owner."""

    @abstractmethod
    async def issue(self, username: str) -> str:
        """
        Mint and store a fresh token for an existing user.

        Raises:
            InvalidArgument: the username is empty
            NotFound: no such user
        """

    @abstractmethod
    async def validate(self, token: Optional[str]) -> str:
        """
        Resolve a token to its username.

        Raises:
            Unauthorized: the token is missing or unknown
        """

    @abstractmethod
    async def revoke(self, token: Optional[str]) -> None:
        """
        Delete a token.

        Raises:
            Unauthorized: the token is missing or unknown
        """

    @abstractmethod
    async def clear(self) -> None:
        ...


class GameStore(ABC):
    """Registry of lobby tables."""

    @abstractmethod
    async def create(self, name: str) -> Table:
        """
        Create a table with empty seats and a fresh rules state.

        Raises:
            InvalidArgument: the name is empty
        """

    @abstractmethod
    async def get(self, table_id: int) -> Table:
        """
        Raises:
            NotFound: no table with that id
        """

    @abstractmethod
    async def list(self) -> List[Table]:
        """All tables, in id order."""

    @abstractmethod
    async def update(self, table: Table) -> None:
        """
        Replace the stored record with the same id.

        Raises:
            NotFound: no table with that id
        """

    @abstractmethod
    async def claim_seat(self, table_id: int, color: TeamColor, username: str) -> Table:
        """
        Put `username` into the seat if, and only if, it is still empty.
        Check and write happen as one atomic step. `username` must name an
        existing user; the LobbyService only passes validated token owners.

        Returns:
            The table after the seat was taken

        Raises:
            NotFound: no table with that id
            AlreadyTaken: the seat is occupied
        """

    @abstractmethod
    async def clear(self) -> None:
        """Remove every table; numbering starts again at 1."""
