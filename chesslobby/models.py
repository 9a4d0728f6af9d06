# chesslobby/models.py
"""
Domain records shared by the stores, the LobbyService and the HTTP layer.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from chesslobby.errors import InvalidArgument


class TeamColor(Enum):
    """Seat colors of a table."""
    WHITE = "WHITE"
    BLACK = "BLACK"

    @classmethod
    def parse(cls, value: Optional[str]) -> "TeamColor":
        if not value or not isinstance(value, str):
            raise InvalidArgument("bad request: player color required")
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise InvalidArgument(f"bad request: unknown color {value!r}") from None


@dataclass(frozen=True)
class User:
    username: str
    password: str
    email: str


@dataclass(frozen=True)
class AuthToken:
    token: str
    username: str


@dataclass
class Table:
    """A lobby entry: two seats plus the opaque rules-engine state."""

    id: int
    name: str
    white_username: Optional[str] = None
    black_username: Optional[str] = None
    rules_state: Any = None

    def occupant(self, color: TeamColor) -> Optional[str]:
        if color is TeamColor.WHITE:
            return self.white_username
        return self.black_username

    def is_full(self) -> bool:
        return self.white_username is not None and self.black_username is not None


def is_blank(value: Optional[str]) -> bool:
    return value is None or not isinstance(value, str) or not value.strip()
