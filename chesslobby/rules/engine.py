"""
Rules-engine collaborator.
The lobby only asks it for a fresh game state and for a text form it can store.
"""
from __future__ import annotations

from typing import Any, Protocol

import chess


class RulesEngine(Protocol):
    """Owner of the opaque per-table game state."""

    def new_state(self) -> Any:
        ...

    def dumps(self, state: Any) -> str:
        ...

    def loads(self, data: str) -> Any:
        ...


class ChessRulesEngine:
    """python-chess backed engine; a state is a `chess.Board`, stored as FEN."""

    def new_state(self) -> chess.Board:
        return chess.Board()

    def dumps(self, state: chess.Board) -> str:
        return state.fen()

    def loads(self, data: str) -> chess.Board:
        return chess.Board(data)
