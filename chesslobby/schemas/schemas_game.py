from typing import List, Optional

from pydantic import BaseModel

from chesslobby.models import Table


class CreateGameRequest(BaseModel):
    gameName: Optional[str] = None


class CreateGameOut(BaseModel):
    gameID: int


class JoinGameRequest(BaseModel):
    playerColor: Optional[str] = None
    gameID: Optional[int] = None


class GameOut(BaseModel):
    gameID: int
    whiteUsername: Optional[str] = None
    blackUsername: Optional[str] = None
    gameName: str

    @classmethod
    def from_table(cls, table: Table) -> "GameOut":
        return cls(
            gameID=table.id,
            whiteUsername=table.white_username,
            blackUsername=table.black_username,
            gameName=table.name,
        )


class GameListOut(BaseModel):
    games: List[GameOut]
