from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from chesslobby.errors import InvalidArgument
from chesslobby.routers.util.deps import get_auth_token, get_lobby_service
from chesslobby.schemas.schemas_game import CreateGameOut, CreateGameRequest, GameListOut, GameOut, JoinGameRequest
from chesslobby.service.lobby_service import LobbyService

router = APIRouter(
    prefix="/game",
    tags=["game"]
)


@router.get("", response_model=GameListOut)
async def list_games(
    token: Optional[str] = Depends(get_auth_token),
    lobby: LobbyService = Depends(get_lobby_service),
) -> GameListOut:
    tables = await lobby.list_tables(token)
    return GameListOut(games=[GameOut.from_table(t) for t in tables])


@router.post("", response_model=CreateGameOut)
async def create_game(
    payload: CreateGameRequest,
    token: Optional[str] = Depends(get_auth_token),
    lobby: LobbyService = Depends(get_lobby_service),
) -> CreateGameOut:
    table = await lobby.create_table(token, payload.gameName)
    return CreateGameOut(gameID=table.id)


@router.put("")
async def join_game(
    payload: JoinGameRequest,
    token: Optional[str] = Depends(get_auth_token),
    lobby: LobbyService = Depends(get_lobby_service),
) -> dict:
    # the token is checked first, so a missing id only matters for authenticated callers
    await lobby.authenticate(token)
    if payload.gameID is None:
        raise InvalidArgument("bad request")
    await lobby.join_table(token, payload.gameID, payload.playerColor)
    return {}
