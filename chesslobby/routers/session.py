from typing import Optional

from fastapi import APIRouter, Depends

from chesslobby.routers.util.deps import get_auth_token, get_lobby_service
from chesslobby.schemas.schemas_auth import AuthOut, LoginRequest
from chesslobby.service.lobby_service import LobbyService

router = APIRouter(
    prefix="/session",
    tags=["session"]
)


@router.post("", response_model=AuthOut)
async def login(
    payload: LoginRequest,
    lobby: LobbyService = Depends(get_lobby_service),
) -> AuthOut:
    result = await lobby.login(payload.username, payload.password)
    return AuthOut(authToken=result.token, username=result.username)


@router.delete("")
async def logout(
    token: Optional[str] = Depends(get_auth_token),
    lobby: LobbyService = Depends(get_lobby_service),
) -> dict:
    await lobby.logout(token)
    return {}
