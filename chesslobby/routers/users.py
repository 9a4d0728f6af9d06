from fastapi import APIRouter, Depends

from chesslobby.routers.util.deps import get_lobby_service
from chesslobby.schemas.schemas_auth import AuthOut, RegisterRequest
from chesslobby.service.lobby_service import LobbyService

router = APIRouter(
    tags=["users"]
)


@router.post("/user", response_model=AuthOut)
async def register(
    payload: RegisterRequest,
    lobby: LobbyService = Depends(get_lobby_service),
) -> AuthOut:
    result = await lobby.register(payload.username, payload.password, payload.email)
    return AuthOut(authToken=result.token, username=result.username)
