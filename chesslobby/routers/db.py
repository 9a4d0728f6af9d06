from fastapi import APIRouter, Depends, HTTPException

from chesslobby.config import Settings
from chesslobby.routers.util.deps import get_app_settings, get_lobby_service
from chesslobby.service.lobby_service import LobbyService

router = APIRouter(
    tags=["admin"]
)


@router.delete("/db")
async def clear_database(
    lobby: LobbyService = Depends(get_lobby_service),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    if not settings.enable_reset_endpoint:
        raise HTTPException(status_code=404, detail="Not found")
    await lobby.reset_all()
    return {}
