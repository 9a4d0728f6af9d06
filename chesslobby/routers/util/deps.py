from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from chesslobby.config import Settings
from chesslobby.service.lobby_service import LobbyService


def get_lobby_service(request: Request) -> LobbyService:
    return request.app.state.lobby_service


def get_auth_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Raw token from the Authorization header; a "Bearer " prefix is tolerated."""
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return authorization


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
