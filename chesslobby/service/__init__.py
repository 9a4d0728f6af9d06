"""
Lobby orchestration: the layer the HTTP routes call.
"""
from chesslobby.service.lobby_service import AuthResult, LobbyService  # noqa: F401
