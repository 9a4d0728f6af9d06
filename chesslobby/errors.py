"""
Error taxonomy of the lobby core.
Every store and the LobbyService raise these; the HTTP layer maps `kind` to a status.
"""


class LobbyError(Exception):
    kind = "LobbyError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class InvalidArgument(LobbyError):
    """Missing, empty or malformed input."""
    kind = "InvalidArgument"


class Unauthorized(LobbyError):
    """Missing, unknown or revoked token, or a credential mismatch."""
    kind = "Unauthorized"


class NotFound(LobbyError):
    kind = "NotFound"


class AlreadyExists(LobbyError):
    kind = "AlreadyExists"


class AlreadyTaken(LobbyError):
    """The requested seat is occupied."""
    kind = "AlreadyTaken"


class Unavailable(LobbyError):
    """The storage backend could not complete the operation."""
    kind = "Unavailable"
