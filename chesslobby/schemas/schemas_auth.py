from typing import Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    # emptiness is judged by the LobbyService, not here
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class AuthOut(BaseModel):
    authToken: str
    username: str
