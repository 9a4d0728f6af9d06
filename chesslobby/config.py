# chesslobby/config.py
"""
Runtime settings, read once from the environment.
"""
from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import BaseModel

from chesslobby.db.config import build_database_url


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings(BaseModel):
    storage: Literal["memory", "sql"] = "memory"
    database_url: Optional[str] = None
    db_echo: bool = False
    password_scheme: Literal["plaintext", "bcrypt"] = "plaintext"
    cors_origins: List[str] = []
    enable_reset_endpoint: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        storage = os.getenv("LOBBY_STORAGE", "memory").strip().lower()
        origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "").split(",")
            if origin.strip()
        ]
        return cls(
            storage=storage,
            # the URL is only required (and validated) for the sql backend
            database_url=build_database_url() if storage == "sql" else None,
            db_echo=_flag("DB_ECHO", "false"),
            password_scheme=os.getenv("PASSWORD_SCHEME", "plaintext").strip().lower(),
            cors_origins=origins,
            enable_reset_endpoint=_flag("ENABLE_RESET_ENDPOINT", "true"),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
