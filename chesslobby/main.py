# chesslobby/main.py
"""
FastAPI entry point of the chess lobby: accounts, bearer tokens and game tables.
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chesslobby.auth.auth_util import build_crypt_context
from chesslobby.config import Settings, get_settings
from chesslobby.errors import LobbyError
from chesslobby.routers import db, game, session, users
from chesslobby.service.lobby_service import LobbyService
from chesslobby.stores import StoreSet, build_stores

# ───────────────────────── logging ──────────────────────────────────────────
logging.basicConfig(
    format="%(asctime)s — %(name)s — %(levelname)s — %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "InvalidArgument": 400,
    "NotFound": 400,
    "Unauthorized": 401,
    "AlreadyExists": 403,
    "AlreadyTaken": 403,
    "Unavailable": 500,
}


def _get_allowed_origins(settings: Settings) -> list[str]:
    default_origins = [
        "http://localhost:3000",
        "http://localhost:8080",
    ]
    origins = list(settings.cors_origins)
    for origin in default_origins:
        if origin not in origins:
            origins.append(origin)
    return origins


async def lobby_error_handler(request: Request, exc: LobbyError) -> JSONResponse:
    status = ERROR_STATUS.get(exc.kind, 500)
    if status == 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind}")
    return JSONResponse(status_code=status, content={"message": f"Error: {exc.message}"})


async def bad_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": "Error: bad request"})


def create_app(settings: Optional[Settings] = None, stores: Optional[StoreSet] = None) -> FastAPI:
    settings = settings or get_settings()

    # ───────────────────────── stores & schema ─────────────────────────
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store_set = stores or build_stores(settings)
        await store_set.open()
        app.state.lobby_service = LobbyService(
            store_set, crypt_context=build_crypt_context(settings.password_scheme)
        )
        logger.info(f"Lobby ready ({settings.storage} storage)")
        try:
            yield
        finally:
            await store_set.close()

    app = FastAPI(title="Chess Lobby", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(users.router)
    app.include_router(session.router)
    app.include_router(game.router)
    app.include_router(db.router)

    app.add_exception_handler(LobbyError, lobby_error_handler)
    app.add_exception_handler(RequestValidationError, bad_request_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_get_allowed_origins(settings),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


# ───────────────────────── dev entrypoint ───────────────────────────────────
if __name__ == "__main__":
    import uvicorn

    host, port = "0.0.0.0", 8080
    logger.info("Starting dev server on http://%s:%d", host, port)
    uvicorn.run("chesslobby.main:create_app", factory=True, host=host, port=port, reload=True)
