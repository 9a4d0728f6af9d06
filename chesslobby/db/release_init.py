from __future__ import annotations

import asyncio

from chesslobby.config import Settings
from chesslobby.db.session import build_engine, init_models


async def _main() -> None:
    settings = Settings.from_env()
    if settings.database_url is None:
        raise SystemExit("LOBBY_STORAGE=sql is required to initialise the database")
    engine = build_engine(settings.database_url, echo=settings.db_echo)
    try:
        await init_models(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(_main())
