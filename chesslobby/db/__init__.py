# chesslobby/db/__init__.py
"""
Re-exports for convenient imports:

    from chesslobby.db import Base, build_engine, build_sessionmaker, init_models
"""
from .base import Base            # noqa: F401
from .session import build_engine, build_sessionmaker, init_models   # noqa: F401
