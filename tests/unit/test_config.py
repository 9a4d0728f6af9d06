import pytest

from chesslobby.config import Settings
from chesslobby.db.config import build_database_url
from chesslobby.stores import build_stores
from chesslobby.stores.memory import MemoryUserStore
from chesslobby.stores.sql import SqlUserStore

DB_VARS = ["DATABASE_URL", "DB_USER", "DB_PASSWORD", "DB_HOST", "DB_PORT", "DB_NAME"]


@pytest.fixture
def clean_env(monkeypatch):
    for name in DB_VARS + ["LOBBY_STORAGE", "PASSWORD_SCHEME", "CORS_ORIGINS", "ENABLE_RESET_ENDPOINT"]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()

    assert settings.storage == "memory"
    assert settings.database_url is None
    assert settings.password_scheme == "plaintext"
    assert settings.enable_reset_endpoint is True


@pytest.mark.parametrize("raw,expected", [
    ("postgres://u:p@h:5432/db", "postgresql+asyncpg://u:p@h:5432/db"),
    ("postgresql://u:p@h:5432/db", "postgresql+asyncpg://u:p@h:5432/db"),
    ("sqlite+aiosqlite:///lobby.db", "sqlite+aiosqlite:///lobby.db"),
])
def test_database_url_rewrite(clean_env, raw, expected):
    clean_env.setenv("DATABASE_URL", raw)

    assert build_database_url() == expected


def test_database_url_from_parts(clean_env):
    for name, value in {"DB_USER": "chess", "DB_PASSWORD": "p@ss", "DB_HOST": "db",
                        "DB_PORT": "5432", "DB_NAME": "lobby"}.items():
        clean_env.setenv(name, value)

    assert build_database_url() == "postgresql+asyncpg://chess:p%40ss@db:5432/lobby"


def test_missing_database_parts_are_listed(clean_env):
    clean_env.setenv("LOBBY_STORAGE", "sql")
    clean_env.setenv("DB_USER", "chess")

    with pytest.raises(RuntimeError, match="DB_PASSWORD"):
        Settings.from_env()


def test_sql_settings(clean_env):
    clean_env.setenv("LOBBY_STORAGE", "SQL")
    clean_env.setenv("DATABASE_URL", "sqlite+aiosqlite:///lobby.db")
    clean_env.setenv("PASSWORD_SCHEME", "bcrypt")
    clean_env.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

    settings = Settings.from_env()

    assert settings.storage == "sql"
    assert settings.database_url == "sqlite+aiosqlite:///lobby.db"
    assert settings.password_scheme == "bcrypt"
    assert settings.cors_origins == ["https://a.example", "https://b.example"]


async def test_build_stores_picks_backend(tmp_path):
    memory = build_stores(Settings())
    assert isinstance(memory.users, MemoryUserStore)

    sql = build_stores(Settings(storage="sql", database_url=f"sqlite+aiosqlite:///{tmp_path / 'x.db'}"))
    try:
        assert isinstance(sql.users, SqlUserStore)
    finally:
        await sql.close()


def test_sql_backend_needs_url():
    with pytest.raises(RuntimeError):
        build_stores(Settings(storage="sql"))
