import json
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from chesslobby.config import Settings
from chesslobby.main import create_app
from chesslobby.service.lobby_service import LobbyService
from chesslobby.stores import memory_stores, sql_stores

# ======================================================================
#  1. BACKENDS
# ======================================================================

BACKENDS = ["memory", "sql"]


def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'lobby.db'}"


class RecordingRulesEngine:
    """Rules engine whose state is a plain dict; counts how often a fresh state was asked for."""

    def __init__(self):
        self.created = 0

    def new_state(self) -> Dict[str, Any]:
        self.created += 1
        return {"moves": [], "turn": "WHITE", "serial": self.created}

    def dumps(self, state: Dict[str, Any]) -> str:
        return json.dumps(state, sort_keys=True)

    def loads(self, data: str) -> Dict[str, Any]:
        return json.loads(data)


@pytest.fixture(params=BACKENDS)
def backend(request) -> str:
    return request.param


@pytest.fixture
async def stores(backend, tmp_path):
    """A fresh, isolated StoreSet for every test, on each backend."""
    if backend == "memory":
        store_set = memory_stores()
    else:
        store_set = sql_stores(sqlite_url(tmp_path))
    await store_set.open()
    yield store_set
    await store_set.close()


@pytest.fixture
async def dict_stores(backend, tmp_path):
    """Same as `stores`, but with a RecordingRulesEngine behind the game store."""
    engine = RecordingRulesEngine()
    if backend == "memory":
        store_set = memory_stores(engine)
    else:
        store_set = sql_stores(sqlite_url(tmp_path), engine)
    await store_set.open()
    yield store_set
    await store_set.close()


@pytest.fixture
def lobby(stores) -> LobbyService:
    return LobbyService(stores)


# ======================================================================
#  2. HTTP CLIENT
# ======================================================================

@pytest.fixture
def client(backend, tmp_path):
    """TestClient around a freshly built app; the lifespan opens and closes the stores."""
    if backend == "memory":
        store_set = memory_stores()
    else:
        store_set = sql_stores(sqlite_url(tmp_path))
    app = create_app(settings=Settings(storage=backend), stores=store_set)
    with TestClient(app) as test_client:
        yield test_client


def register(client: TestClient, username: str, password: str = "pw", email: str = None) -> str:
    resp = client.post(
        "/user",
        json={"username": username, "password": password, "email": email or f"{username}@x"},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["authToken"]
