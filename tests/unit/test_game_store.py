import asyncio

import chess
import pytest

from chesslobby.errors import AlreadyTaken, InvalidArgument, NotFound
from chesslobby.models import TeamColor, User


@pytest.fixture
async def players(stores):
    for name in ("alice", "bob"):
        await stores.users.create(User(name, "pw", f"{name}@x"))


async def test_create_assigns_sequential_ids_with_empty_seats(stores):
    first = await stores.games.create("Match1")
    second = await stores.games.create("Match2")

    assert (first.id, second.id) == (1, 2)
    assert first.name == "Match1"
    assert first.white_username is None and first.black_username is None
    assert first.rules_state.fen() == chess.STARTING_FEN


@pytest.mark.parametrize("name", ["", "   ", None])
async def test_create_requires_name(stores, name):
    with pytest.raises(InvalidArgument):
        await stores.games.create(name)


async def test_get_unknown_table(stores):
    with pytest.raises(NotFound):
        await stores.games.get(42)


async def test_list_in_id_order(stores):
    assert await stores.games.list() == []
    for name in ("a", "b", "c"):
        await stores.games.create(name)

    tables = await stores.games.list()
    assert [t.id for t in tables] == [1, 2, 3]
    assert [t.name for t in tables] == ["a", "b", "c"]


async def test_update_replaces_record(stores, players):
    table = await stores.games.create("Match1")
    table.white_username = "alice"
    table.rules_state.push_san("e4")

    await stores.games.update(table)

    stored = await stores.games.get(table.id)
    assert stored.white_username == "alice"
    assert stored.rules_state.fen() == table.rules_state.fen()


async def test_update_unknown_table(stores):
    table = await stores.games.create("Match1")
    table.id = 99

    with pytest.raises(NotFound):
        await stores.games.update(table)


async def test_returned_state_is_not_shared_with_store(stores):
    table = await stores.games.create("Match1")
    table.rules_state.push_san("e4")

    assert (await stores.games.get(table.id)).rules_state.fen() == chess.STARTING_FEN


async def test_rules_state_passes_through_unchanged(dict_stores):
    table = await dict_stores.games.create("Match1")
    assert table.rules_state == {"moves": [], "turn": "WHITE", "serial": 1}

    table.rules_state["moves"].append("e2e4")
    await dict_stores.games.update(table)

    assert (await dict_stores.games.get(table.id)).rules_state == {
        "moves": ["e2e4"], "turn": "WHITE", "serial": 1,
    }


async def test_claim_seat_fills_each_seat_once(stores, players):
    table = await stores.games.create("Match1")

    after_white = await stores.games.claim_seat(table.id, TeamColor.WHITE, "alice")
    assert after_white.white_username == "alice"
    assert after_white.black_username is None

    with pytest.raises(AlreadyTaken):
        await stores.games.claim_seat(table.id, TeamColor.WHITE, "bob")

    after_black = await stores.games.claim_seat(table.id, TeamColor.BLACK, "bob")
    assert (after_black.white_username, after_black.black_username) == ("alice", "bob")
    assert after_black.is_full()


async def test_claim_seat_unknown_table(stores, players):
    with pytest.raises(NotFound):
        await stores.games.claim_seat(7, TeamColor.BLACK, "alice")


async def test_concurrent_claims_for_different_colors_both_land(stores, players):
    table = await stores.games.create("Match1")

    await asyncio.gather(
        stores.games.claim_seat(table.id, TeamColor.WHITE, "alice"),
        stores.games.claim_seat(table.id, TeamColor.BLACK, "bob"),
    )

    stored = await stores.games.get(table.id)
    assert (stored.white_username, stored.black_username) == ("alice", "bob")


async def test_clear_restarts_numbering(stores):
    await stores.games.create("Match1")
    await stores.games.create("Match2")

    await stores.games.clear()

    assert await stores.games.list() == []
    assert (await stores.games.create("Again")).id == 1
