import asyncio

import pytest

from chesslobby.errors import InvalidArgument, NotFound, Unauthorized
from chesslobby.models import User


@pytest.fixture
async def alice(stores):
    # the sql schema links tokens to users
    await stores.users.create(User("alice", "pw", "a@x"))
    return "alice"


async def test_issue_and_validate(stores, alice):
    token = await stores.tokens.issue(alice)

    assert isinstance(token, str) and len(token) >= 32
    assert await stores.tokens.validate(token) == "alice"


async def test_each_issue_mints_a_distinct_token(stores, alice):
    tokens = await asyncio.gather(*[stores.tokens.issue(alice) for _ in range(20)])

    assert len(set(tokens)) == 20
    for token in tokens:
        assert await stores.tokens.validate(token) == "alice"


async def test_issue_requires_username(stores):
    with pytest.raises(InvalidArgument):
        await stores.tokens.issue("")


@pytest.mark.parametrize("token", [None, "", "not-a-token"])
async def test_validate_unknown_token(stores, token):
    with pytest.raises(Unauthorized):
        await stores.tokens.validate(token)


async def test_revoke_only_removes_that_token(stores, alice):
    first = await stores.tokens.issue(alice)
    second = await stores.tokens.issue(alice)

    await stores.tokens.revoke(first)

    with pytest.raises(Unauthorized):
        await stores.tokens.validate(first)
    assert await stores.tokens.validate(second) == "alice"


async def test_revoke_twice_is_unauthorized(stores, alice):
    token = await stores.tokens.issue(alice)
    await stores.tokens.revoke(token)

    with pytest.raises(Unauthorized):
        await stores.tokens.revoke(token)
    with pytest.raises(Unauthorized):
        await stores.tokens.revoke(None)


async def test_clear_invalidates_everything(stores, alice):
    token = await stores.tokens.issue(alice)

    await stores.tokens.clear()

    with pytest.raises(Unauthorized):
        await stores.tokens.validate(token)


async def test_issue_for_unknown_user(stores):
    with pytest.raises(NotFound):
        await stores.tokens.issue("ghost")


async def test_sql_tokens_go_with_their_owner(backend, stores, alice):
    if backend != "sql":
        pytest.skip("relies on the ON DELETE CASCADE of the sql schema")
    token = await stores.tokens.issue(alice)

    await stores.users.clear()

    with pytest.raises(Unauthorized):
        await stores.tokens.validate(token)
