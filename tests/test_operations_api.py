"""Operations API — the single query/mutation endpoint over HTTP.

Learn: Tests cover:
1. Public reads work anonymously and with junk credentials
2. Every credential carrier (body, query, header) and their precedence
3. Mutations reject anonymous callers with UNAUTHENTICATED
4. Missing/invalid variables reject with BAD_USER_INPUT before business logic
5. Login failures are indistinguishable
6. Result shapes (camelCase, derived counts, no password)
"""

import pytest


# ═══════════════════════════════════════════════════════════
# Public reads
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_anonymous_can_list_thoughts(call):
    r = await call("thoughts")
    assert r.status_code == 200
    assert r.json() == {"data": {"thoughts": []}}


@pytest.mark.asyncio
async def test_public_read_with_garbage_token_still_succeeds(call, signup):
    token, _ = await signup("ann")
    await call("addThought", {"thoughtText": "visible to all"}, token=token)

    r = await call("thoughts", token="not-a-real-token")
    assert r.status_code == 200
    assert [t["thoughtText"] for t in r.json()["data"]["thoughts"]] == ["visible to all"]


@pytest.mark.asyncio
async def test_lookup_misses_return_null(call):
    r = await call("thought", {"id": "missing"})
    assert r.status_code == 200
    assert r.json()["data"]["thought"] is None

    r = await call("user", {"username": "ghost"})
    assert r.json()["data"]["user"] is None


@pytest.mark.asyncio
async def test_thought_shape(call, signup):
    token, _ = await signup("ann")
    r = await call("addThought", {"thoughtText": "Shape check"}, token=token)
    thought = r.json()["data"]["addThought"]

    assert set(thought) == {"id", "thoughtText", "username", "createdAt", "reactions", "reactionCount"}
    assert thought["username"] == "ann"
    assert thought["reactionCount"] == 0

    r = await call("thought", {"id": thought["id"]})
    assert r.json()["data"]["thought"] == thought


@pytest.mark.asyncio
async def test_users_never_expose_password(call, signup):
    await signup("ann")
    r = await call("users")
    users = r.json()["data"]["users"]
    assert len(users) == 1
    assert set(users[0]) == {"id", "username", "email", "thoughts", "friends", "friendCount"}


@pytest.mark.asyncio
async def test_thoughts_filtered_by_username(call, signup):
    ann, _ = await signup("ann")
    bob, _ = await signup("bob")
    await call("addThought", {"thoughtText": "from ann"}, token=ann)
    await call("addThought", {"thoughtText": "from bob"}, token=bob)

    r = await call("thoughts", {"username": "bob"})
    assert [t["thoughtText"] for t in r.json()["data"]["thoughts"]] == ["from bob"]


# ═══════════════════════════════════════════════════════════
# Credential carriers
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_header_token(call, signup):
    token, _ = await signup("ann")
    r = await call("me", token=token)
    assert r.status_code == 200
    assert r.json()["data"]["me"]["username"] == "ann"


@pytest.mark.asyncio
async def test_me_with_body_token(client, signup):
    token, _ = await signup("ann")
    r = await client.post("/api/v1/ops/me", json={"variables": {}, "token": token})
    assert r.status_code == 200
    assert r.json()["data"]["me"]["username"] == "ann"


@pytest.mark.asyncio
async def test_me_with_query_token(client, signup):
    token, _ = await signup("ann")
    r = await client.post("/api/v1/ops/me", params={"token": token}, json={})
    assert r.status_code == 200
    assert r.json()["data"]["me"]["username"] == "ann"


@pytest.mark.asyncio
async def test_query_token_takes_precedence_over_header(client, signup):
    token, _ = await signup("ann")
    r = await client.post(
        "/api/v1/ops/me",
        params={"token": "garbage"},
        headers={"Authorization": f"Bearer {token}"},
        json={},
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_body_token_takes_precedence_over_header(client, signup):
    ann, _ = await signup("ann")
    bob, _ = await signup("bob")
    r = await client.post(
        "/api/v1/ops/me",
        json={"token": bob},
        headers={"Authorization": f"Bearer {ann}"},
    )
    assert r.json()["data"]["me"]["username"] == "bob"


# ═══════════════════════════════════════════════════════════
# Authorization
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name,variables",
    [
        ("me", {}),
        ("addThought", {"thoughtText": "anon"}),
        ("addReaction", {"thoughtId": "t1", "reactionBody": "anon"}),
        ("addFriend", {"friendId": "u1"}),
    ],
)
async def test_actor_operations_reject_anonymous(call, name, variables):
    r = await call(name, variables)
    assert r.status_code == 401
    assert r.json() == {
        "errors": [{"message": "You need to be logged in!", "code": "UNAUTHENTICATED"}]
    }


@pytest.mark.asyncio
async def test_unauthenticated_mutation_has_no_side_effect(call):
    await call("addThought", {"thoughtText": "should not exist"}, token="expired-or-bogus")
    r = await call("thoughts")
    assert r.json()["data"]["thoughts"] == []


# ═══════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_missing_required_variable_is_bad_user_input(call, signup):
    token, _ = await signup("ann")
    r = await call("addThought", {}, token=token)
    assert r.status_code == 422
    error = r.json()["errors"][0]
    assert error["code"] == "BAD_USER_INPUT"
    assert error["details"][0]["loc"] == ["thoughtText"]


@pytest.mark.asyncio
async def test_validation_runs_before_auth(call):
    """Missing variables are rejected as bad input, distinct from UNAUTHENTICATED."""
    r = await call("addThought", {})
    assert r.status_code == 422
    assert r.json()["errors"][0]["code"] == "BAD_USER_INPUT"


@pytest.mark.asyncio
async def test_thought_text_too_long(call, signup):
    token, _ = await signup("ann")
    r = await call("addThought", {"thoughtText": "x" * 281}, token=token)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_unknown_variable_rejected(call):
    r = await call("thoughts", {"author": "ann"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_unknown_operation(call):
    r = await call("deleteEverything")
    assert r.status_code == 404
    assert r.json()["errors"][0]["code"] == "UNKNOWN_OPERATION"


@pytest.mark.asyncio
async def test_bad_user_input_does_not_echo_password(call):
    r = await call("addUser", {"username": "ann", "email": "not-an-email", "password": "hunter22"})
    assert r.status_code == 422
    assert "hunter22" not in r.text


# ═══════════════════════════════════════════════════════════
# Accounts
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_add_user_returns_token_and_user(call):
    r = await call(
        "addUser", {"username": "ann", "email": "ann@example.com", "password": "password123"}
    )
    assert r.status_code == 200
    payload = r.json()["data"]["addUser"]
    assert payload["token"]
    assert payload["user"]["username"] == "ann"
    assert payload["user"]["friendCount"] == 0


@pytest.mark.asyncio
async def test_add_user_duplicate_username_conflicts(call, signup):
    await signup("ann")
    r = await call(
        "addUser", {"username": "ann", "email": "other@example.com", "password": "password123"}
    )
    assert r.status_code == 409
    assert r.json()["errors"][0]["code"] == "CONFLICT"


@pytest.mark.asyncio
async def test_login_success(call, signup):
    await signup("ann", password="correct-horse")
    r = await call("login", {"email": "ann@example.com", "password": "correct-horse"})
    assert r.status_code == 200
    assert r.json()["data"]["login"]["user"]["username"] == "ann"


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_email_identical(call, signup):
    await signup("ann", password="correct-horse")

    wrong = await call("login", {"email": "ann@example.com", "password": "battery-staple"})
    unknown = await call("login", {"email": "ghost@example.com", "password": "correct-horse"})

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()
    assert wrong.json()["errors"][0]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_password_whitespace_is_significant(call):
    r = await call(
        "addUser",
        {"username": "  ann ", "email": " Ann@Example.com ", "password": "  spaced out  "},
    )
    assert r.status_code == 200
    assert r.json()["data"]["addUser"]["user"]["username"] == "ann"

    trimmed = await call("login", {"email": "ann@example.com", "password": "spaced out"})
    assert trimmed.status_code == 401

    exact = await call("login", {"email": " ann@example.com", "password": "  spaced out  "})
    assert exact.status_code == 200


# ═══════════════════════════════════════════════════════════
# Reactions & friends
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_add_reaction_returns_updated_thought(call, signup):
    ann, _ = await signup("ann")
    bob, _ = await signup("bob")
    r = await call("addThought", {"thoughtText": "React!"}, token=ann)
    thought = r.json()["data"]["addThought"]

    r = await call("addReaction", {"thoughtId": thought["id"], "reactionBody": "wow"}, token=bob)
    updated = r.json()["data"]["addReaction"]

    assert updated["id"] == thought["id"]
    assert len(updated["reactions"]) == len(thought["reactions"]) + 1
    assert updated["reactionCount"] == 1
    assert updated["reactions"][0]["username"] == "bob"
    assert updated["reactions"][0]["reactionBody"] == "wow"


@pytest.mark.asyncio
async def test_add_friend_twice(call, signup):
    ann, _ = await signup("ann")
    _, bob = await signup("bob")

    await call("addFriend", {"friendId": bob["id"]}, token=ann)
    r = await call("addFriend", {"friendId": bob["id"]}, token=ann)

    me = r.json()["data"]["addFriend"]
    assert me["username"] == "ann"
    assert me["friendCount"] == 1
    assert [f["id"] for f in me["friends"]] == [bob["id"]]
