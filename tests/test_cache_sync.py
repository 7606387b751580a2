"""Client view cache and the cache synchronizer.

Learn: These run without any server — the synchronizer only sees a
ViewCache and a mutation result, exactly what it gets after a real write.
"""

import pytest

from deepthoughts.client.cache import ViewCache, ViewNotCached, view_key
from deepthoughts.client.sync import CacheSynchronizer, ViewUpdate, prepend_thought

FEED = view_key("thoughts")
ME = view_key("me")
ANN_PROFILE = view_key("user", username="ann")


def _thought(tid, username="ann", reactions=None):
    reactions = reactions or []
    return {
        "id": tid,
        "thoughtText": f"thought {tid}",
        "username": username,
        "createdAt": "2024-01-01T00:00:00Z",
        "reactions": reactions,
        "reactionCount": len(reactions),
    }


def _profile(thoughts, friends=None):
    friends = friends or []
    return {
        "id": "u1",
        "username": "ann",
        "email": "ann@example.com",
        "thoughts": thoughts,
        "friends": friends,
        "friendCount": len(friends),
    }


@pytest.fixture
def cache():
    return ViewCache()


@pytest.fixture
def sync(cache):
    return CacheSynchronizer(cache)


# ─── ViewCache ──────────────────────────────────────────


def test_view_key_ignores_variable_order_and_none():
    assert view_key("user", username="ann", x=None) == view_key("user", username="ann")
    assert view_key("thoughts", username=None) == view_key("thoughts")


def test_unpopulated_view_raises(cache):
    with pytest.raises(ViewNotCached):
        cache.read(FEED)


def test_views_hold_snapshots_by_value(cache):
    feed = [_thought("t1")]
    cache.write(FEED, feed)
    feed.append(_thought("t2"))
    assert len(cache.read(FEED)) == 1

    snapshot = cache.read(FEED)
    snapshot.clear()
    assert len(cache.read(FEED)) == 1


def test_populated_empty_view_is_not_unpopulated(cache):
    cache.write(FEED, [])
    assert cache.read(FEED) == []


# ─── addThought ─────────────────────────────────────────


def test_add_thought_with_only_feed_populated(cache, sync):
    t1, t2 = _thought("t1"), _thought("t2")
    cache.write(FEED, [t1])

    updated = sync.apply("addThought", t2)

    assert cache.read(FEED) == [t2, t1]
    assert not cache.has(ME)
    assert not cache.has(ANN_PROFILE)
    assert updated == [FEED]


def test_add_thought_with_feed_and_profile_populated(cache, sync):
    t1, t2 = _thought("t1"), _thought("t2")
    cache.write(FEED, [t1])
    cache.write(ME, _profile([t1]))
    cache.write(ANN_PROFILE, _profile([t1]))

    sync.apply("addThought", t2)

    assert cache.read(FEED) == [t2, t1]
    assert cache.read(ME)["thoughts"] == [t1, t2]
    assert cache.read(ANN_PROFILE)["thoughts"] == [t1, t2]


def test_add_thought_updates_authors_own_feed_only(cache, sync):
    cache.write(view_key("thoughts", username="ann"), [])
    cache.write(view_key("thoughts", username="bob"), [])

    sync.apply("addThought", _thought("t1", username="ann"))

    assert [t["id"] for t in cache.read(view_key("thoughts", username="ann"))] == ["t1"]
    assert cache.read(view_key("thoughts", username="bob")) == []


def test_prepend_does_not_duplicate():
    t1 = _thought("t1")
    assert prepend_thought([t1], t1) == [t1]


def test_no_views_populated_is_not_an_error(cache, sync):
    assert sync.apply("addThought", _thought("t1")) == []
    assert len(cache) == 0


# ─── addReaction ────────────────────────────────────────


def test_add_reaction_replaces_thought_everywhere(cache, sync):
    t1, t2 = _thought("t1"), _thought("t2")
    reacted = _thought("t1", reactions=[{"id": "r1", "reactionBody": "hi", "username": "bob"}])
    cache.write(FEED, [t2, t1])
    cache.write(view_key("thought", id="t1"), t1)
    cache.write(ME, _profile([t1, t2]))

    sync.apply("addReaction", reacted)

    assert cache.read(FEED) == [t2, reacted]
    assert cache.read(view_key("thought", id="t1")) == reacted
    assert cache.read(ME)["thoughts"] == [reacted, t2]


def test_missing_reaction_target_changes_nothing(cache, sync):
    cache.write(FEED, [_thought("t1")])
    assert sync.apply("addReaction", None) == []
    assert cache.read(FEED) == [_thought("t1")]


# ─── addFriend ──────────────────────────────────────────


def test_add_friend_updates_friend_list(cache, sync):
    cache.write(ME, _profile([_thought("t1")]))
    bob = {"id": "u2", "username": "bob", "email": "bob@example.com"}
    result = _profile([_thought("t1")], friends=[bob])

    sync.apply("addFriend", result)

    me = cache.read(ME)
    assert me["friends"] == [bob]
    assert me["friendCount"] == 1
    assert me["thoughts"] == [_thought("t1")]


# ─── Failure isolation ──────────────────────────────────


def test_one_broken_view_does_not_block_others(cache, sync):
    t1, t2 = _thought("t1"), _thought("t2")
    cache.write(FEED, [t1])
    cache.write(ME, {"unexpected": "shape"})  # no "thoughts" key
    cache.write(ANN_PROFILE, _profile([t1]))

    updated = sync.apply("addThought", t2)

    assert cache.read(FEED) == [t2, t1]
    assert cache.read(ME) == {"unexpected": "shape"}
    assert cache.read(ANN_PROFILE)["thoughts"] == [t1, t2]
    assert updated == [FEED, ANN_PROFILE]


def test_custom_rules_run_in_order(cache):
    seen = []

    def record(name):
        def merge(snapshot, entity):
            seen.append(name)
            return snapshot

        return merge

    cache.write(view_key("a"), 1)
    cache.write(view_key("c"), 3)
    sync = CacheSynchronizer(
        cache,
        rules={
            "op": [
                ViewUpdate(lambda e: view_key("a"), record("a")),
                ViewUpdate(lambda e: view_key("b"), record("b")),
                ViewUpdate(lambda e: view_key("c"), record("c")),
            ]
        },
    )

    sync.apply("op", {"id": "x"})
    assert seen == ["a", "c"]


def test_unknown_operation_touches_nothing(cache, sync):
    cache.write(FEED, [])
    assert sync.apply("login", {"token": "t", "user": {}}) == []
