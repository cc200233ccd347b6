import math

import pytest

from jobmatch.collaborative import (
    CollaborativeFilter,
    SimilarUserFinder,
    UserSimilarity,
    behavior_key,
    create_behavior,
    known_users,
    score_for_action,
    track_behavior,
)
from jobmatch.decay import SECONDS_PER_DAY


def _cf(*events):
    cf = CollaborativeFilter()
    for user, item, action in events:
        cf.add_behavior(create_behavior(user, item, action, timestamp=1_700_000_000))
    return cf


@pytest.fixture
def community():
    return _cf(
        ("u1", "j1", "view"),
        ("u1", "j2", "save"),
        ("u2", "j1", "view"),
        ("u2", "j2", "save"),
        ("u2", "j3", "apply"),
        ("u3", "j1", "view"),
        ("u3", "j3", "view"),
        ("u4", "j1", "reject"),
        ("u4", "j3", "apply"),
    )


def test_action_scores():
    assert [score_for_action(a) for a in ("view", "save", "apply", "reject")] == [1, 2, 3, -2]


def test_add_behavior_accumulates_signed_scores():
    cf = _cf(("u1", "j1", "view"), ("u1", "j1", "apply"), ("u1", "j2", "reject"), ("u1", "j2", "reject"))
    assert cf.scores["u1"] == {"j1": 4, "j2": -4}
    assert len(cf.behaviors["u1"]) == 4


def test_similarity_is_symmetric():
    cf = _cf(
        ("a", "j1", "view"), ("a", "j2", "apply"), ("a", "j3", "reject"),
        ("b", "j1", "save"), ("b", "j2", "view"), ("b", "j3", "save"), ("b", "j4", "apply"),
    )
    assert cf.similarity("a", "b") == cf.similarity("b", "a")


def test_identical_vectors_have_similarity_one():
    cf = _cf(("a", "j1", "view"), ("a", "j2", "apply"), ("b", "j1", "view"), ("b", "j2", "apply"))
    assert cf.similarity("a", "b") == pytest.approx(1.0)


def test_similarity_guards():
    cf = _cf(("a", "j1", "view"), ("b", "j2", "view"))
    assert cf.similarity("a", "b") == 0
    assert cf.similarity("a", "nobody") == 0


def test_find_similar_users_skips_self_and_negative(community):
    similar = community.find_similar_users("u1")
    ids = [s.user_id for s in similar]
    assert "u1" not in ids
    assert "u4" not in ids
    assert ids[:2] == ["u2", "u3"]
    assert all(s.similarity > 0 for s in similar)


def test_collaborative_score_is_zero_for_seen_items(community):
    assert community.collaborative_score("u1", "j1") == 0
    assert community.collaborative_score("u1", "j2") == 0


def test_collaborative_score_weighted_average(community):
    # u2 (sim 1.0) gave j3 a 3, u3 (sim 1.0) gave it a 1
    assert community.collaborative_score("u1", "j3") == pytest.approx(2.0)
    assert community.collaborative_score("u1", "unknown") == 0


def test_get_recommendations(community):
    assert community.get_recommendations("u1", ["j1", "j3", "j9"]) == ["j3"]
    assert community.get_recommendations("u1", ["j3"], limit=0) == []


def test_custom_finder_is_used():
    class FixedFinder(SimilarUserFinder):
        def find(self, cf, user_id, limit):
            return [UserSimilarity("u3", 0.5)]

    cf = _cf(("u1", "j1", "view"), ("u3", "j9", "apply"))
    cf.finder = FixedFinder()
    assert cf.collaborative_score("u1", "j9") == pytest.approx(3.0)


def test_store_round_trip_keeps_most_recent(store):
    cf = CollaborativeFilter()
    for n in range(150):
        cf.add_behavior(create_behavior("u1", f"j{n}", "view", timestamp=n))
    cf.save_to_store(store, "u1")

    saved = store.get(behavior_key("u1"))
    assert len(saved) == 100
    assert saved[-1]["item_id"] == "j149"

    reloaded = CollaborativeFilter.from_store(store, "u1", limit=10)
    assert list(reloaded.scores["u1"]) == [f"j{n}" for n in range(140, 150)]


def test_from_store_skips_bad_records(store):
    store.set(behavior_key("u1"), [
        {"user_id": "u1", "item_id": "j1", "action": "save", "timestamp": 1},
        {"user_id": "u1", "action": "view"},
        {"user_id": "u1", "item_id": "j2", "action": "teleport"},
    ])
    store.set(behavior_key("u2"), "not a list")

    cf = CollaborativeFilter.from_store(store, "u1", "u2", "u3")
    assert cf.scores == {"u1": {"j1": 2}}
    assert sorted(known_users(store)) == ["u1", "u2"]


def test_track_behavior_appends_to_log(store):
    track_behavior(store, "u1", "j1", "view", timestamp=10)
    track_behavior(store, "u1", "j1", "apply", timestamp=20)
    cf = CollaborativeFilter.from_store(store, "u1")
    assert cf.scores["u1"]["j1"] == 4


def test_decayed_filter_discounts_old_events():
    now = 1_700_000_000
    cf = CollaborativeFilter(decay_lambda=0.05, now=now)
    cf.add_behavior(create_behavior("u1", "j1", "apply", timestamp=now - 14 * SECONDS_PER_DAY))
    assert cf.scores["u1"]["j1"] == pytest.approx(3 * math.exp(-0.7))


def test_decayed_filter_credits_engagement_signals():
    now = 1_700_000_000
    cf = CollaborativeFilter(decay_lambda=0.05, now=now)
    cf.add_behavior(create_behavior("u1", "j1", "apply", timestamp=now, scroll_depth=100, dwell_time=120))
    assert cf.scores["u1"]["j1"] == pytest.approx(3 + 1.0 + 1.5)


def test_track_behavior_keeps_engagement_signals(store):
    track_behavior(store, "u1", "j1", "view", timestamp=10, scroll_depth=80, dwell_time=45)
    saved = store.get(behavior_key("u1"))
    assert saved[0]["scroll_depth"] == 80
    assert saved[0]["dwell_time"] == 45
