import random

import pytest

from jobmatch import engine
from jobmatch.bandit import BanditManager
from jobmatch.collaborative import behavior_key, track_behavior
from jobmatch.config import MatchSettings
from jobmatch.models import PriorityItem
from jobmatch.sources import FileSource, MockSource, get_sources


@pytest.fixture
def items():
    return MockSource().fetch()


def test_mock_source_items(items):
    assert len(items) == 4
    assert {i.source_id for i in items} == {"테크스타트", "핀테크랩", "커머스원"}


def test_get_sources_prefers_item_file(tmp_path):
    path = tmp_path / "items.yaml"
    path.write_text("items:\n  - id: a\n    title: A\n  - title: no id\n", encoding="utf-8")

    sources = get_sources(lambda key: str(path) if key == "JOBMATCH_ITEMS_PATH" else "")
    assert isinstance(sources[0], FileSource)
    assert [i.id for i in sources[0].fetch()] == ["a"]
    assert isinstance(get_sources(lambda key: "")[0], MockSource)


@pytest.mark.parametrize("mode", ["hybrid", "diversified", "content"])
def test_rank_items_modes(items, profile, store, mode):
    ranked = engine.rank_items(items, profile, store, settings=MatchSettings(), mode=mode)
    assert ranked
    assert ranked[0].item.id == "job-1"
    scores = [s.score for s in ranked]
    assert scores == sorted(scores, reverse=True)


def test_rank_items_uses_stored_behavior(items, profile, store):
    track_behavior(store, profile.id, "job-2", "view", timestamp=1)
    track_behavior(store, "neighbour", "job-2", "view", timestamp=1)
    track_behavior(store, "neighbour", "job-4", "apply", timestamp=1)

    settings = MatchSettings(threshold=0)
    ranked = engine.rank_items(items, profile, store, settings=settings, mode="hybrid")
    by_id = {s.item.id: s.result for s in ranked}
    assert by_id["job-4"].collaborative_score == pytest.approx(3.0)


def test_rank_items_priority_mode(items, profile, store):
    profile.priorities = [PriorityItem("skills", "보유 스킬", weight=100)]
    ranked = engine.rank_items(items, profile, store, settings=MatchSettings(), mode="priority")
    assert ranked[0].score == 100


def test_run_without_writing(tmp_path, monkeypatch, store):
    profile_path = tmp_path / "profile.yaml"
    profile_path.write_text("id: u1\nskills: [React]\nlocations: [서울]\n", encoding="utf-8")
    monkeypatch.setattr(engine, "ensure_dirs", lambda: None)
    monkeypatch.delenv("JOBMATCH_ITEMS_PATH", raising=False)

    result = engine.run(write=False, profile_path=profile_path, store=store)

    assert result["mode"] == "diversified"
    assert result["items_found"] == 4
    assert result["report_path"] is None


def test_broken_item_file_does_not_abort_fetch(tmp_path, monkeypatch):
    path = tmp_path / "items.yaml"
    path.write_text("- id: a\n  title: [unclosed\n", encoding="utf-8")
    monkeypatch.setenv("JOBMATCH_ITEMS_PATH", str(path))

    assert engine._fetch_items(10) == []


def test_bandit_mode_returns_each_candidate_once(items, profile, store):
    ranked = engine.rank_items(
        items, profile, store, settings=MatchSettings(limit=3), mode="bandit", rng=random.Random(7)
    )
    ids = [s.item.id for s in ranked]
    assert len(ids) == 3
    assert len(set(ids)) == 3
    assert all(s.score == pytest.approx(50) for s in ranked)


def test_record_action_feeds_log_and_bandit(store):
    engine.record_action(store, "u1", "job-1", "apply", timestamp=1, dwell_time=90)
    assert engine.record_action(store, "u1", "job-1", "click") is None

    assert store.get(behavior_key("u1"))[0]["dwell_time"] == 90
    arm = BanditManager(store).get_bandit("u1").arms["job-1"]
    assert arm.alpha == pytest.approx(1 + 3.0 + 1.0)
    assert arm.total_pulls == 2
