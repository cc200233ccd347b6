"""
Recommendation run.

Runs: load settings/profile → fetch items → rebuild behavior vectors → rank → report.
"""
from __future__ import annotations

import random
from pathlib import Path
from typing import Any

from jobmatch.bandit import BanditManager
from jobmatch.collaborative import CollaborativeFilter, known_users, track_behavior
from jobmatch.config import DATA_DIR, ensure_dirs, get_env, load_profile, load_settings
from jobmatch.content import FEED_WEIGHTS, ContentScorer
from jobmatch.decay import resolve_lambda
from jobmatch.hybrid import HybridRecommender
from jobmatch.log import get_logger
from jobmatch.models import ACTION_SCORES, BehaviorEvent, Item, ScoredItem, ScoreResult, UserProfile
from jobmatch.priority import PriorityScorer
from jobmatch.report import build_report, write_report
from jobmatch.sources import get_sources
from jobmatch.stores import JsonFileStore, KeyValueStore

log = get_logger(__name__)

BEHAVIOR_STORE_PATH: Path = DATA_DIR / "behaviors.json"


def _fetch_items(limit: int) -> list[Item]:
    items: list[Item] = []
    seen: set[str] = set()
    for source in get_sources(get_env):
        name = source.__class__.__name__
        try:
            fetched = source.fetch(limit=limit)
        except Exception as exc:
            log.error("[%s] FAILED: %s", name, exc)
            continue
        for item in fetched:
            if item.id not in seen:
                seen.add(item.id)
                items.append(item)
    return items


def _bandit_rank(
    items: list[Item],
    profile: UserProfile,
    store: KeyValueStore,
    limit: int,
    rng: random.Random | None,
) -> list[ScoredItem]:
    manager = BanditManager(store, rng=rng)
    by_id = {item.id: item for item in items}
    picked = manager.recommend(profile.id, by_id, count=limit)
    bandit = manager.get_bandit(profile.id)
    ranked: list[ScoredItem] = []
    for item_id in picked:
        expected = bandit.expected_value(item_id) * 100
        result = ScoreResult(item_id=item_id, content_score=0.0, final_score=expected)
        ranked.append(ScoredItem(by_id[item_id], result))
    return ranked


def rank_items(
    items: list[Item],
    profile: UserProfile,
    store: KeyValueStore,
    *,
    settings=None,
    mode: str = "hybrid",
    rng: random.Random | None = None,
) -> list[ScoredItem]:
    """Rank *items* for *profile* by mode: hybrid, diversified, content, priority or bandit."""
    settings = settings or load_settings()

    if mode == "bandit":
        return _bandit_rank(items, profile, store, settings.limit, rng)

    if mode == "priority":
        return PriorityScorer().rank(items, profile, limit=settings.limit)

    users = set(known_users(store)) | {profile.id}
    cf = CollaborativeFilter.from_store(
        store,
        *sorted(users),
        limit=settings.behavior_log_limit,
        neighbours=settings.neighbours,
        decay_lambda=resolve_lambda(settings.decay_lambda, settings.decay_half_life_days),
    )
    recommender = HybridRecommender(
        cf,
        ContentScorer(settings.hybrid_weights or None),
        content_weight=settings.content_weight,
        collaborative_weight=settings.collaborative_weight,
        threshold=settings.threshold,
    )
    if mode == "diversified":
        return recommender.recommend_diversified(
            items, profile, limit=settings.limit, max_per_source=settings.max_per_source
        )
    if mode == "content":
        recommender.content_scorer = ContentScorer(settings.feed_weights or FEED_WEIGHTS)
        return recommender.recommend(items, profile, include_collaborative=False)[: settings.limit]
    return recommender.recommend(items, profile)[: settings.limit]


def record_action(
    store: KeyValueStore,
    user_id: str,
    item_id: str,
    action: str,
    timestamp: float | None = None,
    **extra,
) -> BehaviorEvent | None:
    """Feed one user action to the behavior log and the user's bandit.

    Bandit-only actions such as ``click`` are not written to the behavior log.
    """
    event = None
    if action in ACTION_SCORES:
        event = track_behavior(store, user_id, item_id, action, timestamp, **extra)
    BanditManager(store).record_action(user_id, item_id, action)
    return event


def run(
    *,
    mode: str | None = None,
    max_items: int = 100,
    write: bool = True,
    profile_path: Path | None = None,
    store: KeyValueStore | None = None,
) -> dict[str, Any]:
    ensure_dirs()
    settings = load_settings()
    profile = load_profile(profile_path)
    store = store if store is not None else JsonFileStore(BEHAVIOR_STORE_PATH)

    if mode is None:
        mode = "priority" if any(p.enabled for p in profile.priorities) else "diversified"

    items = _fetch_items(max_items)
    log.info("Total unique items: %d", len(items))

    ranked = rank_items(items, profile, store, settings=settings, mode=mode)

    report = build_report(ranked, user_id=profile.id, mode=mode)
    report_path = write_report(report, profile.id) if write else None

    log.info("Run complete — items=%d, ranked=%d, mode=%s", len(items), len(ranked), mode)
    return {
        "user_id": profile.id,
        "mode": mode,
        "items_found": len(items),
        "ranked_count": len(ranked),
        "top": [(s.item.id, round(s.score, 2)) for s in ranked[:10]],
        "report_path": str(report_path) if report_path else None,
    }


if __name__ == "__main__":
    result = run()
    log.info("Items found: %d, ranked: %d", result["items_found"], result["ranked_count"])
    if result["report_path"]:
        log.info("Report: %s", result["report_path"])
