"""User-based collaborative filtering over implicit feedback.

Every tracked interaction (view, save, apply, reject) adds a signed score to the
user's per-item vector. Two users are similar when their vectors point the same
way on the items both have touched (cosine similarity over the intersection).
An unseen item is then scored by the similarity-weighted average of what the
nearest neighbours gave it.
"""
from __future__ import annotations

import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable

from jobmatch.decay import behavior_score
from jobmatch.log import get_logger
from jobmatch.models import ACTION_SCORES, BehaviorEvent
from jobmatch.stores import KeyValueStore

log = get_logger(__name__)

BEHAVIOR_KEY_PREFIX = "cf_behaviors_"
BEHAVIOR_LOG_LIMIT = 100
DEFAULT_NEIGHBOURS = 5


def behavior_key(user_id: str) -> str:
    return f"{BEHAVIOR_KEY_PREFIX}{user_id}"


@dataclass
class UserSimilarity:
    user_id: str
    similarity: float


class SimilarUserFinder(ABC):
    @abstractmethod
    def find(self, cf: CollaborativeFilter, user_id: str, limit: int) -> list[UserSimilarity]:
        pass


class BruteForceUserFinder(SimilarUserFinder):
    """Compares *user_id* against every known user: O(U) per call."""

    def find(self, cf: CollaborativeFilter, user_id: str, limit: int) -> list[UserSimilarity]:
        found: list[UserSimilarity] = []
        for other in cf.users():
            if other == user_id:
                continue
            sim = cf.similarity(user_id, other)
            if sim > 0:
                found.append(UserSimilarity(other, sim))
        found.sort(key=lambda s: (-s.similarity, s.user_id))
        return found[:limit]


class CollaborativeFilter:
    def __init__(
        self,
        finder: SimilarUserFinder | None = None,
        *,
        neighbours: int = DEFAULT_NEIGHBOURS,
        decay_lambda: float | None = None,
        now: float | None = None,
    ) -> None:
        self.behaviors: dict[str, list[BehaviorEvent]] = {}
        self.scores: dict[str, dict[str, float]] = {}
        self.finder = finder or BruteForceUserFinder()
        self.neighbours = neighbours
        self.decay_lambda = decay_lambda
        self.now = now

    def users(self) -> list[str]:
        return list(self.scores)

    def add_behavior(self, event: BehaviorEvent) -> None:
        self.behaviors.setdefault(event.user_id, []).append(event)

        # decayed filters also credit scroll depth and dwell time
        weight = event.score
        if self.decay_lambda is not None:
            weight = behavior_score(event, self.now, self.decay_lambda)

        user_scores = self.scores.setdefault(event.user_id, {})
        user_scores[event.item_id] = user_scores.get(event.item_id, 0.0) + weight

    def similarity(self, user_a: str, user_b: str) -> float:
        scores_a = self.scores.get(user_a)
        scores_b = self.scores.get(user_b)
        if not scores_a or not scores_b:
            return 0.0

        # sorted so the float sums do not depend on argument order
        common = sorted(scores_a.keys() & scores_b.keys())
        if not common:
            return 0.0

        dot = mag_a = mag_b = 0.0
        for item_id in common:
            a, b = scores_a[item_id], scores_b[item_id]
            dot += a * b
            mag_a += a * a
            mag_b += b * b
        if mag_a == 0 or mag_b == 0:
            return 0.0
        return max(-1.0, min(1.0, dot / math.sqrt(mag_a * mag_b)))

    def find_similar_users(self, user_id: str, limit: int = 10) -> list[UserSimilarity]:
        return self.finder.find(self, user_id, limit)

    def collaborative_score(self, user_id: str, item_id: str) -> float:
        # already-seen items are not recommended again
        if item_id in self.scores.get(user_id, {}):
            return 0.0

        weighted = 0.0
        total = 0.0
        for neighbour in self.find_similar_users(user_id, self.neighbours):
            their = self.scores.get(neighbour.user_id, {})
            if item_id in their:
                weighted += their[item_id] * neighbour.similarity
                total += neighbour.similarity
        return weighted / total if total > 0 else 0.0

    def get_recommendations(
        self, user_id: str, candidate_ids: Iterable[str], limit: int = 10
    ) -> list[str]:
        scored = [(item_id, self.collaborative_score(user_id, item_id)) for item_id in candidate_ids]
        ranked = sorted([s for s in scored if s[1] > 0], key=lambda s: -s[1])
        return [item_id for item_id, _ in ranked[:limit]]

    @classmethod
    def from_store(
        cls,
        store: KeyValueStore,
        *user_ids: str,
        limit: int = BEHAVIOR_LOG_LIMIT,
        **kwargs,
    ) -> CollaborativeFilter:
        """Rebuild a filter from the most recent *limit* events of each user."""
        cf = cls(**kwargs)
        for user_id in user_ids:
            stored = store.get(behavior_key(user_id)) or []
            if not isinstance(stored, list):
                log.warning("Behavior log for %s is not a list, skipping", user_id)
                continue
            loaded = 0
            for record in stored[-limit:]:
                try:
                    cf.add_behavior(BehaviorEvent.from_dict(record))
                except (KeyError, TypeError, ValueError) as exc:
                    log.warning("Skipping bad behavior record for %s: %s", user_id, exc)
                    continue
                loaded += 1
            log.debug("Loaded %d behavior event(s) for %s", loaded, user_id)
        return cf

    def save_to_store(
        self, store: KeyValueStore, user_id: str, limit: int = BEHAVIOR_LOG_LIMIT
    ) -> None:
        recent = self.behaviors.get(user_id, [])[-limit:]
        store.set(behavior_key(user_id), [e.to_dict() for e in recent])


def known_users(store) -> list[str]:
    """User ids with a behavior log in *store*; needs a store exposing keys()."""
    keys = getattr(store, "keys", None)
    if keys is None:
        return []
    return [k[len(BEHAVIOR_KEY_PREFIX):] for k in keys() if k.startswith(BEHAVIOR_KEY_PREFIX)]


def score_for_action(action: str) -> int:
    return ACTION_SCORES[action]


def create_behavior(
    user_id: str,
    item_id: str,
    action: str,
    timestamp: float | None = None,
    **extra,
) -> BehaviorEvent:
    return BehaviorEvent(
        user_id=user_id,
        item_id=item_id,
        action=action,
        timestamp=time.time() if timestamp is None else timestamp,
        score=float(score_for_action(action)),
        **extra,
    )


def track_behavior(
    store: KeyValueStore,
    user_id: str,
    item_id: str,
    action: str,
    timestamp: float | None = None,
    limit: int = BEHAVIOR_LOG_LIMIT,
    **extra,
) -> BehaviorEvent:
    """Record one interaction: load the user's log, append, save the bounded tail.

    *extra* carries optional engagement signals (``scroll_depth``, ``dwell_time``).
    """
    cf = CollaborativeFilter.from_store(store, user_id, limit=limit)
    event = create_behavior(user_id, item_id, action, timestamp, **extra)
    cf.add_behavior(event)
    cf.save_to_store(store, user_id, limit=limit)
    log.debug("Tracked %s %s → %s", user_id, action, item_id)
    return event
