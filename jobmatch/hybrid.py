"""Hybrid recommender: content-based score blended with the collaborative score."""
from __future__ import annotations

from jobmatch.collaborative import CollaborativeFilter
from jobmatch.content import ContentScorer
from jobmatch.log import get_logger
from jobmatch.models import Item, ScoredItem, ScoreResult, UserProfile

log = get_logger(__name__)

DEFAULT_THRESHOLD = 20.0


class HybridRecommender:
    def __init__(
        self,
        collaborative_filter: CollaborativeFilter | None = None,
        content_scorer: ContentScorer | None = None,
        *,
        content_weight: float = 0.6,
        collaborative_weight: float = 0.4,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        self.collaborative_filter = collaborative_filter or CollaborativeFilter()
        self.content_scorer = content_scorer or ContentScorer()
        self.threshold = threshold
        self.set_weights(content_weight, collaborative_weight)

    def set_weights(self, content_weight: float, collaborative_weight: float) -> None:
        """Set the blend; the two weights are rescaled to sum to 1."""
        if content_weight < 0 or collaborative_weight < 0:
            raise ValueError("Blend weights must be non-negative")
        total = content_weight + collaborative_weight
        if total <= 0:
            raise ValueError("At least one blend weight must be positive")
        self.content_weight = content_weight / total
        self.collaborative_weight = collaborative_weight / total

    def score(
        self, item: Item, profile: UserProfile, include_collaborative: bool = True
    ) -> ScoreResult:
        content = self.content_scorer.score(item, profile)
        result = ScoreResult(
            item_id=item.id,
            content_score=content.total,
            final_score=content.total,
            breakdown=content.breakdown,
            matched_skills=content.matched_skills,
            missing_skills=content.missing_skills,
            reasons=list(content.reasons),
        )
        if include_collaborative:
            collab = self.collaborative_filter.collaborative_score(profile.id, item.id)
            result.collaborative_score = collab
            result.final_score = (
                content.total * self.content_weight + collab * self.collaborative_weight
            )
            if collab > 0:
                result.reasons.append("비슷한 사용자들이 관심을 보인 공고")
        return result

    def recommend(
        self,
        items: list[Item],
        profile: UserProfile,
        include_collaborative: bool = True,
    ) -> list[ScoredItem]:
        scored = [ScoredItem(item, self.score(item, profile, include_collaborative)) for item in items]
        kept = [s for s in scored if s.score >= self.threshold]
        kept.sort(key=lambda s: -s.score)
        log.info(
            "Ranked %d items → %d above %.0f threshold (collaborative=%s)",
            len(items), len(kept), self.threshold, include_collaborative,
        )
        return kept

    def recommend_diversified(
        self,
        items: list[Item],
        profile: UserProfile,
        limit: int = 20,
        max_per_source: int = 3,
    ) -> list[ScoredItem]:
        """Ranked list with at most *max_per_source* items per company or team."""
        counts: dict[str, int] = {}
        diversified: list[ScoredItem] = []
        for scored in self.recommend(items, profile, include_collaborative=True):
            if len(diversified) >= limit:
                break
            source = scored.item.source_id or f"item:{scored.item.id}"
            if counts.get(source, 0) < max_per_source:
                diversified.append(scored)
                counts[source] = counts.get(source, 0) + 1
        return diversified
