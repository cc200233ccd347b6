"""Content-based scoring: weighted sum of the feature scorers."""
from __future__ import annotations

from dataclasses import dataclass, field

from jobmatch.features import SCORERS
from jobmatch.log import get_logger
from jobmatch.models import Item, UserProfile

log = get_logger(__name__)

DIMENSIONS: tuple[str, ...] = tuple(SCORERS)

# Full-credit maxima per dimension; each table sums to 100.
HYBRID_WEIGHTS: dict[str, float] = {
    "industry": 30,
    "skills": 25,
    "location": 15,
    "salary": 15,
    "work_type": 10,
    "experience": 5,
}

FEED_WEIGHTS: dict[str, float] = {
    "industry": 25,
    "skills": 25,
    "location": 15,
    "salary": 15,
    "work_type": 10,
    "experience": 10,
}


@dataclass
class ContentScore:
    total: float
    breakdown: dict[str, float]
    reasons: list[str] = field(default_factory=list)
    matched_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)


def validate_weights(weights: dict[str, float]) -> dict[str, float]:
    missing = [d for d in DIMENSIONS if d not in weights]
    unknown = [k for k in weights if k not in DIMENSIONS]
    if missing or unknown:
        raise ValueError(f"Weight table mismatch: missing={missing} unknown={unknown}")
    if any(w < 0 for w in weights.values()):
        raise ValueError("Weights must be non-negative")
    total = sum(weights.values())
    if abs(total - 100) > 1e-6:
        raise ValueError(f"Weights must sum to 100, got {total}")
    return {d: float(weights[d]) for d in DIMENSIONS}


class ContentScorer:
    def __init__(self, weights: dict[str, float] | None = None) -> None:
        self.weights = validate_weights(weights or HYBRID_WEIGHTS)

    def score(self, item: Item, profile: UserProfile) -> ContentScore:
        breakdown: dict[str, float] = {}
        reasons: list[str] = []
        matched: list[str] = []
        missing: list[str] = []

        for dim in DIMENSIONS:
            result = SCORERS[dim](item, profile, cap=self.weights[dim])
            breakdown[dim] = result.score
            if result.score > 0 and result.reason:
                reasons.append(f"{result.reason} (+{round(result.score)}점)")
            if dim == "skills":
                matched, missing = result.matched, result.missing

        total = sum(breakdown.values())
        log.debug("Content score %s/%s = %.1f", profile.id, item.id, total)
        return ContentScore(
            total=total,
            breakdown=breakdown,
            reasons=reasons,
            matched_skills=matched,
            missing_skills=missing,
        )
