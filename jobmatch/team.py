"""Seven-factor matching of a user against team recruitment postings."""
from __future__ import annotations

from jobmatch.features import (
    EXPERIENCE_RANGES,
    canonical_work_types,
    classify_experience,
    experience_fits,
)
from jobmatch.log import get_logger
from jobmatch.models import Item, ScoredItem, ScoreResult, UserProfile

log = get_logger(__name__)

TEAM_FACTORS: dict[str, int] = {
    "title": 20,
    "required_skills": 25,
    "preferred_skills": 10,
    "experience": 15,
    "location": 10,
    "culture": 10,
    "personality": 10,
}

ONLINE_MARKERS = ("online", "온라인", "remote", "원격", "재택")
_TIERS = ("new", "mid", "senior")


def _norm(values: list[str]) -> list[str]:
    return [v.lower().strip() for v in values if v and v.strip()]


def _skill_ratio(mine: list[str], wanted: list[str]) -> tuple[float, list[str], list[str]]:
    matched = [w for w in wanted if any(m in w.lower() or w.lower() in m for m in mine)]
    missing = [w for w in wanted if w not in matched]
    return len(matched) / len(wanted), matched, missing


class TeamMatcher:
    def __init__(self, factors: dict[str, int] | None = None) -> None:
        self.factors = dict(factors or TEAM_FACTORS)

    def _title(self, posting: Item, profile: UserProfile) -> float:
        cap = self.factors["title"]
        desired = (profile.desired_job or "").lower().strip()
        title = posting.title.lower()
        if not desired or not title:
            return 0.0
        if desired in title or title in desired:
            return cap
        words = {w for w in desired.split() if len(w) >= 2}
        if words & set(title.split()):
            return cap * 0.6
        if desired in posting.description.lower():
            return cap * 0.4
        return 0.0

    def _experience(self, posting: Item, profile: UserProfile) -> float:
        cap = self.factors["experience"]
        tier = classify_experience(posting.experience_level)
        if tier is None or tier == "any":
            return cap
        years = profile.effective_years
        if years is None:
            return 0.0
        if experience_fits(years, tier):
            return cap
        # one tier off still earns partial credit
        nearest = min(
            _TIERS,
            key=lambda t: 0 if experience_fits(years, t) else min(
                abs(years - EXPERIENCE_RANGES[t][0]), abs(years - EXPERIENCE_RANGES[t][1])
            ),
        )
        if abs(_TIERS.index(nearest) - _TIERS.index(tier)) == 1:
            return cap * 0.5
        return 0.0

    def _location(self, posting: Item, profile: UserProfile) -> float:
        cap = self.factors["location"]
        where = (posting.location or "").lower()
        if any(m in where for m in ONLINE_MARKERS):
            return cap
        wanted: set[str] = set()
        for wt in profile.work_types:
            wanted |= canonical_work_types(wt)
        if wanted & canonical_work_types(posting.work_type):
            return cap
        prefs = _norm(profile.locations)
        if not where or not prefs:
            return 0.0
        if any(p in where or where in p for p in prefs):
            return cap
        if any(word in where for p in prefs for word in p.split()):
            return cap * 0.5
        return 0.0

    def _overlap(self, cap: int, offered: list[str], wanted: list[str]) -> float:
        """Share of *wanted* found in *offered*; nothing wanted is satisfied."""
        wanted = _norm(wanted)
        if not wanted:
            return cap
        offered = _norm(offered)
        hits = sum(1 for w in wanted if any(w in o or o in w for o in offered))
        return cap * hits / len(wanted)

    def score(self, posting: Item, profile: UserProfile) -> ScoreResult:
        mine = _norm([s.name for s in profile.skills])
        breakdown: dict[str, float] = {}
        matched: list[str] = []
        missing: list[str] = []

        breakdown["title"] = self._title(posting, profile)

        if posting.required_skills:
            ratio, matched, missing = _skill_ratio(mine, posting.required_skills)
            breakdown["required_skills"] = self.factors["required_skills"] * ratio
        else:
            breakdown["required_skills"] = float(self.factors["required_skills"])

        if posting.preferred_skills:
            ratio, extra, _ = _skill_ratio(mine, posting.preferred_skills)
            breakdown["preferred_skills"] = self.factors["preferred_skills"] * ratio
            matched = matched + extra
        else:
            breakdown["preferred_skills"] = float(self.factors["preferred_skills"])

        breakdown["experience"] = self._experience(posting, profile)
        breakdown["location"] = self._location(posting, profile)
        breakdown["culture"] = self._overlap(
            self.factors["culture"], posting.culture + posting.benefits, profile.preferred_benefits
        )
        breakdown["personality"] = self._overlap(
            self.factors["personality"], profile.personalities, posting.personalities
        )

        breakdown = {k: max(0.0, min(float(v), self.factors[k])) for k, v in breakdown.items()}
        total = min(100.0, sum(breakdown.values()))

        reasons: list[str] = []
        if breakdown["required_skills"] >= self.factors["required_skills"] * 0.7:
            reasons.append("보유 스킬이 팀 요구사항과 잘 맞습니다")
        if classify_experience(posting.experience_level) in (None, "any"):
            reasons.append("경력 무관으로 누구나 참여 가능합니다")
        if any(m in (posting.location or "").lower() for m in ONLINE_MARKERS):
            reasons.append("온라인으로 진행되어 시간/장소 제약이 없습니다")

        return ScoreResult(
            item_id=posting.id,
            content_score=total,
            final_score=total,
            breakdown=breakdown,
            matched_skills=matched,
            missing_skills=missing,
            reasons=reasons,
        )

    def recommend_teams(
        self, postings: list[Item], profile: UserProfile, limit: int = 5
    ) -> list[ScoredItem]:
        ranked = [ScoredItem(p, self.score(p, profile)) for p in postings]
        ranked.sort(key=lambda s: -s.score)
        log.info("Matched %d team postings for %s", len(ranked), profile.id)
        return ranked[:limit]
