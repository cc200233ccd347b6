"""User-ordered priority criteria and the priority-weighted scorer.

Users rank the criteria they care about; each enabled criterion carries a point
weight and an item earns those points when the criterion matches. Reordering,
adding, removing or toggling a criterion recomputes the weights so that higher
ranks get more points and the enabled weights sum to 100. A manual point edit
is stored as typed: the total may then drift from 100 until the list is
reordered again or ``normalize_weights`` is called.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

from jobmatch.features import (
    canonical_work_types,
    classify_experience,
    experience_fits,
    parse_salary,
    score_industry,
    score_location,
)
from jobmatch.log import get_logger
from jobmatch.models import Item, PriorityItem, ScoredItem, ScoreResult, UserProfile

log = get_logger(__name__)

RANK_BOOST = 0.2
TOTAL_POINTS = 100

# Criteria a user can put in their list. Employer criteria describe candidates:
# only fields with an entry in MATCHERS earn points from PriorityScorer.
AVAILABLE_CRITERIA: dict[str, list[dict]] = {
    "jobseeker": [
        {"field": "desiredJob", "label": "희망 직무", "default_weight": 25},
        {"field": "skills", "label": "보유 스킬", "default_weight": 25},
        {"field": "industry", "label": "희망 업종", "default_weight": 15},
        {"field": "location", "label": "희망 근무지", "default_weight": 15},
        {"field": "salary", "label": "희망 연봉", "default_weight": 10},
        {"field": "workType", "label": "근무 형태", "default_weight": 5},
        {"field": "career", "label": "경력 조건", "default_weight": 5},
        {"field": "companySize", "label": "회사 규모", "default_weight": 3},
        {"field": "welfare", "label": "복지 혜택", "default_weight": 2},
    ],
    "employer": [
        {"field": "skills", "label": "요구 스킬", "default_weight": 30},
        {"field": "career", "label": "경력 요구사항", "default_weight": 25},
        {"field": "education", "label": "학력 요구사항", "default_weight": 15},
        {"field": "location", "label": "근무 가능 지역", "default_weight": 10},
        {"field": "salary", "label": "희망 연봉", "default_weight": 10},
        {"field": "workType", "label": "근무 형태", "default_weight": 5},
        {"field": "language", "label": "어학 능력", "default_weight": 5},
    ],
}

# Used when the user has no enabled priority; sums to 100.
DEFAULT_PRIORITIES: list[PriorityItem] = [
    PriorityItem(field=c["field"], label=c["label"], weight=c["default_weight"], id=c["field"])
    for c in AVAILABLE_CRITERIA["jobseeker"][:7]
]

# desiredJob partial-credit tiers
TITLE_MATCH = 1.0
DESCRIPTION_MATCH = 0.7
KEYWORD_MATCH = 0.4


def _scale_to_total(raw: list[float], total: int = TOTAL_POINTS) -> list[int]:
    """Scale *raw* to integers summing to *total* (largest remainder)."""
    s = sum(raw)
    if s <= 0:
        return [0] * len(raw)
    exact = [r * total / s for r in raw]
    floors = [int(math.floor(e)) for e in exact]
    short = total - sum(floors)
    order = sorted(range(len(raw)), key=lambda i: (-(exact[i] - floors[i]), i))
    for i in order[:short]:
        floors[i] += 1
    return floors


def recalculate_weights(items: list[PriorityItem]) -> list[PriorityItem]:
    """Rank-biased weights for enabled items; disabled items get 0.

    The i-th of n enabled items gets ``100/n * (1 + 0.2 * (n - i - 1))`` raw
    points, rescaled so the enabled weights sum to exactly 100.
    """
    enabled = [i for i, p in enumerate(items) if p.enabled]
    n = len(enabled)
    if not n:
        return [replace(p, weight=0) for p in items]

    base = TOTAL_POINTS / n
    raw = [base * (1 + RANK_BOOST * (n - rank - 1)) for rank in range(n)]
    scaled = dict(zip(enabled, _scale_to_total(raw)))
    return [replace(p, weight=scaled.get(i, 0)) for i, p in enumerate(items)]


def add_criterion(
    items: list[PriorityItem], field_name: str, user_type: str = "jobseeker"
) -> list[PriorityItem]:
    if any(p.field == field_name for p in items):
        return list(items)
    criteria = {c["field"]: c for c in AVAILABLE_CRITERIA[user_type]}
    if field_name not in criteria:
        log.warning("Unknown %s criterion %r ignored", user_type, field_name)
        return list(items)
    c = criteria[field_name]
    if not is_scored(field_name):
        log.info("Criterion %s is list-only; items earn no points for it", field_name)
    new = PriorityItem(field=field_name, label=c["label"], weight=c["default_weight"], id=field_name)
    return recalculate_weights([*items, new])


def remove_criterion(items: list[PriorityItem], index: int) -> list[PriorityItem]:
    return recalculate_weights([p for i, p in enumerate(items) if i != index])


def toggle_criterion(items: list[PriorityItem], index: int) -> list[PriorityItem]:
    toggled = [replace(p, enabled=not p.enabled) if i == index else p for i, p in enumerate(items)]
    return recalculate_weights(toggled)


def move_criterion(items: list[PriorityItem], src: int, dst: int) -> list[PriorityItem]:
    """Drag-reorder: move the item at *src* to position *dst*."""
    if not (0 <= src < len(items)) or not (0 <= dst < len(items)):
        return list(items)
    moved = list(items)
    moved.insert(dst, moved.pop(src))
    return recalculate_weights(moved)


def set_weight(items: list[PriorityItem], index: int, weight) -> list[PriorityItem]:
    """Manual point edit, kept verbatim. Out-of-range or non-integer input is ignored."""
    try:
        value = int(weight)
    except (TypeError, ValueError):
        return list(items)
    if not 0 <= value <= TOTAL_POINTS or not 0 <= index < len(items):
        return list(items)
    return [replace(p, weight=value) if i == index else p for i, p in enumerate(items)]


def total_weight(items: list[PriorityItem]) -> int:
    return sum(p.weight for p in items if p.enabled)


def normalize_weights(items: list[PriorityItem]) -> list[PriorityItem]:
    """Rescale enabled weights proportionally so they sum to 100 again."""
    enabled = [i for i, p in enumerate(items) if p.enabled]
    scaled = dict(zip(enabled, _scale_to_total([float(items[i].weight) for i in enabled])))
    return [replace(p, weight=scaled.get(i, 0)) for i, p in enumerate(items)]


@dataclass
class PriorityScore:
    total: float
    breakdown: dict[str, float] = field(default_factory=dict)
    reasons: list[str] = field(default_factory=list)


def _words(text: str) -> set[str]:
    return {w for w in text.lower().split() if len(w) >= 2}


def match_desired_job(item: Item, profile: UserProfile) -> float:
    desired = (profile.desired_job or "").lower().strip()
    if not desired:
        return 0.0
    title = item.title.lower()
    desc = item.description.lower()
    if desired in title:
        return TITLE_MATCH
    if desired in desc:
        return DESCRIPTION_MATCH
    if _words(desired) & (_words(title) | _words(desc)):
        return KEYWORD_MATCH
    return 0.0


def match_skills(item: Item, profile: UserProfile) -> float:
    mine = [s.name.lower() for s in profile.skills if s.name]
    theirs = [s.lower() for s in item.skills]
    hit = any(m in t or t in m for m in mine for t in theirs)
    return 1.0 if hit else 0.0


def match_industry(item: Item, profile: UserProfile) -> float:
    return 1.0 if score_industry(item, profile, cap=1).score >= 1 else 0.0


def match_location(item: Item, profile: UserProfile) -> float:
    return 1.0 if score_location(item, profile, cap=1).score >= 1 else 0.0


def match_work_type(item: Item, profile: UserProfile) -> float:
    wanted: set[str] = set()
    for wt in profile.work_types:
        wanted |= canonical_work_types(wt)
    return 1.0 if wanted & canonical_work_types(item.work_type) else 0.0


def match_salary(item: Item, profile: UserProfile) -> float:
    """Item salary range overlaps the desired range."""
    if profile.salary_min is None and profile.salary_max is None:
        return 0.0
    lo = item.salary_min if item.salary_min is not None else item.salary_max
    hi = item.salary_max if item.salary_max is not None else item.salary_min
    if lo is None:
        lo = hi = parse_salary(item)
    if lo is None:
        return 0.0
    want_lo = profile.salary_min if profile.salary_min is not None else 0.0
    want_hi = profile.salary_max if profile.salary_max is not None else float("inf")
    return 1.0 if hi >= want_lo and lo <= want_hi else 0.0


def match_career(item: Item, profile: UserProfile) -> float:
    tier = classify_experience(item.experience_level)
    if tier is None or tier == "any":
        return 1.0
    if profile.career_type == "newcomer" and profile.career_years is None:
        return 1.0 if tier == "new" else 0.0
    return 1.0 if experience_fits(profile.effective_years, tier) else 0.0


def match_company_size(item: Item, profile: UserProfile) -> float:
    if not profile.company_sizes or not item.company_size:
        return 0.0
    wanted = {s.lower() for s in profile.company_sizes}
    return 1.0 if item.company_size.lower() in wanted else 0.0


def match_welfare(item: Item, profile: UserProfile) -> float:
    if not profile.preferred_benefits or not item.benefits:
        return 0.0
    offered = [b.lower() for b in item.benefits]
    hit = any(w.lower() in b for w in profile.preferred_benefits for b in offered)
    return 1.0 if hit else 0.0


MATCHERS = {
    "desiredJob": match_desired_job,
    "skills": match_skills,
    "industry": match_industry,
    "location": match_location,
    "workType": match_work_type,
    "salary": match_salary,
    "career": match_career,
    "companySize": match_company_size,
    "welfare": match_welfare,
}


def is_scored(field_name: str) -> bool:
    """Whether items can earn points for *field_name*."""
    return field_name in MATCHERS


class PriorityScorer:
    def score(
        self,
        item: Item,
        profile: UserProfile,
        priorities: list[PriorityItem] | None = None,
    ) -> PriorityScore:
        active = [p for p in (priorities if priorities is not None else profile.priorities) if p.enabled]
        if not active:
            active = DEFAULT_PRIORITIES

        breakdown: dict[str, float] = {}
        reasons: list[str] = []
        for p in active:
            matcher = MATCHERS.get(p.field)
            if matcher is None:
                log.debug("No matcher for criterion %s", p.field)
                breakdown.setdefault(p.field, 0.0)
                continue
            points = matcher(item, profile) * p.weight
            # a field listed twice earns both weights
            breakdown[p.field] = breakdown.get(p.field, 0.0) + points
            if points > 0:
                reasons.append(f"{p.label or p.field} (+{round(points)}점)")

        return PriorityScore(total=sum(breakdown.values()), breakdown=breakdown, reasons=reasons)

    def rank(
        self,
        items: list[Item],
        profile: UserProfile,
        priorities: list[PriorityItem] | None = None,
        limit: int | None = None,
    ) -> list[ScoredItem]:
        ranked: list[ScoredItem] = []
        for item in items:
            ps = self.score(item, profile, priorities)
            result = ScoreResult(
                item_id=item.id,
                content_score=ps.total,
                final_score=ps.total,
                breakdown=ps.breakdown,
                reasons=ps.reasons,
            )
            ranked.append(ScoredItem(item, result))
        ranked.sort(key=lambda s: -s.score)
        log.info("Priority-ranked %d items", len(ranked))
        return ranked[:limit] if limit is not None else ranked
