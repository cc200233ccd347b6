"""Per-dimension feature scorers for (item, profile) pairs.

Each scorer returns a ``FeatureScore`` whose ``score`` lies in ``[0, cap]``.
Missing profile or item fields make the dimension contribute 0; scorers never
raise on well-formed records and keep no state between calls.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from jobmatch.models import Item, UserProfile

LEVEL_MULTIPLIERS: dict[str, float] = {
    "advanced": 1.5,
    "intermediate": 1.2,
    "beginner": 1.0,
}

WORK_TYPE_SYNONYMS: dict[str, list[str]] = {
    "remote": ["remote", "재택", "원격"],
    "hybrid": ["hybrid", "하이브리드", "dispatch", "파견"],
    "onsite": ["onsite", "on-site", "사무실", "출근", "상주"],
}

# Checked in order; the first tier with a keyword hit wins.
EXPERIENCE_KEYWORDS: list[tuple[str, list[str]]] = [
    ("any", ["any", "전체", "무관", "경력무관", "신입/경력"]),
    ("senior", ["senior", "lead", "principal", "시니어", "고급", "리드"]),
    ("mid", ["mid", "intermediate", "중급", "미들"]),
    ("new", ["junior", "entry", "new grad", "newcomer", "intern", "신입", "주니어", "인턴"]),
]

EXPERIENCE_RANGES: dict[str, tuple[float, float]] = {
    "new": (0.0, 2.0),
    "mid": (2.0, 5.0),
    "senior": (5.0, float("inf")),
}

_YEARS_MARKER_RE = re.compile(r"년|years?|yrs?")
_DIGITS_RE = re.compile(r"\d+")
_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def _keyword_pattern(keywords: list[str]) -> re.Pattern[str]:
    # whole words for ASCII keywords; Korean ones may carry particles
    parts = [rf"\b{re.escape(kw)}\b" if kw.isascii() else re.escape(kw) for kw in keywords]
    return re.compile("|".join(parts))


_EXPERIENCE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (tier, _keyword_pattern(keywords)) for tier, keywords in EXPERIENCE_KEYWORDS
]

# Share of the location cap awarded for a single-word overlap
PARTIAL_LOCATION_RATIO = 2 / 3


@dataclass
class FeatureScore:
    name: str
    score: float
    cap: float
    reason: str | None = None
    matched: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


def _clamp(value: float, cap: float) -> float:
    return max(0.0, min(float(value), float(cap)))


def _normalize(s: str | None) -> str:
    return (s or "").lower().strip()


def _contains_either(a: str, b: str) -> bool:
    return bool(a) and bool(b) and (a in b or b in a)


def score_industry(item: Item, profile: UserProfile, cap: float = 30) -> FeatureScore:
    item_industry = _normalize(item.industry)
    if not item_industry or not profile.industries:
        return FeatureScore("industry", 0.0, cap)

    item_keywords = item_industry.split()
    best = 0.0
    for preferred in profile.industries:
        pref = _normalize(preferred)
        if not pref:
            continue
        if pref == item_industry:
            best = 1.0
            break
        keywords = pref.split()
        hits = sum(1 for kw in keywords if any(_contains_either(kw, ik) for ik in item_keywords))
        best = max(best, hits / max(len(keywords), 1))

    score = _clamp(best * cap, cap)
    reason = "업종 일치" if best >= 1.0 else ("업종 부분 일치" if score else None)
    return FeatureScore("industry", score, cap, reason)


def score_skills(item: Item, profile: UserProfile, cap: float = 25) -> FeatureScore:
    item_skills = item.skills
    if not profile.skills or not item_skills:
        return FeatureScore("skills", 0.0, cap, missing=list(item.required_skills))

    item_norm = {s: _normalize(s) for s in item_skills}
    matched_item_skills: set[str] = set()
    weighted_matches = 0.0
    total_weight = 0.0

    for skill in profile.skills:
        name = _normalize(skill.name)
        if not name:
            continue
        weight = LEVEL_MULTIPLIERS.get(_normalize(skill.level), 1.0)
        total_weight += weight
        hits = [orig for orig, low in item_norm.items() if _contains_either(name, low)]
        if hits:
            weighted_matches += weight
            matched_item_skills.update(hits)

    score = _clamp((weighted_matches / total_weight) * cap, cap) if total_weight else 0.0
    matched = [s for s in item_skills if s in matched_item_skills]
    missing = [s for s in item.required_skills if s not in matched_item_skills]
    reason = f"보유 스킬 {len(matched)}개 일치" if matched else None
    return FeatureScore("skills", score, cap, reason, matched=matched, missing=missing)


def score_location(item: Item, profile: UserProfile, cap: float = 15) -> FeatureScore:
    job_loc = _normalize(item.location)
    preferred = [_normalize(loc) for loc in profile.locations if _normalize(loc)]
    if not job_loc or not preferred:
        return FeatureScore("location", 0.0, cap)

    if any(_contains_either(loc, job_loc) for loc in preferred):
        return FeatureScore("location", float(cap), cap, "선호 지역 일치")

    # e.g. "서울 마포구" vs "서울 강남구" share the city
    if any(word in job_loc for loc in preferred for word in loc.split()):
        return FeatureScore("location", _clamp(cap * PARTIAL_LOCATION_RATIO, cap), cap, "선호 지역 인접")

    return FeatureScore("location", 0.0, cap)


def parse_salary(item: Item) -> float | None:
    """Single representative salary figure for *item*, or None."""
    bounds = [v for v in (item.salary_min, item.salary_max) if v is not None]
    if bounds:
        return sum(bounds) / len(bounds)

    if not item.salary:
        return None
    values: list[float] = []
    for token in _NUMBER_RE.findall(item.salary):
        try:
            values.append(float(token.replace(",", "")))
        except ValueError:
            continue
    if not values:
        return None
    return sum(values) / len(values)


def score_salary(item: Item, profile: UserProfile, cap: float = 15) -> FeatureScore:
    if profile.salary_min is None and profile.salary_max is None:
        return FeatureScore("salary", 0.0, cap)
    salary = parse_salary(item)
    if salary is None:
        return FeatureScore("salary", 0.0, cap)

    low = profile.salary_min if profile.salary_min is not None else 0.0
    high = profile.salary_max if profile.salary_max is not None else float("inf")
    if low <= salary <= high:
        return FeatureScore("salary", float(cap), cap, "희망 연봉 범위")

    if salary < low:
        distance = low - salary
    else:
        distance = salary - high

    if profile.salary_max is not None and profile.salary_min is not None:
        tolerance = (high - low) * 0.5
    else:
        tolerance = (low if profile.salary_min is not None else high) * 0.5
    if tolerance <= 0:
        return FeatureScore("salary", 0.0, cap)

    score = _clamp(cap - (distance / tolerance) * cap, cap)
    return FeatureScore("salary", score, cap, "희망 연봉 근접" if score else None)


def canonical_work_types(text: str | None) -> set[str]:
    """Canonical work-type groups mentioned in *text*."""
    low = _normalize(text)
    if not low:
        return set()
    found = {group for group, words in WORK_TYPE_SYNONYMS.items() if any(w in low for w in words)}
    return found or {low}


def score_work_type(item: Item, profile: UserProfile, cap: float = 10) -> FeatureScore:
    item_types = canonical_work_types(item.work_type)
    if not item_types or not profile.work_types:
        return FeatureScore("work_type", 0.0, cap)

    wanted: set[str] = set()
    for wt in profile.work_types:
        wanted |= canonical_work_types(wt)
    if wanted & item_types:
        return FeatureScore("work_type", float(cap), cap, "선호 근무 형태")
    return FeatureScore("work_type", 0.0, cap)


def classify_experience(text: str | None) -> str | None:
    """Experience tier of a requirement text: new, mid, senior, any or None."""
    low = _normalize(text)
    if not low:
        return None
    for tier, pattern in _EXPERIENCE_PATTERNS:
        if pattern.search(low):
            return tier

    # "3~5년", "1-3 years": the lower bound decides the tier
    years = [int(n) for n in _DIGITS_RE.findall(low)] if _YEARS_MARKER_RE.search(low) else []
    if years:
        minimum = min(years)
        if minimum < 2:
            return "new"
        if minimum < 5:
            return "mid"
        return "senior"
    return None


def experience_fits(years: float | None, tier: str | None) -> bool:
    if tier == "any":
        return True
    if years is None or tier not in EXPERIENCE_RANGES:
        return False
    low, high = EXPERIENCE_RANGES[tier]
    return low <= years <= high


def score_experience(item: Item, profile: UserProfile, cap: float = 5) -> FeatureScore:
    tier = classify_experience(item.experience_level)
    years = profile.effective_years
    if tier is None or (years is None and tier != "any"):
        return FeatureScore("experience", 0.0, cap)
    if experience_fits(years, tier):
        return FeatureScore("experience", float(cap), cap, "경력 조건 부합")
    return FeatureScore("experience", 0.0, cap)


SCORERS = {
    "industry": score_industry,
    "skills": score_skills,
    "location": score_location,
    "salary": score_salary,
    "work_type": score_work_type,
    "experience": score_experience,
}
