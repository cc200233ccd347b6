"""Data models for items, user profiles, behavior events and score results."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

SKILL_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced")

# Implicit feedback strength per tracked action
ACTION_SCORES: dict[str, int] = {
    "view": 1,
    "save": 2,
    "apply": 3,
    "reject": -2,
}


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return [str(v) for v in value if v is not None and str(v).strip()]


def _as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Skill:
    name: str
    level: str = "beginner"

    @classmethod
    def from_value(cls, value: Any) -> Skill:
        if isinstance(value, Skill):
            return value
        if isinstance(value, dict):
            level = str(value.get("level") or "beginner").lower()
            return cls(name=str(value.get("name", "")), level=level)
        return cls(name=str(value))


@dataclass
class Item:
    """A job posting or a team posting, as handed over by the data-fetch layer."""

    id: str
    title: str = ""
    location: str | None = None
    salary: str | None = None
    salary_min: float | None = None
    salary_max: float | None = None
    work_type: str | None = None
    industry: str | None = None
    required_skills: list[str] = field(default_factory=list)
    preferred_skills: list[str] = field(default_factory=list)
    experience_level: str | None = None
    source_id: str | None = None
    created_at: str | None = None
    description: str = ""
    company_size: str | None = None
    benefits: list[str] = field(default_factory=list)
    culture: list[str] = field(default_factory=list)
    personalities: list[str] = field(default_factory=list)
    raw: dict = field(default_factory=dict)

    @property
    def skills(self) -> list[str]:
        return list(dict.fromkeys(self.required_skills + self.preferred_skills))

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> Item:
        return cls(
            id=str(record.get("id", "")),
            title=record.get("title") or "",
            location=record.get("location"),
            salary=None if record.get("salary") is None else str(record.get("salary")),
            salary_min=_as_number(record.get("salary_min")),
            salary_max=_as_number(record.get("salary_max")),
            work_type=record.get("work_type") or record.get("type"),
            industry=record.get("industry"),
            required_skills=_as_list(record.get("required_skills", record.get("skills"))),
            preferred_skills=_as_list(record.get("preferred_skills")),
            experience_level=record.get("experience_level") or record.get("experience"),
            source_id=record.get("source_id") or record.get("company"),
            created_at=record.get("created_at"),
            description=record.get("description") or "",
            company_size=record.get("company_size"),
            benefits=_as_list(record.get("benefits")),
            culture=_as_list(record.get("culture")),
            personalities=_as_list(record.get("personalities")),
            raw=dict(record),
        )


@dataclass
class PriorityItem:
    field: str
    label: str = ""
    weight: int = 0
    enabled: bool = True
    id: str = ""

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> PriorityItem:
        return cls(
            field=str(record["field"]),
            label=record.get("label", ""),
            weight=int(record.get("weight", 0)),
            enabled=bool(record.get("enabled", True)),
            id=record.get("id", ""),
        )


@dataclass
class UserProfile:
    id: str
    desired_job: str | None = None
    skills: list[Skill] = field(default_factory=list)
    industries: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)
    salary_min: float | None = None
    salary_max: float | None = None
    work_types: list[str] = field(default_factory=list)
    career_type: str | None = None
    career_years: float | None = None
    priorities: list[PriorityItem] = field(default_factory=list)
    personalities: list[str] = field(default_factory=list)
    preferred_benefits: list[str] = field(default_factory=list)
    company_sizes: list[str] = field(default_factory=list)

    @property
    def effective_years(self) -> float | None:
        """Years of experience; a newcomer without a figure counts as zero."""
        if self.career_years is not None:
            return self.career_years
        if self.career_type == "newcomer":
            return 0.0
        return None

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> UserProfile:
        industries = _as_list(record.get("industries"))
        if not industries:
            industries = _as_list(record.get("industry"))
        return cls(
            id=str(record.get("id", "")),
            desired_job=record.get("desired_job"),
            skills=[Skill.from_value(s) for s in record.get("skills") or []],
            industries=industries,
            locations=_as_list(record.get("locations", record.get("preferred_locations"))),
            salary_min=_as_number(record.get("salary_min")),
            salary_max=_as_number(record.get("salary_max")),
            work_types=_as_list(record.get("work_types")),
            career_type=record.get("career_type"),
            career_years=_as_number(record.get("career_years")),
            priorities=[PriorityItem.from_dict(p) for p in record.get("priorities") or []],
            personalities=_as_list(record.get("personalities")),
            preferred_benefits=_as_list(record.get("preferred_benefits")),
            company_sizes=_as_list(record.get("company_sizes")),
        )


@dataclass
class BehaviorEvent:
    user_id: str
    item_id: str
    action: str
    timestamp: float
    score: float
    scroll_depth: float | None = None
    dwell_time: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> BehaviorEvent:
        action = str(record["action"])
        score = record.get("score")
        return cls(
            user_id=str(record["user_id"]),
            item_id=str(record["item_id"]),
            action=action,
            timestamp=float(record.get("timestamp", 0)),
            score=float(score) if score is not None else float(ACTION_SCORES[action]),
            scroll_depth=_as_number(record.get("scroll_depth")),
            dwell_time=_as_number(record.get("dwell_time")),
        )


@dataclass
class ScoreResult:
    item_id: str
    content_score: float = 0.0
    collaborative_score: float = 0.0
    final_score: float = 0.0
    breakdown: dict[str, float] = field(default_factory=dict)
    matched_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)


@dataclass
class ScoredItem:
    item: Item
    result: ScoreResult

    @property
    def score(self) -> float:
        return self.result.final_score
