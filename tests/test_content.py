import pytest

from jobmatch.content import FEED_WEIGHTS, HYBRID_WEIGHTS, ContentScorer
from jobmatch.models import Item, Skill


def test_scenario_profile_against_matching_posting(item, profile):
    result = ContentScorer().score(item, profile)

    assert result.breakdown["industry"] == 30
    assert result.breakdown["skills"] == pytest.approx(12.5)
    assert result.breakdown["location"] == 15
    assert result.breakdown["salary"] == 15
    assert result.breakdown["work_type"] == 0
    assert result.breakdown["experience"] == 0
    assert result.total == pytest.approx(72.5)
    assert result.matched_skills == ["React"]
    assert result.missing_skills == ["Node.js"]


def test_reasons_only_for_contributing_dimensions(item, profile):
    reasons = ContentScorer().score(item, profile).reasons
    assert "업종 일치 (+30점)" in reasons
    assert len(reasons) == 4
    assert not any("근무 형태" in r for r in reasons)


def test_total_equals_breakdown_sum_and_stays_under_100(item, profile):
    profile.skills = [Skill("React", "advanced"), Skill("Node.js", "intermediate")]
    profile.work_types = ["remote"]
    profile.career_years = 3
    rich = Item(
        id="rich",
        industry="IT/소프트웨어",
        required_skills=["React", "Node.js"],
        location="서울",
        salary="4000",
        work_type="원격",
        experience_level="mid",
    )
    for weights in (HYBRID_WEIGHTS, FEED_WEIGHTS):
        for candidate in (item, rich, Item(id="empty")):
            result = ContentScorer(weights).score(candidate, profile)
            assert result.total == sum(result.breakdown.values())
            assert result.total <= 100
    assert ContentScorer().score(rich, profile).total == pytest.approx(100)


def test_feed_weights_rescale_dimensions(item, profile):
    result = ContentScorer(FEED_WEIGHTS).score(item, profile)
    assert result.breakdown["industry"] == 25


@pytest.mark.parametrize(
    "weights",
    [
        {**HYBRID_WEIGHTS, "industry": 40},
        {k: v for k, v in HYBRID_WEIGHTS.items() if k != "salary"},
        {**HYBRID_WEIGHTS, "bonus": 0},
    ],
)
def test_invalid_weight_tables_are_rejected(weights):
    with pytest.raises(ValueError):
        ContentScorer(weights)
