import pytest

from jobmatch.features import (
    SCORERS,
    classify_experience,
    parse_salary,
    score_experience,
    score_industry,
    score_location,
    score_salary,
    score_skills,
    score_work_type,
)
from jobmatch.models import Item, Skill, UserProfile


def test_industry_exact_match_is_case_insensitive(item, profile):
    profile.industries = ["it/소프트웨어"]
    assert score_industry(item, profile).score == 30


def test_industry_partial_keyword_overlap(profile):
    profile.industries = ["IT 소프트웨어"]
    item = Item(id="x", industry="소프트웨어 개발")
    assert score_industry(item, profile).score == pytest.approx(15)


def test_industry_missing_contributes_zero(profile):
    assert score_industry(Item(id="x"), profile).score == 0


def test_skills_one_of_two_matched(item, profile):
    result = score_skills(item, profile)
    assert result.score == pytest.approx(12.5)
    assert result.matched == ["React"]
    assert result.missing == ["Node.js"]


def test_skills_weighted_by_level(profile):
    profile.skills = [Skill("React", "advanced"), Skill("Python", "beginner")]
    item = Item(id="x", required_skills=["React"])
    assert score_skills(item, profile).score == pytest.approx(1.5 / 2.5 * 25)


def test_skills_substring_either_direction(profile):
    profile.skills = [Skill("React")]
    item = Item(id="x", required_skills=["React Native"])
    assert score_skills(item, profile).score == pytest.approx(25)


def test_location_full_and_partial(profile):
    assert score_location(Item(id="a", location="서울 강남구"), profile).score == 15
    profile.locations = ["서울 마포구"]
    assert score_location(Item(id="b", location="서울 강남구"), profile).score == pytest.approx(10)
    assert score_location(Item(id="c", location="부산 해운대구"), profile).score == 0


@pytest.mark.parametrize(
    "record, expected",
    [
        ({"salary": "3500~4500"}, 4000),
        ({"salary": "3,500만원 - 4,500만원"}, 4000),
        ({"salary_min": 3000, "salary_max": 4000}, 3500),
        ({"salary_min": 3200}, 3200),
        ({"salary": "면접 후 결정"}, None),
        ({}, None),
    ],
)
def test_parse_salary(record, expected):
    assert parse_salary(Item.from_dict({"id": "x", **record})) == expected


def test_salary_in_range_and_linear_decay(profile):
    assert score_salary(Item(id="a", salary="3500~4500"), profile).score == 15
    # 500 above the range, tolerance is half the 2000 range width
    assert score_salary(Item(id="b", salary_min=5500), profile).score == pytest.approx(7.5)
    assert score_salary(Item(id="c", salary_min=9000), profile).score == 0


def test_salary_unparseable_is_skipped(profile):
    assert score_salary(Item(id="x", salary="회사 내규에 따름"), profile).score == 0


def test_work_type_synonyms(profile):
    profile.work_types = ["remote"]
    assert score_work_type(Item(id="a", work_type="재택 근무"), profile).score == 10
    profile.work_types = ["dispatch"]
    assert score_work_type(Item(id="b", work_type="Hybrid"), profile).score == 10
    profile.work_types = ["onsite"]
    assert score_work_type(Item(id="c", work_type="remote"), profile).score == 0


@pytest.mark.parametrize(
    "text, tier",
    [
        ("신입", "new"),
        ("Junior developer", "new"),
        ("0~2년", "new"),
        ("3~5년", "mid"),
        ("Mid-level", "mid"),
        ("Senior Engineer", "senior"),
        ("7+ years", "senior"),
        ("경력무관", "any"),
        ("Company of many talents", None),
        ("International team, 3 years", "mid"),
        ("Leadership track, 1 year", "new"),
        ("Tech lead", "senior"),
        ("", None),
        (None, None),
    ],
)
def test_classify_experience(text, tier):
    assert classify_experience(text) == tier


def test_experience_fit(profile):
    profile.career_years = 3
    assert score_experience(Item(id="a", experience_level="중급"), profile).score == 5
    assert score_experience(Item(id="b", experience_level="시니어"), profile).score == 0
    assert score_experience(Item(id="c", experience_level="전체"), profile).score == 5


def test_newcomer_without_years_counts_as_zero():
    newcomer = UserProfile(id="n", career_type="newcomer")
    assert score_experience(Item(id="a", experience_level="신입"), newcomer).score == 5
    assert score_experience(Item(id="b", experience_level="senior"), newcomer).score == 0


def test_every_scorer_stays_within_its_cap(item, profile):
    profile.work_types = ["hybrid"]
    profile.career_years = 4
    items = [
        item,
        Item(id="empty"),
        Item(id="far", salary_min=100000, location="제주", industry="농업"),
        Item(id="wide", required_skills=["React", "TypeScript"], work_type="hybrid",
             experience_level="2~5년", salary="4000"),
    ]
    for candidate in items:
        for name, scorer in SCORERS.items():
            for cap in (5, 10, 30):
                result = scorer(candidate, profile, cap=cap)
                assert 0 <= result.score <= cap, (name, candidate.id)


def test_scorers_are_idempotent(item, profile):
    for scorer in SCORERS.values():
        assert scorer(item, profile) == scorer(item, profile)
