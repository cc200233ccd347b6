"""
Pytest configuration and fixtures
"""

import os

os.environ.setdefault("JOBMATCH_LOG_FILE", "false")

import pytest

from jobmatch.models import Item, Skill, UserProfile
from jobmatch.stores import MemoryStore


@pytest.fixture
def profile():
    """Seeker profile used across the scoring tests"""
    return UserProfile(
        id="user-1",
        desired_job="프론트엔드 개발자",
        skills=[Skill("React"), Skill("TypeScript")],
        industries=["IT/소프트웨어"],
        locations=["서울"],
        salary_min=3000,
        salary_max=5000,
    )


@pytest.fixture
def item():
    """Job posting matching the seeker profile on most dimensions"""
    return Item(
        id="job-1",
        title="프론트엔드 개발자 (React)",
        location="서울 강남구",
        salary="3500~4500",
        industry="IT/소프트웨어",
        required_skills=["React", "Node.js"],
        source_id="techstart",
    )


@pytest.fixture
def make_item(item):
    """Factory for variations of the base posting"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "id": f"gen-{counter['n']}",
            "title": item.title,
            "location": item.location,
            "salary": item.salary,
            "industry": item.industry,
            "required_skills": list(item.required_skills),
            "source_id": item.source_id,
        }
        data.update(overrides)
        return Item(**data)

    return _make


@pytest.fixture
def store():
    """Empty in-memory key-value store"""
    return MemoryStore()
