"""Sample job postings for demos and for runs without an item file."""
from __future__ import annotations

from datetime import datetime, timezone

from jobmatch.log import get_logger
from jobmatch.models import Item
from jobmatch.sources.base import ItemSourceBase

log = get_logger(__name__)

_SAMPLE_RECORDS: list[dict] = [
    {
        "id": "job-1",
        "title": "프론트엔드 개발자 (React)",
        "company": "테크스타트",
        "location": "서울 강남구",
        "salary": "3500~4500만원",
        "type": "hybrid",
        "industry": "IT/소프트웨어",
        "skills": ["React", "TypeScript", "Next.js"],
        "experience": "2~5년",
        "description": "React 기반 웹 서비스 프론트엔드 개발",
    },
    {
        "id": "job-2",
        "title": "백엔드 개발자",
        "company": "테크스타트",
        "location": "서울 강남구",
        "salary": "4000~6000만원",
        "type": "onsite",
        "industry": "IT/소프트웨어",
        "skills": ["Node.js", "PostgreSQL"],
        "experience": "경력 3년 이상",
        "description": "API 서버 설계 및 운영",
    },
    {
        "id": "job-3",
        "title": "데이터 분석가",
        "company": "핀테크랩",
        "location": "경기 성남시",
        "salary": "면접 후 결정",
        "type": "재택",
        "industry": "금융",
        "skills": ["Python", "SQL"],
        "experience": "신입",
        "description": "결제 데이터 분석과 대시보드 구축",
    },
    {
        "id": "job-4",
        "title": "풀스택 엔지니어",
        "company": "커머스원",
        "location": "부산 해운대구",
        "salary_min": 3000,
        "salary_max": 4000,
        "type": "remote",
        "industry": "이커머스",
        "skills": ["React", "Node.js", "AWS"],
        "experience": "경력무관",
        "description": "React와 Node.js로 커머스 플랫폼 개발",
    },
]


class MockSource(ItemSourceBase):
    def fetch(self, limit: int = 50) -> list[Item]:
        log.info("MockSource returning sample postings")
        created = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        items = [Item.from_dict({**r, "created_at": created}) for r in _SAMPLE_RECORDS]
        return items[:limit]
