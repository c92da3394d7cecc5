from __future__ import annotations

import itertools
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest
import pytz

from coastal_monitor.api.models.errors import AuthenticationRequired, InferenceFailure, UploadFailure
from coastal_monitor.api.models.schemas import HazardReport, User

IST = pytz.timezone("Asia/Kolkata")

# 15:00 IST on a fixed day keeps "today" and the 24h window unambiguous.
NOW = IST.localize(datetime(2026, 10, 19, 15, 0))


class FakeReportEntity:
    def __init__(self, reports: Optional[List[HazardReport]] = None, fail_create: bool = False,
                 list_error: Optional[Exception] = None) -> None:
        self.reports = list(reports or [])
        self.fail_create = fail_create
        self.list_error = list_error
        self.list_calls: List[tuple] = []
        self.created: List[Dict[str, Any]] = []
        self._ids = itertools.count(1000)

    async def list(self, sort="-created_date", limit=100):
        self.list_calls.append((sort, limit))
        if self.list_error is not None:
            raise self.list_error
        return self.reports[:limit]

    async def create(self, record):
        if self.fail_create:
            from coastal_monitor.api.models.errors import CreateFailure
            raise CreateFailure("backend rejected the record", status_code=500)
        self.created.append(record)
        return HazardReport(id=str(next(self._ids)), created_by="reporter@example.com",
                            created_date=NOW, **record)


class FakeUserEntity:
    def __init__(self, user: Optional[User] = None) -> None:
        self.user = user
        self.logged_out = False

    async def me(self):
        if self.user is None:
            raise AuthenticationRequired(login_url="https://backend.test/login?from_url=%2F")
        return self.user

    def login(self, next_url="/"):
        return f"https://backend.test/login?from_url={next_url}"

    async def logout(self):
        self.logged_out = True


class FakeCore:
    def __init__(self, llm_response: Any = None, llm_error: Optional[Exception] = None) -> None:
        self.llm_response = llm_response if llm_response is not None else {"urgency_score": 7}
        self.llm_error = llm_error
        self.prompts: List[str] = []
        self.schemas: List[Dict] = []

    async def invoke_llm(self, prompt, response_json_schema=None):
        self.prompts.append(prompt)
        self.schemas.append(response_json_schema)
        if self.llm_error is not None:
            raise self.llm_error
        return self.llm_response

    async def upload_file(self, filename, content, content_type=None):
        return {"file_url": f"https://files.test/{filename}"}


class FakeBlobStore:
    def __init__(self, fail_on: Optional[str] = None) -> None:
        self.fail_on = fail_on
        self.uploaded: List[str] = []

    async def upload(self, filename, content, content_type=None):
        if filename == self.fail_on:
            raise UploadFailure(f"Upload of {filename} failed")
        self.uploaded.append(filename)
        return f"https://files.test/{filename}"


@pytest.fixture
def make_report():
    counter = itertools.count(1)

    def factory(**overrides) -> HazardReport:
        data = {
            "id": f"r{next(counter)}",
            "title": "Unusual waves near the pier",
            "description": "Waves breaking over the promenade",
            "hazard_type": "high_waves",
            "severity": "moderate",
            "location_name": "Marina Beach, Chennai",
            "latitude": 13.0827,
            "longitude": 80.2707,
            "status": "pending",
            "urgency_score": 5,
            "social_media_mentions": 0,
            "media_urls": [],
            "created_by": "citizen@example.com",
            "created_date": NOW - timedelta(hours=1),
        }
        data.update(overrides)
        return HazardReport(**data)

    return factory


@pytest.fixture
def citizen() -> User:
    return User(id="u1", email="citizen@example.com", full_name="Asha Citizen", role="citizen")


@pytest.fixture
def official() -> User:
    return User(id="u2", email="official@example.com", full_name="Ravi Official", role="official")


@pytest.fixture
def failing_llm() -> FakeCore:
    return FakeCore(llm_error=InferenceFailure("model unavailable"))


SAMPLE_ANALYSIS = {
    "trending_keywords": ["#ChennaiFloods", "high tide"],
    "sentiment_breakdown": {"concerned": 55, "neutral": 35, "panic": 10},
    "geographic_hotspots": [{"location": "Chennai", "mention_count": 420, "sentiment": "concerned"}],
    "engagement_metrics": {"total_posts": 1200, "total_reach": 98000, "avg_engagement_rate": 3.4},
    "misinformation_risk": "moderate",
}
