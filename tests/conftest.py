from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from coursesync.config.http_resilience import RetryPolicy
from coursesync.domain.model import DestinationRecord, UnifiedRecord

if TYPE_CHECKING:
    from collections.abc import Iterator


_CONFIG_ENV_VARS = (
    "UDEMY_BASE_URL",
    "UDEMY_CLIENT_ID",
    "UDEMY_CLIENT_SECRET",
    "UDEMY_RPS",
    "PLURALSIGHT_TOKEN",
    "PLURALSIGHT_GQL_URL",
    "EIGHTFOLD_BEARER_TOKEN",
    "EIGHTFOLD_BASE_URL",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def fast_retry() -> RetryPolicy:
    return RetryPolicy(base_delay=0.0, max_delay=0.0, max_jitter=0.0)


@pytest.fixture
def udemy_course() -> UnifiedRecord:
    return UnifiedRecord(
        source="udemy",
        source_id="101",
        title="Python for Data Analysis",
        description="Pandas and friends",
        url="https://acme.udemy.com/course/python-data/",
        language="en_US",
        category="Development | Data Science",
        difficulty="Beginner",
        duration_hours=5.5,
        status="active",
        published_date="2024-05-01",
        image_url="https://img.udemy.com/101_480x270.jpg",
    )


@pytest.fixture
def matching_destination(udemy_course: UnifiedRecord) -> DestinationRecord:
    return DestinationRecord(
        system_id="UDM+101",
        title=udemy_course.title,
        description=udemy_course.description,
        url=udemy_course.url,
        language="en",
        category=udemy_course.category,
        difficulty=udemy_course.difficulty,
        duration_hours=udemy_course.duration_hours,
        status="active",
        published_date=udemy_course.published_date,
        image_url=udemy_course.image_url,
    )
