"""Translate Udemy course payloads into ``UnifiedRecord`` values."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from coursesync.adapters.coercion import LIST_SEPARATOR, absolutize_url, first_non_empty
from coursesync.domain.model import UnifiedRecord

from .schema import CoursePayload

if TYPE_CHECKING:
    from collections.abc import Mapping

SOURCE = "udemy"
DEFAULT_COURSE_ORIGIN = "https://www.udemy.com"
ACTIVE_STATUS = "active"


def parse_course(row: Mapping[str, object], *, origin: str = DEFAULT_COURSE_ORIGIN) -> UnifiedRecord | None:
    """Return the course described by ``row``, or ``None`` when it carries no id.

    ``estimated_content_length`` is reported in seconds. Relative course urls are
    resolved against ``origin`` (the tenant host).
    """

    try:
        payload = CoursePayload.model_validate(row)
    except ValidationError as exc:
        raise ValueError(f"invalid Udemy course: {exc.error_count()} validation errors") from exc

    source_id = payload.id.strip()
    if not source_id:
        return None

    return UnifiedRecord(
        source=SOURCE,
        source_id=source_id,
        title=payload.title.strip(),
        description=payload.description.strip(),
        url=absolutize_url(origin, payload.url),
        language=first_non_empty(payload.locale, payload.language),
        category=LIST_SEPARATOR.join(
            category.label for category in payload.categories if category.label
        ),
        difficulty=payload.level.strip(),
        duration_hours=payload.estimated_content_length / 3600.0,
        status=ACTIVE_STATUS,
        published_date=payload.last_update_date.strip(),
        image_url=payload.image_url,
    )
