"""Translate Pluralsight GraphQL payloads into ``UnifiedRecord`` values."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from coursesync.adapters.coercion import absolutize_url, first_non_empty
from coursesync.adapters.http_resilience import PayloadDecodeError, RetryablePayloadError
from coursesync.domain.model import UnifiedRecord

from .schema import CourseCatalogResponse, CourseNode

if TYPE_CHECKING:
    from collections.abc import Mapping

SOURCE = "pluralsight"
COURSE_ORIGIN = "https://app.pluralsight.com"
ACTIVE_STATUS = "active"


def unwrap_course_catalog(payload: object) -> object:
    """Extract ``data.courseCatalog`` from a GraphQL response.

    GraphQL ``errors`` (throttling, transient resolver failures) are raised as
    ``RetryablePayloadError`` so the exchange is attempted again.
    """

    try:
        response = CourseCatalogResponse.model_validate(payload)
    except ValidationError as exc:
        raise PayloadDecodeError(
            f"invalid Pluralsight response: {exc.error_count()} validation errors"
        ) from exc

    if response.errors:
        messages = "; ".join(error.message for error in response.errors if error.message)
        raise RetryablePayloadError(f"pluralsight graphql errors: {messages or 'unknown error'}")
    if response.data is None or response.data.course_catalog is None:
        raise PayloadDecodeError("pluralsight response is missing data.courseCatalog")
    return response.data.course_catalog


def parse_course(row: Mapping[str, object]) -> UnifiedRecord | None:
    try:
        node = CourseNode.model_validate(row)
    except ValidationError as exc:
        raise ValueError(f"invalid Pluralsight course: {exc.error_count()} validation errors") from exc

    source_id = node.stable_id
    if not source_id:
        return None

    # The catalog query exposes no category, image or skills.
    return UnifiedRecord(
        source=SOURCE,
        source_id=source_id,
        title=node.title.strip(),
        description=first_non_empty(node.description, node.short_description),
        url=absolutize_url(COURSE_ORIGIN, node.url),
        language=node.language.strip(),
        difficulty=node.level.strip(),
        duration_hours=node.course_seconds / 3600.0,
        status=ACTIVE_STATUS,
        published_date=first_non_empty(node.published_date, node.display_date, node.released_date),
    )
