"""Translate Eightfold course rows into ``DestinationRecord`` values."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from coursesync.domain.model import DestinationRecord

from .schema import EightfoldCourseRow

if TYPE_CHECKING:
    from collections.abc import Mapping


def parse_destination_course(row: Mapping[str, object]) -> DestinationRecord:
    try:
        course = EightfoldCourseRow.model_validate(row)
    except ValidationError as exc:
        raise ValueError(f"invalid Eightfold course: {exc.error_count()} validation errors") from exc

    return DestinationRecord(
        system_id=course.system_id.strip(),
        legacy_id=course.lms_course_id.strip(),
        title=course.title,
        description=course.description,
        url=course.course_url,
        language=course.language,
        category=course.category,
        difficulty=course.difficulty,
        duration_hours=course.duration_hours,
        status=course.status,
        published_date=course.published_date,
        image_url=course.image_url,
        skills=course.skills,
    )
