"""Public interface for the Pluralsight adapter."""

from __future__ import annotations

from .client import PluralsightFetcher
from .schema import CourseCatalogResponse, CourseNode
from .translator import parse_course, unwrap_course_catalog

__all__ = [
    "CourseCatalogResponse",
    "CourseNode",
    "PluralsightFetcher",
    "parse_course",
    "unwrap_course_catalog",
]
