"""Public interface for the Udemy adapter."""

from __future__ import annotations

from .client import UdemyFetcher
from .schema import CategoryPayload, CoursePayload
from .translator import parse_course

__all__ = [
    "CategoryPayload",
    "CoursePayload",
    "UdemyFetcher",
    "parse_course",
]
