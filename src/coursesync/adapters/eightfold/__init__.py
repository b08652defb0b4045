"""Public interface for the Eightfold destination adapter."""

from __future__ import annotations

from .client import EightfoldCatalog
from .schema import EightfoldCourseRow
from .translator import parse_destination_course

__all__ = ["EightfoldCatalog", "EightfoldCourseRow", "parse_destination_course"]
