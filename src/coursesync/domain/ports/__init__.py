"""Ports implemented by adapters."""

from __future__ import annotations

from .fetching import CourseProvider, DestinationCatalog

__all__ = ["CourseProvider", "DestinationCatalog"]
