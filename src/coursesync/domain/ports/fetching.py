"""Ports for fetching course catalogs from external systems."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from coursesync.domain.model import DestinationRecord, FetchResult, UnifiedRecord


@runtime_checkable
class CourseProvider(Protocol):
    """Upstream catalog that reports courses as ``UnifiedRecord`` values."""

    name: str

    async def list_courses(
        self,
        *,
        page_size: int | None = None,
        max_pages: int = 0,
        timeout: float | None = None,
    ) -> FetchResult[UnifiedRecord]: ...


@runtime_checkable
class DestinationCatalog(Protocol):
    """Destination catalog whose current content is reconciled against providers."""

    name: str

    async def list_courses(
        self,
        *,
        page_size: int | None = None,
        max_pages: int = 0,
        timeout: float | None = None,
    ) -> FetchResult[DestinationRecord]: ...


__all__ = ["CourseProvider", "DestinationCatalog"]
