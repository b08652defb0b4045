"""Canonical course records exchanged between providers, the destination and exporters."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True, kw_only=True)
class UnifiedRecord:
    """A course as reported by an upstream provider.

    Every provider translator maps into this shape. Missing values are empty
    strings, never ``None``; ``source_id`` is the raw provider id without any
    identity prefix.
    """

    source: str
    source_id: str
    title: str = ""
    description: str = ""
    url: str = ""
    language: str = ""
    category: str = ""
    difficulty: str = ""
    duration_hours: float = 0.0
    status: str = ""
    published_date: str = ""
    image_url: str = ""
    skills: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True, kw_only=True)
class DestinationRecord:
    """A course as read back from the destination catalog.

    ``system_id`` usually already carries the provider prefix (``UDM+123``);
    ``legacy_id`` is the older identity field and serves as a fallback.
    """

    system_id: str = ""
    legacy_id: str = ""
    title: str = ""
    description: str = ""
    url: str = ""
    language: str = ""
    category: str = ""
    difficulty: str = ""
    duration_hours: float = 0.0
    status: str = ""
    published_date: str = ""
    image_url: str = ""
    skills: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class DeleteRecord:
    title: str
    identity: str


@dataclass(slots=True)
class FetchResult[T]:
    """Records gathered by a paginated fetch, with the error that stopped it (if any)."""

    records: list[T] = field(default_factory=list)
    pages: int = 0
    skipped: int = 0
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
