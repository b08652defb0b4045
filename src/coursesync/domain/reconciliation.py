"""Compute create/update/delete sets between provider courses and the destination catalog.

Providers are authoritative for existence: a destination course whose identity no
provider reports any more is scheduled for deletion. Change detection is
asymmetric on purpose. A field only counts as changed when the destination
already holds a non-empty value for it, so courses the destination has not fully
populated do not flap between runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .identity import destination_identity, record_identity
from .model import DeleteRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .model import DestinationRecord, UnifiedRecord

log = getLogger(__name__)

DURATION_TOLERANCE_HOURS: Final[float] = 0.01

_LANGUAGE_NAMES: Final[dict[str, str]] = {
    "english": "en",
    "spanish": "es",
    "español": "es",
    "espanol": "es",
    "portuguese": "pt",
    "português": "pt",
    "portugues": "pt",
}
_LANGUAGE_FAMILIES: Final[tuple[str, ...]] = ("en", "es", "pt")


@dataclass(slots=True)
class ReconciliationResult:
    create: list[UnifiedRecord] = field(default_factory=list)
    update: list[UnifiedRecord] = field(default_factory=list)
    delete: list[DeleteRecord] = field(default_factory=list)
    duplicates: int = 0


def reconcile(
    upstream: Iterable[UnifiedRecord],
    destination: Iterable[DestinationRecord],
) -> ReconciliationResult:
    """Join ``upstream`` and ``destination`` by identity and classify every course."""

    upstream_by_identity: dict[str, UnifiedRecord] = {}
    duplicates = 0
    for record in upstream:
        identity = record_identity(record)
        if not identity:
            continue
        if identity in upstream_by_identity:
            duplicates += 1
        upstream_by_identity[identity] = record

    destination_by_identity: dict[str, DestinationRecord] = {}
    for existing in destination:
        identity = destination_identity(existing)
        if not identity:
            continue
        destination_by_identity[identity] = existing

    if duplicates:
        log.warning("Collapsed %d upstream courses sharing an identity; last one wins", duplicates)

    result = ReconciliationResult(duplicates=duplicates)
    for identity, record in upstream_by_identity.items():
        existing = destination_by_identity.get(identity)
        if existing is None:
            result.create.append(record)
        elif needs_update(record, existing):
            result.update.append(record)

    for identity, existing in destination_by_identity.items():
        if identity not in upstream_by_identity:
            result.delete.append(DeleteRecord(title=existing.title.strip(), identity=identity))

    return result


def needs_update(upstream: UnifiedRecord, existing: DestinationRecord) -> bool:
    """Return True when ``existing`` holds a populated value that disagrees with ``upstream``."""

    text_pairs = (
        (upstream.title, existing.title),
        (upstream.description, existing.description),
        (upstream.url, existing.url),
        (upstream.category, existing.category),
        (upstream.difficulty, existing.difficulty),
        (upstream.published_date, existing.published_date),
        (upstream.image_url, existing.image_url),
    )
    for provided, current in text_pairs:
        if _differs(_normalize(provided), _normalize(current)):
            return True

    if _differs(normalize_language(upstream.language), normalize_language(existing.language)):
        return True

    if (
        existing.duration_hours > 0
        and upstream.duration_hours > 0
        and abs(existing.duration_hours - upstream.duration_hours) > DURATION_TOLERANCE_HOURS
    ):
        return True

    # Destinations leave status blank to mean "keep whatever is there".
    provided_status = _normalize(upstream.status)
    current_status = _normalize(existing.status)
    return bool(provided_status) and _differs(provided_status, current_status)


def normalize_language(value: str) -> str:
    """Reduce long names and locale codes to a language family (``en_US`` -> ``en``)."""

    normalized = _normalize(value).replace("_", "-")
    if normalized in _LANGUAGE_NAMES:
        return _LANGUAGE_NAMES[normalized]
    for family in _LANGUAGE_FAMILIES:
        if normalized.startswith(family):
            return family
    return normalized


def filter_managed(
    records: Iterable[DestinationRecord],
    prefixes: Sequence[str],
) -> list[DestinationRecord]:
    """Keep destination courses whose identity starts with one of ``prefixes``.

    Courses owned by other systems are never candidates for deletion. An empty
    ``prefixes`` keeps every record.
    """

    kept = list(records)
    if not prefixes:
        return kept
    normalized_prefixes = tuple(prefix.strip().upper() for prefix in prefixes)
    return [
        record
        for record in kept
        if destination_identity(record).upper().startswith(normalized_prefixes)
    ]


def _normalize(value: str) -> str:
    return value.strip().lower()


def _differs(provided: str, current: str) -> bool:
    return current != "" and provided != current
