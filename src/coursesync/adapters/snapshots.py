"""JSON snapshots of the inputs of a reconciliation run.

A snapshot directory holds ``udemy.json``, ``pluralsight.json`` and
``destination.json``, each a JSON array of records. Writing one after a live
fetch and reading it back later reproduces the same reconciliation without
calling any API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import TypeAdapter, ValidationError

from coursesync.domain.model import DestinationRecord, UnifiedRecord

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

log = getLogger(__name__)

UDEMY_SNAPSHOT: Final[str] = "udemy.json"
PLURALSIGHT_SNAPSHOT: Final[str] = "pluralsight.json"
DESTINATION_SNAPSHOT: Final[str] = "destination.json"

_UPSTREAM_ADAPTER: Final = TypeAdapter(list[UnifiedRecord])
_DESTINATION_ADAPTER: Final = TypeAdapter(list[DestinationRecord])


class SnapshotError(RuntimeError):
    """Raised when a snapshot file is missing or does not hold the expected records."""


@dataclass(slots=True)
class CatalogSnapshot:
    udemy: list[UnifiedRecord] = field(default_factory=list)
    pluralsight: list[UnifiedRecord] = field(default_factory=list)
    destination: list[DestinationRecord] = field(default_factory=list)


def write_snapshot(directory: Path, snapshot: CatalogSnapshot) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    _write(directory / UDEMY_SNAPSHOT, _UPSTREAM_ADAPTER, snapshot.udemy)
    _write(directory / PLURALSIGHT_SNAPSHOT, _UPSTREAM_ADAPTER, snapshot.pluralsight)
    _write(directory / DESTINATION_SNAPSHOT, _DESTINATION_ADAPTER, snapshot.destination)
    log.info(
        "Wrote snapshot to %s (udemy=%d pluralsight=%d destination=%d)",
        directory,
        len(snapshot.udemy),
        len(snapshot.pluralsight),
        len(snapshot.destination),
    )


def read_snapshot(directory: Path) -> CatalogSnapshot:
    """Load all three files from ``directory``; a missing file raises ``SnapshotError``."""

    return CatalogSnapshot(
        udemy=_read(directory / UDEMY_SNAPSHOT, _UPSTREAM_ADAPTER),
        pluralsight=_read(directory / PLURALSIGHT_SNAPSHOT, _UPSTREAM_ADAPTER),
        destination=_read(directory / DESTINATION_SNAPSHOT, _DESTINATION_ADAPTER),
    )


def _write[T](path: Path, adapter: TypeAdapter[list[T]], records: Sequence[T]) -> None:
    path.write_bytes(adapter.dump_json(list(records), indent=2))


def _read[T](path: Path, adapter: TypeAdapter[list[T]]) -> list[T]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise SnapshotError(f"Snapshot file not found: {path}") from exc
    try:
        return adapter.validate_json(raw)
    except ValidationError as exc:
        raise SnapshotError(f"Invalid snapshot file {path}: {exc.error_count()} errors") from exc
