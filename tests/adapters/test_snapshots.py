from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from coursesync.adapters.snapshots import (
    DESTINATION_SNAPSHOT,
    PLURALSIGHT_SNAPSHOT,
    UDEMY_SNAPSHOT,
    CatalogSnapshot,
    SnapshotError,
    read_snapshot,
    write_snapshot,
)
from coursesync.domain.model import DestinationRecord, UnifiedRecord

if TYPE_CHECKING:
    from pathlib import Path


def test_written_snapshot_reads_back(
    tmp_path: Path,
    udemy_course: UnifiedRecord,
    matching_destination: DestinationRecord,
) -> None:
    pluralsight = UnifiedRecord(source="pluralsight", source_id="7", skills=("go", "k8s"))
    snapshot = CatalogSnapshot(
        udemy=[udemy_course],
        pluralsight=[pluralsight],
        destination=[matching_destination],
    )

    write_snapshot(tmp_path / "run", snapshot)
    loaded = read_snapshot(tmp_path / "run")

    assert loaded == snapshot
    assert loaded.pluralsight[0].skills == ("go", "k8s")


def test_snapshot_files_are_json_arrays(tmp_path: Path, udemy_course: UnifiedRecord) -> None:
    write_snapshot(tmp_path, CatalogSnapshot(udemy=[udemy_course]))

    udemy = json.loads((tmp_path / UDEMY_SNAPSHOT).read_text())
    assert udemy[0]["source_id"] == "101"
    assert json.loads((tmp_path / PLURALSIGHT_SNAPSHOT).read_text()) == []
    assert json.loads((tmp_path / DESTINATION_SNAPSHOT).read_text()) == []


def test_missing_snapshot_file_raises(tmp_path: Path) -> None:
    with pytest.raises(SnapshotError, match="not found"):
        read_snapshot(tmp_path)


def test_hand_written_snapshot_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / UDEMY_SNAPSHOT).write_text('[{"source": "udemy", "source_id": "1"}]')
    (tmp_path / PLURALSIGHT_SNAPSHOT).write_text("[]")
    (tmp_path / DESTINATION_SNAPSHOT).write_text('[{"system_id": "UDM+1", "title": "x"}]')

    loaded = read_snapshot(tmp_path)

    assert loaded.udemy == [UnifiedRecord(source="udemy", source_id="1")]
    assert loaded.destination == [DestinationRecord(system_id="UDM+1", title="x")]


def test_invalid_snapshot_raises(tmp_path: Path) -> None:
    (tmp_path / UDEMY_SNAPSHOT).write_text('{"not": "a list"}')
    (tmp_path / PLURALSIGHT_SNAPSHOT).write_text("[]")
    (tmp_path / DESTINATION_SNAPSHOT).write_text("[]")

    with pytest.raises(SnapshotError, match="Invalid snapshot"):
        read_snapshot(tmp_path)
