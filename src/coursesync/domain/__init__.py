"""Domain types and pure logic for course catalog reconciliation."""

from __future__ import annotations

from .identity import build_identity, destination_identity, parse_identity
from .model import DeleteRecord, DestinationRecord, FetchResult, UnifiedRecord
from .reconciliation import ReconciliationResult, filter_managed, needs_update, reconcile

__all__ = [
    "DeleteRecord",
    "DestinationRecord",
    "FetchResult",
    "ReconciliationResult",
    "UnifiedRecord",
    "build_identity",
    "destination_identity",
    "filter_managed",
    "needs_update",
    "parse_identity",
    "reconcile",
]
