"""Synchronization defaults for catalog runs."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PROVIDER_PAGE_SIZE = 100
DEFAULT_DESTINATION_PAGE_SIZE = 100
DEFAULT_PROVIDER_WORKERS = 4
DEFAULT_FETCH_TIMEOUT_SECONDS = 6 * 60 * 60
DEFAULT_MANAGED_PREFIXES = ("UDM+", "PLS+")


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Knobs for one reconciliation run.

    ``*_max_pages`` of ``0`` fetches until the upstream reports the last page.
    """

    provider_page_size: int = DEFAULT_PROVIDER_PAGE_SIZE
    udemy_max_pages: int = 0
    pluralsight_max_pages: int = 0
    destination_page_size: int = DEFAULT_DESTINATION_PAGE_SIZE
    destination_max_pages: int = 0
    provider_workers: int = DEFAULT_PROVIDER_WORKERS
    fetch_timeout_seconds: float | None = DEFAULT_FETCH_TIMEOUT_SECONDS
    managed_prefixes: tuple[str, ...] = DEFAULT_MANAGED_PREFIXES


def get_sync_config() -> SyncConfig:
    return SyncConfig()
