"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from coursesync.adapters.eightfold import EightfoldCatalog
from coursesync.adapters.pluralsight import PluralsightFetcher
from coursesync.adapters.snapshots import CatalogSnapshot, read_snapshot, write_snapshot
from coursesync.adapters.udemy import UdemyFetcher
from coursesync.common.parallel import parallel_map
from coursesync.config.sync import SyncConfig
from coursesync.domain.reconciliation import ReconciliationResult, filter_managed, reconcile

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from coursesync.domain.model import DestinationRecord, FetchResult, UnifiedRecord
    from coursesync.domain.ports.fetching import CourseProvider, DestinationCatalog

log = getLogger(__name__)


class DestinationFetchError(RuntimeError):
    """The destination catalog could not be read completely.

    Reconciling against a partial destination would schedule every missing
    course for creation, so the run stops instead.
    """


@dataclass(slots=True)
class CatalogSyncResult:
    reconciliation: ReconciliationResult
    provider_counts: dict[str, int] = field(default_factory=dict)
    failed_providers: list[str] = field(default_factory=list)
    destination_count: int = 0
    managed_count: int = 0

    @property
    def partial(self) -> bool:
        return bool(self.failed_providers)


def sync_course_catalog(
    *,
    providers: Sequence[CourseProvider] | None = None,
    destination: DestinationCatalog | None = None,
    config: SyncConfig | None = None,
    snapshot_dir: Path | None = None,
    mock_dir: Path | None = None,
) -> CatalogSyncResult:
    """Reconcile the provider catalogs against the destination catalog.

    With ``mock_dir`` the inputs are read from a snapshot directory and no API
    is called; otherwise Udemy and Pluralsight are fetched concurrently and the
    Eightfold catalog is read. ``snapshot_dir`` stores the fetched inputs.
    """

    return asyncio.run(
        sync_course_catalog_async(
            providers=providers,
            destination=destination,
            config=config,
            snapshot_dir=snapshot_dir,
            mock_dir=mock_dir,
        )
    )


async def sync_course_catalog_async(
    *,
    providers: Sequence[CourseProvider] | None = None,
    destination: DestinationCatalog | None = None,
    config: SyncConfig | None = None,
    snapshot_dir: Path | None = None,
    mock_dir: Path | None = None,
) -> CatalogSyncResult:
    effective_config = config or SyncConfig()

    if mock_dir is not None:
        log.info("Reading catalog inputs from %s", mock_dir)
        snapshot = read_snapshot(mock_dir)
        upstream = {"udemy": snapshot.udemy, "pluralsight": snapshot.pluralsight}
        failed: list[str] = []
        destination_records = snapshot.destination
    else:
        effective_destination = destination or EightfoldCatalog()
        effective_providers = (
            list(providers) if providers is not None else [UdemyFetcher(), PluralsightFetcher()]
        )
        destination_records = await _fetch_destination(effective_destination, effective_config)
        upstream, failed = await _fetch_providers(effective_providers, effective_config)
        if snapshot_dir is not None:
            write_snapshot(
                snapshot_dir,
                CatalogSnapshot(
                    udemy=upstream.get("udemy", []),
                    pluralsight=upstream.get("pluralsight", []),
                    destination=destination_records,
                ),
            )

    managed = filter_managed(destination_records, effective_config.managed_prefixes)
    upstream_records = [record for records in upstream.values() for record in records]
    reconciliation = reconcile(upstream_records, managed)

    result = CatalogSyncResult(
        reconciliation=reconciliation,
        provider_counts={name: len(records) for name, records in upstream.items()},
        failed_providers=failed,
        destination_count=len(destination_records),
        managed_count=len(managed),
    )
    log.info(
        "Reconciliation finished: upstream=%d destination=%d managed=%d "
        "create=%d update=%d delete=%d duplicates=%d",
        len(upstream_records),
        result.destination_count,
        result.managed_count,
        len(reconciliation.create),
        len(reconciliation.update),
        len(reconciliation.delete),
        reconciliation.duplicates,
    )
    return result


async def _fetch_destination(
    destination: DestinationCatalog,
    config: SyncConfig,
) -> list[DestinationRecord]:
    fetched = await destination.list_courses(
        page_size=config.destination_page_size,
        max_pages=config.destination_max_pages,
        timeout=config.fetch_timeout_seconds,
    )
    if fetched.error is not None:
        raise DestinationFetchError(
            f"{destination.name}: destination fetch failed after {fetched.pages} pages: "
            f"{fetched.error}"
        ) from fetched.error
    return fetched.records


async def _fetch_providers(
    providers: Sequence[CourseProvider],
    config: SyncConfig,
) -> tuple[dict[str, list[UnifiedRecord]], list[str]]:
    max_pages = {
        "udemy": config.udemy_max_pages,
        "pluralsight": config.pluralsight_max_pages,
    }

    async def fetch(_index: int, provider: CourseProvider) -> FetchResult[UnifiedRecord]:
        return await provider.list_courses(
            page_size=config.provider_page_size,
            max_pages=max_pages.get(provider.name, 0),
            timeout=config.fetch_timeout_seconds,
        )

    results, errors = await parallel_map(providers, fetch, max_workers=config.provider_workers)
    for error in errors:
        log.warning("Provider fetch raised: %s", error)

    upstream: dict[str, list[UnifiedRecord]] = {}
    failed: list[str] = []
    for provider, fetched in zip(providers, results, strict=True):
        if fetched is None:
            failed.append(provider.name)
            upstream[provider.name] = []
            log.warning("%s: fetch failed; continue with 0 records", provider.name)
            continue
        upstream[provider.name] = fetched.records
        if fetched.error is not None:
            failed.append(provider.name)
            log.warning(
                "%s: fetch stopped early (%s); continue with %d records",
                provider.name,
                fetched.error,
                len(fetched.records),
            )
    return upstream, failed
