"""HTTP client reading the Eightfold destination course catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from coursesync.adapters.http_resilience import ResilienceConfig, ResilientClient
from coursesync.adapters.pagination import OFFSET_MAX_PAGE_SIZE, Paginator
from coursesync.config.eightfold import EightfoldConfig, get_eightfold_config
from coursesync.domain.ports.fetching import DestinationCatalog

from .translator import parse_destination_course

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from coursesync.adapters.pagination import PageToken
    from coursesync.domain.model import DestinationRecord, FetchResult

log = getLogger(__name__)

COURSES_PATH = "/api/v2/core/courses"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class EightfoldCatalog:
    name: ClassVar[str] = "eightfold"

    config: EightfoldConfig = field(default_factory=get_eightfold_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def list_courses(
        self,
        *,
        page_size: int | None = None,
        max_pages: int = 0,
        timeout: float | None = None,
    ) -> FetchResult[DestinationRecord]:
        async with self.client_factory(self.config.resilience) as client:
            paginator = Paginator(
                client,
                partial(self._build_request, client),
                page_size=page_size,
                max_pages=max_pages,
                max_page_size=OFFSET_MAX_PAGE_SIZE,
            )
            result = await paginator.collect(parse_destination_course, timeout=timeout)
        log.info("eightfold: %d destination courses over %d pages", len(result.records), result.pages)
        return result

    def _build_request(self, client: ResilientClient, token: PageToken) -> httpx.Request:
        params = {"limit": token.page_size, "start": token.offset}
        headers = {"Authorization": f"Bearer {self.config.bearer_token}"}
        return client.build_request("GET", COURSES_PATH, params=params, headers=headers)


if TYPE_CHECKING:
    _catalog_check: DestinationCatalog = EightfoldCatalog()
