"""GraphQL client for the Pluralsight course catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from coursesync.adapters.http_resilience import ResilienceConfig, ResilientClient
from coursesync.adapters.pagination import Paginator
from coursesync.config.pluralsight import PluralsightConfig, get_pluralsight_config
from coursesync.domain.ports.fetching import CourseProvider

from .schema import COURSE_CATALOG_QUERY
from .translator import parse_course, unwrap_course_catalog

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from coursesync.adapters.pagination import PageToken
    from coursesync.domain.model import FetchResult, UnifiedRecord

log = getLogger(__name__)

PLURALSIGHT_MAX_FIRST = 8000


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class PluralsightFetcher:
    name: ClassVar[str] = "pluralsight"

    config: PluralsightConfig = field(default_factory=get_pluralsight_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def list_courses(
        self,
        *,
        page_size: int | None = None,
        max_pages: int = 0,
        timeout: float | None = None,
    ) -> FetchResult[UnifiedRecord]:
        async with self.client_factory(self.config.resilience) as client:
            paginator = Paginator(
                client,
                partial(self._build_request, client),
                page_size=page_size,
                max_pages=max_pages,
                max_page_size=PLURALSIGHT_MAX_FIRST,
                unwrap=unwrap_course_catalog,
            )
            result = await paginator.collect(parse_course, timeout=timeout)
        log.info("pluralsight: %d courses over %d pages", len(result.records), result.pages)
        return result

    def _build_request(self, client: ResilientClient, token: PageToken) -> httpx.Request:
        body = {
            "query": COURSE_CATALOG_QUERY,
            "variables": {"first": token.page_size, "after": token.cursor},
        }
        headers = {"Authorization": f"Bearer {self.config.token}"}
        return client.build_request("POST", self.config.endpoint, json=body, headers=headers)


if TYPE_CHECKING:
    _provider_check: CourseProvider = PluralsightFetcher()
