"""HTTP client for the Udemy Business course catalog."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from coursesync.adapters.coercion import url_origin
from coursesync.adapters.http_resilience import ResilienceConfig, ResilientClient
from coursesync.adapters.pagination import Paginator
from coursesync.config.udemy import UdemyConfig, get_udemy_config
from coursesync.domain.ports.fetching import CourseProvider

from .translator import DEFAULT_COURSE_ORIGIN, parse_course

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from coursesync.adapters.pagination import PageToken
    from coursesync.domain.model import FetchResult, UnifiedRecord

log = getLogger(__name__)

UDEMY_MAX_PAGE_SIZE = 100
COURSES_PATH = "courses/list/"
COURSE_FIELDS = (
    "id,title,description,url,estimated_content_length,categories,images,locale,"
    "last_update_date,level"
)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def basic_auth_header(client_id: str, client_secret: str) -> str:
    token = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode("ascii")
    return f"Basic {token}"


@dataclass(slots=True)
class UdemyFetcher:
    name: ClassVar[str] = "udemy"

    config: UdemyConfig = field(default_factory=get_udemy_config)
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
        origin = url_origin(self.config.resilience.base_url, DEFAULT_COURSE_ORIGIN)
        async with self.client_factory(self.config.resilience) as client:
            paginator = Paginator(
                client,
                partial(self._build_request, client),
                page_size=page_size,
                max_pages=max_pages,
                max_page_size=UDEMY_MAX_PAGE_SIZE,
            )
            result = await paginator.collect(partial(parse_course, origin=origin), timeout=timeout)
        log.info("udemy: %d courses over %d pages", len(result.records), result.pages)
        return result

    def _build_request(self, client: ResilientClient, token: PageToken) -> httpx.Request:
        headers = {
            "Authorization": basic_auth_header(self.config.client_id, self.config.client_secret)
        }
        if token.url:
            # ``next`` links already carry page_size and the field selection.
            return client.build_request("GET", token.url, headers=headers)
        params = {"page_size": token.page_size, "fields[course]": COURSE_FIELDS}
        return client.build_request("GET", COURSES_PATH, params=params, headers=headers)


if TYPE_CHECKING:
    _provider_check: CourseProvider = UdemyFetcher()
