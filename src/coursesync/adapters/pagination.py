"""Drive repeated fetches across the pagination idioms our upstreams use.

Three shapes are understood, and the first successful page decides which one
applies for the rest of the run:

* offset/meta: ``{"data": [...], "meta": {"pageStartIndex", "pageTotalCount", "totalCount"}}``
* cursor (GraphQL connections): ``{"pageInfo": {"hasNextPage", "endCursor"}, "nodes": [...]}``
* next-link: ``{"results": [...], "next": "<absolute url or empty>"}``

Rows are translated as soon as their page arrives, so a failure on page N still
leaves pages 1..N-1 in the returned ``FetchResult``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from contextlib import aclosing
from dataclasses import dataclass, replace
from enum import StrEnum
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from coursesync.domain.model import FetchResult

from .http_resilience import PayloadDecodeError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    import httpx

    from .http_resilience import PayloadUnwrap, ResilientClient

log = getLogger(__name__)

OFFSET_MAX_PAGE_SIZE: Final[int] = 100

Row = dict[str, Any]


class PaginationIdiom(StrEnum):
    OFFSET = "offset"
    CURSOR = "cursor"
    NEXT_LINK = "next-link"


@dataclass(slots=True, frozen=True)
class PageToken:
    """Everything a request builder needs to ask for one page.

    Only the field matching the detected idiom changes between pages: ``offset``
    for offset/meta, ``cursor`` for cursor pagination and ``url`` (the literal
    ``next`` link) for next-link pagination.
    """

    number: int = 1
    page_size: int = OFFSET_MAX_PAGE_SIZE
    offset: int = 0
    cursor: str | None = None
    url: str | None = None


def _none_to_list(value: object) -> object:
    return [] if value is None else value


class _PageModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class OffsetMeta(_PageModel):
    page_start_index: int = Field(default=0, alias="pageStartIndex")
    page_total_count: int = Field(default=0, alias="pageTotalCount")
    total_count: int = Field(default=0, alias="totalCount")


class OffsetPage(_PageModel):
    data: list[Row] = Field(default_factory=list)
    meta: OffsetMeta

    _normalize_data = field_validator("data", mode="before")(_none_to_list)


class PageInfo(_PageModel):
    has_next_page: bool = Field(default=False, alias="hasNextPage")
    end_cursor: str | None = Field(default=None, alias="endCursor")


class CursorPage(_PageModel):
    page_info: PageInfo = Field(alias="pageInfo")
    nodes: list[Row] = Field(default_factory=list)

    _normalize_nodes = field_validator("nodes", mode="before")(_none_to_list)


class NextLinkPage(_PageModel):
    results: list[Row] = Field(default_factory=list)
    next: str | None = None

    _normalize_results = field_validator("results", mode="before")(_none_to_list)


type Page = OffsetPage | CursorPage | NextLinkPage

_SHAPES: Final[tuple[tuple[PaginationIdiom, type[_PageModel], str], ...]] = (
    (PaginationIdiom.OFFSET, OffsetPage, "meta"),
    (PaginationIdiom.CURSOR, CursorPage, "pageInfo"),
    (PaginationIdiom.NEXT_LINK, NextLinkPage, "results"),
)


def decode_page(
    payload: object,
    *,
    idiom: PaginationIdiom | None = None,
) -> tuple[PaginationIdiom, Page]:
    """Decode ``payload`` into the first page shape it matches.

    With ``idiom`` set only that shape is tried. Raises ``PayloadDecodeError``
    when no shape matches.
    """

    if not isinstance(payload, Mapping):
        raise PayloadDecodeError(f"Expected a JSON object page, got {type(payload).__name__}")

    problems: list[str] = []
    for candidate, model, marker in _SHAPES:
        if idiom is not None and candidate is not idiom:
            continue
        if marker not in payload:
            continue
        try:
            page = model.model_validate(payload)
        except ValidationError as exc:
            problems.append(f"{candidate}: {exc.error_count()} validation errors")
            continue
        return candidate, page  # type: ignore[return-value]

    expected = idiom or "offset/meta, cursor or next-link"
    detail = f" ({'; '.join(problems)})" if problems else ""
    raise PayloadDecodeError(f"Page does not match {expected} pagination{detail}")


def page_rows(page: Page) -> list[Row]:
    match page:
        case OffsetPage():
            return page.data
        case CursorPage():
            return page.nodes
        case NextLinkPage():
            return page.results


def clamp_page_size(requested: int | None, ceiling: int) -> int:
    if requested is None or requested <= 0:
        return ceiling
    return min(requested, ceiling)


def next_token(idiom: PaginationIdiom, page: Page, token: PageToken) -> PageToken | None:
    """Return the token for the page after ``page``, or ``None`` once the idiom says stop."""

    following = token.number + 1
    match page:
        case OffsetPage(meta=meta):
            if not page.data or meta.total_count <= 0 or meta.page_total_count <= 0:
                return None
            offset = meta.page_start_index + meta.page_total_count
            if offset >= meta.total_count:
                return None
            if offset <= token.offset:
                log.warning("Offset pagination stopped advancing at %d; stopping", offset)
                return None
            return replace(
                token,
                number=following,
                offset=offset,
                page_size=min(token.page_size, OFFSET_MAX_PAGE_SIZE),
            )
        case CursorPage(page_info=info):
            cursor = (info.end_cursor or "").strip()
            if not info.has_next_page or not cursor:
                return None
            if cursor == token.cursor:
                log.warning("Cursor pagination repeated cursor %r; stopping", cursor)
                return None
            return replace(token, number=following, cursor=cursor)
        case NextLinkPage():
            link = (page.next or "").strip()
            if not link:
                return None
            if link == token.url:
                log.warning("Next-link pagination repeated %s; stopping", link)
                return None
            return replace(token, number=following, url=link)
    raise AssertionError(f"Unhandled pagination idiom {idiom}")  # pragma: no cover


class Paginator:
    """Fetch pages through a ``ResilientClient`` until the idiom or ``max_pages`` stops it.

    ``build_request`` turns a ``PageToken`` into a request; authentication and
    provider-specific parameters live there. ``unwrap`` extracts the page object
    from an envelope (e.g. ``data.courseCatalog`` in a GraphQL response) and
    may raise ``RetryablePayloadError``. ``max_pages`` of ``0`` means "until the
    upstream says there is nothing left"; a positive value caps the iterations.
    """

    def __init__(
        self,
        client: ResilientClient,
        build_request: Callable[[PageToken], httpx.Request],
        *,
        page_size: int | None = None,
        max_pages: int = 0,
        max_page_size: int | None = None,
        unwrap: PayloadUnwrap | None = None,
    ) -> None:
        self._client = client
        self._build_request = build_request
        self._page_size = clamp_page_size(page_size, max_page_size or OFFSET_MAX_PAGE_SIZE)
        self._max_pages = max(max_pages, 0)
        self._unwrap = unwrap

    async def iter_pages(self) -> AsyncIterator[list[Row]]:
        """Yield the raw rows of every page, in order."""

        token = PageToken(number=1, page_size=self._page_size)
        idiom: PaginationIdiom | None = None
        while True:
            if self._max_pages and token.number > self._max_pages:
                log.info("%s: reached max_pages=%d", self._client.name, self._max_pages)
                return
            payload = await self._client.fetch_json(
                partial(self._build_request, token),
                unwrap=self._unwrap,
            )
            idiom, page = decode_page(payload, idiom=idiom)
            rows = page_rows(page)
            log.info(
                "%s page %d (%s): %d rows",
                self._client.name,
                token.number,
                idiom,
                len(rows),
            )
            yield rows
            following = next_token(idiom, page, token)
            if following is None:
                return
            token = following

    async def collect[T](
        self,
        translate: Callable[[Row], T | None],
        *,
        timeout: float | None = None,
    ) -> FetchResult[T]:
        """Translate every row of every page; never raises for fetch failures.

        A terminal fetch error, a decode error or an expired ``timeout`` ends the
        run and is returned in ``FetchResult.error`` together with the records
        translated so far. Rows that fail translation are logged and skipped.
        """

        result: FetchResult[T] = FetchResult()
        try:
            async with asyncio.timeout(timeout), aclosing(self.iter_pages()) as pages:
                async for rows in pages:
                    result.pages += 1
                    for row in rows:
                        try:
                            record = translate(row)
                        except ValueError as exc:
                            result.skipped += 1
                            log.warning("%s: skipping malformed row: %s", self._client.name, exc)
                            continue
                        if record is not None:
                            result.records.append(record)
        except TimeoutError as exc:
            result.error = exc
            log.warning(
                "%s: pagination timed out after %d pages (%d records kept)",
                self._client.name,
                result.pages,
                len(result.records),
            )
        except Exception as exc:  # noqa: BLE001
            result.error = exc
            log.warning(
                "%s: pagination failed after %d pages (%d records kept): %s",
                self._client.name,
                result.pages,
                len(result.records),
                exc,
            )
        return result
