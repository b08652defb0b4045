from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from coursesync.config.http_resilience import RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from types import TracebackType

    from tenacity.wait import wait_base

    from httpx._types import (
        CookieTypes,
        HeaderTypes,
        QueryParamTypes,
        RequestContent,
        RequestData,
        RequestExtensions,
        RequestFiles,
        TimeoutTypes,
        URLTypes,
    )

log = getLogger(__name__)

RequestBuilder = Callable[[], httpx.Request]
PayloadUnwrap = Callable[[object], object]
Sleep = Callable[[float], Awaitable[None]]

BODY_SNIPPET_LIMIT = 900

_RETRYABLE_TRANSPORT_ERRORS: tuple[type[httpx.TransportError], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)
_TRANSIENT_MESSAGE_MARKERS = ("connection reset", "broken pipe", "eof")
_HTML_PREFIXES = ("<!doctype", "<html", "<head", "<body")

__all__ = [
    "HTTPResponseError",
    "PayloadDecodeError",
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "RetryablePayloadError",
    "is_retryable_transport_error",
    "looks_like_html",
    "parse_retry_after",
    "snippet",
]


class HTTPResponseError(httpx.HTTPError):
    """Terminal non-2xx response, carrying enough of the exchange to diagnose it."""

    def __init__(self, request: httpx.Request, response: httpx.Response) -> None:
        self.method = request.method
        self.url = str(request.url)
        self.status_code = response.status_code
        self.headers = response.headers
        self.body = response.content
        self.retry_after = parse_retry_after(response.headers.get("Retry-After"))
        super().__init__(
            f"http error: {self.method} {self.url} status={self.status_code} "
            f"body={snippet(self.body)}"
        )
        self.request = request
        self.response = response


class RetryablePayloadError(httpx.HTTPError):
    """Raised by payload hooks when a payload-level condition should trigger a retry."""

    def __init__(self, message: str, *, response: httpx.Response | None = None) -> None:
        super().__init__(message)
        self.response = response


class PayloadDecodeError(ValueError):
    """Raised when a successful response does not carry the expected payload."""

    def __init__(self, message: str, *, body: bytes = b"") -> None:
        detail = f"{message} body={snippet(body)}" if body else message
        super().__init__(detail)
        self.body = body


class RequestOptions(TypedDict, total=False):
    content: RequestContent | None
    data: RequestData | None
    files: RequestFiles | None
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    cookies: CookieTypes | None
    extensions: RequestExtensions | None
    timeout: TimeoutTypes


class AsyncClientOptions(TypedDict, total=False):
    base_url: URLTypes
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    """One pooled ``httpx.AsyncClient`` plus the retry policy for a single upstream.

    Build it once per provider and pass it to every page fetch, so connections
    are reused across the whole run. ``fetch`` performs one logical exchange:
    transient transport failures and retryable statuses are retried with
    exponential backoff and jitter, honoring ``Retry-After``; everything else
    is raised immediately. Exhausting the attempts re-raises the last error.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )
        self._sleep: Sleep = sleep or asyncio.sleep

        client_kwargs: AsyncClientOptions = {"timeout": config.timeout_seconds}
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if config.default_headers:
            client_kwargs["headers"] = dict(config.default_headers)
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def name(self) -> str:
        return self.config.name

    def build_request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Request:
        """Build a request that inherits ``base_url`` and default headers."""

        return self._client.build_request(method, url, **kwargs)

    async def fetch(self, build: RequestBuilder) -> httpx.Response:
        """Perform one logical exchange and return the successful response.

        ``build`` is called again for every attempt. The response body has
        already been read in full.
        """

        response, _ = await self._exchange(build, decode=None)
        return response

    async def fetch_json(
        self,
        build: RequestBuilder,
        *,
        unwrap: PayloadUnwrap | None = None,
    ) -> object:
        """Like ``fetch`` but decode the JSON body and pass it through ``unwrap``.

        HTML bodies on a 2xx (proxy or WAF interstitials) and ``unwrap`` raising
        ``RetryablePayloadError`` are retried ``payload_retries`` more times.
        Any other decoding problem raises ``PayloadDecodeError``.
        """

        def decode(response: httpx.Response) -> object:
            payload = _decode_json(response)
            return unwrap(payload) if unwrap is not None else payload

        _, payload = await self._exchange(build, decode=decode)
        return payload

    async def _exchange(
        self,
        build: RequestBuilder,
        *,
        decode: Callable[[httpx.Response], object] | None,
    ) -> tuple[httpx.Response, object]:
        policy = self.config.retry
        payload_retries_left = policy.payload_retries

        def should_retry(exc: BaseException) -> bool:
            nonlocal payload_retries_left
            if isinstance(exc, RetryablePayloadError):
                if payload_retries_left <= 0:
                    return False
                payload_retries_left -= 1
                return True
            if isinstance(exc, HTTPResponseError):
                return policy.is_retryable_status(exc.status_code)
            if isinstance(exc, httpx.TransportError):
                return is_retryable_transport_error(exc)
            return False

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(policy.max_attempts, 1)),
            wait=_wait_retry_after(policy.build_wait()),
            retry=retry_if_exception(should_retry),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )
        return await retrying(self._attempt, build, decode)

    async def _attempt(
        self,
        build: RequestBuilder,
        decode: Callable[[httpx.Response], object] | None,
    ) -> tuple[httpx.Response, object]:
        request = build()
        response = await self._send(request)
        if not response.is_success:
            raise HTTPResponseError(request, response)
        if decode is None:
            return response, None
        try:
            return response, decode(response)
        except RetryablePayloadError as exc:
            if exc.response is None:
                exc.response = response
            raise

    async def _send(self, request: httpx.Request) -> httpx.Response:
        if self._limiter is None:
            return await self._client.send(request)
        async with self._limiter:
            return await self._client.send(request)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        log.warning(
            "%s: retrying (attempt %d/%d) in %.2fs: %s",
            self.config.name,
            retry_state.attempt_number,
            self.config.retry.max_attempts,
            delay,
            outcome.exception() if outcome is not None else None,
        )


def _wait_retry_after(fallback: wait_base) -> Callable[[RetryCallState], float]:
    """Sleep for the server's ``Retry-After`` when it sent one, else ``fallback``."""

    def wait(retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        error = outcome.exception() if outcome is not None else None
        if isinstance(error, HTTPResponseError) and error.retry_after:
            return error.retry_after
        return fallback(retry_state)

    return wait


def is_retryable_transport_error(exc: Exception) -> bool:
    """Classify a failed exchange as transient (timeouts, resets, early EOF)."""

    if isinstance(exc, _RETRYABLE_TRANSPORT_ERRORS):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _TRANSIENT_MESSAGE_MARKERS)


def parse_retry_after(value: str | None, *, now: datetime | None = None) -> float | None:
    """Parse ``Retry-After`` as delta seconds or an HTTP date; ``None`` when unusable."""

    if value is None:
        return None
    stripped = value.strip()
    if not stripped:
        return None
    if stripped.isdigit():
        return float(int(stripped))
    try:
        when = parsedate_to_datetime(stripped)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    reference = now or datetime.now(UTC)
    return max((when - reference).total_seconds(), 0.0)


def looks_like_html(body: bytes) -> bool:
    head = body[:64].decode("utf-8", errors="ignore").lstrip().lower()
    return head.startswith(_HTML_PREFIXES)


def snippet(body: bytes | str, limit: int = BODY_SNIPPET_LIMIT) -> str:
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "…"


def _decode_json(response: httpx.Response) -> object:
    body = response.content
    try:
        return json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        if looks_like_html(body):
            raise RetryablePayloadError(
                f"Expected JSON but received an HTML page from {response.request.url}",
                response=response,
            ) from exc
        raise PayloadDecodeError(f"json parse error: {exc}", body=body) from exc
