from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx
import pytest

from coursesync.adapters.http_resilience import (
    HTTPResponseError,
    PayloadDecodeError,
    ResilienceConfig,
    RetryablePayloadError,
    is_retryable_transport_error,
    looks_like_html,
    parse_retry_after,
    snippet,
)
from coursesync.config.http_resilience import RetryPolicy
from tests.helpers.http import make_client_factory

if TYPE_CHECKING:
    from collections.abc import Callable

BASE = ResilienceConfig(name="test", base_url="https://api.example.test/")


def _fetch_json(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    retry: RetryPolicy,
    sleeps: list[float] | None = None,
    unwrap: Callable[[object], object] | None = None,
) -> object:
    factory = make_client_factory(handler, retry=retry, sleeps=sleeps)

    async def scenario() -> object:
        async with factory(BASE) as client:
            return await client.fetch_json(
                lambda: client.build_request("GET", "courses"),
                unwrap=unwrap,
            )

    return asyncio.run(scenario())


def test_sustained_503_surfaces_after_max_attempts(fast_retry: RetryPolicy) -> None:
    calls = 0

    def handler(_request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503, text="unavailable")

    with pytest.raises(HTTPResponseError) as excinfo:
        _fetch_json(handler, retry=fast_retry)

    assert calls == 8
    assert excinfo.value.status_code == 503
    assert excinfo.value.method == "GET"
    assert excinfo.value.url == "https://api.example.test/courses"


def test_non_retryable_status_fails_immediately(fast_retry: RetryPolicy) -> None:
    calls = 0

    def handler(_request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(404, text="x" * 2000)

    with pytest.raises(HTTPResponseError) as excinfo:
        _fetch_json(handler, retry=fast_retry)

    assert calls == 1
    assert excinfo.value.status_code == 404
    assert len(excinfo.value.body) == 2000
    assert "x" * 901 not in str(excinfo.value)


def test_recovers_after_transient_statuses(fast_retry: RetryPolicy) -> None:
    statuses = iter([429, 502, 200])

    def handler(_request: httpx.Request) -> httpx.Response:
        status = next(statuses)
        if status == 200:
            return httpx.Response(200, json={"ok": True})
        return httpx.Response(status)

    assert _fetch_json(handler, retry=fast_retry) == {"ok": True}


def test_retry_after_header_sets_the_delay() -> None:
    sleeps: list[float] = []
    responses = iter(
        [
            httpx.Response(429, headers={"Retry-After": "3"}),
            httpx.Response(200, json=[]),
        ]
    )

    result = _fetch_json(lambda _request: next(responses), retry=RetryPolicy(), sleeps=sleeps)

    assert result == []
    assert sleeps == [3.0]


def test_backoff_delay_grows_exponentially_with_bounded_jitter() -> None:
    sleeps: list[float] = []
    policy = RetryPolicy(max_attempts=4, base_delay=0.7, max_delay=30.0, max_jitter=0.4)

    with pytest.raises(HTTPResponseError):
        _fetch_json(lambda _request: httpx.Response(500), retry=policy, sleeps=sleeps)

    assert len(sleeps) == 3
    for attempt, delay in enumerate(sleeps, start=1):
        floor = min(0.7 * 2 ** (attempt - 1), 30.0)
        assert floor <= delay <= floor + 0.4


def test_network_errors_are_retried(fast_retry: RetryPolicy) -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls < 3:
            raise httpx.ConnectError("connection reset by peer", request=request)
        return httpx.Response(200, json={"page": 1})

    assert _fetch_json(handler, retry=fast_retry) == {"page": 1}
    assert calls == 3


def test_exhausted_network_errors_reraise_last_error(fast_retry: RetryPolicy) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(httpx.ReadTimeout):
        _fetch_json(handler, retry=fast_retry)


def test_html_interstitial_is_retried_once(fast_retry: RetryPolicy) -> None:
    bodies = iter(["<!DOCTYPE html><html>Just a moment...</html>", '{"ok": true}'])

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=next(bodies))

    assert _fetch_json(handler, retry=fast_retry) == {"ok": True}


def test_repeated_html_interstitial_gives_up(fast_retry: RetryPolicy) -> None:
    calls = 0

    def handler(_request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, text="<html><body>blocked</body></html>")

    with pytest.raises(RetryablePayloadError):
        _fetch_json(handler, retry=fast_retry)

    assert calls == 2


def test_malformed_json_is_terminal(fast_retry: RetryPolicy) -> None:
    calls = 0

    def handler(_request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, text="{not json")

    with pytest.raises(PayloadDecodeError):
        _fetch_json(handler, retry=fast_retry)

    assert calls == 1


def test_unwrap_hook_can_request_a_retry(fast_retry: RetryPolicy) -> None:
    payloads = iter([{"errors": ["throttled"]}, {"data": 1}])

    def unwrap(payload: object) -> object:
        assert isinstance(payload, dict)
        if "errors" in payload:
            raise RetryablePayloadError("throttled")
        return payload["data"]

    result = _fetch_json(
        lambda _request: httpx.Response(200, json=next(payloads)),
        retry=fast_retry,
        unwrap=unwrap,
    )

    assert result == 1


def test_rebuilds_request_for_every_attempt(fast_retry: RetryPolicy) -> None:
    seen: list[str] = []
    statuses = iter([503, 200])
    builds = 0

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["X-Attempt"])
        return httpx.Response(next(statuses), json={})

    factory = make_client_factory(handler, retry=fast_retry)

    def build_with(client_request: Callable[..., httpx.Request]) -> Callable[[], httpx.Request]:
        def build() -> httpx.Request:
            nonlocal builds
            builds += 1
            return client_request("GET", "courses", headers={"X-Attempt": str(builds)})

        return build

    async def scenario() -> httpx.Response:
        async with factory(BASE) as client:
            return await client.fetch(build_with(client.build_request))

    response = asyncio.run(scenario())

    assert response.status_code == 200
    assert seen == ["1", "2"]


def test_is_retryable_transport_error() -> None:
    request = httpx.Request("GET", "https://api.example.test/")

    assert is_retryable_transport_error(httpx.ConnectTimeout("slow", request=request))
    assert is_retryable_transport_error(httpx.RemoteProtocolError("eof", request=request))
    assert is_retryable_transport_error(RuntimeError("broken pipe"))
    assert not is_retryable_transport_error(httpx.UnsupportedProtocol("ftp", request=request))


def test_parse_retry_after() -> None:
    now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)

    assert parse_retry_after("5") == 5.0
    assert parse_retry_after(" ") is None
    assert parse_retry_after(None) is None
    assert parse_retry_after("soon") is None
    assert parse_retry_after("Mon, 01 Jan 2024 12:00:10 GMT", now=now) == 10.0
    assert parse_retry_after("Mon, 01 Jan 2024 11:59:00 GMT", now=now) == 0.0


def test_looks_like_html_and_snippet() -> None:
    assert looks_like_html(b"  <!doctype html><html></html>")
    assert looks_like_html(b"<HTML>")
    assert not looks_like_html(b'{"html": "<html>"}')
    assert snippet("short") == "short"
    assert snippet("y" * 1000) == "y" * 900 + "…"


def test_zero_retry_after_falls_back_to_backoff() -> None:
    sleeps: list[float] = []
    policy = RetryPolicy(base_delay=0.5, max_delay=30.0, max_jitter=0.0)
    responses = iter(
        [
            httpx.Response(503, headers={"Retry-After": "0"}),
            httpx.Response(200, json={"ok": True}),
        ]
    )

    result = _fetch_json(lambda _request: next(responses), retry=policy, sleeps=sleeps)

    assert result == {"ok": True}
    assert sleeps == [0.5]


def test_payload_retries_share_the_attempt_budget() -> None:
    calls = 0
    policy = RetryPolicy(
        max_attempts=2, base_delay=0.0, max_delay=0.0, max_jitter=0.0, payload_retries=5
    )

    def handler(_request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, text="<html>wait</html>")

    with pytest.raises(RetryablePayloadError) as excinfo:
        _fetch_json(handler, retry=policy)

    assert calls == 2
    assert excinfo.value.response is not None
