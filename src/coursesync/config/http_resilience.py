"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tenacity import wait_exponential, wait_random

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tenacity.wait import wait_base

DEFAULT_RETRY_STATUSES = frozenset({429, 408, 425, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """How many times and how patiently a single HTTP exchange is retried.

    Delays are in seconds. ``retry_statuses`` lists non-2xx codes that are always
    retried; ``retry_5xx`` additionally retries every server error. Payload-level
    failures (HTML interstitials, retryable GraphQL errors) get ``payload_retries``
    extra attempts, still bounded by ``max_attempts``.
    """

    max_attempts: int = 8
    base_delay: float = 0.7
    max_delay: float = 30.0
    retry_statuses: frozenset[int] = DEFAULT_RETRY_STATUSES
    retry_5xx: bool = True
    max_jitter: float = 0.4
    payload_retries: int = 1

    def is_retryable_status(self, status_code: int) -> bool:
        if status_code in self.retry_statuses:
            return True
        return self.retry_5xx and 500 <= status_code <= 599  # noqa: PLR2004

    def build_wait(self) -> wait_base:
        """Exponential backoff capped at ``max_delay`` plus up to ``max_jitter`` of noise."""

        return wait_exponential(multiplier=self.base_delay, max=self.max_delay) + wait_random(
            0, self.max_jitter
        )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 120.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
