"""Udemy Business configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_int, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

UDEMY_TIMEOUT_SECONDS = 120.0
UDEMY_DEFAULT_RPS = 4


@dataclass(frozen=True, slots=True)
class UdemyConfig:
    """Holds Udemy API configuration values.

    ``base_url`` is the organization root, e.g.
    ``https://<tenant>.udemy.com/api-2.0/organizations/<org-id>``.
    """

    client_id: str
    client_secret: str
    resilience: ResilienceConfig


def udemy_resilience(base_url: str, *, requests_per_second: int = UDEMY_DEFAULT_RPS) -> ResilienceConfig:
    return ResilienceConfig(
        name="udemy",
        base_url=base_url.rstrip("/") + "/",
        timeout_seconds=UDEMY_TIMEOUT_SECONDS,
        retry=RetryPolicy(max_attempts=12, base_delay=1.0, max_delay=45.0, max_jitter=1.0),
        ratelimit=RateLimit(max_calls=requests_per_second, per_seconds=1.0),
        default_headers={"Accept": "application/json"},
    )


def get_udemy_config() -> UdemyConfig:
    values = require_env_vars(("UDEMY_BASE_URL", "UDEMY_CLIENT_ID", "UDEMY_CLIENT_SECRET"))
    rps = optional_env_int("UDEMY_RPS", UDEMY_DEFAULT_RPS)
    return UdemyConfig(
        client_id=values["UDEMY_CLIENT_ID"],
        client_secret=values["UDEMY_CLIENT_SECRET"],
        resilience=udemy_resilience(values["UDEMY_BASE_URL"], requests_per_second=rps),
    )
