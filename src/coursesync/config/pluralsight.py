"""Pluralsight GraphQL configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_env_var, require_env_vars
from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_PLURALSIGHT_GQL_URL = "https://api.pluralsight.com/api"
PLURALSIGHT_TIMEOUT_SECONDS = 120.0


def pluralsight_resilience() -> ResilienceConfig:
    # GraphQL reports throttling as ``errors`` with a 200, so payload retries get
    # a larger share of the attempt budget than elsewhere.
    return ResilienceConfig(
        name="pluralsight",
        timeout_seconds=PLURALSIGHT_TIMEOUT_SECONDS,
        retry=RetryPolicy(payload_retries=3),
        default_headers={"Accept": "application/json", "Content-Type": "application/json"},
    )


@dataclass(frozen=True, slots=True)
class PluralsightConfig:
    """Holds the Pluralsight GraphQL endpoint and its bearer token."""

    token: str
    endpoint: str = DEFAULT_PLURALSIGHT_GQL_URL
    resilience: ResilienceConfig = field(default_factory=pluralsight_resilience)


def get_pluralsight_config() -> PluralsightConfig:
    values = require_env_vars(("PLURALSIGHT_TOKEN",))
    return PluralsightConfig(
        token=values["PLURALSIGHT_TOKEN"],
        endpoint=optional_env_var("PLURALSIGHT_GQL_URL", DEFAULT_PLURALSIGHT_GQL_URL),
    )
