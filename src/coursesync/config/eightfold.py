"""Eightfold destination catalog configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import ResilienceConfig

DEFAULT_EIGHTFOLD_BASE_URL = "https://apiv2.eightfold.ai"
EIGHTFOLD_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class EightfoldConfig:
    bearer_token: str
    resilience: ResilienceConfig


def eightfold_resilience(base_url: str = DEFAULT_EIGHTFOLD_BASE_URL) -> ResilienceConfig:
    return ResilienceConfig(
        name="eightfold",
        base_url=base_url,
        timeout_seconds=EIGHTFOLD_TIMEOUT_SECONDS,
        default_headers={"Accept": "application/json"},
    )


def get_eightfold_config() -> EightfoldConfig:
    values = require_env_vars(("EIGHTFOLD_BEARER_TOKEN",))
    base_url = optional_env_var("EIGHTFOLD_BASE_URL", DEFAULT_EIGHTFOLD_BASE_URL)
    return EightfoldConfig(
        bearer_token=values["EIGHTFOLD_BEARER_TOKEN"],
        resilience=eightfold_resilience(base_url),
    )
