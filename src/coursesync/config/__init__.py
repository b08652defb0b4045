"""Application configuration helpers."""

from __future__ import annotations

from .eightfold import EightfoldConfig, get_eightfold_config
from .env import optional_env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .pluralsight import PluralsightConfig, get_pluralsight_config
from .sync import SyncConfig, get_sync_config
from .udemy import UdemyConfig, get_udemy_config

__all__ = [
    "ConfigurationError",
    "EightfoldConfig",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "PluralsightConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SyncConfig",
    "UdemyConfig",
    "get_eightfold_config",
    "get_pluralsight_config",
    "get_sync_config",
    "get_udemy_config",
    "optional_env_int",
    "optional_env_var",
    "require_env_vars",
]
