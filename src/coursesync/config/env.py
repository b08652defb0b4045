"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import InvalidConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def optional_env_var(name: str, default: str) -> str:
    """Return the stripped value of ``name``, or ``default`` when it is unset or blank."""

    value = (os.getenv(name) or "").strip()
    return value or default


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return stripped values for ``names``; every absent or blank one is reported at once."""

    values = {name: optional_env_var(name, "") for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise MissingConfigurationError(missing)
    return values


def optional_env_int(name: str, default: int) -> int:
    value = optional_env_var(name, "")
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise InvalidConfigurationError(name, value, "expected an integer") from exc
    if parsed <= 0:
        raise InvalidConfigurationError(name, value, "must be positive")
    return parsed
