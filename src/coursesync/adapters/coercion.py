"""Pydantic field types for the loosely typed catalogs our upstreams return.

Upstream fields arrive as a string in one tenant, an object in another and an
array in a third. These annotated types fold all of them into the plain values
the translators need, with empty strings instead of ``None``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Final
from urllib.parse import urlsplit

from pydantic import BeforeValidator

_TEXT_KEYS: Final[tuple[str, ...]] = ("title", "name", "value", "label", "locale", "code", "id")
LIST_SEPARATOR: Final[str] = " | "


def coerce_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, Mapping):
        for key in _TEXT_KEYS:
            text = coerce_text(value.get(key)).strip()
            if text:
                return text
        return ""
    if isinstance(value, Sequence):
        parts = (coerce_text(item).strip() for item in value)
        return LIST_SEPARATOR.join(part for part in parts if part)
    return str(value)


def coerce_text_list(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str | Mapping) or not isinstance(value, Sequence):
        text = coerce_text(value).strip()
        return (text,) if text else ()
    parts = (coerce_text(item).strip() for item in value)
    return tuple(part for part in parts if part)


def coerce_non_negative_float(value: object) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip() or 0)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if number > 0 else 0.0


LooseText = Annotated[str, BeforeValidator(coerce_text)]
LooseTextList = Annotated[tuple[str, ...], BeforeValidator(coerce_text_list)]
LooseFloat = Annotated[float, BeforeValidator(coerce_non_negative_float)]


def first_non_empty(*values: str) -> str:
    for value in values:
        stripped = value.strip()
        if stripped:
            return stripped
    return ""


def url_origin(url: str | None, default: str) -> str:
    """Return ``scheme://host`` of ``url``, or ``default`` when it has neither."""

    if not url:
        return default
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return default
    return f"{parts.scheme}://{parts.netloc}"


def absolutize_url(origin: str, value: str) -> str:
    stripped = value.strip()
    if not stripped:
        return ""
    if stripped.startswith(("http://", "https://")):
        return stripped
    if stripped.startswith("/"):
        return origin + stripped
    return f"{origin}/{stripped}"
