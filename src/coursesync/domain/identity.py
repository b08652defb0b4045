"""Stable join keys between upstream courses and destination courses."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from .model import DestinationRecord, UnifiedRecord

KNOWN_PREFIXES: Final[dict[str, str]] = {
    "udemy": "UDM",
    "pluralsight": "PLS",
}
FALLBACK_PREFIX: Final[str] = "SRC"
SEPARATOR: Final[str] = "+"


def source_prefix(source: str) -> str:
    normalized = source.strip()
    if not normalized:
        return FALLBACK_PREFIX
    return KNOWN_PREFIXES.get(normalized.lower(), normalized.upper())


def build_identity(source: str, source_id: str) -> str:
    """Return ``<PREFIX>+<source_id>`` for a provider record.

    Never raises: an empty source falls back to the ``SRC`` prefix. An empty
    ``source_id`` yields ``""``, which callers treat as "no identity".
    """

    native_id = source_id.strip()
    if not native_id:
        return ""
    return f"{source_prefix(source)}{SEPARATOR}{native_id}"


def record_identity(record: UnifiedRecord) -> str:
    return build_identity(record.source, record.source_id)


def parse_identity(value: str) -> str:
    """Normalize an identity string read back from the destination.

    ``udm+7``, ``UDM + 7`` and ``udemy+7`` all read back as ``UDM+7``. Values
    without a separator are returned trimmed but otherwise untouched.
    """

    trimmed = value.strip()
    if SEPARATOR not in trimmed:
        return trimmed
    prefix, native_id = trimmed.split(SEPARATOR, 1)
    return build_identity(prefix, native_id)


def destination_identity(record: DestinationRecord) -> str:
    """Identity of a destination record.

    Eightfold rows written by a sync carry ``UDM+123`` in ``lmsCourseId``
    (``legacy_id``) while ``systemId`` often holds a bare system tag such as
    ``successfactors``. A prefixed value wins, ``legacy_id`` before
    ``system_id``; otherwise the first non-empty value is used as is.
    """

    candidates = [parse_identity(value) for value in (record.legacy_id, record.system_id)]
    for identity in candidates:
        if SEPARATOR in identity:
            return identity
    return next((identity for identity in candidates if identity), "")
