"""Logging setup for the coursesync command line."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Third-party loggers that report every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, level: int | str = logging.INFO, force: bool = False) -> None:
    """Configure the root logger for CLI runs.

    Page progress and run summaries are logged at INFO by coursesync itself, so
    per-request logs from the HTTP stack are raised to WARNING.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    root_level = logging.getLogger().getEffectiveLevel()
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))
