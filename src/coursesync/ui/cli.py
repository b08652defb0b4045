from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from coursesync.app import sync_course_catalog
from coursesync.common.logging import configure_logging
from coursesync.config import ConfigurationError, get_sync_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from coursesync.config import SyncConfig

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile provider course catalogs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Compute create/update/delete sets")
    sync.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Number of courses to request per provider page (defaults to config)",
    )
    sync.add_argument(
        "--udemy-max-pages",
        type=int,
        default=None,
        help="Maximum number of Udemy pages to fetch (0 fetches everything)",
    )
    sync.add_argument(
        "--pluralsight-max-pages",
        type=int,
        default=None,
        help="Maximum number of Pluralsight pages to fetch (0 fetches everything)",
    )
    inputs = sync.add_mutually_exclusive_group()
    inputs.add_argument(
        "--snapshot-dir",
        type=Path,
        help="Directory to store the fetched inputs as JSON",
    )
    inputs.add_argument(
        "--mock-dir",
        type=Path,
        help="Read inputs from a snapshot directory instead of calling the APIs",
    )

    return parser.parse_args(list(argv))


def _build_sync_config(args: argparse.Namespace, base: SyncConfig) -> SyncConfig:
    config = base
    if args.page_size is not None:
        if args.page_size <= 0:
            raise ValueError("Page size must be positive")
        config = replace(config, provider_page_size=args.page_size)
    if args.udemy_max_pages is not None:
        if args.udemy_max_pages < 0:
            raise ValueError("Udemy max pages must be non-negative")
        config = replace(config, udemy_max_pages=args.udemy_max_pages)
    if args.pluralsight_max_pages is not None:
        if args.pluralsight_max_pages < 0:
            raise ValueError("Pluralsight max pages must be non-negative")
        config = replace(config, pluralsight_max_pages=args.pluralsight_max_pages)
    return config


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        config = _build_sync_config(parsed_args, get_sync_config())
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        result = sync_course_catalog(
            config=config,
            snapshot_dir=parsed_args.snapshot_dir,
            mock_dir=parsed_args.mock_dir,
        )
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)

    reconciliation = result.reconciliation
    log.info(
        "Sync finished: create=%d, update=%d, delete=%d, partial_providers=%s",
        len(reconciliation.create),
        len(reconciliation.update),
        len(reconciliation.delete),
        ", ".join(result.failed_providers) or "none",
    )


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
