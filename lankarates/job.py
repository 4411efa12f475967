"""Run one ingestion pass from the command line.

Usage::

    python -m lankarates.job [--bank SAMPATH]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .banks import build_registry
from .config import ConfigurationError, configure_logging, load_storage_settings
from .firestore_manager import open_firestore_manager
from .services import IngestionService, UnsupportedBankError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ALL_FAILED = 1
EXIT_USAGE = 2


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch and store bank USD exchange rates once.")
    parser.add_argument("--bank", help="Only fetch this bank code (default: every active bank)")
    return parser.parse_args(argv)


def run(argv: Optional[Sequence[str]] = None, client=None) -> int:
    """Entry point returning a process exit code."""

    args = _parse_args(argv)

    try:
        settings = load_storage_settings()
        registry = build_registry()
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_USAGE

    with open_firestore_manager(settings, client=client) as store:
        service = IngestionService(store, registry)
        try:
            report = service.run(args.bank)
        except UnsupportedBankError as exc:
            logger.error("%s. Available banks: %s", exc, exc.available)
            return EXIT_USAGE

    for observation in report.stored:
        logger.info("Stored %s: %s at %s", observation.bank, observation.rate, observation.fetched_at.isoformat())
    for failure in report.failures:
        logger.warning("Failed %s: %s", failure.bank, failure.reason)

    return EXIT_ALL_FAILED if report.all_failed else EXIT_OK


def main() -> None:  # pragma: no cover - manual execution path
    configure_logging()
    sys.exit(run())


if __name__ == "__main__":  # pragma: no cover - manual execution path
    main()
