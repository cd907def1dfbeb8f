"""
Daemon that periodically removes expired contact submissions.

Useful when the API runs with several workers and cleanup should happen in
exactly one place.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from contact_backend.config import get_settings
from contact_backend.dependencies import get_submission_store
from contact_backend.retention import run_cleanup

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Contact submission retention daemon")
    parser.add_argument(
        "--interval-hours",
        type=float,
        default=settings.cleanup_interval_hours,
        help="Hours between cleanup runs",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cleanup and exit",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    store = get_submission_store()
    while True:
        removed = run_cleanup(store)
        logger.info("Cleanup complete, removed %d submissions", removed)

        if args.once:
            return 0

        sleep_for = args.interval_hours * 3600
        logger.info("Sleeping for %.1fs", sleep_for)
        time.sleep(sleep_for)


if __name__ == "__main__":
    raise SystemExit(main())
