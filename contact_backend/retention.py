"""
Retention cleanup scheduling.

Cleanup runs once when the app starts and then on a fixed interval inside
the app's event loop.
"""

from __future__ import annotations

import asyncio
import logging

from contact_backend.store import SubmissionStore

logger = logging.getLogger(__name__)


def run_cleanup(store: SubmissionStore) -> int:
    """Remove expired submissions; failures are logged and reported as 0."""
    try:
        return store.cleanup_expired()
    except Exception:
        logger.exception("Retention cleanup failed")
        return 0


async def cleanup_loop(store: SubmissionStore, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        run_cleanup(store)
