"""Refresh job: fetch every configured feed and log a summary."""

import asyncio
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any

from .config import load_settings
from .manager import RssManager

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO")
logger = logging.getLogger(__name__)


async def run_refresh(settings_path: str | None = None) -> dict[str, Any]:
    """
    Fetch all feeds listed in the settings file.

    Persisting the parsed items is up to the caller; this only reports what
    came back.
    """
    start_time = datetime.now(timezone.utc)
    logger.info(f"Starting feed refresh at {start_time.isoformat()}")

    settings = load_settings(settings_path)
    logger.info(f"Loaded {len(settings.feeds)} feeds")

    async with RssManager(settings.adapter) as manager:
        results = await manager.fetch_many(settings.feeds, concurrency=settings.concurrency)

    succeeded = 0
    items = 0
    failures = {}
    for url, result in results.items():
        if result.success and result.data:
            succeeded += 1
            items += len(result.data.items)
        else:
            failures[url] = result.error
            logger.warning(f"[{url}] Fetch error: {result.error}")

    end_time = datetime.now(timezone.utc)
    summary = {
        "status": "success",
        "feeds_checked": len(results),
        "succeeded": succeeded,
        "failed": len(failures),
        "items": items,
        "failures": failures,
        "duration_seconds": (end_time - start_time).total_seconds(),
        "timestamp": end_time.isoformat(),
    }

    logger.info(f"Completed: {json.dumps(summary)}")
    return summary


def main() -> int:
    """Console entry point."""
    logging.basicConfig(level=log_level)
    try:
        asyncio.run(run_refresh())
    except Exception as e:
        logger.error(f"Refresh failed: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
