from __future__ import annotations

"""
Dedicated maintenance worker for media lifecycle schedulers.

Responsibilities:
- Retention sweep (reclaim media + hard-delete long soft-deleted records)
- Deleted media item cleanup for active coaching centres

Env toggles:
  RETENTION_SWEEP_SCHEDULER=true|false (default true)
  MEDIA_ITEM_CLEANUP_SCHEDULER=true|false (default true)

Run:
  python scripts/worker.py
"""

import asyncio
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from sportshub.core.config import settings
from sportshub.core.logger import configure_logging
from sportshub.db.session import db_healthcheck, dispose_engine

logger = logging.getLogger("worker")


def setup_jobs(scheduler: Optional[AsyncIOScheduler] = None) -> Optional[AsyncIOScheduler]:
    """Start every enabled job; one job failing to start never blocks the other."""
    try:
        if settings.RETENTION_SWEEP_SCHEDULER:
            from sportshub.services.retention_sweep import start_retention_sweep_scheduler

            scheduler = start_retention_sweep_scheduler(scheduler=scheduler)
    except Exception:
        logger.exception("Retention sweep scheduler failed to start")

    try:
        if settings.MEDIA_ITEM_CLEANUP_SCHEDULER:
            from sportshub.services.media_item_cleanup import start_media_item_cleanup_scheduler

            scheduler = start_media_item_cleanup_scheduler(scheduler=scheduler)
    except Exception:
        logger.exception("Media item cleanup scheduler failed to start")

    return scheduler


def main() -> None:
    configure_logging()
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    # AsyncIOScheduler binds to the running loop on start
    scheduler = loop.run_until_complete(_start())
    if scheduler is None:
        logger.warning("No maintenance jobs enabled; exiting")
        loop.close()
        return

    try:
        loop.run_forever()
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.shutdown(wait=False)
        loop.run_until_complete(dispose_engine())
        loop.stop()
        loop.close()


async def _start() -> Optional[AsyncIOScheduler]:
    if not await db_healthcheck():
        # non-fatal; each job opens its own sessions
        logger.warning("Database unreachable at startup")
    return setup_jobs()


if __name__ == "__main__":
    main()
