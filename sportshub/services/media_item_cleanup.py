# sportshub/services/media_item_cleanup.py
from __future__ import annotations

"""
SportsHub — Deleted Media Item Cleanup
======================================

Active coaching centres keep removed gallery entries as *soft-deleted media
items* (`is_deleted=true`, `deleted_at=...`) inside their JSON lists. Once an
item's own retention (`MEDIA_ITEM_RETENTION_DAYS`, default 180) has elapsed
this job deletes its stored objects (file + thumbnail) and drops the item
from the record.

- A failed object delete keeps the item in place for the next run.
- Soft-deleted centres are skipped here; the retention sweep owns them.
- Scheduled daily (`MEDIA_ITEM_CLEANUP_CRON`).
"""

import copy
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from sportshub.core.config import settings
from sportshub.db.models.coaching_center import (
    ITEM_THUMBNAIL,
    ITEM_URL,
    CoachingCenter,
    media_item_expired,
)
from sportshub.repositories.purgeable import PurgeableRepositoryProtocol, SqlAlchemyPurgeableRepository
from sportshub.services.media.key_codec import KeyCodec
from sportshub.services.media.reclaimer import PrefixReclaimer

logger = logging.getLogger(__name__)


@dataclass
class ItemCleanupSummary:
    centres_updated: int = 0
    items_removed: int = 0
    media_deleted: int = 0
    errors: int = 0
    skipped: Optional[str] = None

class MediaItemCleanupJob:
    def __init__(
        self,
        repository: PurgeableRepositoryProtocol,
        *,
        reclaimer: Optional[PrefixReclaimer] = None,
        codec: Optional[KeyCodec] = None,
        retention_days: Optional[int] = None,
    ) -> None:
        self._repo = repository
        self._reclaimer = reclaimer or PrefixReclaimer()
        self._codec = codec or KeyCodec()
        self._retention_days = int(retention_days or settings.MEDIA_ITEM_RETENTION_DAYS)

    async def run(self, *, now: Optional[datetime] = None) -> ItemCleanupSummary:
        summary = ItemCleanupSummary()
        if not self._reclaimer.enabled:
            logger.warning("Media item cleanup skipped: object store not configured")
            summary.skipped = "store_unavailable"
            return summary

        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=self._retention_days)
        centres = await self._repo.list_centres_with_deleted_items()
        logger.info("Media item cleanup started | centres=%s cutoff=%s", len(centres), cutoff.isoformat())

        for centre in centres:
            try:
                await self._clean_centre(centre, cutoff, summary)
            except Exception:  # noqa: BLE001
                logger.exception("Media item cleanup failed for coaching centre %s", centre.id)
                summary.errors += 1

        logger.info(
            "Media item cleanup finished | centres=%s items=%s media_deleted=%s errors=%s",
            summary.centres_updated, summary.items_removed, summary.media_deleted, summary.errors,
        )
        return summary

    async def _clean_centre(self, centre: CoachingCenter, cutoff: datetime, summary: ItemCleanupSummary) -> None:
        values: Dict[str, Any] = {}
        for field_name in CoachingCenter.NESTED_MEDIA_FIELDS:
            value = copy.deepcopy(getattr(centre, field_name, None) or [])
            changed = False
            for stem, owner, item in list(CoachingCenter.iter_media_items(field_name, value)):
                if not media_item_expired(item, cutoff):
                    continue
                if await self._delete_item_media(centre, stem, item, summary):
                    owner[:] = [i for i in owner if i is not item]
                    summary.items_removed += 1
                    changed = True
            if changed:
                values[field_name] = value

        if values:
            await self._repo.update_fields(CoachingCenter, centre.external_id, values)
            summary.centres_updated += 1

    async def _delete_item_media(
        self, centre: CoachingCenter, stem: str, item: Dict[str, Any], summary: ItemCleanupSummary,
    ) -> bool:
        ok = True
        for url_field in (ITEM_URL, ITEM_THUMBNAIL):
            key = self._codec.try_decode(item.get(url_field))
            if not key:
                continue
            try:
                summary.media_deleted += await self._reclaimer.delete_object(key)
            except Exception as e:  # noqa: BLE001
                logger.error("Failed to delete %s of centre %s (%s): %s", key, centre.id, stem, e)
                summary.errors += 1
                ok = False
        return ok


async def run_media_item_cleanup(
    *,
    repository: Optional[PurgeableRepositoryProtocol] = None,
    now: Optional[datetime] = None,
) -> ItemCleanupSummary:
    return await MediaItemCleanupJob(repository or SqlAlchemyPurgeableRepository()).run(now=now)


def start_media_item_cleanup_scheduler(
    *,
    cron: Optional[str] = None,
    scheduler: Optional[AsyncIOScheduler] = None,
) -> AsyncIOScheduler:
    expr = cron or settings.MEDIA_ITEM_CLEANUP_CRON
    sched = scheduler or AsyncIOScheduler(timezone=timezone.utc)
    sched.add_job(
        run_media_item_cleanup,
        CronTrigger.from_crontab(expr, timezone=timezone.utc),
        id="media_item_cleanup",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    if not sched.running:
        sched.start()
    logger.info("Media item cleanup scheduler started | cron=%s", expr)
    return sched


__all__ = [
    "MediaItemCleanupJob",
    "ItemCleanupSummary",
    "run_media_item_cleanup",
    "start_media_item_cleanup_scheduler",
]
