# sportshub/services/retention_sweep.py
from __future__ import annotations

"""
SportsHub — Retention Sweep (media reclamation + hard delete)
=============================================================

Permanently removes records that were soft-deleted longer ago than the
retention window, after first deleting every stored object they own.

Per record type, in fixed order (highlights → reels → coaching centres):

1) Load records with ``deleted_at < now - MEDIA_RETENTION_DAYS``.
2) For each record, one at a time:
   a) Build its reclamation plan from `media_slots()`.
   b) Single-object targets fan out (bounded by `MEDIA_RECLAIM_CONCURRENCY`),
      then prefix targets run sequentially in plan order.
   c) A failing target is logged and recorded in the summary; it never blocks
      the purge.
   d) Hard-delete the record once every target was attempted.
3) An unexpected error for one record is counted and the loop moves on.

If the object store is not configured the sweep does nothing: purging rows
whose media could not be reclaimed would orphan that media for good.

Entrypoints
-----------
- `await run_retention_sweep()`           one-off run with default wiring
- `start_retention_sweep_scheduler()`     APScheduler cron job for the worker
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from sportshub.core.config import settings
from sportshub.core.exceptions import PartialDeleteFailure
from sportshub.db.models import PURGEABLE_MODELS
from sportshub.repositories.purgeable import PurgeableRepositoryProtocol, SqlAlchemyPurgeableRepository
from sportshub.services.media.planner import MediaReclamationPlanner, PlanItem, PlanItemKind
from sportshub.services.media.reclaimer import PrefixReclaimer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepFailure:
    record_type: str
    record_id: str
    locator: Optional[str]  # None when the record as a whole failed
    error: str


@dataclass
class SweepSummary:
    """Outcome of one sweep run."""

    purged: Dict[str, int] = field(default_factory=dict)
    media_deleted: int = 0
    errors: int = 0
    failures: List[SweepFailure] = field(default_factory=list)
    skipped: Optional[str] = None  # reason the run did no work at all

    @property
    def total_purged(self) -> int:
        return sum(self.purged.values())

    def fail(self, record_type: str, record_id: str, locator: Optional[str], error: BaseException | str) -> None:
        self.errors += 1
        self.failures.append(
            SweepFailure(record_type=record_type, record_id=str(record_id), locator=locator, error=str(error))
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "purged": dict(self.purged),
            "media_deleted": self.media_deleted,
            "errors": self.errors,
            "failures": [f.__dict__.copy() for f in self.failures],
            "skipped": self.skipped,
        }


class RetentionSweepJob:
    """
    Parameters
    ----------
    repository : PurgeableRepositoryProtocol
        Lists purgeable records and hard-deletes them.
    planner / reclaimer
        Injected collaborators; defaults are built from settings.
    retention_days / concurrency
        Override `MEDIA_RETENTION_DAYS` / `MEDIA_RECLAIM_CONCURRENCY`.
    models
        Record types to sweep, in order.
    """

    def __init__(
        self,
        repository: PurgeableRepositoryProtocol,
        *,
        planner: Optional[MediaReclamationPlanner] = None,
        reclaimer: Optional[PrefixReclaimer] = None,
        retention_days: Optional[int] = None,
        concurrency: Optional[int] = None,
        models: Sequence[Type[Any]] = PURGEABLE_MODELS,
    ) -> None:
        self._repo = repository
        self._planner = planner or MediaReclamationPlanner()
        self._reclaimer = reclaimer or PrefixReclaimer()
        self._retention_days = int(retention_days or settings.MEDIA_RETENTION_DAYS)
        self._concurrency = max(1, int(concurrency or settings.MEDIA_RECLAIM_CONCURRENCY))
        self._models = tuple(models)

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        return (now or datetime.now(timezone.utc)) - timedelta(days=self._retention_days)

    async def run(self, *, now: Optional[datetime] = None) -> SweepSummary:
        summary = SweepSummary()
        if not self._reclaimer.enabled:
            logger.warning("Retention sweep skipped: object store not configured")
            summary.skipped = "store_unavailable"
            return summary

        cutoff = self.cutoff(now)
        logger.info("Retention sweep started | cutoff=%s", cutoff.isoformat())

        for model in self._models:
            record_type = model.RECORD_TYPE
            summary.purged.setdefault(record_type, 0)
            try:
                records = await self._repo.list_purgeable(model, cutoff)
            except Exception as e:  # noqa: BLE001
                logger.exception("Failed to list purgeable %s records", record_type)
                summary.fail(record_type, "*", None, e)
                continue

            logger.info("Found %s %s record(s) to purge", len(records), record_type)
            for record in records:
                try:
                    await self._sweep_record(record, summary)
                except Exception as e:  # noqa: BLE001
                    logger.exception("Error purging %s %s", record_type, getattr(record, "id", "?"))
                    summary.fail(record_type, str(getattr(record, "id", "?")), None, e)

        logger.info(
            "Retention sweep finished | purged=%s media_deleted=%s errors=%s",
            summary.purged, summary.media_deleted, summary.errors,
        )
        return summary

    # ── per record ──────────────────────────────────────────
    async def _sweep_record(self, record: Any, summary: SweepSummary) -> None:
        slots = record.media_slots()
        plan = self._planner.plan(slots)
        logger.debug("Plan for %s %s: %s item(s)", slots.record_type, slots.parent_id, len(plan))

        sem = asyncio.Semaphore(self._concurrency)

        async def _bounded(item: PlanItem) -> Tuple[int, Optional[BaseException]]:
            async with sem:
                return await self._execute(item)

        outcomes: List[Tuple[PlanItem, Tuple[int, Optional[BaseException]]]] = []
        singles = plan.singles
        single_results = await asyncio.gather(*(_bounded(i) for i in singles))
        outcomes.extend(zip(singles, single_results))
        for item in plan.prefixes:
            outcomes.append((item, await self._execute(item)))

        deleted = 0
        for item, (count, err) in outcomes:
            deleted += count
            if err is not None:
                summary.fail(slots.record_type, slots.parent_id, item.locator, err)
        summary.media_deleted += deleted

        if await self._repo.hard_delete(type(record), slots.parent_id):
            summary.purged[slots.record_type] = summary.purged.get(slots.record_type, 0) + 1
            logger.info(
                "Purged %s %s (media deleted=%s)", slots.record_type, slots.parent_id, deleted,
            )
        else:
            logger.warning("%s %s vanished before hard delete", slots.record_type, slots.parent_id)

    async def _execute(self, item: PlanItem) -> Tuple[int, Optional[BaseException]]:
        """Run one plan item; never raises. Returns (deleted, error)."""
        try:
            if item.kind is PlanItemKind.PREFIX:
                return await self._reclaimer.delete_by_prefix(item.locator), None
            return await self._reclaimer.delete_object(item.locator), None
        except PartialDeleteFailure as e:
            logger.error("Partial delete under %s: %s", item.locator, e)
            return e.deleted, e
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to delete %s %s: %s", item.kind.value, item.locator, e)
            return 0, e


# ─────────────────────────────────────────────
# 🧹 Public task
# ─────────────────────────────────────────────
async def run_retention_sweep(
    *,
    repository: Optional[PurgeableRepositoryProtocol] = None,
    now: Optional[datetime] = None,
) -> SweepSummary:
    """Run one sweep with default wiring (SQLAlchemy repository, process S3 client)."""
    return await RetentionSweepJob(repository or SqlAlchemyPurgeableRepository()).run(now=now)


# ─────────────────────────────────────────────
# ⏰ Scheduler
# ─────────────────────────────────────────────
def start_retention_sweep_scheduler(
    *,
    cron: Optional[str] = None,
    scheduler: Optional[AsyncIOScheduler] = None,
) -> AsyncIOScheduler:
    """
    Register the sweep as a non-reentrant cron job and start the scheduler.

    Args:
        cron: crontab expression; defaults to `RETENTION_SWEEP_CRON` (monthly).
        scheduler: share an existing scheduler instead of creating one.
    """
    expr = cron or settings.RETENTION_SWEEP_CRON
    sched = scheduler or AsyncIOScheduler(timezone=timezone.utc)
    sched.add_job(
        run_retention_sweep,
        CronTrigger.from_crontab(expr, timezone=timezone.utc),
        id="retention_sweep",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    if not sched.running:
        sched.start()
    logger.info("Retention sweep scheduler started | cron=%s", expr)
    return sched


__all__ = [
    "RetentionSweepJob",
    "SweepSummary",
    "SweepFailure",
    "run_retention_sweep",
    "start_retention_sweep_scheduler",
]
