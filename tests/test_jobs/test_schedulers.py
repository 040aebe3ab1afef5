import pytest

from scripts import worker
from sportshub.core.config import settings
from sportshub.services.media_item_cleanup import start_media_item_cleanup_scheduler
from sportshub.services.retention_sweep import run_retention_sweep, start_retention_sweep_scheduler


@pytest.mark.anyio
async def test_retention_sweep_job_is_non_reentrant():
    sched = start_retention_sweep_scheduler(cron="0 3 1 * *")
    try:
        job = sched.get_job("retention_sweep")
        assert job is not None
        assert job.func is run_retention_sweep
        assert job.max_instances == 1
        assert job.coalesce is True
    finally:
        sched.shutdown(wait=False)


@pytest.mark.anyio
async def test_worker_registers_enabled_jobs_on_one_scheduler(monkeypatch):
    monkeypatch.setattr(settings, "RETENTION_SWEEP_SCHEDULER", True)
    monkeypatch.setattr(settings, "MEDIA_ITEM_CLEANUP_SCHEDULER", True)

    sched = worker.setup_jobs()
    try:
        assert {j.id for j in sched.get_jobs()} == {"retention_sweep", "media_item_cleanup"}
    finally:
        sched.shutdown(wait=False)


@pytest.mark.anyio
async def test_worker_skips_disabled_jobs(monkeypatch):
    monkeypatch.setattr(settings, "RETENTION_SWEEP_SCHEDULER", False)
    monkeypatch.setattr(settings, "MEDIA_ITEM_CLEANUP_SCHEDULER", True)

    sched = worker.setup_jobs()
    try:
        assert [j.id for j in sched.get_jobs()] == ["media_item_cleanup"]
    finally:
        sched.shutdown(wait=False)


@pytest.mark.anyio
async def test_item_cleanup_scheduler_shares_an_existing_scheduler():
    sched = start_retention_sweep_scheduler()
    try:
        same = start_media_item_cleanup_scheduler(scheduler=sched, cron="0 2 * * *")
        assert same is sched
        assert sched.get_job("media_item_cleanup") is not None
    finally:
        sched.shutdown(wait=False)
