"""
Unit tests for the background job scheduler.

These tests cover:
- Deferred scheduling of jobs registered before start
- Scheduling misuse before the scheduler exists
- Manual triggering and job listing
"""

from unittest.mock import AsyncMock

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from academy.core import scheduler
from academy.core.scheduler import (
    RegisteredJob,
    list_registered_jobs,
    register_job,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
    unregister_job,
)

JOB_ID = "test_scheduler_job"


@pytest.fixture
def job_func():
    func = AsyncMock()
    yield func
    unregister_job(JOB_ID)


class TestScheduling:
    """Tests for scheduling registered jobs."""

    def test_schedule_without_scheduler_raises(self, job_func):
        """Scheduling before start is reported as a RuntimeError."""
        job = RegisteredJob(func=job_func, trigger=IntervalTrigger(minutes=5))

        with pytest.raises(RuntimeError, match=JOB_ID):
            scheduler._schedule(JOB_ID, job)

    @pytest.mark.asyncio
    async def test_jobs_registered_before_start_are_scheduled(self, job_func):
        """Jobs in the registry are added to the scheduler on start."""
        register_job(JOB_ID, job_func, IntervalTrigger(minutes=5))

        started = await start_scheduler()
        try:
            assert started.get_job(JOB_ID) is not None
            listed = {job["job_id"]: job for job in list_registered_jobs()}
            assert listed[JOB_ID]["next_run_time"] is not None
        finally:
            await stop_scheduler()

        assert scheduler.get_scheduler() is None


class TestTriggerJobManually:
    """Tests for trigger_job_manually."""

    @pytest.mark.asyncio
    async def test_runs_job(self, job_func):
        register_job(JOB_ID, job_func, IntervalTrigger(minutes=5))

        result = await trigger_job_manually(JOB_ID)

        assert result["status"] == "success"
        job_func.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_job_failure_is_reported(self, job_func):
        """A failing job returns an error result instead of raising."""
        job_func.side_effect = RuntimeError("boom")
        register_job(JOB_ID, job_func, IntervalTrigger(minutes=5))

        result = await trigger_job_manually(JOB_ID)

        assert result["status"] == "error"
        assert result["error"] == "boom"

    @pytest.mark.asyncio
    async def test_unknown_job(self):
        with pytest.raises(ValueError, match="not found"):
            await trigger_job_manually("no_such_job")
