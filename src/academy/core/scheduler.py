"""
Background Job Scheduler

Provides scheduled task execution using APScheduler with AsyncIO support.
Handles job registration, execution, and graceful shutdown.

Design Principles:
- Jobs are idempotent (safe to run multiple times)
- Failed jobs are logged but don't crash the scheduler
- Jobs can be triggered manually for testing
- Scheduler integrates with FastAPI lifespan

Usage:
    from academy.core.scheduler import register_job, start_scheduler, stop_scheduler

    # Register before or after start; jobs registered early are added on start
    register_job("my_job", my_job, IntervalTrigger(minutes=10))

    # In FastAPI lifespan:
    async def lifespan(app):
        await start_scheduler()
        yield
        await stop_scheduler()
"""

import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Coroutine[Any, Any, None]]


@dataclass
class RegisteredJob:
    func: JobFunc
    trigger: BaseTrigger


# Global scheduler instance
_scheduler: AsyncIOScheduler | None = None

# Job registry for deferred scheduling and manual triggering
_job_registry: dict[str, RegisteredJob] = {}


class SchedulerConfig:
    """Configuration for the background scheduler."""

    TIMEZONE = "UTC"

    JOB_COALESCE = True  # Combine multiple missed executions into one
    JOB_MAX_INSTANCES = 1  # Only one instance of each job can run at a time
    JOB_MISFIRE_GRACE_TIME = 60 * 5

    JOB_DEFAULTS = {
        "coalesce": JOB_COALESCE,
        "max_instances": JOB_MAX_INSTANCES,
        "misfire_grace_time": JOB_MISFIRE_GRACE_TIME,
    }


def _job_listener(event: JobExecutionEvent) -> None:
    """Log job execution results."""
    if event.exception:
        logger.error(
            f"Job {event.job_id} failed with exception: {event.exception}",
            exc_info=event.exception,
        )
    else:
        logger.debug(f"Job {event.job_id} executed successfully at {datetime.now(UTC).isoformat()}")


def get_scheduler() -> AsyncIOScheduler | None:
    """Get the global scheduler instance, or None if not started."""
    return _scheduler


def _schedule(job_id: str, job: RegisteredJob) -> None:
    if _scheduler is None:
        raise RuntimeError(f"Cannot schedule job {job_id}: scheduler is not initialized")
    _scheduler.add_job(
        job.func,
        trigger=job.trigger,
        id=job_id,
        replace_existing=True,
    )
    logger.info(f"Scheduled job: {job_id}")


async def start_scheduler() -> AsyncIOScheduler:
    """
    Initialize and start the background scheduler.

    Every job already in the registry is scheduled.

    Returns:
        The started scheduler instance
    """
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        logger.warning("Scheduler already running, returning existing instance")
        return _scheduler

    logger.info("Initializing background job scheduler...")

    _scheduler = AsyncIOScheduler(
        timezone=SchedulerConfig.TIMEZONE,
        job_defaults=SchedulerConfig.JOB_DEFAULTS,
    )
    _scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    for job_id, job in _job_registry.items():
        _schedule(job_id, job)

    _scheduler.start()

    logger.info(f"Background job scheduler started with {len(_job_registry)} jobs")
    return _scheduler


async def stop_scheduler() -> None:
    """Stop the background scheduler, waiting for running jobs to finish."""
    global _scheduler

    if _scheduler is None or not _scheduler.running:
        logger.debug("Scheduler not running, nothing to stop")
        _scheduler = None
        return

    logger.info("Stopping background job scheduler...")
    _scheduler.shutdown(wait=True)
    logger.info("Background job scheduler stopped")
    _scheduler = None


def register_job(job_id: str, func: JobFunc, trigger: BaseTrigger) -> None:
    """
    Register a job with the scheduler.

    If the scheduler is already running the job is scheduled immediately,
    otherwise it is scheduled when ``start_scheduler`` runs.

    Args:
        job_id: Unique identifier for the job
        func: Async function to execute
        trigger: APScheduler trigger (IntervalTrigger, CronTrigger, etc.)
    """
    job = RegisteredJob(func=func, trigger=trigger)
    _job_registry[job_id] = job

    if _scheduler is None:
        logger.debug(f"Scheduler not initialized, job {job_id} will be scheduled on start")
        return

    _schedule(job_id, job)


def unregister_job(job_id: str) -> None:
    """Remove a job from the registry and the running scheduler."""
    _job_registry.pop(job_id, None)
    if _scheduler is not None and _scheduler.get_job(job_id):
        _scheduler.remove_job(job_id)


async def trigger_job_manually(job_id: str) -> dict[str, Any]:
    """
    Run a registered job immediately, bypassing its schedule.

    Returns:
        Dict with job_id, status ("success" or "error"), executed_at and error

    Raises:
        ValueError: If job_id is not found in the registry
    """
    if job_id not in _job_registry:
        raise ValueError(
            f"Job {job_id} not found in registry. Available jobs: {list(_job_registry.keys())}"
        )

    executed_at = datetime.now(UTC)
    logger.info(f"Manually triggering job: {job_id}")

    try:
        await _job_registry[job_id].func()
        return {
            "job_id": job_id,
            "status": "success",
            "executed_at": executed_at.isoformat(),
        }
    except Exception as e:
        logger.error(f"Manual execution of job {job_id} failed: {e}", exc_info=True)
        return {
            "job_id": job_id,
            "status": "error",
            "executed_at": executed_at.isoformat(),
            "error": str(e),
        }


def list_registered_jobs() -> list[dict[str, Any]]:
    """List registered jobs with their next run time."""
    jobs = []

    for job_id in _job_registry:
        job_info: dict[str, Any] = {"job_id": job_id, "next_run_time": None}

        if _scheduler is not None:
            scheduled_job = _scheduler.get_job(job_id)
            if scheduled_job and scheduled_job.next_run_time:
                job_info["next_run_time"] = scheduled_job.next_run_time.isoformat()

        jobs.append(job_info)

    return jobs
