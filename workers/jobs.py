"""
Background job service - queue work, poll its progress.

Jobs run as asyncio tasks on the caller's loop. Without a registered
handler a job just walks its progress from 0 to 100 in fixed steps.
Finished jobs (completed or failed) stay visible for `retention`
seconds, then disappear from lookup.
"""

import asyncio
import logging
import random
import string
import time
from typing import Awaitable, Callable, Optional

from models import Job, JobStatus, JobStats, utc_now

logger = logging.getLogger(__name__)

# Handler gets the job and a progress callback (0-100)
JobHandler = Callable[[Job, Callable[[int], None]], Awaitable[None]]


def new_job_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"job_{int(time.time() * 1000)}_{suffix}"


class BackgroundJobService:
    """
    In-process job runner.

    Handles:
    - Job lifecycle (pending -> processing -> completed | failed)
    - Progress simulation or handler-driven progress
    - Purging finished jobs after the retention window
    - Stats and callbacks for notifications
    """

    def __init__(self, step: int = 20, interval: float = 0.5, retention: float = 5.0):
        """
        Args:
            step: Progress increment per tick when simulating
            interval: Seconds between simulated ticks
            retention: Seconds a finished job stays queryable
        """
        self.step = step
        self.interval = interval
        self.retention = retention
        self.stats = JobStats()
        self._jobs: dict[str, Job] = {}
        self._handlers: dict[str, JobHandler] = {}
        self._tasks: set[asyncio.Task] = set()
        self._callbacks: list[Callable] = []

    def register(self, job_type: str, handler: JobHandler) -> None:
        """Run `handler` for jobs of `job_type` instead of the simulator."""
        self._handlers[job_type] = handler

    def add_callback(self, callback: Callable) -> None:
        """Add callback for job updates: callback(event_type, job)."""
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def notify(self, event_type: str, job: Job) -> None:
        for cb in self._callbacks:
            try:
                cb(event_type, job)
            except Exception as e:
                logger.error("[JOBS] Callback error: %s", e)

    async def enqueue(self, job_type: str) -> str:
        """Queue a job and start it. Returns the job id."""
        job = Job(id=new_job_id(), type=job_type)
        self._jobs[job.id] = job
        self._spawn(self._process(job.id))
        logger.info("[JOBS] Queued %s (%s)", job.id, job_type)
        return job.id

    async def get_status(self, job_id: str) -> Optional[Job]:
        """Snapshot of the job, or None if unknown or already purged."""
        job = self._jobs.get(job_id)
        return job.model_copy() if job else None

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _update(self, job_id: str, **changes) -> Job:
        job = self._jobs[job_id].model_copy(update=changes)
        self._jobs[job_id] = job
        self.notify("job_update", job)
        return job

    async def _process(self, job_id: str) -> None:
        job = self._update(job_id, status=JobStatus.PROCESSING)
        self.stats.record_run(job.type)

        handler = self._handlers.get(job.type)
        try:
            if handler:
                await handler(job, lambda pct: self._update(job_id, progress=max(0, min(100, int(pct)))))
            else:
                await self._simulate(job_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("[JOBS] %s failed: %s", job_id, e)
            self.stats.record_error(str(e))
            self._update(job_id, status=JobStatus.FAILED, error=str(e), completed_at=utc_now())
        else:
            self.stats.record_success()
            self._update(job_id, status=JobStatus.COMPLETED, progress=100, completed_at=utc_now())

        self._spawn(self._purge_later(job_id))

    async def _simulate(self, job_id: str) -> None:
        for progress in range(0, 101, self.step):
            await asyncio.sleep(self.interval)
            self._update(job_id, progress=progress)

    async def _purge_later(self, job_id: str) -> None:
        await asyncio.sleep(self.retention)
        self._jobs.pop(job_id, None)
        logger.debug("[JOBS] Purged %s", job_id)

    @property
    def pending_count(self) -> int:
        return sum(1 for j in self._jobs.values() if not j.is_finished)

    async def stop(self) -> None:
        """Cancel in-flight jobs and purge timers."""
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("[JOBS] Stopped")

    def get_stats(self) -> dict:
        return {
            "pending": self.pending_count,
            **self.stats.to_dict(),
        }
