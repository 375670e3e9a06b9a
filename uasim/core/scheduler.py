"""PeriodicScheduler — one independent asyncio timer per simulator.

Design notes:
    - Every job runs in its own task with deadlines ``start + k * interval``,
      so a late tick does not push the following ones back and jobs never
      wait on each other.
    - A job is never ticked concurrently with itself: its task runs the tick
      to completion before computing the next deadline.  When a tick overruns
      one or more whole intervals the missed deadlines are skipped.
    - A tick that raises is contained here.  StaleHandleError means the job
      skips this tick; any other exception is logged with a traceback.  In
      both cases the job keeps its schedule and other jobs are unaffected.
    - ``stop`` cancels all jobs together.  Nothing about the schedule is
      persisted; a restarted process starts every simulator from scratch.
"""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime
from typing import Protocol

from uasim.foundation.clock import utc_now
from uasim.store.address_space import StaleHandleError

logger = logging.getLogger(__name__)


class PeriodicJob(Protocol):
    """Anything with a name, an interval and a bounded synchronous tick."""

    name: str
    interval: float

    def tick(self) -> None:
        ...


class JobStats:
    """Per-job tick statistics for observability."""

    __slots__ = ("name", "interval", "tick_count", "failure_count", "last_error", "last_tick_at")

    def __init__(self, name: str, interval: float) -> None:
        self.name = name
        self.interval = interval
        self.tick_count: int = 0
        self.failure_count: int = 0
        self.last_error: str | None = None
        self.last_tick_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "interval": self.interval,
            "tick_count": self.tick_count,
            "failure_count": self.failure_count,
            "last_error": self.last_error,
            "last_tick_at": self.last_tick_at.isoformat() if self.last_tick_at else None,
        }


class PeriodicScheduler:
    """Drives a fixed set of periodic jobs on the running event loop."""

    def __init__(self) -> None:
        self._jobs: list[PeriodicJob] = []
        self._stats: dict[str, JobStats] = {}
        self._tasks: list[asyncio.Task] = []

    # ── Registration ─────────────────────────────────────────────────────

    def add(self, job: PeriodicJob) -> None:
        if self.running:
            raise RuntimeError("cannot add jobs while the scheduler is running")
        if job.interval <= 0:
            raise ValueError(f"job '{job.name}' needs a positive interval")
        if job.name in self._stats:
            raise ValueError(f"duplicate job name '{job.name}'")
        self._jobs.append(job)
        self._stats[job.name] = JobStats(job.name, job.interval)
        logger.info("Scheduled %s every %.3gs", job.name, job.interval)

    @property
    def jobs(self) -> list[PeriodicJob]:
        return list(self._jobs)

    @property
    def stats(self) -> list[dict]:
        return [s.to_dict() for s in self._stats.values()]

    def job_stats(self, name: str) -> JobStats:
        return self._stats[name]

    # ── Lifecycle ────────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    async def start(self) -> None:
        """Start one task per job.  Must be called from the event loop."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._run(job), name=f"sim:{job.name}")
            for job in self._jobs
        ]
        logger.info("Scheduler started with %d job(s)", len(self._tasks))

    async def stop(self) -> None:
        """Cancel every job and wait for the tasks to finish unwinding."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Scheduler stopped")

    # ── Ticking ──────────────────────────────────────────────────────────

    def run_once(self, job: PeriodicJob) -> bool:
        """Run a single tick of *job*; return False if it failed."""
        stats = self._stats[job.name]
        stats.last_tick_at = utc_now()
        try:
            job.tick()
        except StaleHandleError as exc:
            stats.failure_count += 1
            stats.last_error = str(exc)
            logger.warning("Job %s skipped a tick: %s", job.name, exc)
            return False
        except Exception as exc:
            stats.failure_count += 1
            stats.last_error = repr(exc)
            logger.error("Job %s tick failed", job.name, exc_info=True)
            return False
        stats.tick_count += 1
        return True

    async def _run(self, job: PeriodicJob) -> None:
        loop = asyncio.get_running_loop()
        start = loop.time()
        k = 0
        while True:
            k += 1
            delay = start + k * job.interval - loop.time()
            if delay < 0:
                missed = math.floor(-delay / job.interval)
                if missed:
                    logger.warning("Job %s missed %d tick(s)", job.name, missed)
                    k += missed
                    delay += missed * job.interval
            await asyncio.sleep(max(delay, 0.0))
            self.run_once(job)
