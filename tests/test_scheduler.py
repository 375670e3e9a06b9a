"""Tests for the PeriodicScheduler."""

import asyncio
import time

import pytest

from uasim.core.scheduler import PeriodicScheduler
from uasim.store.address_space import StaleHandleError


class _Job:
    def __init__(self, name: str, interval: float, fail_with: Exception | None = None) -> None:
        self.name = name
        self.interval = interval
        self.ticks = 0
        self._fail_with = fail_with

    def tick(self) -> None:
        self.ticks += 1
        if self._fail_with is not None:
            raise self._fail_with


class TestRegistration:
    def test_duplicate_name_rejected(self) -> None:
        scheduler = PeriodicScheduler()
        scheduler.add(_Job("a", 1.0))
        with pytest.raises(ValueError):
            scheduler.add(_Job("a", 2.0))

    def test_non_positive_interval_rejected(self) -> None:
        with pytest.raises(ValueError):
            PeriodicScheduler().add(_Job("a", 0.0))


class TestRunOnce:
    def test_successful_tick_counted(self) -> None:
        scheduler = PeriodicScheduler()
        job = _Job("a", 1.0)
        scheduler.add(job)
        assert scheduler.run_once(job) is True
        stats = scheduler.job_stats("a")
        assert stats.tick_count == 1
        assert stats.failure_count == 0
        assert stats.last_tick_at is not None

    def test_stale_handle_skips_tick(self) -> None:
        scheduler = PeriodicScheduler()
        job = _Job("a", 1.0, fail_with=StaleHandleError("ns=1;s=Gone"))
        scheduler.add(job)
        assert scheduler.run_once(job) is False
        stats = scheduler.job_stats("a")
        assert stats.failure_count == 1
        assert "ns=1;s=Gone" in (stats.last_error or "")

    def test_unexpected_error_is_contained(self) -> None:
        scheduler = PeriodicScheduler()
        job = _Job("a", 1.0, fail_with=ZeroDivisionError("boom"))
        scheduler.add(job)
        assert scheduler.run_once(job) is False
        assert scheduler.job_stats("a").failure_count == 1


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_jobs_tick_independently(self) -> None:
        scheduler = PeriodicScheduler()
        fast = _Job("fast", 0.01)
        slow = _Job("slow", 0.05)
        scheduler.add(fast)
        scheduler.add(slow)

        await scheduler.start()
        assert scheduler.running
        await asyncio.sleep(0.2)
        await scheduler.stop()

        assert not scheduler.running
        assert fast.ticks > slow.ticks >= 2

    @pytest.mark.asyncio
    async def test_failing_job_does_not_stop_others(self) -> None:
        scheduler = PeriodicScheduler()
        broken = _Job("broken", 0.01, fail_with=RuntimeError("always"))
        healthy = _Job("healthy", 0.01)
        scheduler.add(broken)
        scheduler.add(healthy)

        await scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

        assert broken.ticks >= 3
        assert healthy.ticks >= 3
        assert scheduler.job_stats("broken").failure_count == broken.ticks
        assert scheduler.job_stats("healthy").failure_count == 0

    @pytest.mark.asyncio
    async def test_stop_halts_all_ticks(self) -> None:
        scheduler = PeriodicScheduler()
        job = _Job("a", 0.01)
        scheduler.add(job)
        await scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()
        ticks = job.ticks
        await asyncio.sleep(0.05)
        assert job.ticks == ticks

    @pytest.mark.asyncio
    async def test_cannot_add_while_running(self) -> None:
        scheduler = PeriodicScheduler()
        scheduler.add(_Job("a", 10.0))
        await scheduler.start()
        try:
            with pytest.raises(RuntimeError):
                scheduler.add(_Job("b", 1.0))
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_overrun_skips_missed_ticks_instead_of_bursting(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        loop = asyncio.get_running_loop()
        starts: list[float] = []

        class _SlowFirstTick(_Job):
            def tick(self) -> None:
                starts.append(loop.time())
                super().tick()
                if self.ticks == 1:
                    time.sleep(0.25)  # blocks through 2.5 intervals

        scheduler = PeriodicScheduler()
        slow = _SlowFirstTick("slow", 0.1)
        steady = _Job("steady", 0.1)
        scheduler.add(slow)
        scheduler.add(steady)

        await scheduler.start()
        await asyncio.sleep(0.65)
        await scheduler.stop()

        assert "Job slow missed" in caplog.text
        gaps = [b - a for a, b in zip(starts, starts[1:])]
        assert len(gaps) >= 3
        assert min(gaps) > 0.02
        assert steady.ticks >= 3
        assert scheduler.job_stats("steady").failure_count == 0
