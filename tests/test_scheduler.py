"""
Tests for the periodic cleanup scheduler.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from alphachat.services import CleanupScheduler


class TestRunOnce:

    @pytest.mark.asyncio
    async def test_returns_sweep_count(self):
        scheduler = CleanupScheduler(AsyncMock(return_value=3))
        assert await scheduler.run_once() == 3

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, caplog):
        scheduler = CleanupScheduler(AsyncMock(side_effect=RuntimeError("disk unavailable")))

        assert await scheduler.run_once() is None
        assert "disk unavailable" in caplog.text


class TestLoop:

    @pytest.mark.asyncio
    async def test_runs_repeatedly_and_survives_failures(self):
        calls = []

        async def sweep():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return 1

        scheduler = CleanupScheduler(sweep, interval_seconds=0.01, startup_delay_seconds=0)

        scheduler.start()
        assert scheduler.is_running
        for _ in range(100):
            if len(calls) >= 3:
                break
            await asyncio.sleep(0.01)
        await scheduler.stop()

        assert len(calls) >= 3
        assert not scheduler.is_running

    @pytest.mark.asyncio
    async def test_startup_delay(self):
        sweep = AsyncMock(return_value=0)
        scheduler = CleanupScheduler(sweep, interval_seconds=60, startup_delay_seconds=60)

        scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()

        sweep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_start_is_idempotent_and_stop_without_start(self):
        scheduler = CleanupScheduler(AsyncMock(return_value=0), startup_delay_seconds=60)
        await scheduler.stop()

        scheduler.start()
        task = scheduler._task
        scheduler.start()
        assert scheduler._task is task
        await scheduler.stop()
