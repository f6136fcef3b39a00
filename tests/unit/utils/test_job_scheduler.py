"""
Unit tests for the job scheduler wrapper.
"""

import asyncio
import pytest

from dining_watch.utils.scheduler import JobScheduler


class TestJobScheduler:
    """Test scheduling against a real AsyncIOScheduler."""

    @pytest.mark.asyncio
    async def test_remove_missing_job(self):
        scheduler = JobScheduler()

        assert scheduler.remove_job("missing") is False
        assert scheduler.get_scheduler_stats()['jobs_removed'] == 0

    @pytest.mark.asyncio
    async def test_interval_job_runs_immediately(self):
        scheduler = JobScheduler()
        ran = asyncio.Event()

        async def job():
            ran.set()

        scheduler.start()
        try:
            scheduler.add_interval_job("poll", job, seconds=3600, run_immediately=True)
            await asyncio.wait_for(ran.wait(), timeout=5)

            assert scheduler.get_job_ids() == ["poll"]
            assert scheduler.running
        finally:
            scheduler.shutdown()

        assert not scheduler.running

    @pytest.mark.asyncio
    async def test_delayed_job_receives_args(self):
        scheduler = JobScheduler()
        received = asyncio.Queue()

        async def job(value):
            await received.put(value)

        scheduler.start()
        try:
            scheduler.add_delayed_job("cleanup", job, delay_seconds=0.05, args=("tts_cleanup_1",))
            value = await asyncio.wait_for(received.get(), timeout=5)
        finally:
            scheduler.shutdown()

        assert value == "tts_cleanup_1"

    @pytest.mark.asyncio
    async def test_removed_job_does_not_run(self):
        scheduler = JobScheduler()
        ran = []

        async def job():
            ran.append(True)

        scheduler.start()
        try:
            scheduler.add_delayed_job("pause", job, delay_seconds=0.2)
            assert scheduler.remove_job("pause") is True
            await asyncio.sleep(0.4)
        finally:
            scheduler.shutdown()

        assert ran == []
        stats = scheduler.get_scheduler_stats()
        assert stats['jobs_scheduled'] == 1
        assert stats['jobs_removed'] == 1

    @pytest.mark.asyncio
    async def test_add_replaces_existing_job(self):
        scheduler = JobScheduler()

        async def job():
            pass

        scheduler.start()
        try:
            scheduler.add_delayed_job("pause", job, delay_seconds=60)
            scheduler.add_delayed_job("pause", job, delay_seconds=120)

            assert scheduler.get_job_ids() == ["pause"]
        finally:
            scheduler.shutdown()
