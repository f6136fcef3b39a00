"""
Shared fixtures for Dining Watch tests.
"""

from datetime import date

import pytest

from dining_watch.models.dining_models import MealAvailability, OpeningEvent, Target


class FakeScheduler:
    """Records jobs instead of running them; tests fire them by hand."""

    def __init__(self):
        self.jobs = {}
        self.removed = []

    def add_interval_job(self, name, func, seconds, run_immediately=False):
        self.jobs[name] = {"func": func, "seconds": seconds, "run_immediately": run_immediately, "args": ()}
        return name

    def add_delayed_job(self, name, func, delay_seconds, args=None):
        self.jobs[name] = {"func": func, "seconds": delay_seconds, "run_immediately": False, "args": args or ()}
        return name

    def remove_job(self, job_id):
        self.removed.append(job_id)
        return self.jobs.pop(job_id, None) is not None

    def get_job_ids(self):
        return list(self.jobs)

    async def fire(self, job_id):
        """Run a recorded job the way the asyncio scheduler would."""
        job = self.jobs[job_id]
        result = job["func"](*job["args"])
        if hasattr(result, "__await__"):
            result = await result
        return result


@pytest.fixture
def fake_scheduler():
    return FakeScheduler()


@pytest.fixture
def target_a1():
    return Target(
        name="A1",
        venue_id="1",
        query_url="https://dining.test/v1/openings/2024-01-29%7C1%7C2%7C5",
        deep_link="https://book.test/a1"
    )


@pytest.fixture
def dinner_event(target_a1):
    """Opening with two dinner tables on Thursday, Feb 1 2024."""
    return OpeningEvent(
        target=target_a1,
        date=date(2024, 2, 1),
        availability=MealAvailability.from_raw({"Breakfast": "0", "Lunch": 0, "Dinner": 2})
    )
