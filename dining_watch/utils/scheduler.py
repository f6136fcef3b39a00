"""
Job scheduling for Dining Watch.

Wraps APScheduler's AsyncIOScheduler so the poll loop, the SMS cooldown
windows and temporary file cleanup all run as cancellable jobs on the
application's event loop.
"""

import sys
import logging
from datetime import datetime, timedelta
from typing import Optional, Callable, Dict, Any, List

try:
    from apscheduler.schedulers.asyncio import AsyncIOScheduler
    from apscheduler.triggers.date import DateTrigger
    from apscheduler.triggers.interval import IntervalTrigger
    from apscheduler.events import EVENT_JOB_EXECUTED, EVENT_JOB_ERROR, EVENT_JOB_MISSED, EVENT_JOB_MAX_INSTANCES
    from apscheduler.jobstores.base import JobLookupError
    import pytz
except ImportError as e:
    print(f"Missing required dependencies: {e}")
    print("Please install: pip install apscheduler pytz")
    sys.exit(1)


class JobScheduler:
    """
    Asyncio job scheduler with execution statistics.

    Jobs should be coroutine functions. Plain callables are run by
    APScheduler in a worker thread.
    """

    def __init__(self,
                 timezone: str = "UTC",
                 logger: Optional[logging.Logger] = None):
        """
        Initialize job scheduler.

        Args:
            timezone: Timezone used for trigger calculations
            logger: Logger instance
        """
        self.timezone = pytz.timezone(timezone)
        self.logger = logger or logging.getLogger(__name__)

        job_defaults = {
            'coalesce': True,
            'max_instances': 1,
            'misfire_grace_time': 30
        }

        self.scheduler = AsyncIOScheduler(job_defaults=job_defaults, timezone=self.timezone)

        self.stats = {
            'jobs_scheduled': 0,
            'jobs_executed': 0,
            'jobs_failed': 0,
            'jobs_missed': 0,
            'jobs_removed': 0,
            'started_at': None
        }

        self._setup_event_listeners()

        self.logger.debug("Job scheduler initialized")

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self):
        """Start the scheduler. Must be called with a running event loop."""
        if not self.scheduler.running:
            self.scheduler.start()
            self.stats['started_at'] = datetime.now(self.timezone)
            self.logger.info("Job scheduler started")
        else:
            self.logger.warning("Job scheduler is already running")

    def shutdown(self, wait: bool = False):
        """
        Shutdown the scheduler and drop every pending job.

        Args:
            wait: Whether to wait for running jobs to complete
        """
        if self.scheduler.running:
            self.logger.info("Shutting down job scheduler...")
            self.scheduler.remove_all_jobs()
            self.scheduler.shutdown(wait=wait)
            self.logger.info("Job scheduler shutdown complete")

    def add_interval_job(self,
                         name: str,
                         func: Callable,
                         seconds: float,
                         run_immediately: bool = False) -> str:
        """
        Schedule ``func`` every ``seconds``.

        Args:
            name: Job identifier, replacing any job with the same id
            func: Callable or coroutine function to run
            seconds: Interval between runs
            run_immediately: Fire the first run now instead of after one interval

        Returns:
            Job ID
        """
        options: Dict[str, Any] = {}
        if run_immediately:
            options['next_run_time'] = datetime.now(self.timezone)

        job = self.scheduler.add_job(
            func,
            trigger=IntervalTrigger(seconds=seconds, timezone=self.timezone),
            id=name,
            name=name,
            replace_existing=True,
            **options
        )

        self.stats['jobs_scheduled'] += 1
        self.logger.debug(f"Interval job '{name}' scheduled every {seconds}s")

        return job.id

    def add_delayed_job(self,
                        name: str,
                        func: Callable,
                        delay_seconds: float,
                        args: Optional[tuple] = None) -> str:
        """
        Schedule ``func(*args)`` to run once after ``delay_seconds``.

        Returns:
            Job ID
        """
        run_date = datetime.now(self.timezone) + timedelta(seconds=delay_seconds)

        job = self.scheduler.add_job(
            func,
            trigger=DateTrigger(run_date=run_date, timezone=self.timezone),
            args=args or (),
            id=name,
            name=name,
            replace_existing=True
        )

        self.stats['jobs_scheduled'] += 1
        self.logger.debug(f"One-shot job '{name}' scheduled in {delay_seconds}s")

        return job.id

    def remove_job(self, job_id: str) -> bool:
        """Remove a job, returning False when it already ran or never existed."""
        try:
            self.scheduler.remove_job(job_id)
        except JobLookupError:
            self.logger.debug(f"Job '{job_id}' not found, nothing to remove")
            return False

        self.stats['jobs_removed'] += 1
        self.logger.debug(f"Job '{job_id}' removed")
        return True

    def get_job_ids(self) -> List[str]:
        return [job.id for job in self.scheduler.get_jobs()]

    def get_scheduler_stats(self) -> Dict[str, Any]:
        """Get scheduler statistics."""
        stats = dict(self.stats)
        stats['scheduler_running'] = self.scheduler.running
        stats['pending_jobs'] = len(self.scheduler.get_jobs())
        if stats['started_at'] is not None:
            stats['started_at'] = stats['started_at'].isoformat()
        return stats

    def _setup_event_listeners(self):
        """Setup APScheduler event listeners."""

        def job_executed(event):
            self.stats['jobs_executed'] += 1
            self.logger.debug(f"Job executed: {event.job_id}")

        def job_error(event):
            self.stats['jobs_failed'] += 1
            self.logger.error(f"Job error: {event.job_id} - {event.exception}")

        def job_missed(event):
            self.stats['jobs_missed'] += 1
            self.logger.warning(f"Job missed: {event.job_id} at {event.scheduled_run_time}")

        def max_instances_reached(event):
            self.logger.warning(f"Max instances reached for job: {event.job_id}")

        self.scheduler.add_listener(job_executed, EVENT_JOB_EXECUTED)
        self.scheduler.add_listener(job_error, EVENT_JOB_ERROR)
        self.scheduler.add_listener(job_missed, EVENT_JOB_MISSED)
        self.scheduler.add_listener(max_instances_reached, EVENT_JOB_MAX_INSTANCES)
