"""
Fixed-interval poll loop over the resolved targets.

Each check pass starts one task per target and returns without waiting for
them, so a slow venue never delays the next pass or its siblings. A failing
target check is logged and reported but never propagates.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set

from dining_watch.analysis.availability_detector import detect_opening
from dining_watch.analysis.opening_log import OpeningLog
from dining_watch.api.dining_client import DiningClient
from dining_watch.models.dining_models import OpeningEvent, PollState, Target
from dining_watch.notifications.notification_manager import NotificationManager
from dining_watch.utils.error_handler import ErrorSeverity, GlobalErrorHandler, get_error_handler
from dining_watch.utils.logger import get_performance_logger
from dining_watch.utils.scheduler import JobScheduler


class OpeningPoller:
    """Runs check passes and hands detected openings to the notification manager."""

    JOB_ID = "opening_poll"

    def __init__(self,
                 client: DiningClient,
                 notification_manager: NotificationManager,
                 opening_log: OpeningLog,
                 scheduler: JobScheduler,
                 interval_seconds: float,
                 state: Optional[PollState] = None,
                 error_handler: Optional[GlobalErrorHandler] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the poller.

        Args:
            client: Provider client used for openings fetches
            notification_manager: Dispatches detected openings
            opening_log: Append-only opening record
            scheduler: Scheduler that owns the poll job
            interval_seconds: Delay between check passes
            state: Poll counters, created when omitted
            error_handler: Receives failed target checks
            logger: Logger instance
        """
        self.client = client
        self.notification_manager = notification_manager
        self.opening_log = opening_log
        self.scheduler = scheduler
        self.interval_seconds = interval_seconds
        self.state = state or PollState()
        self.error_handler = error_handler or get_error_handler()
        self.logger = logger or logging.getLogger(__name__)

        self.targets: List[Target] = []
        self._in_flight: Set[asyncio.Task] = set()
        self._perf = get_performance_logger('poller')

        self._stats = {
            'checks_completed': 0,
            'checks_failed': 0,
            'openings_found': 0
        }

    def start(self, targets: List[Target]):
        """Schedule check passes for ``targets``, the first one immediately."""
        self.targets = list(targets)
        self.scheduler.add_interval_job(
            self.JOB_ID,
            self.run_check_pass,
            seconds=self.interval_seconds,
            run_immediately=True
        )
        self.logger.info(
            f"Polling {len(self.targets)} restaurants every {self.interval_seconds:g}s"
        )

    async def run_check_pass(self) -> List[asyncio.Task]:
        """
        Start one check per target in target order.

        Returns:
            The tasks started for this pass
        """
        self.state.check_count += 1
        check_number = self.state.check_count
        self.logger.info(f"check #{check_number}", extra={"check_number": check_number})

        tasks = []
        for target in self.targets:
            task = asyncio.create_task(self.check_target(target, check_number))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            tasks.append(task)

        return tasks

    async def check_target(self, target: Target, check_number: Optional[int] = None) -> Optional[OpeningEvent]:
        """
        Fetch, detect and notify for a single target.

        Returns:
            The detected event, or None when there is no opening or the check failed
        """
        if check_number is None:
            check_number = self.state.check_count

        self.logger.debug(f"checking {target.name}")

        try:
            with self._perf.timer("check_target", venue=target.name):
                records = await self.client.fetch_openings(target)

            event = detect_opening(target, records)
            self._stats['checks_completed'] += 1
            if event is None:
                return None

            self._stats['openings_found'] += 1
            self.opening_log.record(event, check_number)
            await self.notification_manager.dispatch(event)
            return event

        except Exception as e:
            self._stats['checks_failed'] += 1
            self.logger.error(f"Error checking {target.name}: {e}")
            self.error_handler.report_error(
                e,
                component="poller",
                severity=ErrorSeverity.MEDIUM,
                context={"venue": target.name, "check_number": check_number}
            )
            return None

    async def shutdown(self):
        """Cancel the poll job and any target checks still running."""
        self.scheduler.remove_job(self.JOB_ID)

        pending = [task for task in self._in_flight if not task.done()]
        for task in pending:
            task.cancel()

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            self.logger.info(f"Cancelled {len(pending)} in-flight checks")

    def get_poll_stats(self) -> Dict[str, Any]:
        stats = dict(self._stats)
        stats['check_count'] = self.state.check_count
        stats['targets'] = len(self.targets)
        stats['in_flight'] = len(self._in_flight)
        return stats
