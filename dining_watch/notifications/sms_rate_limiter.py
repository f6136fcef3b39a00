"""
SMS cooldown for the opening alerts.

Two independent timers drive the limiter:

- a cycle job that zeroes the send counter every ``cycle_minutes``,
  regardless of pause state
- a one-shot pause-expiry job, scheduled when the counter reaches
  ``threshold``, that zeroes the counter and lifts the pause

While paused, alerts are dropped for SMS only. Nothing is queued.

``acquire`` never awaits, so its state changes are atomic on a single event
loop. The pause notice runs as a background task and ``flush_notices`` waits
for any still in flight.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from dining_watch.models.dining_models import SMSThrottleState
from dining_watch.notifications.formatters import SMSFormatter
from dining_watch.notifications.models import NotificationTemplate
from dining_watch.notifications.sms_sender import SMSSender
from dining_watch.utils.scheduler import JobScheduler

logger = logging.getLogger(__name__)


class SMSRateLimiter:
    """Counts SMS alerts per cycle and pauses sending at the threshold."""

    CYCLE_JOB_ID = "sms_cycle_reset"
    PAUSE_JOB_ID = "sms_pause_expiry"

    def __init__(self,
                 sender: SMSSender,
                 scheduler: JobScheduler,
                 threshold: int = 5,
                 pause_minutes: int = 3,
                 cycle_minutes: int = 5,
                 state: Optional[SMSThrottleState] = None):
        """
        Initialize the limiter.

        Args:
            sender: Sends the pause and unpause notices
            scheduler: Owns the cycle and pause-expiry jobs
            threshold: Alerts per cycle that trigger a pause
            pause_minutes: Length of a pause
            cycle_minutes: Counter reset window
            state: Throttle state, created when omitted
        """
        if threshold <= 0:
            raise ValueError("threshold must be positive")

        self.sender = sender
        self.scheduler = scheduler
        self.threshold = threshold
        self.pause_minutes = pause_minutes
        self.cycle_minutes = cycle_minutes
        self.state = state or SMSThrottleState()
        self._notice_tasks: Set[asyncio.Task] = set()

        self._stats = {
            'allowed': 0,
            'suppressed': 0,
            'pauses': 0
        }

    @property
    def paused(self) -> bool:
        return self.state.paused

    def start(self):
        """Schedule the recurring cycle reset."""
        self.scheduler.add_interval_job(
            self.CYCLE_JOB_ID,
            self.on_cycle_reset,
            seconds=self.cycle_minutes * 60
        )
        logger.info(
            f"SMS limiter started: pause after {self.threshold} alerts, "
            f"{self.pause_minutes}m pause, {self.cycle_minutes}m cycle"
        )

    def shutdown(self):
        """Cancel the cycle job and any pending pause expiry."""
        self.scheduler.remove_job(self.CYCLE_JOB_ID)
        self.scheduler.remove_job(self.PAUSE_JOB_ID)

    async def acquire(self) -> bool:
        """
        Claim a send slot for one alert.

        Returns:
            True if the alert may be sent, False while paused
        """
        if self.state.paused:
            self._stats['suppressed'] += 1
            logger.debug("SMS paused, alert suppressed")
            return False

        self.state.sent_in_current_cycle += 1
        self._stats['allowed'] += 1

        if self.state.sent_in_current_cycle >= self.threshold:
            self.state.paused = True
            self._stats['pauses'] += 1
            self.scheduler.add_delayed_job(
                self.PAUSE_JOB_ID,
                self.on_pause_expired,
                delay_seconds=self.pause_minutes * 60
            )
            logger.warning(f"Pausing SMS send for {self.pause_minutes} minutes")
            task = asyncio.create_task(
                self._send_notice(SMSFormatter.format_pause_notice(self.pause_minutes))
            )
            self._notice_tasks.add(task)
            task.add_done_callback(self._notice_tasks.discard)

        return True

    async def flush_notices(self):
        """Wait for pause notices still being sent."""
        if self._notice_tasks:
            await asyncio.gather(*list(self._notice_tasks), return_exceptions=True)

    async def on_pause_expired(self):
        """Lift the pause and start a fresh count."""
        self.state.sent_in_current_cycle = 0
        self.state.paused = False
        logger.info("Unpausing SMS")
        await self._send_notice(SMSFormatter.format_unpause_notice())

    async def on_cycle_reset(self):
        """Zero the counter. The pause flag is left alone."""
        if self.state.sent_in_current_cycle:
            logger.debug(f"SMS cycle reset after {self.state.sent_in_current_cycle} alerts")
        self.state.sent_in_current_cycle = 0

    async def _send_notice(self, template: NotificationTemplate):
        try:
            results = await self.sender.send_bulk_messages(template)
        except Exception as e:
            logger.error(f"Failed to send SMS notice '{template.text_content}': {e}")
            return

        failed = [r for r in results if r.is_failure]
        if failed:
            logger.warning(f"SMS notice failed for {len(failed)} recipients")

    def get_limiter_stats(self) -> Dict[str, Any]:
        stats = dict(self._stats)
        stats['sent_in_current_cycle'] = self.state.sent_in_current_cycle
        stats['paused'] = self.state.paused
        return stats
