"""
Append-only record of detected openings.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from dining_watch.models.dining_models import MealPeriod, OpeningEvent

logger = logging.getLogger(__name__)


def format_timestamp(moment: datetime) -> str:
    """Short local timestamp, e.g. ``2/1/24, 9:05 AM``."""
    hour = moment.hour % 12 or 12
    return f"{moment.month}/{moment.day}/{moment:%y}, {hour}:{moment:%M %p}"


class OpeningLog:
    """Writes one line per detected opening to a text file."""

    def __init__(self,
                 path: str = "reservation-openings-log.txt",
                 clock: Optional[Callable[[], datetime]] = None):
        self.path = path
        self.clock = clock or datetime.now

        parent = os.path.dirname(path)
        if parent:
            Path(parent).mkdir(parents=True, exist_ok=True)

    def format_line(self, event: OpeningEvent, check_number: int) -> str:
        counts = " ".join(
            f"{period.value}: {event.availability.count(period)}" for period in MealPeriod
        )
        return (
            f"{format_timestamp(self.clock())} - Check {check_number} - "
            f"{event.venue_name} - {event.date.isoformat()} {counts}"
        )

    def record(self, event: OpeningEvent, check_number: int) -> str:
        """
        Append ``event`` to the log file.

        Args:
            event: Detected opening
            check_number: Check pass that found it

        Returns:
            The line written, without the trailing newline
        """
        line = self.format_line(event, check_number)

        with open(self.path, 'a', encoding='utf-8') as f:
            f.write(line + "\n")

        logger.info(
            f"Found opening for {event.venue_name} on {event.date.isoformat()}",
            extra={"venue": event.venue_name, "check_number": check_number}
        )
        return line
