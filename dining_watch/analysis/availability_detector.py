"""
Availability detection over provider opening records.
"""

from typing import Iterable, Optional

from dining_watch.models.dining_models import OpeningEvent, OpeningRecord, Target


def find_first_opening(records: Iterable[OpeningRecord]) -> Optional[OpeningRecord]:
    """
    Return the first record, in provider order, with any bookable meal period.

    Records are not sorted; later dates with availability are ignored once a
    match is found.
    """
    for record in records:
        if record.availability.is_available():
            return record
    return None


def detect_opening(target: Target, records: Iterable[OpeningRecord]) -> Optional[OpeningEvent]:
    """Wrap the first opening for ``target`` into an event, or return None."""
    record = find_first_opening(records)
    if record is None:
        return None

    return OpeningEvent(target=target, date=record.date, availability=record.availability)
