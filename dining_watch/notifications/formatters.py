"""
Formatters for converting detected openings into notification content.
"""

from datetime import date, datetime, time
from typing import List

import pytz

from dining_watch.models.dining_models import MealPeriod, OpeningEvent
from dining_watch.notifications.models import NotificationTemplate


def venue_midnight(day: date, utc_offset_minutes: int) -> datetime:
    """Midnight of ``day`` in the venue's fixed UTC offset."""
    return datetime.combine(day, time()).replace(tzinfo=pytz.FixedOffset(utc_offset_minutes))


def join_english(items: List[str]) -> str:
    """Join as ``a``, ``a and b`` or ``a, b and c``."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return f"{', '.join(items[:-1])} and {items[-1]}"


class PushFormatter:
    """Formats openings for push notifications."""

    @staticmethod
    def format_opening(event: OpeningEvent, utc_offset_minutes: int = -360) -> NotificationTemplate:
        """
        Title carries the venue name; body carries the date, the non-zero
        meal periods and the booking link.
        """
        moment = venue_midnight(event.date, utc_offset_minutes)
        formatted_date = f"{moment:%a, %b} {moment.day}"

        summary = " ".join(
            f"{period.value}: {event.availability.count(period)}"
            for period in event.availability.available_periods()
        )

        return NotificationTemplate(
            subject=f"🔴 🍽️ {event.venue_name}",
            text_content=f"{formatted_date} - {summary} \n\n{event.deep_link}"
        )


class SMSFormatter:
    """Formats openings and throttle notices for SMS."""

    @staticmethod
    def format_opening(event: OpeningEvent) -> NotificationTemplate:
        lines = [f"Availability detected for {event.venue_name} on {event.date.isoformat()}:"]
        lines.extend(
            f"{period.value}: {event.availability.count(period)}" for period in MealPeriod
        )
        lines.extend(["", event.deep_link])

        return NotificationTemplate(text_content="\n".join(lines))

    @staticmethod
    def format_pause_notice(pause_minutes: int) -> NotificationTemplate:
        return NotificationTemplate(text_content=f"Pausing SMS send for {pause_minutes} minutes")

    @staticmethod
    def format_unpause_notice() -> NotificationTemplate:
        return NotificationTemplate(text_content="Unpausing SMS")


class SpeechFormatter:
    """Formats openings as a sentence for text-to-speech."""

    @staticmethod
    def format_opening(event: OpeningEvent, utc_offset_minutes: int = -360) -> NotificationTemplate:
        moment = venue_midnight(event.date, utc_offset_minutes)
        spoken_date = f"{moment:%A, %B} {moment.day}"
        meals = join_english([
            period.value.lower() for period in event.availability.available_periods()
        ])

        return NotificationTemplate(
            text_content=f"{event.venue_name} has availability on {spoken_date} for {meals}."
        )
