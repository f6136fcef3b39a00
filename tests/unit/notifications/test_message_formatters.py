"""
Unit tests for notification formatters.
"""

from datetime import date

import pytest

from dining_watch.models.dining_models import MealAvailability, OpeningEvent
from dining_watch.notifications.formatters import (
    PushFormatter, SMSFormatter, SpeechFormatter, join_english, venue_midnight
)


class TestJoinEnglish:

    @pytest.mark.parametrize("items,expected", [
        ([], ""),
        (["dinner"], "dinner"),
        (["lunch", "dinner"], "lunch and dinner"),
        (["breakfast", "lunch", "dinner"], "breakfast, lunch and dinner"),
    ])
    def test_join(self, items, expected):
        assert join_english(items) == expected


def test_venue_midnight_keeps_calendar_date():
    moment = venue_midnight(date(2024, 2, 1), -360)

    assert (moment.year, moment.month, moment.day, moment.hour) == (2024, 2, 1, 0)
    assert moment.utcoffset().total_seconds() == -6 * 3600


class TestPushFormatter:

    def test_format_opening(self, dinner_event):
        template = PushFormatter.format_opening(dinner_event)

        assert template.subject == "🔴 🍽️ A1"
        assert template.text_content == "Thu, Feb 1 - Dinner: 2 \n\nhttps://book.test/a1"

    def test_multiple_periods(self, target_a1):
        event = OpeningEvent(target_a1, date(2024, 1, 30), MealAvailability(breakfast=1, lunch=3))

        template = PushFormatter.format_opening(event)

        assert template.text_content.startswith("Tue, Jan 30 - Breakfast: 1 Lunch: 3 \n\n")


class TestSMSFormatter:

    def test_format_opening(self, dinner_event):
        template = SMSFormatter.format_opening(dinner_event)

        assert template.subject is None
        assert template.text_content == (
            "Availability detected for A1 on 2024-02-01:\n"
            "Breakfast: 0\n"
            "Brunch: 0\n"
            "Lunch: 0\n"
            "Dinner: 2\n"
            "\n"
            "https://book.test/a1"
        )

    def test_throttle_notices(self):
        assert SMSFormatter.format_pause_notice(3).text_content == "Pausing SMS send for 3 minutes"
        assert SMSFormatter.format_unpause_notice().text_content == "Unpausing SMS"


class TestSpeechFormatter:

    def test_format_opening(self, dinner_event):
        template = SpeechFormatter.format_opening(dinner_event)

        assert template.text_content == "A1 has availability on Thursday, February 1 for dinner."

    def test_several_meals(self, target_a1):
        event = OpeningEvent(target_a1, date(2024, 2, 3), MealAvailability(brunch=2, lunch=1, dinner=5))

        template = SpeechFormatter.format_opening(event)

        assert template.text_content == "A1 has availability on Saturday, February 3 for brunch, lunch and dinner."
