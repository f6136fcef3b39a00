"""
Unit tests for opening detection.
"""

from datetime import date

import pytest

from dining_watch.analysis.availability_detector import detect_opening, find_first_opening
from dining_watch.models.dining_models import MealAvailability, OpeningRecord


def record(day, **counts):
    return OpeningRecord(date=date(2024, 1, day), availability=MealAvailability(**counts))


class TestFindFirstOpening:

    def test_no_records(self):
        assert find_first_opening([]) is None

    def test_all_zero(self):
        assert find_first_opening([record(29), record(30), record(31)]) is None

    def test_first_in_provider_order(self):
        records = [record(31, lunch=1), record(29, dinner=4), record(30)]

        first = find_first_opening(records)

        assert first.date == date(2024, 1, 31)

    def test_skips_zero_dates(self):
        records = [record(29), record(30, breakfast=2)]

        assert find_first_opening(records).date == date(2024, 1, 30)


class TestDetectOpening:

    def test_builds_event(self, target_a1):
        event = detect_opening(target_a1, [record(29), record(30, dinner=2)])

        assert event.target is target_a1
        assert event.venue_name == "A1"
        assert event.deep_link == "https://book.test/a1"
        assert event.date == date(2024, 1, 30)
        assert event.availability.dinner == 2

    def test_no_opening(self, target_a1):
        assert detect_opening(target_a1, [record(29)]) is None


class TestDetectFromProviderRecords:

    @pytest.mark.parametrize("raw", ["0.0", "00", " 0 ", 0.5, "0.5"])
    def test_non_zero_values_are_openings(self, raw):
        records = [OpeningRecord.from_api_response({"Date": "2024-02-01", "MealOpenings": {"Dinner": raw}})]

        first = find_first_opening(records)

        assert first is not None
        assert first.date == date(2024, 2, 1)

    def test_zero_and_absent_values_are_not_openings(self):
        records = [
            OpeningRecord.from_api_response({"Date": "2024-02-01", "MealOpenings": {"Dinner": "0", "Lunch": 0}}),
            OpeningRecord.from_api_response({"Date": "2024-02-02", "MealOpenings": {}}),
            OpeningRecord.from_api_response({"Date": "2024-02-03"}),
        ]

        assert find_first_opening(records) is None
