"""
Unit tests for dining data models.
"""

import pytest
from datetime import date

from dining_watch.models.dining_models import (
    MealAvailability, MealPeriod, OpeningRecord, VenueDirectoryEntry, normalize_meal_count
)


class TestNormalizeMealCount:
    """Test normalization of raw meal values."""

    @pytest.mark.parametrize("raw", [None, "", 0, "0", 0.0, False, float("nan")])
    def test_zero_like_values(self, raw):
        assert normalize_meal_count(raw) == 0

    @pytest.mark.parametrize("raw,expected", [
        (2, 2),
        ("3", 3),
        (" 4 ", 4),
        (2.7, 2),
        ("5.0", 5),
        (True, 1),
        (0.5, 1),
        ("0.5", 1),
        (-2, -2),
    ])
    def test_numeric_values(self, raw, expected):
        assert normalize_meal_count(raw) == expected

    @pytest.mark.parametrize("raw", ["0.0", "00", " 0 ", "   "])
    def test_zero_looking_strings_count_as_available(self, raw):
        assert normalize_meal_count(raw) != 0

    @pytest.mark.parametrize("raw", ["abc", "yes", "nan", "inf", float("inf"), ["x"]])
    def test_unparseable_values_count_as_available(self, raw):
        assert normalize_meal_count(raw) == 1

    @pytest.mark.parametrize("raw", ["0.0", "00", " 0 ", 0.5, "0.5"])
    def test_non_zero_values_make_an_opening(self, raw):
        availability = MealAvailability.from_raw({"Dinner": raw})

        assert availability.is_available()
        assert availability.available_periods() == [MealPeriod.DINNER]


class TestMealAvailability:
    """Test MealAvailability parsing and queries."""

    def test_from_raw_missing_mapping(self):
        availability = MealAvailability.from_raw(None)

        assert availability == MealAvailability()
        assert not availability.is_available()
        assert availability.available_periods() == []

    def test_from_raw_mixed_values(self):
        availability = MealAvailability.from_raw({
            "Breakfast": "0",
            "Lunch": 0,
            "Dinner": "2"
        })

        assert availability.dinner == 2
        assert availability.brunch == 0
        assert availability.is_available()
        assert availability.available_periods() == [MealPeriod.DINNER]

    def test_available_periods_in_display_order(self):
        availability = MealAvailability.from_raw({"Dinner": 1, "Breakfast": 3, "Brunch": "2"})

        assert availability.available_periods() == [
            MealPeriod.BREAKFAST, MealPeriod.BRUNCH, MealPeriod.DINNER
        ]

    def test_as_dict_includes_zeros(self):
        availability = MealAvailability(lunch=4)

        assert availability.as_dict() == {"Breakfast": 0, "Brunch": 0, "Lunch": 4, "Dinner": 0}


class TestOpeningRecord:
    """Test parsing of provider opening records."""

    def test_parse_plain_date(self):
        record = OpeningRecord.from_api_response({
            "Date": "2024-02-01",
            "MealOpenings": {"Dinner": "2"}
        })

        assert record.date == date(2024, 2, 1)
        assert record.availability.dinner == 2

    def test_parse_date_with_time_suffix(self):
        record = OpeningRecord.from_api_response({"Date": "2024-02-03T00:00:00"})

        assert record.date == date(2024, 2, 3)
        assert not record.availability.is_available()

    def test_missing_date_raises(self):
        with pytest.raises(ValueError, match="missing Date"):
            OpeningRecord.from_api_response({"MealOpenings": {"Dinner": 1}})

    def test_invalid_date_raises(self):
        with pytest.raises(ValueError, match="Invalid opening date"):
            OpeningRecord.from_api_response({"Date": "next tuesday"})


class TestVenueDirectoryEntry:

    def test_from_api_response(self):
        entry = VenueDirectoryEntry.from_api_response({
            "Name": "Space 220",
            "ID": 19330385,
            "DisneyUrl": "https://disneyworld.disney.go.com/dining/epcot/space-220-restaurant/",
            "Location": "EPCOT"
        })

        assert entry.name == "Space 220"
        assert entry.venue_id == "19330385"
        assert entry.booking_url.endswith("space-220-restaurant/")

    def test_missing_booking_url(self):
        entry = VenueDirectoryEntry.from_api_response({"Name": "A1", "ID": "1", "DisneyUrl": None})

        assert entry.booking_url == ""
