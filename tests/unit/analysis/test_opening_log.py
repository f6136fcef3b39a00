"""
Unit tests for the opening log file.
"""

import logging
from datetime import datetime

import pytest

from dining_watch.analysis.opening_log import OpeningLog, format_timestamp


class TestFormatTimestamp:

    @pytest.mark.parametrize("moment,expected", [
        (datetime(2024, 2, 1, 9, 5), "2/1/24, 9:05 AM"),
        (datetime(2024, 12, 25, 15, 30), "12/25/24, 3:30 PM"),
        (datetime(2024, 2, 1, 0, 0), "2/1/24, 12:00 AM"),
        (datetime(2024, 2, 1, 12, 1), "2/1/24, 12:01 PM"),
    ])
    def test_format(self, moment, expected):
        assert format_timestamp(moment) == expected


class TestOpeningLog:

    def test_format_line(self, tmp_path, dinner_event):
        log = OpeningLog(str(tmp_path / "openings.txt"), clock=lambda: datetime(2024, 2, 1, 9, 5))

        line = log.format_line(dinner_event, 3)

        assert line == "2/1/24, 9:05 AM - Check 3 - A1 - 2024-02-01 Breakfast: 0 Brunch: 0 Lunch: 0 Dinner: 2"

    def test_record_appends(self, tmp_path, dinner_event, caplog):
        path = tmp_path / "logs" / "openings.txt"
        log = OpeningLog(str(path), clock=lambda: datetime(2024, 2, 1, 21, 40))

        with caplog.at_level(logging.INFO):
            first = log.record(dinner_event, 1)
            log.record(dinner_event, 2)

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == first
        assert lines[0].startswith("2/1/24, 9:40 PM - Check 1 - A1")
        assert "Check 2" in lines[1]
        assert "Found opening for A1 on 2024-02-01" in caplog.text
