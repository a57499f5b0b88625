"""
Tests for clock parsing and notice arithmetic.

Run with:
    python3 -m pytest attendance_ledger/test_time_utils.py -v
"""

from datetime import date, datetime

import pytest

from attendance_ledger import time_utils


# ============================================================================
# 1. Clock parsing
# ============================================================================

class TestClock:

    @pytest.mark.parametrize("text, expected", [
        ("5:15pm", (17, 15)),
        ("5:15p", (17, 15)),
        ("5 PM", (17, 0)),
        ("12pm", (12, 0)),
        ("12:30am", (0, 30)),
        ("9", (9, 0)),
        ("16:30", (16, 30)),
    ])
    def test_parse_clock(self, text, expected):
        assert time_utils.parse_clock(text) == expected

    @pytest.mark.parametrize("text", ["", "TBD", "25:00", "7:75pm", None])
    def test_parse_clock_invalid(self, text):
        assert time_utils.parse_clock(text) is None

    def test_range_start_only(self):
        assert time_utils.range_start("5:15pm - 9:05pm") == (17, 15)
        assert time_utils.start_hour("10am-2pm") == 10
        assert time_utils.start_hour("") is None


# ============================================================================
# 2. Notice arithmetic
# ============================================================================

class TestNotice:

    def test_hours_notice(self):
        hours = time_utils.hours_notice(date(2026, 1, 5), "6:00pm - 9:00pm", datetime(2026, 1, 5, 15, 30))
        assert hours == pytest.approx(2.5)

    def test_negative_when_requested_after_start(self):
        assert time_utils.hours_notice(date(2026, 1, 5), "6pm - 9pm", datetime(2026, 1, 5, 19, 0)) < 0

    def test_unparseable_start_is_ample(self):
        hours = time_utils.hours_notice(date(2026, 1, 5), "TBD", datetime(2026, 1, 5, 17, 59))
        assert hours == time_utils.AMPLE_NOTICE_HOURS

    def test_whole_days_ignores_time_of_day(self):
        assert time_utils.whole_days_between(date(2026, 1, 3), date(2026, 1, 5)) == 2

    def test_within_days_either_direction(self):
        assert time_utils.within_days(date(2026, 1, 5), date(2026, 1, 19), 14)
        assert time_utils.within_days(date(2026, 1, 19), date(2026, 1, 5), 14)
        assert not time_utils.within_days(date(2026, 1, 5), date(2026, 1, 20), 14)

    def test_days_elapsed(self):
        assert time_utils.days_elapsed(date(2026, 1, 5), datetime(2026, 1, 20, 23, 0)) == 15


class TestDates:

    @pytest.mark.parametrize("name, expected", [("Jan", 1), ("january", 1), ("SEPT", 9), ("Foo", None), ("", None)])
    def test_month_number(self, name, expected):
        assert time_utils.month_number(name) == expected

    def test_safe_date(self):
        assert time_utils.safe_date(2026, 2, 28) == date(2026, 2, 28)
        assert time_utils.safe_date(2026, 2, 30) is None

    def test_format_date(self):
        assert time_utils.format_date(date(2026, 1, 5)) == "01/05/2026"
