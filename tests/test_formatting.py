from datetime import datetime

import pytest

from flow_tracker.aggregation import TimelineEntry
from flow_tracker.formatting import (
    display_time_spent,
    display_timestamp,
    format_entry_label,
    seconds_to_minutes,
)


@pytest.mark.parametrize(
    ("seconds", "minutes"),
    [(0, 0), (29, 0), (30, 1), (89, 1), (90, 2), (150, 3), (3600, 60), (-90, -1)],
)
def test_seconds_to_minutes_rounds_half_up(seconds: float, minutes: int) -> None:
    assert seconds_to_minutes(seconds) == minutes


class TestDisplayTimestamp:
    def test_morning(self):
        assert display_timestamp(datetime(2024, 3, 4, 9, 5).timestamp()) == "9:05am"

    def test_midnight_hour_shows_twelve(self):
        assert display_timestamp(datetime(2024, 3, 4, 0, 7).timestamp()) == "12:07am"

    def test_noon_is_pm(self):
        assert display_timestamp(datetime(2024, 3, 4, 12, 30).timestamp()) == "12:30pm"

    def test_evening(self):
        assert display_timestamp(datetime(2024, 3, 4, 23, 59, 59).timestamp()) == "11:59pm"


class TestDisplayTimeSpent:
    def test_hours_and_minutes(self):
        assert display_time_spent(125) == "2 hours and 5 minutes"

    def test_no_singular_forms(self):
        assert display_time_spent(61) == "1 hours and 1 minutes"

    def test_zero(self):
        assert display_time_spent(0) == "0 hours and 0 minutes"


def test_format_entry_label() -> None:
    entry = TimelineEntry(
        name="Write report", duration_minutes=90, left_offset_pct=0.0, right_offset_pct=0.0
    )
    assert format_entry_label(entry) == "Write report: 1 hours and 30 minutes"


def test_negative_minutes_keep_a_positive_remainder() -> None:
    assert display_time_spent(-30) == "-1 hours and 30 minutes"
    assert display_time_spent(-90) == "-2 hours and 30 minutes"
