"""Display helpers for timestamps and durations."""

from __future__ import annotations

import math
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .aggregation import TimelineEntry

SECONDS_IN_MINUTE = 60
MINUTES_IN_HOUR = 60


def seconds_to_minutes(seconds: float) -> int:
    """Round seconds to whole minutes, with halves rounding up."""
    return math.floor(seconds / SECONDS_IN_MINUTE + 0.5)


def display_timestamp(timestamp: float) -> str:
    """Format a timestamp as local 12-hour clock time, e.g. ``9:05am``."""
    moment = datetime.fromtimestamp(timestamp)
    suffix = "pm" if moment.hour >= 12 else "am"
    hours = moment.hour % 12 or 12
    return f"{hours}:{moment.minute:02d}{suffix}"


def display_time_spent(minutes: int) -> str:
    hours, remaining = divmod(int(minutes), MINUTES_IN_HOUR)
    return f"{hours} hours and {remaining} minutes"


def format_entry_label(entry: "TimelineEntry") -> str:
    return f"{entry.name}: {display_time_spent(entry.duration_minutes)}"
