"""Turn a finished day into a proportional timeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .formatting import SECONDS_IN_MINUTE, display_timestamp, seconds_to_minutes
from .models import FlowInterval, SessionSnapshot

TOTAL_TIME_LABEL = "Total Time"


@dataclass(frozen=True, slots=True)
class TimelineEntry:
    """One row of the summary, placed by its left and right margins."""

    name: str
    duration_minutes: int
    left_offset_pct: float
    right_offset_pct: float
    is_total: bool = False


@dataclass(slots=True)
class DaySummary:
    day_start_time: float
    day_end_time: float
    filter_minutes: int
    entries: list[TimelineEntry] = field(default_factory=list)
    hidden_count: int = 0

    @property
    def total_seconds(self) -> float:
        return self.day_end_time - self.day_start_time

    @property
    def day_start_label(self) -> str:
        return display_timestamp(self.day_start_time)

    @property
    def day_end_label(self) -> str:
        return display_timestamp(self.day_end_time)


def offset_pct(start: float, end: float, total: float) -> float:
    """Return ``end - start`` as a percentage of ``total``; 0 for an empty day."""
    if total == 0:
        return 0.0
    return (end - start) / total * 100


def is_filtered_out(flow: FlowInterval, min_duration_minutes: int) -> bool:
    duration = flow.duration_seconds
    if duration is None:
        return True
    return duration < min_duration_minutes * SECONDS_IN_MINUTE


def build_timeline(
    day_start: float,
    day_end: float,
    flows: Iterable[FlowInterval],
    min_duration_minutes: int,
) -> list[TimelineEntry]:
    """Return the total entry followed by every flow that passes the filter.

    Flows keep their completion order. Negative durations are not clamped.
    """
    total = day_end - day_start
    entries = [
        TimelineEntry(
            name=TOTAL_TIME_LABEL,
            duration_minutes=seconds_to_minutes(total),
            left_offset_pct=0.0,
            right_offset_pct=0.0,
            is_total=True,
        )
    ]
    for flow in flows:
        end_time = flow.end_time
        if end_time is None or is_filtered_out(flow, min_duration_minutes):
            continue
        entries.append(
            TimelineEntry(
                name=flow.name,
                duration_minutes=seconds_to_minutes(end_time - flow.start_time),
                left_offset_pct=offset_pct(day_start, flow.start_time, total),
                right_offset_pct=offset_pct(end_time, day_end, total),
            )
        )
    return entries


def summarize_day(snapshot: SessionSnapshot) -> DaySummary:
    entries = build_timeline(
        snapshot.day_start_time,
        snapshot.day_end_time,
        snapshot.completed_flows,
        snapshot.min_duration_filter_minutes,
    )
    return DaySummary(
        day_start_time=snapshot.day_start_time,
        day_end_time=snapshot.day_end_time,
        filter_minutes=snapshot.min_duration_filter_minutes,
        entries=entries,
        hidden_count=len(snapshot.completed_flows) - (len(entries) - 1),
    )
