"""Console rendering for sessions and day summaries."""

from __future__ import annotations

from typing import Callable, Optional

from .aggregation import DaySummary
from .clock import system_clock
from .formatting import (
    display_time_spent,
    display_timestamp,
    format_entry_label,
    seconds_to_minutes,
)
from .models import SessionSnapshot

BAR_WIDTH = 40


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, echo: Callable[[str], None] = print, width: int = BAR_WIDTH) -> None:
        self._echo = echo
        self.width = width

    def print_day_summary(self, summary: DaySummary) -> None:
        self._echo("Flow Summary")
        self._echo("-" * self.width)
        self._echo(f"{summary.day_start_label} - {summary.day_end_label}")
        self._echo(f"Filtering flow shorter than {summary.filter_minutes} minutes")
        self._echo("")
        for entry in summary.entries:
            self._echo(format_entry_label(entry))
            self._echo(
                render_bar(entry.left_offset_pct, entry.right_offset_pct, self.width, entry.is_total)
            )
        if summary.hidden_count:
            self._echo("")
            self._echo(f"({summary.hidden_count} shorter flows hidden)")

    def print_session_status(
        self, snapshot: Optional[SessionSnapshot], now: Optional[float] = None
    ) -> None:
        if snapshot is None:
            self._echo("No saved flow session.")
            return
        now = now if now is not None else system_clock()
        self._echo(f"Phase: {snapshot.phase.value}")
        if snapshot.day_start_time:
            self._echo(f"Day started at {display_timestamp(snapshot.day_start_time)}")
        current = snapshot.current_flow
        if current is not None and current.name:
            elapsed = seconds_to_minutes(now - current.start_time)
            self._echo(f"Flowing on {current.name} for {display_time_spent(elapsed)}")
        self._echo(f"Completed flows: {len(snapshot.completed_flows)}")
        for flow in snapshot.completed_flows:
            minutes = seconds_to_minutes(flow.duration_seconds or 0.0)
            self._echo(f"  {flow.name:<30} {display_time_spent(minutes)}")


def render_bar(left_pct: float, right_pct: float, width: int, is_total: bool = False) -> str:
    """Draw a segment placed by its margins on a fixed-width text axis."""
    left = _clamp(round(left_pct / 100 * width), 0, width)
    right = _clamp(round(right_pct / 100 * width), 0, width - left)
    fill = "=" if is_total else "#"
    return " " * left + fill * (width - left - right) + " " * right


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
