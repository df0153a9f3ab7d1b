"""Configuration models and helpers for the flow tracker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .models import DEFAULT_FILTER_MINUTES


@dataclass(slots=True)
class FlowSettings:
    """Runtime configuration for a session host."""

    begin_transition: timedelta = timedelta(milliseconds=500)
    submit_transition: timedelta = timedelta(milliseconds=500)
    pause_transition: timedelta = timedelta(0)
    end_transition: timedelta = timedelta(milliseconds=500)
    default_filter_minutes: int = DEFAULT_FILTER_MINUTES
    storage_key: str = "state"

    @classmethod
    def from_milliseconds(
        cls,
        transition_ms: float,
        pause_ms: float | None = None,
        filter_minutes: int | None = None,
    ) -> "FlowSettings":
        fade = timedelta(milliseconds=transition_ms)
        pause = timedelta(milliseconds=pause_ms) if pause_ms is not None else timedelta(0)
        return cls(
            begin_transition=fade,
            submit_transition=fade,
            pause_transition=pause,
            end_transition=fade,
            default_filter_minutes=(
                filter_minutes if filter_minutes is not None else DEFAULT_FILTER_MINUTES
            ),
        )
