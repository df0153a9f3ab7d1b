"""Domain models for a tracked working day."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

DEFAULT_FILTER_MINUTES = 60


class Phase(str, Enum):
    """Lifecycle of a working day."""

    START = "start"
    PROMPT = "prompt"
    IN_FLOW = "in_flow"
    SUMMARY = "summary"


@dataclass(frozen=True, slots=True)
class FlowInterval:
    """A named, contiguous block of focused work."""

    name: str
    start_time: float
    end_time: Optional[float] = None

    @property
    def in_progress(self) -> bool:
        return self.end_time is None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time


def _new_flow_list() -> list[FlowInterval]:
    return []


@dataclass(slots=True)
class SessionSnapshot:
    """Everything needed to render or resume a working day."""

    day_start_time: float = 0.0
    day_end_time: float = 0.0
    current_flow: Optional[FlowInterval] = None
    completed_flows: list[FlowInterval] = field(default_factory=_new_flow_list)
    pending_task_name: str = ""
    phase: Phase = Phase.START
    min_duration_filter_minutes: int = DEFAULT_FILTER_MINUTES
