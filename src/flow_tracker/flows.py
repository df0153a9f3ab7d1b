"""The in-progress flow and the list of completed ones."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from .clock import Clock, system_clock
from .models import FlowInterval, SessionSnapshot

logger = logging.getLogger(__name__)


class FlowRecordStore:
    """Mutates the flow fields of a snapshot it does not own.

    ``completed_flows`` is append-only and kept in completion order, which is
    also the order the summary displays.
    """

    def __init__(self, snapshot: SessionSnapshot, clock: Clock = system_clock) -> None:
        self.snapshot = snapshot
        self._clock = clock

    @property
    def current_flow(self) -> Optional[FlowInterval]:
        return self.snapshot.current_flow

    @property
    def completed_flows(self) -> list[FlowInterval]:
        return self.snapshot.completed_flows

    def has_active_flow(self) -> bool:
        current = self.snapshot.current_flow
        return bool(current and current.name)

    def start_flow(self, name: str) -> bool:
        if not name:
            return False
        if self.has_active_flow():
            logger.debug("Ignoring start of %r; a flow is already active.", name)
            return False
        self.snapshot.current_flow = FlowInterval(name=name, start_time=self._clock())
        return True

    def end_flow(self) -> Optional[FlowInterval]:
        current = self.snapshot.current_flow
        if current is None or not current.name:
            return None
        finished = replace(current, end_time=self._clock())
        self.snapshot.completed_flows.append(finished)
        self.snapshot.current_flow = None
        logger.debug(
            "Flow %r ended after %.0f seconds.", finished.name, finished.duration_seconds
        )
        return finished

    def reset(self) -> None:
        self.snapshot.current_flow = None
        self.snapshot.completed_flows.clear()
