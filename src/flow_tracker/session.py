"""The session state machine that drives a working day."""

from __future__ import annotations

import copy
import logging
import threading
from datetime import timedelta
from typing import Callable, Optional

from .aggregation import DaySummary, summarize_day
from .clock import Clock, system_clock
from .config import FlowSettings
from .flows import FlowRecordStore
from .models import FlowInterval, Phase, SessionSnapshot
from .persistence import PersistenceBridge, restore_session
from .scheduling import ImmediateScheduler, TransitionScheduler
from .storage import NullStore

logger = logging.getLogger(__name__)


class SessionStateMachine:
    """Owns one session snapshot and every change made to it.

    Start -> Prompt -> InFlow -> Prompt -> ... -> Summary -> Start.

    Data fields change as soon as a trigger is accepted. The ``phase`` field
    only flips once the transition delay has elapsed, and only if no newer
    transition was requested in the meantime. Triggers that do not apply to
    the current phase are ignored and return ``False``.
    """

    def __init__(
        self,
        snapshot: Optional[SessionSnapshot] = None,
        *,
        bridge: Optional[PersistenceBridge] = None,
        clock: Clock = system_clock,
        scheduler: Optional[TransitionScheduler] = None,
        settings: Optional[FlowSettings] = None,
    ) -> None:
        self.settings = settings or FlowSettings()
        self.bridge = bridge or PersistenceBridge(NullStore(), key=self.settings.storage_key)
        self._clock = clock
        self._scheduler = scheduler or ImmediateScheduler()
        self._lock = threading.RLock()
        self._snapshot = snapshot if snapshot is not None else self._default_snapshot()
        self._flows = FlowRecordStore(self._snapshot, clock)
        self._token = 0
        self._target: Optional[Phase] = None
        self._transition_seconds = 0.0

    # Read side

    @property
    def phase(self) -> Phase:
        return self._snapshot.phase

    @property
    def logical_phase(self) -> Phase:
        """The phase the session is heading to, or the current one when idle."""
        with self._lock:
            return self._target or self._snapshot.phase

    @property
    def in_transition(self) -> bool:
        return self._target is not None

    @property
    def transition_seconds(self) -> float:
        return self._transition_seconds

    @property
    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return copy.deepcopy(self._snapshot)

    @property
    def current_flow(self) -> Optional[FlowInterval]:
        return self._snapshot.current_flow

    def summary(self) -> Optional[DaySummary]:
        with self._lock:
            if self._snapshot.phase is not Phase.SUMMARY:
                return None
            return summarize_day(self._snapshot)

    # Triggers

    def begin_day(self) -> bool:
        with self._lock:
            if not self._accepts("begin", Phase.START):
                return False
            self._snapshot.day_start_time = self._clock()
            self._transition(Phase.PROMPT, self.settings.begin_transition, persist=True)
            return True

    def set_pending_name(self, text: str) -> bool:
        with self._lock:
            if not self._accepts("edit task name", Phase.PROMPT):
                return False
            self._snapshot.pending_task_name = text
            self._save()
            return True

    def submit_task(self, name: Optional[str] = None) -> bool:
        with self._lock:
            if not self._accepts("submit", Phase.PROMPT):
                return False
            task_name = self._snapshot.pending_task_name if name is None else name
            if not self._flows.start_flow(task_name):
                return False
            self._snapshot.pending_task_name = task_name
            self._save()
            self._transition(Phase.IN_FLOW, self.settings.submit_transition, persist=True)
            return True

    def pause_flow(self) -> bool:
        with self._lock:
            if not self._accepts("pause", Phase.IN_FLOW):
                return False
            self._flows.end_flow()
            self._save()
            self._transition(Phase.PROMPT, self.settings.pause_transition, persist=True)
            return True

    def end_day(self) -> bool:
        with self._lock:
            if not self._accepts("end day", Phase.PROMPT, Phase.IN_FLOW):
                return False
            self._flows.end_flow()
            self._snapshot.day_end_time = self._clock()
            self.bridge.clear()
            self._transition(Phase.SUMMARY, self.settings.end_transition, persist=False)
            return True

    def start_over(self) -> bool:
        with self._lock:
            if not self._accepts("start over", Phase.SUMMARY):
                return False
            self._replace_snapshot(self._default_snapshot())
            logger.info("Session reset.")
            return True

    def set_filter_minutes(self, minutes: int) -> None:
        with self._lock:
            self._snapshot.min_duration_filter_minutes = int(minutes)

    def offer_resume(self, confirm: Callable[[str], bool]) -> bool:
        """Replace the session with the stored one if the host confirms."""
        with self._lock:
            restored = restore_session(self.bridge, confirm)
            if restored is None:
                return False
            self._replace_snapshot(_settle_phase(restored))
            return True

    # Internals

    def _default_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(min_duration_filter_minutes=self.settings.default_filter_minutes)

    def _accepts(self, action: str, *phases: Phase) -> bool:
        current = self._target or self._snapshot.phase
        if current in phases:
            return True
        logger.debug("Ignoring %s while in %s.", action, current.value)
        return False

    def _replace_snapshot(self, snapshot: SessionSnapshot) -> None:
        self._token += 1
        self._target = None
        self._transition_seconds = 0.0
        self._snapshot = snapshot
        self._flows = FlowRecordStore(snapshot, self._clock)

    def _transition(self, target: Phase, delay: timedelta, *, persist: bool) -> None:
        self._token += 1
        token = self._token
        self._target = target
        self._transition_seconds = delay.total_seconds()
        logger.debug(
            "Transition %d: %s -> %s in %.2fs.",
            token,
            self._snapshot.phase.value,
            target.value,
            self._transition_seconds,
        )
        self._scheduler.schedule(
            self._transition_seconds, lambda: self._commit(token, target, persist)
        )

    def _commit(self, token: int, target: Phase, persist: bool) -> None:
        with self._lock:
            if token != self._token:
                logger.debug("Transition %d to %s superseded.", token, target.value)
                return
            self._snapshot.phase = target
            self._target = None
            if persist:
                self._save()

    def _save(self) -> None:
        self.bridge.save(self._snapshot)


def _settle_phase(snapshot: SessionSnapshot) -> SessionSnapshot:
    """Align a restored phase with its flow data.

    A save taken during a submit or pause fade still carries the old phase.
    """
    current = snapshot.current_flow
    active = current is not None and bool(current.name)
    if snapshot.phase is Phase.PROMPT and active:
        logger.info("Restored session was starting a flow; resuming in %s.", Phase.IN_FLOW.value)
        snapshot.phase = Phase.IN_FLOW
    elif snapshot.phase is Phase.IN_FLOW and not active:
        logger.info("Restored session had no active flow; resuming in %s.", Phase.PROMPT.value)
        snapshot.phase = Phase.PROMPT
    return snapshot
