"""Save and restore a whole session snapshot through a durable store."""

from __future__ import annotations

import json
import logging
from typing import Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from .models import DEFAULT_FILTER_MINUTES, FlowInterval, Phase, SessionSnapshot
from .storage import KeyValueStore, StorageUnavailableError

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
DEFAULT_STORAGE_KEY = "state"
RESUME_QUESTION = "We found data from a previous flow session. Do you want to load it?"


class FlowRecord(BaseModel):
    name: str
    start_time: float
    end_time: Optional[float] = None

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_interval(cls, flow: FlowInterval) -> "FlowRecord":
        return cls(name=flow.name, start_time=flow.start_time, end_time=flow.end_time)

    def to_interval(self) -> FlowInterval:
        return FlowInterval(
            name=self.name, start_time=self.start_time, end_time=self.end_time
        )


class CompletedFlowRecord(FlowRecord):
    end_time: float


class SnapshotRecord(BaseModel):
    day_start_time: float = 0.0
    day_end_time: float = 0.0
    current_flow: Optional[FlowRecord] = None
    completed_flows: list[CompletedFlowRecord] = []
    pending_task_name: str = ""
    phase: Phase = Phase.START
    min_duration_filter_minutes: int = DEFAULT_FILTER_MINUTES

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> "SnapshotRecord":
        return cls(
            day_start_time=snapshot.day_start_time,
            day_end_time=snapshot.day_end_time,
            current_flow=(
                FlowRecord.from_interval(snapshot.current_flow)
                if snapshot.current_flow is not None
                else None
            ),
            completed_flows=[
                CompletedFlowRecord.from_interval(flow)
                for flow in snapshot.completed_flows
            ],
            pending_task_name=snapshot.pending_task_name,
            phase=snapshot.phase,
            min_duration_filter_minutes=snapshot.min_duration_filter_minutes,
        )

    def to_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            day_start_time=self.day_start_time,
            day_end_time=self.day_end_time,
            current_flow=self.current_flow.to_interval() if self.current_flow else None,
            completed_flows=[record.to_interval() for record in self.completed_flows],
            pending_task_name=self.pending_task_name,
            phase=self.phase,
            min_duration_filter_minutes=self.min_duration_filter_minutes,
        )


class PersistedSession(BaseModel):
    """The versioned envelope written to storage."""

    version: Literal[1]
    state: SnapshotRecord

    model_config = ConfigDict(extra="forbid")


class UnsupportedFormatError(ValueError):
    pass


def encode_snapshot(snapshot: SessionSnapshot) -> str:
    document = PersistedSession(
        version=FORMAT_VERSION, state=SnapshotRecord.from_snapshot(snapshot)
    )
    return document.model_dump_json()


def decode_snapshot(payload: str) -> SessionSnapshot:
    """Parse a stored payload.

    Raises ``UnsupportedFormatError`` for a well-formed blob written in some
    other format version, and ``pydantic.ValidationError`` for anything else
    that does not parse.
    """
    version = _peek_version(payload)
    if version is not None and version != FORMAT_VERSION:
        raise UnsupportedFormatError(f"Unsupported session format version {version!r}")
    document = PersistedSession.model_validate_json(payload)
    return document.state.to_snapshot()


def _peek_version(payload: str) -> object:
    try:
        raw = json.loads(payload)
    except ValueError:
        return None
    return raw.get("version") if isinstance(raw, dict) else None


class PersistenceBridge:
    """Fire-and-forget snapshot persistence.

    Every failure degrades to "nothing stored": callers never see an
    exception from ``save``, ``load`` or ``clear``.
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.store = store
        self.key = key

    def save(self, snapshot: SessionSnapshot) -> None:
        payload = encode_snapshot(snapshot)
        try:
            self.store.set(self.key, payload)
        except StorageUnavailableError:
            logger.warning("Could not save session state.", exc_info=True)

    def load(self) -> Optional[SessionSnapshot]:
        try:
            payload = self.store.get(self.key)
        except StorageUnavailableError:
            logger.warning("Could not read saved session state.", exc_info=True)
            return None
        if not payload:
            return None
        try:
            return decode_snapshot(payload)
        except UnsupportedFormatError as exc:
            logger.warning("Ignoring saved session: %s.", exc)
            return None
        except ValidationError as exc:
            logger.warning(
                "Ignoring unreadable saved session (%d errors).", exc.error_count()
            )
            return None

    def clear(self) -> None:
        try:
            self.store.remove(self.key)
        except StorageUnavailableError:
            logger.warning("Could not clear saved session state.", exc_info=True)

    def has_saved_session(self) -> bool:
        return self.load() is not None


def restore_session(
    bridge: PersistenceBridge, confirm: Callable[[str], bool]
) -> Optional[SessionSnapshot]:
    """Ask the host whether to resume a stored session.

    Returns the stored snapshot when the host agrees. Declining leaves the
    stored copy in place.
    """
    stored = bridge.load()
    if stored is None:
        return None
    if not confirm(RESUME_QUESTION):
        logger.info("Saved session left in place; starting fresh.")
        return None
    logger.info("Resuming saved session in phase %s.", stored.phase.value)
    return stored
