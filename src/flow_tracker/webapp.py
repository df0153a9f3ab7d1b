"""FastAPI application that exposes the flow session as a local JSON API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .aggregation import DaySummary
from .clock import Clock, system_clock
from .config import FlowSettings
from .formatting import format_entry_label
from .models import Phase
from .paths import get_state_path
from .persistence import RESUME_QUESTION, PersistenceBridge, SnapshotRecord
from .scheduling import ThreadTimerScheduler, TransitionScheduler
from .session import SessionStateMachine
from .storage import KeyValueStore, SqliteStore

logger = logging.getLogger(__name__)

MAX_FILTER_MINUTES = 120


class ResumeAnswer(BaseModel):
    accept: bool

    model_config = ConfigDict(extra="forbid")


class TaskNamePayload(BaseModel):
    name: str

    model_config = ConfigDict(extra="forbid")


class SubmitPayload(BaseModel):
    name: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class FilterPayload(BaseModel):
    minutes: int = Field(ge=0, le=MAX_FILTER_MINUTES)

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    state_path: Optional[Path] = None,
    store: Optional[KeyValueStore] = None,
    settings: Optional[FlowSettings] = None,
    scheduler: Optional[TransitionScheduler] = None,
    clock: Clock = system_clock,
) -> FastAPI:
    """Instantiate the FastAPI application around a fresh session."""
    resolved_settings = settings or FlowSettings()
    resolved_store = store if store is not None else SqliteStore(state_path or get_state_path())
    bridge = PersistenceBridge(resolved_store, key=resolved_settings.storage_key)
    machine = SessionStateMachine(
        bridge=bridge,
        clock=clock,
        scheduler=scheduler or ThreadTimerScheduler(),
        settings=resolved_settings,
    )

    app = FastAPI(title="Flow Tracker", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.machine = machine
    app.state.resume_pending = bridge.has_saved_session()

    @app.on_event("startup")
    async def _startup() -> None:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
        if app.state.resume_pending:
            logger.info("A saved flow session is waiting to be resumed.")

    @app.get("/api/session")
    def session(request: Request) -> Dict[str, Any]:
        return _session_payload(request)

    @app.post("/api/resume")
    def resume(payload: ResumeAnswer, request: Request) -> Dict[str, Any]:
        if not request.app.state.resume_pending:
            raise HTTPException(status_code=409, detail="No saved session to resume")
        request.app.state.resume_pending = False
        _machine(request).offer_resume(lambda _question: payload.accept)
        return _session_payload(request)

    @app.post("/api/begin")
    def begin(request: Request) -> Dict[str, Any]:
        _require(_ready_machine(request).begin_day(), "The day has already begun")
        return _session_payload(request)

    @app.put("/api/pending-name")
    def pending_name(payload: TaskNamePayload, request: Request) -> Dict[str, Any]:
        _require(
            _ready_machine(request).set_pending_name(payload.name),
            "Task names can only be edited while choosing a task",
        )
        return _session_payload(request)

    @app.post("/api/flows")
    def submit_flow(payload: SubmitPayload, request: Request) -> Dict[str, Any]:
        machine = _ready_machine(request)
        _require(
            machine.logical_phase is Phase.PROMPT,
            "Tasks can only be submitted while choosing a task",
        )
        machine.submit_task(payload.name)
        return _session_payload(request)

    @app.post("/api/pause")
    def pause(request: Request) -> Dict[str, Any]:
        _require(_ready_machine(request).pause_flow(), "No flow is in progress")
        return _session_payload(request)

    @app.post("/api/end-day")
    def end_day(request: Request) -> Dict[str, Any]:
        _require(_ready_machine(request).end_day(), "The day is not in progress")
        return _session_payload(request)

    @app.post("/api/start-over")
    def start_over(request: Request) -> Dict[str, Any]:
        _require(_ready_machine(request).start_over(), "The day has not ended yet")
        return _session_payload(request)

    @app.put("/api/filter")
    def update_filter(payload: FilterPayload, request: Request) -> Dict[str, Any]:
        _machine(request).set_filter_minutes(payload.minutes)
        return _session_payload(request)

    @app.get("/api/summary")
    def summary(request: Request) -> Dict[str, Any]:
        day = _machine(request).summary()
        if day is None:
            raise HTTPException(status_code=409, detail="The day has not ended yet")
        return _summary_payload(day)

    return app


def _machine(request: Request) -> SessionStateMachine:
    return request.app.state.machine


def _ready_machine(request: Request) -> SessionStateMachine:
    if request.app.state.resume_pending:
        raise HTTPException(status_code=409, detail="Answer the resume question first")
    return _machine(request)


def _require(accepted: bool, detail: str) -> None:
    if not accepted:
        raise HTTPException(status_code=409, detail=detail)


def _session_payload(request: Request) -> Dict[str, Any]:
    machine = _machine(request)
    snapshot = machine.snapshot
    return {
        "phase": snapshot.phase.value,
        "in_transition": machine.in_transition,
        "transition_seconds": machine.transition_seconds,
        "snapshot": SnapshotRecord.from_snapshot(snapshot).model_dump(mode="json"),
        "resume_prompt": RESUME_QUESTION if request.app.state.resume_pending else None,
    }


def _summary_payload(day: DaySummary) -> Dict[str, Any]:
    return {
        "day_start": day.day_start_label,
        "day_end": day.day_end_label,
        "total_seconds": day.total_seconds,
        "filter_minutes": day.filter_minutes,
        "hidden_count": day.hidden_count,
        "entries": [
            {
                "name": entry.name,
                "label": format_entry_label(entry),
                "duration_minutes": entry.duration_minutes,
                "left_offset_pct": entry.left_offset_pct,
                "right_offset_pct": entry.right_offset_pct,
                "is_total": entry.is_total,
            }
            for entry in day.entries
        ],
    }
