"""Serve one flow session over HTTP with uvicorn."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI

from .config import FlowSettings
from .paths import get_state_path
from .webapp import create_app

logger = logging.getLogger(__name__)


def build_server_app(
    state_path: Optional[Path] = None, settings: Optional[FlowSettings] = None
) -> FastAPI:
    resolved_path = Path(state_path or get_state_path())
    app = create_app(state_path=resolved_path, settings=settings or FlowSettings())
    logger.info("Session state stored in %s", resolved_path)
    if app.state.resume_pending:
        logger.info(
            "A saved session is waiting; answer it with POST /api/resume before other actions."
        )
    return app


def serve_api(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    state_path: Optional[Path] = None,
    settings: Optional[FlowSettings] = None,
    log_level: str = "info",
) -> None:
    """Block serving the session API until interrupted."""
    app = build_server_app(state_path, settings)
    logger.info("Flow session API at http://%s:%d/api/session", host, port)
    uvicorn.run(app, host=host, port=port, log_level=log_level)
