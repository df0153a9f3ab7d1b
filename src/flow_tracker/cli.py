"""Command-line interface for the flow tracker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .config import FlowSettings
from .models import Phase
from .paths import get_state_path
from .persistence import PersistenceBridge
from .reporting import SummaryPrinter
from .server_runner import serve_api
from .session import SessionStateMachine
from .storage import KeyValueStore, NullStore, SqliteStore

app = typer.Typer(help="Track your working day as named flows.")

END_DAY_COMMAND = ":end"


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _open_bridge(state_path: Optional[Path], persist: bool = True) -> PersistenceBridge:
    store: KeyValueStore = SqliteStore(state_path or get_state_path()) if persist else NullStore()
    return PersistenceBridge(store)


@app.command()
def run(
    state_path: Optional[Path] = typer.Option(
        None,
        "--state",
        path_type=Path,
        help="Location of the session SQLite database.",
    ),
    filter_minutes: int = typer.Option(
        60,
        "--filter",
        min=0,
        max=120,
        help="Hide flows shorter than this many minutes in the summary.",
    ),
    persist: bool = typer.Option(
        True,
        "--persist/--no-persist",
        help="Save progress so an interrupted day can be resumed.",
    ),
) -> None:
    """Track a working day interactively in the terminal."""
    settings = FlowSettings.from_milliseconds(0, filter_minutes=filter_minutes)
    machine = SessionStateMachine(
        bridge=_open_bridge(state_path, persist), settings=settings
    )
    machine.offer_resume(lambda question: typer.confirm(question, default=False))
    printer = SummaryPrinter(echo=typer.echo)

    while True:
        phase = machine.phase
        if phase is Phase.START:
            typer.confirm("Start flowing?", default=True, abort=True)
            machine.begin_day()
        elif phase is Phase.PROMPT:
            name = typer.prompt(
                f"What are you flowing on? ({END_DAY_COMMAND} to end the day)",
                default=machine.snapshot.pending_task_name,
                show_default=bool(machine.snapshot.pending_task_name),
            ).strip()
            if name == END_DAY_COMMAND:
                machine.end_day()
            else:
                machine.submit_task(name)
        elif phase is Phase.IN_FLOW:
            current = machine.current_flow
            action = typer.prompt(
                f"You are flowing on {current.name if current else ''}. [p]ause or [e]nd the day",
                default="p",
            ).strip().lower()
            if action.startswith("e"):
                machine.end_day()
            elif action.startswith("p"):
                machine.pause_flow()
        else:
            summary = machine.summary()
            if summary is not None:
                printer.print_day_summary(summary)
            if not typer.confirm("Start over?", default=False):
                return
            machine.start_over()


@app.command()
def status(
    state_path: Optional[Path] = typer.Option(
        None,
        "--state",
        path_type=Path,
        help="Location of the session SQLite database.",
    ),
) -> None:
    """Print the saved, unfinished session if there is one."""
    bridge = _open_bridge(state_path)
    SummaryPrinter(echo=typer.echo).print_session_status(bridge.load())


@app.command()
def clear(
    state_path: Optional[Path] = typer.Option(
        None,
        "--state",
        path_type=Path,
        help="Location of the session SQLite database.",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Discard the saved session."""
    bridge = _open_bridge(state_path)
    if not bridge.has_saved_session():
        typer.echo("No saved flow session.")
        return
    if not yes:
        typer.confirm("Discard the saved flow session?", abort=True)
    bridge.clear()
    typer.echo("Saved flow session discarded.")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the API."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the API."
    ),
    state_path: Optional[Path] = typer.Option(
        None, "--state", path_type=Path, help="Location of the session SQLite database."
    ),
    transition_ms: float = typer.Option(
        500.0,
        "--transition-ms",
        min=0.0,
        help="Delay before a phase change takes effect, in milliseconds.",
    ),
    filter_minutes: int = typer.Option(
        60,
        "--filter",
        min=0,
        max=120,
        help="Initial summary filter in minutes.",
    ),
) -> None:
    """Serve the flow session over a local HTTP API."""
    settings = FlowSettings.from_milliseconds(transition_ms, filter_minutes=filter_minutes)
    serve_api(
        host=host,
        port=port,
        state_path=state_path or get_state_path(),
        settings=settings,
        log_level="debug" if logging.getLogger().isEnabledFor(logging.DEBUG) else "info",
    )
