"""Delayed callbacks used to commit phase transitions."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TransitionScheduler(Protocol):
    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> None: ...


class ImmediateScheduler:
    """Runs every callback inline, ignoring the delay."""

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        callback()


class ThreadTimerScheduler:
    """Fires callbacks from daemon ``threading.Timer`` threads."""

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        if delay_seconds <= 0:
            callback()
            return
        timer = threading.Timer(delay_seconds, self._run, args=(callback,))
        timer.daemon = True
        timer.start()

    @staticmethod
    def _run(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:  # pragma: no cover - log path
            logger.exception("Scheduled transition failed.")
