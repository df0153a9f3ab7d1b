"""Wall-clock access for the session core."""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], float]


def system_clock() -> float:
    """Return seconds since the epoch as a float."""
    return time.time()
