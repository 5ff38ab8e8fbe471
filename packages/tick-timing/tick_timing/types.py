"""Shared type aliases, status enum and time helpers for tick-timing."""

from __future__ import annotations

import time as _time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

Callback = Callable[[], None]
Cancel = Callable[[], None]

# Anchors the monotonic clock to the wall clock once, at import.
_EPOCH_OFFSET_MS = _time.time() * 1000.0 - _time.monotonic() * 1000.0


def now_ms() -> float:
    """Milliseconds since the epoch, read from the monotonic clock."""
    return _EPOCH_OFFSET_MS + _time.monotonic() * 1000.0


class ClockStatus(Enum):
    """Lifecycle state of a Scheduler."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    now: float
    delta_time: float
    time: float


TickListener = Callable[[TickContext], None]
