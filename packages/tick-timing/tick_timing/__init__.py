"""tick-timing - One shared clock driving scheduled, interval and timeout callbacks."""

from tick_timing.clock import ClockState
from tick_timing.registry import IntervalEntry, TimerEntry, TimerRegistry
from tick_timing.scheduler import Scheduler
from tick_timing.scope import current_clock, optional_clock, shared_clock
from tick_timing.source import (
    FrameSignal,
    FrameTickSource,
    IntervalTickSource,
    LoopFrameSignal,
    ManualTickSource,
    TickSource,
    make_tick_source,
)
from tick_timing.types import Cancel, ClockStatus, TickContext, now_ms

__all__ = [
    "Scheduler",
    "ClockState",
    "ClockStatus",
    "TickContext",
    "Cancel",
    "now_ms",
    "TimerRegistry",
    "TimerEntry",
    "IntervalEntry",
    "TickSource",
    "ManualTickSource",
    "IntervalTickSource",
    "FrameSignal",
    "LoopFrameSignal",
    "FrameTickSource",
    "make_tick_source",
    "shared_clock",
    "current_clock",
    "optional_clock",
]
