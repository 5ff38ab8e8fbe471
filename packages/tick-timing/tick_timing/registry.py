"""TimerRegistry - keyed tables of one-shot and repeating callbacks."""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable

from tick_timing.types import Callback, Cancel

logger = logging.getLogger(__name__)

ErrorReporter = Callable[[BaseException, Callable[..., None]], None]


@dataclass(frozen=True, slots=True)
class TimerEntry:
    """One-shot entry. Fires once ``fire_at`` is reached, then is removed."""

    id: int
    callback: Callback
    fire_at: float


@dataclass(slots=True)
class IntervalEntry:
    """Repeating entry. Fires when ``period`` has passed since ``last_fired``."""

    id: int
    callback: Callback
    period: float
    last_fired: float


def log_callback_error(exc: BaseException, callback: Callable[..., None]) -> None:
    logger.error("callback %r raised", callback, exc_info=exc)


class TimerRegistry:
    """Scheduled, interval and timeout tables sharing one id counter.

    ``evaluate`` walks snapshots of all three tables taken before the pass
    starts, so a callback that registers or cancels entries in any table only
    affects the next pass. A failing callback is handed to ``on_error`` and
    the pass carries on with the next entry.
    """

    def __init__(self, on_error: ErrorReporter | None = None) -> None:
        self._scheduled: dict[int, TimerEntry] = {}
        self._intervals: dict[int, IntervalEntry] = {}
        self._timeouts: dict[int, TimerEntry] = {}
        self._ids = itertools.count(1)
        self._generation = 0
        self._on_error = on_error if on_error is not None else log_callback_error

    def __len__(self) -> int:
        return len(self._scheduled) + len(self._intervals) + len(self._timeouts)

    def counts(self) -> dict[str, int]:
        return {
            "scheduled": len(self._scheduled),
            "interval": len(self._intervals),
            "timeout": len(self._timeouts),
        }

    def register_scheduled(self, callback: Callback, fire_at: float, now: float) -> Cancel:
        if fire_at < now:
            raise ValueError(f"fire_at {fire_at!r} is earlier than now {now!r}")
        entry = TimerEntry(next(self._ids), callback, fire_at)
        self._scheduled[entry.id] = entry
        return _canceller(self._scheduled, entry.id)

    def register_interval(self, callback: Callback, period: float, now: float) -> Cancel:
        if period <= 0:
            raise ValueError(f"interval period must be positive, got {period!r}")
        entry = IntervalEntry(next(self._ids), callback, period, now)
        self._intervals[entry.id] = entry
        return _canceller(self._intervals, entry.id)

    def register_timeout(self, callback: Callback, delay: float, now: float) -> Cancel:
        if delay < 0:
            raise ValueError(f"timeout delay must not be negative, got {delay!r}")
        entry = TimerEntry(next(self._ids), callback, now + delay)
        self._timeouts[entry.id] = entry
        return _canceller(self._timeouts, entry.id)

    def clear(self) -> None:
        # Replace the tables so outstanding cancel handles point at dead dicts.
        self._scheduled = {}
        self._intervals = {}
        self._timeouts = {}
        self._generation += 1

    def evaluate(self, now: float) -> int:
        """Fire everything due at ``now``. Returns the number of callbacks run.

        All three tables are copied before the first callback runs.
        """
        generation = self._generation
        scheduled, timeouts = self._scheduled, self._timeouts
        scheduled_due = list(scheduled.values())
        intervals_due = list(self._intervals.values())
        timeouts_due = list(timeouts.values())

        fired = self._fire_due(scheduled, scheduled_due, now, generation)
        fired += self._fire_intervals(intervals_due, now, generation)
        fired += self._fire_due(timeouts, timeouts_due, now, generation)
        return fired

    def _fire_due(
        self,
        table: dict[int, TimerEntry],
        entries: list[TimerEntry],
        now: float,
        generation: int,
    ) -> int:
        fired = 0
        for entry in entries:
            if generation != self._generation:
                break
            if entry.fire_at > now:
                continue
            try:
                self._invoke(entry.callback)
            finally:
                table.pop(entry.id, None)
            fired += 1
        return fired

    def _fire_intervals(self, entries: list[IntervalEntry], now: float, generation: int) -> int:
        fired = 0
        for entry in entries:
            if generation != self._generation:
                break
            if now - entry.last_fired < entry.period:
                continue
            self._invoke(entry.callback)
            entry.last_fired = now
            fired += 1
        return fired

    def _invoke(self, callback: Callback) -> None:
        try:
            callback()
        except Exception as exc:
            self._on_error(exc, callback)


def _canceller(table: dict[int, TimerEntry] | dict[int, IntervalEntry], entry_id: int) -> Cancel:
    def cancel() -> None:
        table.pop(entry_id, None)

    return cancel
