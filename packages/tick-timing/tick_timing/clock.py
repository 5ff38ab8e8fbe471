"""ClockState - current time, previous time and the delta between them."""

from tick_timing.types import TickContext


class ClockState:
    def __init__(self, now: float) -> None:
        self._current = now
        self._previous = now
        self._delta = 0.0
        self._tick_number = 0

    @property
    def current_time(self) -> float:
        return self._current

    @property
    def previous_time(self) -> float:
        return self._previous

    @property
    def delta_time(self) -> float:
        return self._delta

    @property
    def tick_number(self) -> int:
        return self._tick_number

    def update(self, now: float) -> int:
        """Advance to ``now``. A source that steps backwards yields a zero delta."""
        self._previous = self._current
        self._current = now
        self._delta = max(0.0, now - self._previous)
        self._tick_number += 1
        return self._tick_number

    def reset(self, now: float) -> None:
        self._current = now
        self._previous = now
        self._delta = 0.0

    def elapsed_since(self, timestamp: float) -> float:
        return self._current - timestamp

    def context(self) -> TickContext:
        return TickContext(
            tick_number=self._tick_number,
            now=self._current,
            delta_time=self._delta,
            time=self._current / 1000.0,
        )
