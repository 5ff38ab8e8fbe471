"""Scheduler - shared clock, lifecycle and timer fan-out."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from tick_timing.clock import ClockState
from tick_timing.registry import TimerRegistry, log_callback_error
from tick_timing.source import FrameSignal, TickSource, make_tick_source
from tick_timing.types import Callback, Cancel, ClockStatus, TickListener, now_ms

logger = logging.getLogger(__name__)


class Scheduler:
    """One clock that many consumers share.

    Each tick updates the clock, fires due scheduled, interval and timeout
    callbacks (in that order), then notifies tick listeners. Times are in
    milliseconds.

    Args:
        auto_start: Start running immediately.
        target_fps: Target tick rate used when building the default source.
        use_frame_sync: Prefer a frame-paced source over a fixed interval timer.
        time_fn: Millisecond clock; defaults to ``now_ms``.
        tick_source: Explicit tick source. Overrides ``target_fps``,
            ``use_frame_sync``, ``frame_signal`` and ``loop``.
        frame_signal: Frame host for the frame-paced source.
        loop: Event loop for the default sources.
    """

    def __init__(
        self,
        auto_start: bool = True,
        target_fps: float = 60,
        use_frame_sync: bool = True,
        *,
        time_fn: Callable[[], float] = now_ms,
        tick_source: TickSource | None = None,
        frame_signal: FrameSignal | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if target_fps <= 0:
            raise ValueError("target_fps must be positive")
        if tick_source is None:
            tick_source = make_tick_source(target_fps, use_frame_sync, frame_signal, loop)
        self._time_fn = time_fn
        self._source = tick_source
        self._clock = ClockState(time_fn())
        self._registry = TimerRegistry()
        self._listeners: dict[int, TickListener] = {}
        self._next_listener = 0
        self._status = ClockStatus.STOPPED

        if auto_start:
            self.start()

    def __enter__(self) -> Scheduler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # --- read accessors ---

    @property
    def now(self) -> float:
        return self._clock.current_time

    @property
    def time(self) -> float:
        return self._clock.current_time / 1000.0

    @property
    def delta_time(self) -> float:
        return self._clock.delta_time

    @property
    def is_running(self) -> bool:
        return self._status is ClockStatus.RUNNING

    @property
    def status(self) -> ClockStatus:
        return self._status

    @property
    def tick_number(self) -> int:
        return self._clock.tick_number

    @property
    def clock(self) -> ClockState:
        return self._clock

    @property
    def registry(self) -> TimerRegistry:
        return self._registry

    @property
    def tick_source(self) -> TickSource:
        return self._source

    # --- lifecycle ---

    def start(self) -> None:
        if self._status is ClockStatus.RUNNING:
            # Lets a source that could not arm earlier try again.
            self._source.start(self._tick)
            return
        self._clock.reset(self._time_fn())
        self._source.start(self._tick)
        logger.debug("clock %s -> running", self._status.value)
        self._status = ClockStatus.RUNNING

    def stop(self) -> None:
        if self._status is not ClockStatus.STOPPED:
            logger.debug("clock %s -> stopped", self._status.value)
        self._status = ClockStatus.STOPPED
        self._source.stop()
        self._registry.clear()
        self._listeners = {}

    def pause(self) -> None:
        if self._status is not ClockStatus.RUNNING:
            return
        logger.debug("clock running -> paused")
        self._status = ClockStatus.PAUSED
        self._source.stop()

    def resume(self) -> None:
        if self._status is ClockStatus.PAUSED:
            self.start()

    # --- time queries ---

    def get_elapsed_time(self, since: float) -> float:
        return self._clock.elapsed_since(since)

    # --- registration ---

    def schedule(self, callback: Callback, delay_ms: float) -> Cancel:
        now = self._time_fn()
        cancel = self._registry.register_scheduled(callback, now + delay_ms, now)
        self._wake_source()
        return cancel

    def create_interval(self, callback: Callback, period_ms: float) -> Cancel:
        cancel = self._registry.register_interval(callback, period_ms, self._time_fn())
        self._wake_source()
        return cancel

    def create_timeout(self, callback: Callback, delay_ms: float) -> Cancel:
        cancel = self._registry.register_timeout(callback, delay_ms, self._time_fn())
        self._wake_source()
        return cancel

    def on_tick(self, listener: TickListener) -> Cancel:
        self._next_listener += 1
        key = self._next_listener
        listeners = self._listeners
        listeners[key] = listener
        self._wake_source()

        def unsubscribe() -> None:
            listeners.pop(key, None)

        return unsubscribe

    # --- tick ---

    def _wake_source(self) -> None:
        # A scheduler built outside an event loop arms its timer here, once
        # the first consumer registers from inside one.
        if self._status is ClockStatus.RUNNING:
            self._source.start(self._tick)

    def _tick(self) -> None:
        # A tick already dispatched by the host before stop()/pause().
        if self._status is not ClockStatus.RUNNING:
            return
        self._clock.update(self._time_fn())
        self._registry.evaluate(self._clock.current_time)
        if self._status is not ClockStatus.RUNNING or not self._listeners:
            return
        ctx = self._clock.context()
        for listener in list(self._listeners.values()):
            try:
                listener(ctx)
            except Exception as exc:
                log_callback_error(exc, listener)
