"""Tick sources - best-effort periodic signals that drive a Scheduler."""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Callable, Hashable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

TickHandler = Callable[[], None]

# Frame requests made this close before a boundary belong to that boundary.
_FRAME_EPSILON = 1e-6


@runtime_checkable
class TickSource(Protocol):
    """Calls a handler repeatedly until stopped.

    A handler call always returns before the next one is armed, and no call
    is delivered after ``stop()`` returns. Calling ``start`` again while
    running keeps the first handler.
    """

    @property
    def running(self) -> bool: ...

    def start(self, handler: TickHandler) -> None: ...

    def stop(self) -> None: ...


class ManualTickSource:
    """Tick source with no host: ticks are delivered by calling ``fire``."""

    def __init__(self) -> None:
        self._handler: TickHandler | None = None

    @property
    def running(self) -> bool:
        return self._handler is not None

    def start(self, handler: TickHandler) -> None:
        self._handler = handler

    def stop(self) -> None:
        self._handler = None

    def fire(self, n: int = 1) -> int:
        """Deliver up to ``n`` ticks, fewer if stopped along the way."""
        delivered = 0
        for _ in range(n):
            handler = self._handler
            if handler is None:
                break
            handler()
            delivered += 1
        return delivered


class IntervalTickSource:
    """Fixed-period repeating timer on an asyncio event loop.

    Deadlines advance one period per tick. When the loop falls behind by more
    than a period the schedule restarts from the loop's current time instead
    of replaying the missed ticks.
    """

    def __init__(self, period: float, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if period <= 0:
            raise ValueError("period must be positive")
        self._period = period
        self._loop = loop
        self._active_loop: asyncio.AbstractEventLoop | None = None
        self._handler: TickHandler | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._deadline = 0.0
        self._in_tick = False

    @property
    def period(self) -> float:
        return self._period

    @property
    def running(self) -> bool:
        return self._handler is not None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def start(self, handler: TickHandler) -> None:
        """Run ``handler`` once per period.

        Without an explicit loop the timer arms on the running loop. Outside
        one the source is left running but unarmed, and a later ``start``
        from inside a loop arms it.
        """
        if self._handler is None:
            self._handler = handler
        active = self._active_loop
        if self._handle is not None and active is not None and active.is_closed():
            self._handle = None
        if self._handle is None and not self._in_tick:
            self._arm()

    def _arm(self) -> None:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.debug("no running event loop, interval timer left unarmed")
                return
        self._active_loop = loop
        self._deadline = loop.time() + self._period
        self._handle = loop.call_at(self._deadline, self._run)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._handler = None

    def _run(self) -> None:
        self._handle = None
        handler = self._handler
        if handler is None:
            return
        self._in_tick = True
        try:
            handler()
        finally:
            self._in_tick = False
        # Stopped, or stopped and restarted, from inside the handler.
        if self._handler is None or self._handle is not None:
            return
        loop = self._active_loop
        now = loop.time()
        self._deadline += self._period
        if self._deadline < now - self._period:
            self._deadline = now
        self._handle = loop.call_at(self._deadline, self._run)


class FrameSignal(Protocol):
    """Frame-paced callback host, shaped like requestAnimationFrame."""

    def request(self, callback: TickHandler) -> Hashable: ...

    def cancel(self, handle: Any) -> None: ...


class LoopFrameSignal:
    """Frames at fixed boundaries of an event loop's clock.

    Boundaries sit at whole multiples of the frame period, so every consumer
    requesting frames from the same loop is woken in phase.
    """

    def __init__(self, rate: float, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        self._frame = 1.0 / rate
        self._loop = loop

    @property
    def frame_period(self) -> float:
        return self._frame

    def next_boundary(self, now: float) -> float:
        return (math.floor((now + _FRAME_EPSILON) / self._frame) + 1) * self._frame

    def request(self, callback: TickHandler) -> asyncio.TimerHandle:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return loop.call_at(self.next_boundary(loop.time()), callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class FrameTickSource:
    """Drives a handler from a FrameSignal, one frame request at a time."""

    def __init__(self, signal: FrameSignal) -> None:
        self._signal = signal
        self._handler: TickHandler | None = None
        self._handle: Any = None

    @property
    def signal(self) -> FrameSignal:
        return self._signal

    @property
    def running(self) -> bool:
        return self._handler is not None

    def start(self, handler: TickHandler) -> None:
        if self._handler is not None:
            return
        self._handler = handler
        self._handle = self._signal.request(self._frame)

    def stop(self) -> None:
        if self._handle is not None:
            self._signal.cancel(self._handle)
            self._handle = None
        self._handler = None

    def _frame(self) -> None:
        self._handle = None
        handler = self._handler
        if handler is None:
            return
        handler()
        if self._handler is None or self._handle is not None:
            return
        self._handle = self._signal.request(self._frame)


def _running_loop_signal(rate: float) -> LoopFrameSignal | None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return None
    return LoopFrameSignal(rate, loop)


def make_tick_source(
    target_rate: float = 60,
    use_frame_sync: bool = True,
    frame_signal: FrameSignal | None = None,
    loop: asyncio.AbstractEventLoop | None = None,
) -> TickSource:
    """Pick a frame-paced source when one is available, else an interval timer."""
    if target_rate <= 0:
        raise ValueError("target_rate must be positive")
    if use_frame_sync:
        if frame_signal is None:
            if loop is not None:
                frame_signal = LoopFrameSignal(target_rate, loop)
            else:
                frame_signal = _running_loop_signal(target_rate)
        if frame_signal is not None:
            return FrameTickSource(frame_signal)
        logger.debug(
            "no frame signal available, falling back to a %.2f ms interval timer",
            1000.0 / target_rate,
        )
    return IntervalTickSource(1.0 / target_rate, loop=loop)
