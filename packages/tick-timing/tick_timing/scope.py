"""Shared-clock scopes.

``shared_clock`` owns one Scheduler for the duration of a ``with`` block and
makes it visible to everything running inside that block through
``current_clock``. Code that may run outside any scope uses
``optional_clock`` and gets a private Scheduler instead of an error.
"""
from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Any, Iterator

from tick_timing.scheduler import Scheduler

_current: contextvars.ContextVar[Scheduler | None] = contextvars.ContextVar(
    "tick_timing_clock", default=None
)


@contextmanager
def shared_clock(**options: Any) -> Iterator[Scheduler]:
    """Build a Scheduler, bind it for the block, stop and unbind it on exit."""
    scheduler = Scheduler(**options)
    token = _current.set(scheduler)
    try:
        yield scheduler
    finally:
        _current.reset(token)
        scheduler.stop()


def current_clock() -> Scheduler:
    scheduler = _current.get()
    if scheduler is None:
        raise LookupError("current_clock() called outside a shared_clock() scope")
    return scheduler


def optional_clock(**options: Any) -> Scheduler:
    """The bound Scheduler, or a new private one built from ``options``.

    The caller owns a private Scheduler and is responsible for stopping it.
    """
    scheduler = _current.get()
    if scheduler is not None:
        return scheduler
    return Scheduler(**options)
