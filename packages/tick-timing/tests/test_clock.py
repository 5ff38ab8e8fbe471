"""Tests for ClockState updates and derived time values."""

import dataclasses

import pytest

from tick_timing.clock import ClockState
from tick_timing.types import TickContext


def test_clock_initialization():
    """Clock starts with current == previous and a zero delta."""
    clock = ClockState(1000.0)
    assert clock.current_time == 1000.0
    assert clock.previous_time == 1000.0
    assert clock.delta_time == 0.0
    assert clock.tick_number == 0


def test_update_tracks_previous_and_delta():
    clock = ClockState(1000.0)
    clock.update(1016.0)
    assert clock.previous_time == 1000.0
    assert clock.current_time == 1016.0
    assert clock.delta_time == 16.0

    clock.update(1050.0)
    assert clock.previous_time == 1016.0
    assert clock.current_time == 1050.0
    assert clock.delta_time == 34.0


def test_update_returns_tick_number():
    clock = ClockState(0.0)
    assert clock.update(10.0) == 1
    assert clock.update(20.0) == 2
    assert clock.tick_number == 2


def test_update_backwards_clamps_delta_to_zero():
    """A source reporting an earlier time never yields a negative delta."""
    clock = ClockState(500.0)
    clock.update(400.0)
    assert clock.delta_time == 0.0
    assert clock.current_time == 400.0


def test_update_same_time_zero_delta():
    clock = ClockState(500.0)
    clock.update(500.0)
    assert clock.delta_time == 0.0


def test_reset_collapses_previous_onto_now():
    """After reset, the next update measures from the reset time."""
    clock = ClockState(0.0)
    clock.update(100.0)
    clock.reset(10_000.0)
    assert clock.current_time == 10_000.0
    assert clock.previous_time == 10_000.0
    assert clock.delta_time == 0.0

    clock.update(10_016.0)
    assert clock.delta_time == 16.0


def test_reset_preserves_tick_number():
    clock = ClockState(0.0)
    clock.update(1.0)
    clock.update(2.0)
    clock.reset(50.0)
    assert clock.tick_number == 2


def test_elapsed_since():
    clock = ClockState(0.0)
    clock.update(2500.0)
    assert clock.elapsed_since(1000.0) == 1500.0
    assert clock.elapsed_since(2500.0) == 0.0


def test_elapsed_since_future_timestamp_is_negative():
    clock = ClockState(1000.0)
    assert clock.elapsed_since(1500.0) == -500.0


def test_context_fields():
    """context() snapshots the clock into a frozen TickContext."""
    clock = ClockState(1000.0)
    clock.update(3000.0)
    ctx = clock.context()

    assert isinstance(ctx, TickContext)
    assert ctx.tick_number == 1
    assert ctx.now == 3000.0
    assert ctx.delta_time == 2000.0
    assert ctx.time == 3.0


def test_context_is_frozen():
    ctx = ClockState(0.0).context()
    with pytest.raises(dataclasses.FrozenInstanceError):
        ctx.now = 5.0  # type: ignore[misc]
