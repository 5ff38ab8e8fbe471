"""Slideshow -- several consumers sharing one clock.

Demonstrates:
- Opening a shared_clock() scope on an asyncio event loop
- A once-a-second wall clock built on create_interval
- A slideshow that advances slides with create_timeout and tracks progress
  with get_elapsed_time
- A counter animated from tick listeners using delta_time
- Pausing and resuming without losing registrations

Run: python -m examples.slideshow
"""

import asyncio

from tick_timing import TickContext, current_clock, shared_clock

SLIDES = ["intro", "architecture", "demo", "questions"]
SLIDE_MS = 600


def wall_clock() -> None:
    clock = current_clock()

    def show() -> None:
        print(f"  [clock]  t={clock.time:.3f}s")

    clock.create_interval(show, 1000)


def slideshow(done: asyncio.Event) -> None:
    clock = current_clock()
    state = {"index": 0, "shown_at": clock.now}

    def advance() -> None:
        state["index"] += 1
        if state["index"] >= len(SLIDES):
            done.set()
            return
        state["shown_at"] = clock.now
        print(f"  [slide]  {SLIDES[state['index']]}")
        clock.create_timeout(advance, SLIDE_MS)

    def progress() -> None:
        pct = min(100.0, clock.get_elapsed_time(state["shown_at"]) / SLIDE_MS * 100)
        print(f"  [slide]  {SLIDES[state['index']]} {pct:5.1f}%")

    print(f"  [slide]  {SLIDES[0]}")
    clock.create_timeout(advance, SLIDE_MS)
    clock.create_interval(progress, 250)


def counter(target: int, duration_ms: float) -> None:
    clock = current_clock()
    state = {"elapsed": 0.0}

    def on_tick(ctx: TickContext) -> None:
        if state["elapsed"] >= duration_ms:
            return
        state["elapsed"] = min(duration_ms, state["elapsed"] + ctx.delta_time)
        t = state["elapsed"] / duration_ms
        eased = 1 - (1 - t) ** 3
        if state["elapsed"] >= duration_ms:
            print(f"  [count]  reached {round(eased * target)} after {ctx.tick_number} ticks")

    clock.on_tick(on_tick)


async def main() -> None:
    print("=== Slideshow ===\n")

    done = asyncio.Event()
    with shared_clock(target_fps=60) as clock:
        wall_clock()
        slideshow(done)
        counter(target=1000, duration_ms=1500)

        await asyncio.sleep(1.0)
        clock.pause()
        print("  -- paused --")
        await asyncio.sleep(0.5)
        clock.resume()
        print("  -- resumed --")

        await done.wait()
        print(f"\nDone after {clock.tick_number} ticks.")


if __name__ == "__main__":
    asyncio.run(main())
