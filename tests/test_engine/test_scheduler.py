"""Tests for deferred callback scheduling."""

import asyncio

from onestroke.engine.scheduler import AsyncioScheduler, ManualScheduler


def test_manual_runs_due_callbacks_in_order():
    scheduler = ManualScheduler()
    ran = []
    scheduler.call_later(2.0, lambda: ran.append("b"))
    scheduler.call_later(1.0, lambda: ran.append("a"))
    scheduler.call_later(1.0, lambda: ran.append("a2"))
    assert scheduler.pending == 3

    assert scheduler.advance(0.5) == 0
    assert scheduler.advance(0.5) == 2
    assert ran == ["a", "a2"]
    assert scheduler.advance(10) == 1
    assert ran == ["a", "a2", "b"]
    assert scheduler.now == 11.0


def test_manual_callback_may_schedule_more():
    scheduler = ManualScheduler()
    ran = []

    def first():
        ran.append(scheduler.now)
        scheduler.call_later(1.0, lambda: ran.append(scheduler.now))

    scheduler.call_later(1.0, first)
    scheduler.advance(5.0)
    assert ran == [1.0, 2.0]


def test_asyncio_scheduler():
    ran = []

    async def main():
        AsyncioScheduler().call_later(0.01, lambda: ran.append(1))
        await asyncio.sleep(0.05)

    asyncio.run(main())
    assert ran == [1]
