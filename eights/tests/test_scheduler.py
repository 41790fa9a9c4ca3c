"""
Tests for deferred task scheduling.

Tests:
- Virtual clock ordering
- Cancellation
- asyncio-backed delays
"""

import asyncio

from ..session.scheduler import AsyncioScheduler, ManualScheduler


class TestManualScheduler:
    """Tests for the virtual-clock scheduler."""

    def test_nothing_runs_until_advanced(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.schedule(1.0, lambda t: fired.append(t.name), name="a", epoch=1)

        assert fired == []
        assert scheduler.advance(0.5) == 0
        assert fired == []
        assert scheduler.advance(0.5) == 1
        assert fired == ["a"]

    def test_due_order_then_schedule_order(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.schedule(2.0, lambda t: fired.append(t.name), name="late", epoch=1)
        scheduler.schedule(1.0, lambda t: fired.append(t.name), name="first", epoch=1)
        scheduler.schedule(1.0, lambda t: fired.append(t.name), name="second", epoch=1)

        scheduler.run_pending()
        assert fired == ["first", "second", "late"]

    def test_cancelled_task_never_fires(self):
        scheduler = ManualScheduler()
        fired = []
        task = scheduler.schedule(1.0, lambda t: fired.append(t.name), name="a", epoch=1)
        scheduler.cancel(task)

        scheduler.advance(5.0)
        assert fired == []
        assert not task.pending

    def test_chained_tasks_within_advance(self):
        """A task scheduled by a firing task runs too if it is already due."""
        scheduler = ManualScheduler()
        fired = []

        def first(task):
            fired.append("first")
            scheduler.schedule(0.5, lambda t: fired.append("second"), name="second", epoch=1)

        scheduler.schedule(1.0, first, name="first", epoch=1)
        scheduler.advance(1.5)
        assert fired == ["first", "second"]

    def test_task_fires_once(self):
        scheduler = ManualScheduler()
        fired = []
        task = scheduler.schedule(0.0, lambda t: fired.append(1), name="a", epoch=1)
        scheduler.run_pending()
        task.run()
        assert fired == [1]

    def test_cancel_none_is_noop(self):
        ManualScheduler().cancel(None)


class TestAsyncioScheduler:
    """Tests for the event-loop scheduler."""

    def test_fires_after_delay(self):
        async def scenario():
            scheduler = AsyncioScheduler()
            fired = asyncio.Event()
            scheduler.schedule(0.01, lambda t: fired.set(), name="a", epoch=1)
            await asyncio.wait_for(fired.wait(), timeout=1.0)
            return fired.is_set()

        assert asyncio.run(scenario())

    def test_cancel_prevents_firing(self):
        async def scenario():
            scheduler = AsyncioScheduler()
            fired = []
            task = scheduler.schedule(0.01, lambda t: fired.append(1), name="a", epoch=1)
            scheduler.cancel(task)
            await asyncio.sleep(0.05)
            return fired

        assert asyncio.run(scenario()) == []
