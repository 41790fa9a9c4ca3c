"""
Scheduler - Cancellable deferred tasks.

The game loop defers two steps: completing the deal and the opponent's
move. Each ScheduledTask remembers the epoch it was created in, so the
loop can discard a task that fires after a restart even if cancellation
raced with it.

Two implementations:
- ManualScheduler: virtual clock advanced explicitly (tests, CLI)
- AsyncioScheduler: real delays on an asyncio event loop (API)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable
import asyncio
import itertools
import logging

logger = logging.getLogger(__name__)


@dataclass
class ScheduledTask:
    """A callback due after a delay, tagged with the epoch it belongs to."""
    name: str
    epoch: int
    due: float
    callback: Callable[[ScheduledTask], None]
    cancelled: bool = False
    fired: bool = False
    sequence: int = 0
    handle: Any = field(default=None, repr=False)

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def run(self) -> None:
        """Fire the callback unless cancelled or already fired."""
        if not self.pending:
            return
        self.fired = True
        self.callback(self)


class Scheduler(ABC):
    """Interface the game loop uses to defer work."""

    @abstractmethod
    def schedule(
        self,
        delay: float,
        callback: Callable[[ScheduledTask], None],
        name: str,
        epoch: int,
    ) -> ScheduledTask:
        """Run `callback(task)` after `delay` seconds."""
        pass

    def cancel(self, task: ScheduledTask | None) -> None:
        """Cancel a task; cancelling a finished or missing task is a no-op."""
        if task is None or not task.pending:
            return
        task.cancelled = True
        logger.debug("Cancelled %s (epoch %d)", task.name, task.epoch)


class ManualScheduler(Scheduler):
    """
    Scheduler driven by a virtual clock.

    Nothing runs until advance() or run_pending() is called. Tasks fire in
    due-time order; tasks with equal due times fire in scheduling order.
    Tasks scheduled while others run are picked up in the same call if
    they are already due.
    """

    def __init__(self):
        self.now = 0.0
        self._tasks: list[ScheduledTask] = []
        self._sequence = itertools.count()

    def schedule(self, delay, callback, name, epoch) -> ScheduledTask:
        task = ScheduledTask(
            name=name,
            epoch=epoch,
            due=self.now + max(0.0, delay),
            callback=callback,
            sequence=next(self._sequence),
        )
        self._tasks.append(task)
        return task

    @property
    def pending(self) -> list[ScheduledTask]:
        """Pending tasks, earliest first."""
        return sorted(
            (t for t in self._tasks if t.pending),
            key=lambda t: (t.due, t.sequence),
        )

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and fire everything that became due.

        Returns the number of tasks fired.
        """
        target = self.now + seconds
        fired = 0
        while True:
            due = [t for t in self.pending if t.due <= target]
            if not due:
                break
            task = due[0]
            self.now = max(self.now, task.due)
            task.run()
            fired += 1
        self.now = target
        self._tasks = [t for t in self._tasks if t.pending]
        return fired

    def run_pending(self, max_tasks: int = 1000) -> int:
        """
        Fire pending tasks in order until none remain.

        `max_tasks` bounds runaway rescheduling.
        """
        fired = 0
        while fired < max_tasks:
            pending = self.pending
            if not pending:
                break
            task = pending[0]
            self.now = max(self.now, task.due)
            task.run()
            fired += 1
        self._tasks = [t for t in self._tasks if t.pending]
        return fired


class AsyncioScheduler(Scheduler):
    """Scheduler backed by loop.call_later on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, delay, callback, name, epoch) -> ScheduledTask:
        task = ScheduledTask(
            name=name,
            epoch=epoch,
            due=self.loop.time() + max(0.0, delay),
            callback=callback,
        )
        task.handle = self.loop.call_later(max(0.0, delay), task.run)
        return task

    def cancel(self, task: ScheduledTask | None) -> None:
        if task is not None and task.handle is not None:
            task.handle.cancel()
        super().cancel(task)
