"""One-shot delayed task scheduler driven by the game loop.

The engine never blocks or spawns timers.  Instead, delayed work (such as
entering a node a moment after it is selected) is pushed onto a
:class:`TaskScheduler` and runs when the owner calls :meth:`advance` with
the elapsed time.  Tests advance the clock by hand.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for a pending one-shot task.

    Returned by :meth:`TaskScheduler.schedule`.  Call :meth:`cancel` to
    drop the task before it fires.
    """

    def __init__(
        self,
        task_id: int,
        name: str,
        due: float,
        callback: Callable[[], None],
    ) -> None:
        self.task_id = task_id
        self.name = name
        self.due = due
        self._callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        """True while the task has neither fired nor been cancelled."""
        return not (self.cancelled or self.fired)

    def cancel(self) -> bool:
        """Cancel the task.  Returns False if it already fired or was
        cancelled."""
        if not self.pending:
            return False
        self.cancelled = True
        logger.debug("Cancelled task %s (#%d)", self.name, self.task_id)
        return True

    def _fire(self) -> None:
        self.fired = True
        self._callback()

    def __repr__(self) -> str:
        state = "pending" if self.pending else ("fired" if self.fired else "cancelled")
        return f"ScheduledTask({self.name!r}, due={self.due:.3f}, {state})"


class TaskScheduler:
    """Clock plus a list of pending one-shot tasks.

    Tasks fire in due-time order; ties fire in scheduling order.  A task
    scheduled from inside another task's callback with zero delay fires in
    the same :meth:`advance` call.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._tasks: list[ScheduledTask] = []
        self._ids = itertools.count(1)

    @property
    def now(self) -> float:
        """Current scheduler time in seconds."""
        return self._now

    # -- mutations -----------------------------------------------------------

    def schedule(
        self,
        delay: float,
        callback: Callable[[], None],
        name: str = "task",
    ) -> ScheduledTask:
        """Run *callback* once, *delay* seconds from now."""
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        task = ScheduledTask(next(self._ids), name, self._now + delay, callback)
        self._tasks.append(task)
        logger.debug("Scheduled task %s (#%d) at t=%.3f", name, task.task_id, task.due)
        return task

    def advance(self, dt: float) -> int:
        """Move the clock forward by *dt* seconds and fire due tasks.

        Returns the number of tasks that fired.
        """
        if dt < 0:
            raise ValueError(f"dt must be >= 0, got {dt}")
        self._now += dt

        fired = 0
        while True:
            due = [t for t in self._tasks if t.pending and t.due <= self._now]
            if not due:
                break
            task = min(due, key=lambda t: (t.due, t.task_id))
            self._tasks.remove(task)
            task._fire()
            fired += 1

        self._tasks = [t for t in self._tasks if t.pending]
        return fired

    def cancel_all(self) -> int:
        """Cancel every pending task.  Returns how many were cancelled."""
        count = sum(1 for t in self._tasks if t.cancel())
        self._tasks.clear()
        return count

    # -- queries -------------------------------------------------------------

    def pending(self) -> list[ScheduledTask]:
        """Return pending tasks in firing order."""
        return sorted(
            (t for t in self._tasks if t.pending),
            key=lambda t: (t.due, t.task_id),
        )

    def __len__(self) -> int:
        return sum(1 for t in self._tasks if t.pending)
