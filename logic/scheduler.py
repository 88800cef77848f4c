"""logic/scheduler.py — Delayed-task scheduler with a generation guard.

Super bursts fan out into secondaries that resolve a little later.
Instead of fire-and-forget timers, each secondary is posted to a
priority queue ordered by simulation time and stamped with the
scheduler's current *epoch*::

    scheduler = TaskScheduler()
    scheduler.register_handler("cluster", on_cluster)
    scheduler.post_delta(now, 0.05, "cluster", {"x": 320.0, "y": 140.0})
    ...
    scheduler.tick(now)          # runs every task due by ``now``

Resetting or tearing down the simulation calls ``advance_epoch()``;
tasks posted under an older epoch are discarded when they come due
instead of touching the fresh state.
"""

from __future__ import annotations
import heapq
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(order=True)
class DelayedTask:
    """A single task in the scheduler priority queue.

    Ordered by ``time`` so the heap gives us earliest-first.
    """
    time: float
    # heapq tiebreaker (insertion order) — avoids comparing kind
    _seq: int = field(compare=True, repr=False)
    kind: str = field(compare=False, default="")
    data: dict[str, Any] = field(compare=False, default_factory=dict)
    epoch: int = field(compare=False, default=0)


class TaskScheduler:
    """Priority-queue scheduler for delayed secondary bursts.

    Owned by the simulation context; driven by its clock.
    """

    def __init__(self) -> None:
        self._queue: list[DelayedTask] = []
        self._seq: int = 0
        self.epoch: int = 0
        # Dispatcher: kind → handler(data, now)
        self._handlers: dict[str, Callable[[dict[str, Any], float], None]] = {}
        # Stats
        self.tasks_processed: int = 0
        self.tasks_stale: int = 0

    # ── Posting ──────────────────────────────────────────────────────

    def post(self, time: float, kind: str,
             data: dict[str, Any] | None = None) -> DelayedTask:
        """Schedule a task at ``time`` seconds of simulation time."""
        self._seq += 1
        task = DelayedTask(
            time=time,
            _seq=self._seq,
            kind=kind,
            data=data or {},
            epoch=self.epoch,
        )
        heapq.heappush(self._queue, task)
        return task

    def post_delta(self, current_time: float, delta: float, kind: str,
                   data: dict[str, Any] | None = None) -> DelayedTask:
        """Post a task ``delta`` seconds from ``current_time``."""
        return self.post(current_time + max(0.0, delta), kind, data)

    # ── Cancellation ─────────────────────────────────────────────────

    def advance_epoch(self) -> int:
        """Invalidate every task posted so far.  Returns the new epoch."""
        self.epoch += 1
        return self.epoch

    def clear(self) -> None:
        """Drop the whole queue (stale or not)."""
        self._queue.clear()

    # ── Handler registration ─────────────────────────────────────────

    def register_handler(self, kind: str,
                         handler: Callable[[dict[str, Any], float], None]) -> None:
        """Register a handler for a task kind.

        Handler signature: ``handler(data, now)``
        """
        self._handlers[kind] = handler

    # ── Tick ─────────────────────────────────────────────────────────

    def _is_live(self, task: DelayedTask) -> bool:
        return task.epoch == self.epoch

    def peek_time(self) -> float:
        """Return the time of the next live task, or inf if empty."""
        while self._queue and not self._is_live(self._queue[0]):
            heapq.heappop(self._queue)
            self.tasks_stale += 1
        if self._queue:
            return self._queue[0].time
        return float("inf")

    def tick(self, now: float) -> int:
        """Run all tasks due by ``now``.  Returns the number run.

        Tasks posted by a handler are queued normally; if already due
        they run in this same tick.
        """
        count = 0

        while self._queue:
            if self._queue[0].time > now:
                break

            task = heapq.heappop(self._queue)
            if task.epoch != self.epoch:
                self.tasks_stale += 1
                continue

            handler = self._handlers.get(task.kind)
            if handler:
                handler(task.data, now)
                count += 1

        self.tasks_processed += count
        return count

    # ── Queries ──────────────────────────────────────────────────────

    def pending_count(self) -> int:
        """Number of live tasks still waiting."""
        return sum(1 for t in self._queue if self._is_live(t))

