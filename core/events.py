"""core/events.py — Lightweight event bus.

Decouples the simulation, which *signals* that something happened,
from collaborators that *react* to it (audio, the dev log).  The
simulation owns one bus::

    from core.events import EventBus, RocketBurst
    bus.emit(RocketBurst(x=320.0, y=120.0, count=30))

Consumers subscribe with a callable::

    bus.subscribe("RocketBurst", my_handler)

And the frame driver drains once per running frame::

    bus.drain()          # calls all handlers for pending events

Design rules:
  - Events are plain dataclasses — no behaviour.
  - ``emit()`` is O(1) (just appends).
  - ``drain()`` processes all queued events in FIFO order.
  - Handlers may emit new events; those are processed in the same drain.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable
from collections import defaultdict
import traceback


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class RocketLaunched:
    """A rocket entered the live set."""
    x: float = 0.0
    y: float = 0.0
    tx: float = 0.0
    ty: float = 0.0
    manual: bool = False
    depth: int = 0
    volume: float = 0.0            # launch sound volume, 0 = silent


@dataclass
class RocketBurst:
    """A rocket (or a direct burst request) was replaced by particles."""
    x: float = 0.0
    y: float = 0.0
    count: int = 0
    is_super: bool = False
    secondaries: int = 0           # delayed tasks scheduled by a super burst
    volume: float = 0.0


@dataclass
class ClusterBurst:
    """A delayed secondary burst resolved into its own particle cloud."""
    x: float = 0.0
    y: float = 0.0
    count: int = 0
    volume: float = 0.0


@dataclass
class EntityDropped:
    """An entity was removed because its state went bad."""
    kind: str = ""                 # "rocket" or "particle"
    reason: str = ""


@dataclass
class SimulationReset:
    """Collections cleared and pending tasks abandoned."""
    epoch: int = 0
    teardown: bool = False


@dataclass
class DriverStateChanged:
    """The frame driver moved between RUNNING / PAUSED / INACTIVE."""
    old: str = ""
    new: str = ""


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

class EventBus:
    """Fire-and-forget event bus owned by the simulation context."""

    def __init__(self):
        self._queue: list[Any] = []
        self._subs: dict[str, list[Callable]] = defaultdict(list)
        self._stats: dict[str, int] = defaultdict(int)

    # ── Public API ───────────────────────────────────────────────────

    def emit(self, event) -> None:
        """Queue an event for processing on next ``drain()``."""
        self._queue.append(event)

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """Register *handler* to receive events of *event_type*.

        *event_type* is the class name, e.g. ``"RocketBurst"``.
        """
        self._subs[event_type].append(handler)

    def drain(self) -> int:
        """Process all queued events.  Returns number processed.

        Handlers may emit new events — those are processed in the
        same drain pass (breadth-first).
        """
        processed = 0
        safety = 1000  # prevent infinite loops
        while self._queue and safety > 0:
            batch = self._queue[:]
            self._queue.clear()
            for event in batch:
                name = type(event).__name__
                self._stats[name] += 1
                for handler in self._subs.get(name, []):
                    try:
                        handler(event)
                    except Exception as exc:
                        print(f"[EVENT] handler error for {name}: {exc}")
                        traceback.print_exc()
            processed += len(batch)
            safety -= 1
        return processed

    def stats(self) -> dict[str, int]:
        """Return cumulative event counts by type."""
        return dict(self._stats)

    def pending_count(self) -> int:
        """Number of events waiting to be drained."""
        return len(self._queue)
