"""components.dev_log — Structured simulation event log.

A ring-buffer that records timestamped launches, bursts, cluster
resolutions, dropped entities, resets and driver state changes.  Read
by the F3 debug overlay to give a live feed of what the show is doing.

Usage:
    log = DevLog()
    log.attach(sim.bus, clock=lambda: sim.clock)
    log.record("burst", "super at (320, 140)", details={"count": 70})

Each entry is a dict:
    {"t": float, "cat": str, "msg": str, "details": dict | None}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

from core.events import EventBus


@dataclass
class DevLog:
    """Ring-buffer of simulation events for the debug overlay."""

    entries: list[dict] = field(default_factory=list)
    max_entries: int = 200
    _clock: Callable[[], float] | None = None

    # If non-empty, only entries whose ``cat`` is in the set are kept.
    cat_filter: set[str] = field(default_factory=set)

    def record(self, cat: str, msg: str, *, t: float | None = None,
               details: dict | None = None) -> None:
        if self.cat_filter and cat not in self.cat_filter:
            return
        if t is None:
            t = self._clock() if self._clock else 0.0
        entry = {
            "t": t,
            "cat": cat,
            "msg": msg,
            "details": details,
        }
        self.entries.append(entry)
        if len(self.entries) > self.max_entries:
            self.entries = self.entries[-self.max_entries:]

    # ── Bus wiring ───────────────────────────────────────────────────

    def attach(self, bus: EventBus, clock: Callable[[], float] | None = None) -> None:
        """Subscribe to the simulation's events."""
        self._clock = clock
        bus.subscribe("RocketLaunched", self._on_launch)
        bus.subscribe("RocketBurst", self._on_burst)
        bus.subscribe("ClusterBurst", self._on_cluster)
        bus.subscribe("EntityDropped", self._on_drop)
        bus.subscribe("SimulationReset", self._on_reset)
        bus.subscribe("DriverStateChanged", self._on_state)

    def _on_launch(self, ev) -> None:
        who = "manual" if ev.manual else ("child" if ev.depth else "auto")
        self.record("launch", f"{who} → ({ev.tx:.0f}, {ev.ty:.0f})")

    def _on_burst(self, ev) -> None:
        kind = "super" if ev.is_super else "plain"
        self.record("burst", f"{kind} at ({ev.x:.0f}, {ev.y:.0f})",
                    details={"count": ev.count, "secondaries": ev.secondaries})

    def _on_cluster(self, ev) -> None:
        self.record("cluster", f"cluster at ({ev.x:.0f}, {ev.y:.0f})",
                    details={"count": ev.count})

    def _on_drop(self, ev) -> None:
        self.record("drop", f"{ev.kind} dropped: {ev.reason}")

    def _on_reset(self, ev) -> None:
        what = "teardown" if ev.teardown else "reset"
        self.record("reset", f"{what} → epoch {ev.epoch}")

    def _on_state(self, ev) -> None:
        self.record("driver", f"{ev.old} → {ev.new}")

    # ── Queries ──────────────────────────────────────────────────────

    def clear(self) -> None:
        self.entries.clear()

    def recent(self, n: int = 50) -> list[dict]:
        """Return the *n* most recent entries (newest last)."""
        return self.entries[-n:]

    def for_cat(self, cat: str, n: int = 50) -> list[dict]:
        """Return last *n* entries in a category."""
        return [e for e in self.entries if e["cat"] == cat][-n:]
