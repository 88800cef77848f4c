"""logic/frame_driver.py — RUNNING / PAUSED / INACTIVE frame gating.

The app calls ``frame(dt)`` once per display refresh no matter what;
the driver decides whether anything happens.  Pause is a user toggle
(Space, or a pointer release resumes); visibility comes from the
window.  Either one gates the frame, independently of the other.

While RUNNING a frame is, in order:
  1. renderer.begin_frame — clear / fade the canvas, draw background
  2. sim.step             — the simulation step
  3. renderer.draw        — every live entity
  4. cadence              — count the frame, maybe launch
  5. bus.drain            — sounds, dev log

Anything else skips all five: no entity state changes at all.
"""

from __future__ import annotations
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from core.events import DriverStateChanged

if TYPE_CHECKING:
    from logic.simulation import FireworkSim


class DriverState(Enum):
    RUNNING = "running"
    PAUSED = "paused"
    INACTIVE = "inactive"


class FrameRenderer(Protocol):
    def begin_frame(self, sim: FireworkSim) -> None: ...
    def draw(self, sim: FireworkSim) -> None: ...


class FrameDriver:
    """Runs the simulation one frame at a time, subject to gating."""

    def __init__(self, sim: FireworkSim, *, paused: bool = True,
                 renderer: FrameRenderer | None = None):
        self.sim = sim
        self.renderer = renderer
        self.paused = paused
        self.active = True
        self.frames_run = 0
        self.frames_skipped = 0

    @property
    def state(self) -> DriverState:
        if not self.active:
            return DriverState.INACTIVE
        if self.paused:
            return DriverState.PAUSED
        return DriverState.RUNNING

    @property
    def running(self) -> bool:
        return self.state is DriverState.RUNNING

    # ── Transitions ──────────────────────────────────────────────────

    def _transition(self, paused: bool | None = None, active: bool | None = None) -> None:
        old = self.state
        if paused is not None:
            self.paused = paused
        if active is not None:
            self.active = active
        new = self.state
        if new is not old:
            self.sim.bus.emit(DriverStateChanged(old=old.value, new=new.value))

    def toggle_pause(self) -> DriverState:
        self._transition(paused=not self.paused)
        return self.state

    def pause(self) -> None:
        self._transition(paused=True)

    def resume(self) -> None:
        self._transition(paused=False)

    def set_active(self, active: bool) -> None:
        """Visibility signal from the host window."""
        self._transition(active=active)

    # ── Frame ────────────────────────────────────────────────────────

    def frame(self, dt: float) -> bool:
        """One display refresh.  Returns True if the frame did any work."""
        if not self.running or self.sim.torn_down:
            self.frames_skipped += 1
            return False

        if self.renderer is not None:
            self.renderer.begin_frame(self.sim)
        self.sim.step(dt)
        if self.renderer is not None:
            self.renderer.draw(self.sim)
        self.sim.cadence.advance(self.sim.spawner)
        self.sim.bus.drain()

        self.frames_run += 1
        return True
