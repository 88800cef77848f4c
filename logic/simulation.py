"""logic/simulation.py — The simulation context and its per-frame step.

One ``FireworkSim`` owns everything that changes while the show runs:
the live rockets and particles, the seeded RNG, the delayed-task
scheduler, the event bus, the cadence and the canvas size.  Nothing
else removes a live entity.

    sim = FireworkSim(1280, 720, load_profile("classic"), seed=7)
    sim.spawner.launch_from_ground((640, 200))
    sim.step(1 / 60)

Per step, in order:
  1. advance the simulation clock and run delayed tasks now due
  2. update particles (back to front, removing in place)
  3. update rockets (back to front); a rocket that bursts is removed
     and replaced by its burst within the same step

Particles born in step 3 are first updated on the next step, so a
fresh burst is drawn once at its spawn point.
"""

from __future__ import annotations
import random
from collections import defaultdict

from components.fireworks import Particle, Rocket
from components.profile import Profile, load_profile
from core import tuning
from core.events import EntityDropped, EventBus, SimulationReset
from logic.physics import (
    particle_is_sane, rocket_is_sane, update_particle, update_rocket,
)
from logic.scheduler import TaskScheduler
from logic.spawner import LaunchCadence, Spawner, TASK_CHILD, TASK_CLUSTER


class FireworkSim:
    """Live collections plus everything needed to advance them."""

    def __init__(self, width: int, height: int, profile: Profile | None = None, *,
                 seed: int | None = None, hue: float | None = None,
                 hue_drift: float | None = None,
                 max_particles: int | None = None,
                 bus: EventBus | None = None):
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        self.profile = profile or load_profile()
        self.rng = random.Random(seed)
        self.bus = bus or EventBus()

        if hue is None:
            hue = float(tuning.get("sim", "base_hue", 120.0))
        if hue_drift is None:
            hue_drift = float(tuning.get("sim", "hue_drift", 0.0))
        if max_particles is None:
            max_particles = int(tuning.get("sim", "max_particles", 5000))
        self.base_hue = hue
        self.hue = hue
        self.hue_drift = hue_drift
        self.max_particles = max_particles

        self.rockets: list[Rocket] = []
        self.particles: list[Particle] = []
        self.clock = 0.0       # s of simulation time (advances only in step)
        self.frame = 0
        self.torn_down = False
        self.stats: dict[str, int] = defaultdict(int)

        self.spawner = Spawner(self)
        self.cadence = LaunchCadence(self.profile.cadence, self.rng)
        self.scheduler = TaskScheduler()
        self.scheduler.register_handler(TASK_CLUSTER, self.spawner.resolve_cluster)
        self.scheduler.register_handler(TASK_CHILD, self.spawner.resolve_child)

    # ── Geometry ─────────────────────────────────────────────────────

    @property
    def epoch(self) -> int:
        return self.scheduler.epoch

    def resize(self, width: int, height: int) -> None:
        """Follow the canvas size.  Live entities keep their positions."""
        self.width = max(1, int(width))
        self.height = max(1, int(height))

    def clamp(self, x: float, y: float) -> tuple[float, float]:
        """Clamp a point into the canvas rectangle."""
        return (min(max(float(x), 0.0), float(self.width)),
                min(max(float(y), 0.0), float(self.height)))

    # ── Step ─────────────────────────────────────────────────────────

    def step(self, dt: float = 1.0 / 60.0) -> bool:
        """Advance every live entity one tick.  Returns False once torn down."""
        if self.torn_down:
            return False

        self.clock += max(0.0, dt)
        self.frame += 1
        self.scheduler.tick(self.clock)

        self._step_particles()
        self._step_rockets()

        if self.hue_drift:
            self.hue = (self.hue + self.hue_drift) % 360.0
        return True

    def _step_particles(self) -> None:
        live = self.particles
        for i in range(len(live) - 1, -1, -1):
            p = live[i]
            try:
                gone = update_particle(p, self.rng)
            except ArithmeticError as exc:
                self._drop(live, i, "particle", f"{type(exc).__name__}: {exc}")
                continue
            if not particle_is_sane(p):
                self._drop(live, i, "particle", "non-finite state")
                continue
            if gone:
                del live[i]
                self.stats["particles_retired"] += 1

    def _step_rockets(self) -> None:
        live = self.rockets
        for i in range(len(live) - 1, -1, -1):
            r = live[i]
            try:
                burst = update_rocket(r)
            except ArithmeticError as exc:
                self._drop(live, i, "rocket", f"{type(exc).__name__}: {exc}")
                continue
            if not rocket_is_sane(r):
                self._drop(live, i, "rocket", "non-finite state")
                continue
            if burst:
                del live[i]
                self.stats["rockets_burst"] += 1
                self.spawner.explode(r)

    def _drop(self, live: list, index: int, kind: str, reason: str) -> None:
        del live[index]
        self.stats[f"{kind}s_dropped"] += 1
        print(f"[SIM] dropped {kind}: {reason}")
        self.bus.emit(EntityDropped(kind=kind, reason=reason))

    # ── Lifecycle ────────────────────────────────────────────────────

    def reset(self, profile: Profile | None = None) -> None:
        """Clear both collections and abandon every pending task.

        A new *profile* takes effect from here on.
        """
        if profile is not None:
            self.profile = profile
        self.rockets.clear()
        self.particles.clear()
        epoch = self.scheduler.advance_epoch()
        self.cadence = LaunchCadence(self.profile.cadence, self.rng)
        self.hue = self.base_hue
        self.stats["resets"] += 1
        self.bus.emit(SimulationReset(epoch=epoch))

    def teardown(self) -> None:
        """Stop for good: nothing steps and no pending task will ever run."""
        if self.torn_down:
            return
        self.rockets.clear()
        self.particles.clear()
        epoch = self.scheduler.advance_epoch()
        self.scheduler.clear()
        self.torn_down = True
        self.bus.emit(SimulationReset(epoch=epoch, teardown=True))
        self.bus.drain()

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def live_count(self) -> int:
        return len(self.rockets) + len(self.particles)

    def snapshot(self) -> tuple:
        """Hashable copy of every entity's evolving state (tests, debugging)."""
        rockets = tuple(
            (r.kind, r.x, r.y, r.speed, r.vx, r.vy, r.distance_traveled, tuple(r.trail))
            for r in self.rockets
        )
        particles = tuple(
            (p.kind, p.x, p.y, p.speed, p.gravity, p.alpha, p.size, tuple(p.trail))
            for p in self.particles
        )
        return rockets, particles, self.scheduler.pending_count(), self.clock
