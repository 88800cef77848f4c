"""logic/spawner.py — Creates rockets and bursts; owns the launch cadence.

Usage:
    spawner = sim.spawner
    spawner.launch_rocket((w / 2, h), (tx, ty))      # → Rocket, appended
    spawner.create_burst(x, y, is_super=True)        # → particles appended

Bursts come in two tiers.  A *plain* burst is one particle cloud.  A
*super* burst is a bigger cloud plus ``secondary_count`` delayed
secondaries posted to the simulation's task scheduler; depending on
the profile each secondary resolves to a mini-particle cluster on a
ring around the burst point, or to a child rocket fired outward that
bursts again on its own (child rockets always burst plain).

``LaunchCadence`` decides when rockets are launched without a spawn
request: every ``timer_total`` frames automatically, and every
``limiter_total`` frames toward the pointer while it is held down.
"""

from __future__ import annotations
import math
import random
from typing import TYPE_CHECKING

from components.fireworks import Particle, Rocket, make_trail
from components.profile import (
    CadenceStyle, LAYOUT_EVEN, ParticleStyle, RocketStyle, SUPER_CLUSTER,
)
from core.constants import TAU
from core.events import ClusterBurst, RocketBurst, RocketLaunched

if TYPE_CHECKING:
    from logic.simulation import FireworkSim

TASK_CLUSTER = "cluster"
TASK_CHILD = "child"


class Spawner:
    """Appends new entities to a simulation's live collections."""

    def __init__(self, sim: FireworkSim):
        self.sim = sim

    # ── Rockets ──────────────────────────────────────────────────────

    def launch_rocket(self, origin: tuple[float, float],
                      target: tuple[float, float],
                      style: RocketStyle | None = None, *,
                      depth: int = 0, manual: bool = False) -> Rocket:
        """Launch a rocket from *origin* toward *target* (both clamped)."""
        sim = self.sim
        rng = sim.rng
        style = style or sim.profile.rocket
        sx, sy = sim.clamp(*origin)
        tx, ty = sim.clamp(*target)

        rocket = Rocket(
            kind=style.kind,
            x=sx, y=sy,
            sx=sx, sy=sy,
            tx=tx, ty=ty,
            angle=math.atan2(ty - sy, tx - sx),
            speed=rng.uniform(*style.speed),
            hue=sim.hue,
            brightness=rng.uniform(*style.brightness),
            depth=depth,
            acceleration=style.acceleration,
            drag=style.drag,
            gravity=style.gravity,
            proximity=style.proximity,
            speed_floor=style.speed_floor,
            trail=make_trail(sx, sy, style.trail_length),
        )
        sim.rockets.append(rocket)
        sim.stats["rockets_launched"] += 1

        audible = rng.random() < style.launch_sound_chance
        sim.bus.emit(RocketLaunched(
            x=sx, y=sy, tx=tx, ty=ty, manual=manual, depth=depth,
            volume=style.launch_volume if audible else 0.0,
        ))
        return rocket

    def launch_from_ground(self, target: tuple[float, float], *,
                           manual: bool = False) -> Rocket:
        """Launch from bottom centre, the default launch site."""
        return self.launch_rocket((self.sim.width / 2, self.sim.height),
                                  target, manual=manual)

    def launch_random(self) -> Rocket:
        """Launch toward a random point in the upper half of the canvas."""
        rng = self.sim.rng
        target = (rng.uniform(0, self.sim.width),
                  rng.uniform(0, self.sim.height / 2))
        return self.launch_from_ground(target)

    # ── Particles ────────────────────────────────────────────────────

    def spawn_particles(self, x: float, y: float, style: ParticleStyle,
                        count: int) -> int:
        """Append up to *count* particles at (x, y).  Returns how many fit."""
        sim = self.sim
        rng = sim.rng
        room = max(0, sim.max_particles - len(sim.particles))
        n = min(max(0, count), room)
        if n < count:
            sim.stats["particles_capped"] += count - n

        for _ in range(n):
            hue = rng.uniform(sim.hue - style.hue_spread,
                              sim.hue + style.hue_spread) % 360.0
            sim.particles.append(Particle(
                kind=style.kind,
                x=x, y=y,
                angle=rng.uniform(0.0, TAU),
                speed=rng.uniform(*style.speed),
                hue=hue,
                brightness=rng.uniform(*style.brightness),
                alpha=1.0,
                decay=rng.uniform(*style.decay),
                friction=style.friction,
                gravity=style.gravity,
                gravity_growth=style.gravity_growth,
                wander=style.wander,
                size=rng.uniform(*style.size),
                shrink=rng.uniform(*style.shrink),
                trail=make_trail(x, y, style.trail_length),
            ))
        sim.stats["particles_spawned"] += n
        return n

    # ── Bursts ───────────────────────────────────────────────────────

    def create_burst(self, x: float, y: float, is_super: bool = False, *,
                     count: int | None = None) -> int:
        """Burst at (x, y).  Returns particles added right now.

        *count* overrides the profile's plain/super particle count.
        """
        burst = self.sim.profile.burst
        style = self.sim.profile.particle
        if count is None:
            count = burst.super_count if is_super else burst.plain_count

        added = self.spawn_particles(x, y, style, count)
        secondaries = self._schedule_secondaries(x, y) if is_super else 0

        self.sim.stats["super_bursts" if is_super else "plain_bursts"] += 1
        self.sim.bus.emit(RocketBurst(
            x=x, y=y, count=added, is_super=is_super,
            secondaries=secondaries, volume=burst.explosion_volume,
        ))
        return added

    def explode(self, rocket: Rocket) -> int:
        """Replace *rocket* with a burst at its final position.

        Rockets launched by a burst always burst plain with the
        profile's ``child_count``; first-generation rockets roll for a
        super burst.
        """
        burst = self.sim.profile.burst
        if rocket.depth > 0:
            return self.create_burst(rocket.x, rocket.y, False,
                                     count=burst.child_count)
        is_super = self.sim.rng.random() < burst.super_chance
        return self.create_burst(rocket.x, rocket.y, is_super)

    def _ring_points(self, x: float, y: float, n: int) -> list[tuple[float, float]]:
        burst = self.sim.profile.burst
        rng = self.sim.rng
        points = []
        phase = rng.uniform(0.0, TAU)
        for i in range(n):
            if burst.ring_layout == LAYOUT_EVEN:
                angle = phase + i * TAU / n
            else:
                angle = rng.uniform(0.0, TAU)
            dist = rng.uniform(*burst.ring)
            points.append((x + math.cos(angle) * dist,
                           y + math.sin(angle) * dist))
        return points

    def _schedule_secondaries(self, x: float, y: float) -> int:
        sim = self.sim
        burst = sim.profile.burst
        n = max(0, burst.secondary_count)
        kind = TASK_CLUSTER if burst.super_mode == SUPER_CLUSTER else TASK_CHILD
        for i, (px, py) in enumerate(self._ring_points(x, y, n)):
            delay = burst.secondary_delay + i * burst.secondary_stagger
            sim.scheduler.post_delta(sim.clock, delay, kind, {
                "x": px, "y": py, "ox": x, "oy": y,
            })
        return n

    # ── Task handlers (registered on the scheduler) ──────────────────

    def resolve_cluster(self, data: dict, now: float) -> None:
        burst = self.sim.profile.burst
        x, y = data["x"], data["y"]
        added = self.spawn_particles(x, y, self.sim.profile.mini,
                                     burst.cluster_count)
        self.sim.stats["clusters"] += 1
        self.sim.bus.emit(ClusterBurst(x=x, y=y, count=added,
                                       volume=burst.cluster_volume))

    def resolve_child(self, data: dict, now: float) -> None:
        self.launch_rocket((data["ox"], data["oy"]), (data["x"], data["y"]),
                           depth=1)


class LaunchCadence:
    """Frame-counted launch timing plus pointer-driven manual launches.

    The automatic timer keeps counting while suppressed, so the first
    frame after the pointer is released launches straight away.
    """

    def __init__(self, style: CadenceStyle, rng: random.Random):
        self.style = style
        self.rng = rng
        self.timer_tick = 0
        self.timer_total = self._roll()
        self.limiter_tick = 0
        self.suppressed = False
        self.pointer: tuple[float, float] | None = None
        self._launched_this_hold = False

    def _roll(self) -> int:
        s = self.style
        return s.timer_total_long if self.rng.random() < s.long_chance else s.timer_total

    def reset(self) -> None:
        self.timer_tick = 0
        self.timer_total = self._roll()
        self.limiter_tick = 0
        self.suppressed = False
        self.pointer = None
        self._launched_this_hold = False

    # ── Pointer ──────────────────────────────────────────────────────

    def press(self, pos: tuple[float, float]) -> None:
        """Pointer down: suppress automatic launches, start manual ones."""
        self.suppressed = True
        self.pointer = pos
        self.limiter_tick = self.style.limiter_total
        self._launched_this_hold = False

    def move(self, pos: tuple[float, float]) -> None:
        if self.pointer is not None:
            self.pointer = pos

    def release(self, pos: tuple[float, float], spawner: Spawner) -> Rocket | None:
        """Pointer up: resume automatic launches.

        A click too short to launch anything still launches one rocket
        toward the release point.
        """
        held = self.pointer is not None
        self.suppressed = False
        self.pointer = None
        if held and not self._launched_this_hold:
            self._launched_this_hold = True
            return spawner.launch_from_ground(pos, manual=True)
        return None

    # ── Per-frame ────────────────────────────────────────────────────

    def advance(self, spawner: Spawner) -> list[Rocket]:
        """Count one running frame; returns rockets launched this frame."""
        launched: list[Rocket] = []

        if self.pointer is not None:
            if self.limiter_tick >= self.style.limiter_total:
                launched.append(spawner.launch_from_ground(self.pointer, manual=True))
                self.limiter_tick = 0
                self._launched_this_hold = True
            else:
                self.limiter_tick += 1

        if self.timer_tick >= self.timer_total:
            if not self.suppressed:
                launched.append(spawner.launch_random())
                self.timer_tick = 0
                self.timer_total = self._roll()
        else:
            self.timer_tick += 1

        return launched
