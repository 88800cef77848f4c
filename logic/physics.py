"""logic/physics.py — Per-tick laws for rockets and particles.

Stylised, not physical: every law is applied once per rendered frame
and tuned for the look.  Each entity kind picks its law from a table
keyed by the kind tag, so adding a variant means adding one function
and one table row.

    burst_now = update_rocket(rocket)            # True → replace with a burst
    gone = update_particle(particle, rng)        # True → remove from live set

Neither function touches anything but the entity passed in.
"""

from __future__ import annotations
import math
import random
from typing import Callable

from components.fireworks import (
    Particle, ParticleKind, Rocket, RocketKind, distance,
)


# ── Rockets ─────────────────────────────────────────────────────────

def _launch_law(r: Rocket) -> bool:
    """Accelerate along the launch angle; burst once the target distance is reached.

    On the burst tick the rocket snaps to its target, so the distance
    from origin never shrinks and the burst point is exactly (tx, ty).
    """
    r.speed *= r.acceleration
    vx = math.cos(r.angle) * r.speed
    vy = math.sin(r.angle) * r.speed
    r.vx, r.vy = vx, vy

    traveled = distance(r.sx, r.sy, r.x + vx, r.y + vy)
    if traveled >= r.distance_to_target:
        r.x, r.y = r.tx, r.ty
        r.distance_traveled = r.distance_to_target
        return True

    r.x += vx
    r.y += vy
    r.distance_traveled = traveled
    return False


def _ballistic_law(r: Rocket) -> bool:
    """Drag on both axes, gravity on y; burst near the target or once spent.

    "Spent" is any of: slower than ``speed_floor``, past the target
    distance, or about to fall back toward the origin.  The step that
    would bring it closer to the origin is not committed.
    """
    r.vx *= r.drag
    r.vy = r.vy * r.drag + r.gravity
    r.speed = math.hypot(r.vx, r.vy)

    nx, ny = r.x + r.vx, r.y + r.vy
    traveled = distance(r.sx, r.sy, nx, ny)
    receding = traveled < r.distance_traveled

    if not receding:
        r.x, r.y = nx, ny
        r.distance_traveled = traveled

    near = distance(r.x, r.y, r.tx, r.ty) <= r.proximity
    spent = r.speed < r.speed_floor or traveled >= r.distance_to_target
    return near or spent or receding


_ROCKET_LAWS: dict[RocketKind, Callable[[Rocket], bool]] = {
    RocketKind.LAUNCH: _launch_law,
    RocketKind.BALLISTIC: _ballistic_law,
}


def update_rocket(r: Rocket) -> bool:
    """Advance *r* one tick.  Returns True when it must burst now."""
    r.trail.appendleft((r.x, r.y))
    burst = _ROCKET_LAWS[r.kind](r)
    if burst:
        r.exploded = True
    return burst


# ── Particles ───────────────────────────────────────────────────────

def _drift(p: Particle, rng: random.Random) -> None:
    p.speed *= p.friction
    p.x += p.cos_a * p.speed
    p.y += p.sin_a * p.speed + p.gravity


def _spark_drift(p: Particle, rng: random.Random) -> None:
    p.speed *= p.friction
    p.gravity += p.gravity_growth
    jitter = rng.uniform(-p.wander, p.wander) if p.wander else 0.0
    p.x += p.cos_a * p.speed + jitter
    p.y += p.sin_a * p.speed + p.gravity


def _below_own_decay(p: Particle) -> bool:
    return p.alpha <= p.decay


def _burnt_out(p: Particle) -> bool:
    return p.alpha <= 0.0 or p.size <= 0.0


_PARTICLE_LAWS: dict[ParticleKind, Callable[[Particle, random.Random], None]] = {
    ParticleKind.STANDARD: _drift,
    ParticleKind.MINI: _drift,
    ParticleKind.SPARK: _spark_drift,
}

_PARTICLE_FLOORS: dict[ParticleKind, Callable[[Particle], bool]] = {
    ParticleKind.STANDARD: _below_own_decay,
    ParticleKind.MINI: _below_own_decay,
    ParticleKind.SPARK: _burnt_out,
}


def update_particle(p: Particle, rng: random.Random) -> bool:
    """Advance *p* one tick.  Returns True once it crossed its fade floor."""
    p.trail.appendleft((p.x, p.y))
    _PARTICLE_LAWS[p.kind](p, rng)
    p.alpha -= p.decay
    if p.shrink:
        p.size -= p.shrink
    return _PARTICLE_FLOORS[p.kind](p)


# ── Sanity ──────────────────────────────────────────────────────────

def rocket_is_sane(r: Rocket) -> bool:
    return all(math.isfinite(v) for v in (r.x, r.y, r.speed))


def particle_is_sane(p: Particle) -> bool:
    return all(math.isfinite(v) for v in (p.x, p.y, p.speed, p.alpha, p.size))
