"""components.profile — Tunable firework styles grouped into profiles.

A *profile* bundles everything that shapes a show: how rockets fly,
what their fallout looks like, how bursts fan out and how often the
cadence launches.  Two profiles are built in:

classic   straight accelerating rockets, 30-particle stroke bursts,
          super bursts that scatter delayed mini clusters
grand     ballistic rockets, 150-spark filled bursts, super bursts
          that launch a ring of child rockets after a stagger

Any field can be overridden from ``data/tuning.toml``::

    [profiles.classic.burst]
    plain_count = 40

Ranges are ``(low, high)`` pairs; TOML arrays of two numbers.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from enum import Enum

from components.fireworks import ParticleKind, RocketKind
from core import tuning

Range = tuple[float, float]

SUPER_CLUSTER = "cluster"      # delayed mini-particle clouds on a ring
SUPER_ROCKETS = "rockets"      # delayed child rockets launched outward

LAYOUT_RANDOM = "random"
LAYOUT_EVEN = "even"


@dataclass(frozen=True)
class RocketStyle:
    kind: RocketKind = RocketKind.LAUNCH
    speed: Range = (2.0, 2.0)
    acceleration: float = 1.05
    drag: float = 0.99
    gravity: float = 0.12
    proximity: float = 12.0
    speed_floor: float = 1.5
    trail_length: int = 3
    brightness: Range = (50.0, 70.0)
    launch_sound_chance: float = 0.3
    launch_volume: float = 0.5


@dataclass(frozen=True)
class ParticleStyle:
    kind: ParticleKind = ParticleKind.STANDARD
    trail_length: int = 5
    speed: Range = (1.0, 10.0)
    friction: float = 0.95
    gravity: float = 1.0
    gravity_growth: float = 0.0
    wander: float = 0.0
    hue_spread: float = 50.0
    brightness: Range = (50.0, 80.0)
    decay: Range = (0.015, 0.03)
    size: Range = (0.0, 0.0)
    shrink: Range = (0.0, 0.0)


@dataclass(frozen=True)
class BurstStyle:
    plain_count: int = 30
    super_chance: float = 0.2
    super_count: int = 70
    super_mode: str = SUPER_CLUSTER
    secondary_count: int = 10
    secondary_delay: float = 0.05      # s before the first secondary resolves
    secondary_stagger: float = 0.0     # s added per secondary index
    ring: Range = (50.0, 100.0)        # px from the burst point
    ring_layout: str = LAYOUT_RANDOM
    cluster_count: int = 20
    child_count: int = 40              # plain burst size of a child rocket
    explosion_volume: float = 0.5
    cluster_volume: float = 0.3


@dataclass(frozen=True)
class CadenceStyle:
    timer_total: int = 30              # frames between automatic launches
    timer_total_long: int = 60
    long_chance: float = 0.2           # chance the next gap is the long one
    limiter_total: int = 5             # frames between manual launches


@dataclass(frozen=True)
class Profile:
    name: str = "classic"
    rocket: RocketStyle = field(default_factory=RocketStyle)
    particle: ParticleStyle = field(default_factory=ParticleStyle)
    mini: ParticleStyle = field(default_factory=lambda: ParticleStyle(
        kind=ParticleKind.MINI,
        speed=(1.0, 7.0),
        brightness=(70.0, 90.0),
        decay=(0.01, 0.02),
        size=(2.0, 4.0),
    ))
    burst: BurstStyle = field(default_factory=BurstStyle)
    cadence: CadenceStyle = field(default_factory=CadenceStyle)

    @property
    def super_particle_total(self) -> int:
        """Particles a super burst adds once every secondary resolved.

        Child rockets of the ``rockets`` mode are not counted: they
        burst on their own schedule.
        """
        b = self.burst
        if b.super_mode == SUPER_CLUSTER:
            return b.super_count + b.secondary_count * b.cluster_count
        return b.super_count


CLASSIC = Profile()

GRAND = Profile(
    name="grand",
    rocket=RocketStyle(
        kind=RocketKind.BALLISTIC,
        speed=(14.0, 18.0),
        drag=0.99,
        gravity=0.12,
        proximity=12.0,
        speed_floor=1.5,
        trail_length=4,
        brightness=(55.0, 75.0),
        launch_sound_chance=0.5,
    ),
    particle=ParticleStyle(
        kind=ParticleKind.SPARK,
        trail_length=1,
        speed=(1.0, 8.0),
        friction=0.96,
        gravity=0.02,
        gravity_growth=0.002,
        wander=0.3,
        hue_spread=60.0,
        brightness=(55.0, 85.0),
        decay=(0.008, 0.02),
        size=(1.5, 3.5),
        shrink=(0.01, 0.04),
    ),
    mini=ParticleStyle(
        kind=ParticleKind.MINI,
        speed=(1.0, 5.0),
        brightness=(70.0, 90.0),
        decay=(0.012, 0.025),
        size=(1.5, 3.0),
    ),
    burst=BurstStyle(
        plain_count=150,
        super_chance=0.25,
        super_count=150,
        super_mode=SUPER_ROCKETS,
        secondary_count=6,
        secondary_delay=0.1,
        secondary_stagger=0.08,
        ring=(140.0, 140.0),
        ring_layout=LAYOUT_EVEN,
        cluster_count=20,
        child_count=40,
    ),
    cadence=CadenceStyle(timer_total=45, timer_total_long=90, long_chance=0.25),
)

BUILTIN_PROFILES: dict[str, Profile] = {"classic": CLASSIC, "grand": GRAND}


# ── Loading from tuning ─────────────────────────────────────────────

def _coerce(current, value):
    """Convert a TOML value to the type of the field's current value."""
    if isinstance(current, Enum):
        return type(current)(value)
    if isinstance(current, tuple):
        lo, hi = value
        return (float(lo), float(hi))
    if isinstance(current, bool):
        return bool(value)
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return value


# String fields that only take a fixed set of values.
_CHOICES = {
    "super_mode": {SUPER_CLUSTER, SUPER_ROCKETS},
    "ring_layout": {LAYOUT_EVEN, LAYOUT_RANDOM},
}


def _override(style, data: dict, where: str):
    known = {f.name: getattr(style, f.name) for f in fields(style)}
    changes = {}
    for key, value in data.items():
        if key not in known:
            print(f"[TUNING] unknown key {where}.{key} — ignored")
            continue
        try:
            coerced = _coerce(known[key], value)
            if key in _CHOICES and coerced not in _CHOICES[key]:
                raise ValueError(f"expected one of {sorted(_CHOICES[key])}")
            changes[key] = coerced
        except (TypeError, ValueError) as exc:
            print(f"[TUNING] bad value for {where}.{key}: {value!r} ({exc}) — ignored")
    return replace(style, **changes) if changes else style


def load_profile(name: str | None = None) -> Profile:
    """Build profile *name* from the built-in defaults plus tuning overrides.

    ``None`` means ``[sim].profile`` (default ``"classic"``).  An unknown
    name with no tuning table falls back to classic.
    """
    if name is None:
        name = tuning.get("sim", "profile", "classic")
    base = BUILTIN_PROFILES.get(name)
    if base is None:
        if not tuning.section(f"profiles.{name}"):
            print(f"[TUNING] unknown profile '{name}' — using classic")
        base = replace(CLASSIC, name=name)

    prefix = f"profiles.{name}"
    parts = {}
    for part in ("rocket", "particle", "mini", "burst", "cadence"):
        data = tuning.section(f"{prefix}.{part}")
        current = getattr(base, part)
        parts[part] = _override(current, data, f"{prefix}.{part}") if data else current
    return replace(base, **parts)


def available_profiles() -> list[str]:
    """Built-in profile names plus any extra tables in the tuning file."""
    extra = [n for n in tuning.names("profiles") if n not in BUILTIN_PROFILES]
    return list(BUILTIN_PROFILES) + extra
