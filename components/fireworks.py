"""components.fireworks — Rocket and Particle entity data.

Entities are plain dataclasses tagged with a *kind*.  The per-frame
laws live in ``logic.physics`` and the drawing rules in
``scenes.fireworks_draw``; both dispatch on the tag, so every rocket
(and every particle) shares one field layout regardless of variant.

All coordinates are canvas pixels, all rates are per tick.
"""

from __future__ import annotations
import math
from collections import deque
from dataclasses import dataclass, field
from enum import Enum


class RocketKind(Enum):
    """How a rocket moves and when it bursts."""
    LAUNCH = "launch"          # accelerates in a straight line; bursts at target distance
    BALLISTIC = "ballistic"    # drag + gravity; bursts near target or when spent


class ParticleKind(Enum):
    """Post-burst fallout variants."""
    STANDARD = "standard"      # stroke trail, constant gravity
    MINI = "mini"              # filled dot from a cluster burst
    SPARK = "spark"            # filled dot that shrinks, wanders, falls faster


class RenderStyle(Enum):
    STROKE = "stroke"          # line from oldest trail point to current point
    FILL = "fill"              # filled circle at current point


RENDER_STYLE: dict[Enum, RenderStyle] = {
    RocketKind.LAUNCH: RenderStyle.STROKE,
    RocketKind.BALLISTIC: RenderStyle.STROKE,
    ParticleKind.STANDARD: RenderStyle.STROKE,
    ParticleKind.MINI: RenderStyle.FILL,
    ParticleKind.SPARK: RenderStyle.FILL,
}


def make_trail(x: float, y: float, length: int) -> deque:
    """Fixed-length ring of past positions, pre-filled with (x, y).

    Newest point is at index 0; ``appendleft`` drops the oldest from
    the right end once the ring is full.
    """
    length = max(1, int(length))
    return deque([(x, y)] * length, maxlen=length)


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x1 - x2, y1 - y2)


@dataclass
class Rocket:
    """The rising firework before it bursts."""

    kind: RocketKind
    x: float
    y: float
    sx: float                  # origin
    sy: float
    tx: float                  # target
    ty: float
    angle: float               # rad, fixed at launch (origin → target)
    speed: float               # px / tick
    hue: float = 120.0
    brightness: float = 60.0   # % lightness
    depth: int = 0             # 0 = launched by cadence/click, 1+ = child of a burst

    # Variant laws (fixed at creation)
    acceleration: float = 1.05     # LAUNCH: speed multiplier per tick
    drag: float = 0.99             # BALLISTIC: velocity multiplier per tick
    gravity: float = 0.12          # BALLISTIC: px / tick² downward
    proximity: float = 12.0        # BALLISTIC: burst when this close to target
    speed_floor: float = 1.5       # BALLISTIC: burst when slower than this

    # Derived / evolving state
    vx: float = 0.0
    vy: float = 0.0
    distance_to_target: float = 0.0
    distance_traveled: float = 0.0
    exploded: bool = False
    trail: deque = field(default_factory=deque)

    def __post_init__(self):
        self.distance_to_target = distance(self.sx, self.sy, self.tx, self.ty)
        self.vx = math.cos(self.angle) * self.speed
        self.vy = math.sin(self.angle) * self.speed
        if not self.trail:
            self.trail = make_trail(self.x, self.y, 3)

    @property
    def oldest(self) -> tuple[float, float]:
        return self.trail[-1]


@dataclass
class Particle:
    """A single point of post-burst fallout."""

    kind: ParticleKind
    x: float
    y: float
    angle: float               # rad, fixed at creation
    speed: float               # px / tick, decays by friction
    hue: float = 120.0
    brightness: float = 65.0
    alpha: float = 1.0
    decay: float = 0.02        # alpha lost per tick
    friction: float = 0.95     # speed multiplier per tick
    gravity: float = 1.0       # px / tick added to y
    gravity_growth: float = 0.0    # gravity gained per tick (SPARK)
    wander: float = 0.0        # max lateral jitter per tick (SPARK)
    size: float = 0.0          # px radius, FILL variants only
    shrink: float = 0.0        # size lost per tick (SPARK)
    trail: deque = field(default_factory=deque)

    def __post_init__(self):
        self.cos_a = math.cos(self.angle)
        self.sin_a = math.sin(self.angle)
        if not self.trail:
            self.trail = make_trail(self.x, self.y, 5)

    @property
    def oldest(self) -> tuple[float, float]:
        return self.trail[-1]
