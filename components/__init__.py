"""components — Firework entity and style dataclasses.

Submodules
----------
fireworks      Rocket, Particle, their kind tags and render styles
profile        RocketStyle, ParticleStyle, BurstStyle, CadenceStyle, Profile
dev_log        DevLog ring buffer fed from the simulation's event bus

The common names are re-exported here so callers can do
``from components import Rocket, Profile``.
"""

# ── Entities ─────────────────────────────────────────────────────────
from components.fireworks import (
    Rocket, Particle, RocketKind, ParticleKind, RenderStyle, RENDER_STYLE,
)

# ── Styles / profiles ────────────────────────────────────────────────
from components.profile import (
    RocketStyle, ParticleStyle, BurstStyle, CadenceStyle, Profile,
    CLASSIC, GRAND, load_profile,
)

# ── Diagnostics ──────────────────────────────────────────────────────
from components.dev_log import DevLog

__all__ = [
    # entities
    "Rocket", "Particle", "RocketKind", "ParticleKind", "RenderStyle", "RENDER_STYLE",
    # profiles
    "RocketStyle", "ParticleStyle", "BurstStyle", "CadenceStyle", "Profile",
    "CLASSIC", "GRAND", "load_profile",
    # diagnostics
    "DevLog",
]
