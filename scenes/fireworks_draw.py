"""scenes/fireworks_draw.py — Render step for the firework simulation.

Drawing is a pure read of entity state: nothing in here writes to a
rocket, a particle or the simulation.

The renderer keeps its own persistent canvas (so "fade" mode can leave
motion trails across frames) and a black glow layer.  Entities are
drawn onto the glow layer with colours pre-multiplied by their alpha,
then the glow layer is added onto the canvas (``BLEND_RGB_ADD``), the
additive "lighter" composite: sparks brighten the background and the
previous frame's fade instead of painting over them.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

import pygame

from components.fireworks import RENDER_STYLE, Particle, RenderStyle, Rocket
from core.constants import BACKGROUND_COLOR

if TYPE_CHECKING:
    from logic.simulation import FireworkSim

CLEAR = "clear"
FADE = "fade"


def hsla(hue: float, saturation: float, lightness: float, alpha: float = 1.0) -> tuple[int, int, int]:
    """HSL(A) → RGB with alpha pre-multiplied (for additive drawing)."""
    c = pygame.Color(0, 0, 0)
    c.hsla = (hue % 360.0,
              max(0.0, min(100.0, saturation)),
              max(0.0, min(100.0, lightness)),
              100.0)
    a = max(0.0, min(1.0, alpha))
    return int(c.r * a), int(c.g * a), int(c.b * a)


# ── Per-entity drawers ──────────────────────────────────────────────

def _stroke(surface: pygame.Surface, color, entity, width: int) -> None:
    pygame.draw.line(surface, color, entity.oldest, (entity.x, entity.y), width)


def _fill(surface: pygame.Surface, color, entity, width: int) -> None:
    radius = max(1, round(entity.size))
    pygame.draw.circle(surface, color, (round(entity.x), round(entity.y)), radius)


_DRAWERS = {
    RenderStyle.STROKE: _stroke,
    RenderStyle.FILL: _fill,
}


def draw_rocket(surface: pygame.Surface, r: Rocket, width: int = 1) -> None:
    color = hsla(r.hue, 100.0, r.brightness)
    _DRAWERS[RENDER_STYLE[r.kind]](surface, color, r, width)


def draw_particle(surface: pygame.Surface, p: Particle, width: int = 1) -> None:
    if p.alpha <= 0.0:
        return
    color = hsla(p.hue, 100.0, p.brightness, p.alpha)
    _DRAWERS[RENDER_STYLE[p.kind]](surface, color, p, width)


# ── Renderer ────────────────────────────────────────────────────────

class FireworkRenderer:
    """Owns the canvas; implements the frame driver's render hooks."""

    def __init__(self, size: tuple[int, int], background: pygame.Surface | None = None, *,
                 clear_mode: str = CLEAR, fade_alpha: int = 26,
                 bg_color: tuple[int, int, int] = BACKGROUND_COLOR,
                 line_width: int = 1):
        self.background = background
        self.clear_mode = clear_mode
        self.fade_alpha = max(0, min(255, int(fade_alpha)))
        self.bg_color = bg_color
        self.line_width = max(1, int(line_width))
        self.resize(*size)

    def resize(self, width: int, height: int) -> None:
        size = (max(1, int(width)), max(1, int(height)))
        self.size = size
        self.canvas = pygame.Surface(size)
        self.glow = pygame.Surface(size)
        self._fade = pygame.Surface(size, pygame.SRCALPHA)
        self._fade.fill((*self.bg_color, self.fade_alpha))
        self._scaled_bg = None
        if self.background is not None:
            self._scaled_bg = pygame.transform.scale(self.background, size)
            self.canvas.blit(self._scaled_bg, (0, 0))
        else:
            self.canvas.fill(self.bg_color)

    # ── Frame hooks ──────────────────────────────────────────────────

    def begin_frame(self, sim: FireworkSim) -> None:
        """Clear or fade the canvas and draw the background."""
        if self._scaled_bg is not None:
            self.canvas.blit(self._scaled_bg, (0, 0))
        elif self.clear_mode == FADE:
            self.canvas.blit(self._fade, (0, 0))
        else:
            self.canvas.fill(self.bg_color)

    def draw(self, sim: FireworkSim) -> None:
        """Draw every live entity additively onto the canvas."""
        self.glow.fill((0, 0, 0))
        for r in sim.rockets:
            draw_rocket(self.glow, r, self.line_width)
        for p in sim.particles:
            draw_particle(self.glow, p, self.line_width)
        self.canvas.blit(self.glow, (0, 0), special_flags=pygame.BLEND_RGB_ADD)

    # ── Intro ────────────────────────────────────────────────────────

    def draw_intro(self, surface: pygame.Surface, opacity: float) -> None:
        """Fade the background in before the show starts."""
        surface.fill(self.bg_color)
        if self._scaled_bg is None:
            return
        self._scaled_bg.set_alpha(int(255 * max(0.0, min(1.0, opacity))))
        surface.blit(self._scaled_bg, (0, 0))
        self._scaled_bg.set_alpha(None)
