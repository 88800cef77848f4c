"""test_render.py — Drawing is a pure read; the canvas composes additively.

Runs headless (SDL dummy drivers).

Tests:
1. HSL(A) colours with pre-multiplied alpha
2. Stroke and fill drawers; fully faded particles are skipped
3. Renderer never mutates the simulation
4. Clear / fade / background frame starts; additive glow
5. Intro fade

Run:  python test_render.py      (or: pytest test_render.py)
"""
from __future__ import annotations
import os, sys, traceback

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame

from components.fireworks import Particle, ParticleKind, Rocket, RocketKind, make_trail
from components.profile import CLASSIC, GRAND
from core import tuning
from logic.simulation import FireworkSim
from scenes.fireworks_draw import (
    FADE, FireworkRenderer, draw_particle, draw_rocket, hsla,
)

tuning.clear()

DT = 1.0 / 60.0


# ── Test harness ─────────────────────────────────────────────────────

_passed = 0
_failed = 0

def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")

def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    msg = f"  [FAIL] {label}"
    if detail:
        msg += f" — {detail}"
    print(msg)

def check(cond: bool, label: str, detail: str = ""):
    if cond:
        ok(label)
    else:
        fail(label, detail)
    assert cond, f"{label} {detail}".strip()


def _rgb(surface: pygame.Surface, pos: tuple[int, int]) -> tuple[int, int, int]:
    c = surface.get_at(pos)
    return c.r, c.g, c.b


def _red_dot(x: float, y: float, alpha: float = 1.0) -> Particle:
    return Particle(kind=ParticleKind.MINI, x=x, y=y, angle=0.0, speed=0.0,
                    hue=0.0, brightness=50.0, alpha=alpha, size=3.0)


# ═══════════════════════════════════════════════════════════════════════
#  TEST 1 — Colours
# ═══════════════════════════════════════════════════════════════════════

def test_hsla_premultiplies_alpha():
    print("\n=== Test 1: Colours ===")
    r, g, b = hsla(0.0, 100.0, 50.0)
    check(r >= 250 and g <= 5 and b <= 5, "1a: hue 0 is red", f"rgb=({r}, {g}, {b})")
    r2, _, _ = hsla(0.0, 100.0, 50.0, 0.5)
    check(abs(r2 - r / 2) <= 1, "1b: half alpha halves the channels", f"r={r2}")
    check(hsla(360.0 + 120.0, 100.0, 50.0) == hsla(120.0, 100.0, 50.0),
          "1c: hue wraps at 360")
    check(hsla(200.0, 100.0, 60.0, 0.0) == (0, 0, 0), "1d: zero alpha draws nothing")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 2 — Drawers
# ═══════════════════════════════════════════════════════════════════════

def test_stroke_and_fill_drawers():
    print("\n=== Test 2: Drawers ===")
    surf = pygame.Surface((40, 40))
    rocket = Rocket(kind=RocketKind.LAUNCH, x=25.0, y=30.0, sx=5.0, sy=30.0,
                    tx=100.0, ty=30.0, angle=0.0, speed=1.0, hue=120.0,
                    brightness=60.0, trail=make_trail(5.0, 30.0, 3))
    draw_rocket(surf, rocket)
    check(_rgb(surf, (15, 30))[1] > 0, "2a: rocket stroked from oldest trail point")
    check(_rgb(surf, (15, 20)) == (0, 0, 0), "2b: stroke stays on its line")

    surf.fill((0, 0, 0))
    draw_particle(surf, _red_dot(10.0, 10.0))
    check(_rgb(surf, (10, 10))[0] > 200, "2c: mini particle drawn as a filled dot")

    surf.fill((0, 0, 0))
    draw_particle(surf, _red_dot(10.0, 10.0, alpha=0.0))
    check(_rgb(surf, (10, 10)) == (0, 0, 0), "2d: faded-out particle skipped")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 3 — Purity
# ═══════════════════════════════════════════════════════════════════════

def test_render_does_not_mutate_state():
    print("\n=== Test 3: Render purity ===")
    for profile in (CLASSIC, GRAND):
        sim = FireworkSim(320, 240, profile, seed=21)
        sim.spawner.create_burst(160.0, 120.0, True)
        sim.spawner.launch_from_ground((100.0, 50.0))
        for _ in range(3):
            sim.step(DT)
        renderer = FireworkRenderer((320, 240))
        before = sim.snapshot()
        for _ in range(3):
            renderer.begin_frame(sim)
            renderer.draw(sim)
        check(sim.snapshot() == before, f"3a: drawing leaves {profile.name} state untouched")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 4 — Frame start and composite
# ═══════════════════════════════════════════════════════════════════════

def test_clear_fade_and_background():
    print("\n=== Test 4: Frame start ===")
    sim = FireworkSim(32, 32, CLASSIC, seed=22)

    cleared = FireworkRenderer((32, 32))
    cleared.canvas.fill((200, 200, 200))
    cleared.begin_frame(sim)
    check(_rgb(cleared.canvas, (5, 5)) == cleared.bg_color, "4a: clear mode wipes the canvas")

    faded = FireworkRenderer((32, 32), clear_mode=FADE, fade_alpha=26)
    faded.canvas.fill((200, 200, 200))
    faded.begin_frame(sim)
    r = _rgb(faded.canvas, (5, 5))[0]
    check(0 < r < 200, "4b: fade mode darkens without clearing", f"r={r}")

    bg = pygame.Surface((8, 8))
    bg.fill((10, 20, 30))
    backed = FireworkRenderer((32, 32), bg)
    backed.begin_frame(sim)
    check(_rgb(backed.canvas, (20, 20)) == (10, 20, 30), "4c: background scaled to canvas")

    backed.resize(64, 48)
    check(backed.canvas.get_size() == (64, 48), "4d: resize rebuilds the canvas")
    backed.begin_frame(sim)
    check(_rgb(backed.canvas, (60, 40)) == (10, 20, 30), "4e: background follows resize")


def test_background_on_canvas_before_first_frame():
    bg = pygame.Surface((8, 8))
    bg.fill((40, 80, 120))
    renderer = FireworkRenderer((16, 16), bg)
    check(_rgb(renderer.canvas, (2, 2)) == (40, 80, 120),
          "4h: paused canvas shows the background right after construction")
    renderer.resize(24, 20)
    check(_rgb(renderer.canvas, (22, 18)) == (40, 80, 120),
          "4i: paused canvas keeps the background after a resize")

    flat = FireworkRenderer((16, 16), bg_color=(5, 6, 7))
    check(_rgb(flat.canvas, (2, 2)) == (5, 6, 7), "4j: no background → flat colour")


def test_glow_adds_onto_canvas():
    sim = FireworkSim(32, 32, CLASSIC, seed=23)
    sim.particles.append(_red_dot(10.0, 10.0))
    renderer = FireworkRenderer((32, 32), bg_color=(0, 0, 100))
    renderer.begin_frame(sim)
    renderer.draw(sim)
    r, g, b = _rgb(renderer.canvas, (10, 10))
    check(r > 200 and b == 100, "4f: entity light adds to the background",
          f"rgb=({r}, {g}, {b})")
    check(_rgb(renderer.canvas, (25, 25)) == (0, 0, 100), "4g: unlit pixels keep the background")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 5 — Intro
# ═══════════════════════════════════════════════════════════════════════

def test_intro_fade():
    print("\n=== Test 5: Intro ===")
    bg = pygame.Surface((8, 8))
    bg.fill((100, 100, 100))
    renderer = FireworkRenderer((16, 16), bg)
    screen = pygame.Surface((16, 16))

    renderer.draw_intro(screen, 0.0)
    check(_rgb(screen, (4, 4)) == renderer.bg_color, "5a: opacity 0 shows only the base colour")
    renderer.draw_intro(screen, 0.5)
    mid = _rgb(screen, (4, 4))[0]
    check(0 < mid < 100, "5b: half opacity blends", f"r={mid}")
    renderer.draw_intro(screen, 1.0)
    check(_rgb(screen, (4, 4)) == (100, 100, 100), "5c: full opacity shows the background")


# ═══════════════════════════════════════════════════════════════════════
#  MAIN
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    tests = [v for k, v in sorted(globals().items()) if k.startswith("test_") and callable(v)]
    for fn in tests:
        try:
            fn()
        except AssertionError:
            pass
        except Exception:
            _failed += 1
            print(f"\n  [CRASH] {fn.__name__} — unhandled exception:")
            traceback.print_exc()

    total = _passed + _failed
    print(f"\n{'=' * 60}")
    print(f"  Render Tests: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
