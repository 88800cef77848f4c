"""scenes/fireworks_scene.py — The firework show.

Controls:
    LMB hold        launch toward the pointer (automatic launches pause)
    LMB release     resume automatic launches, unpause
    Space           pause / resume
    R               reset the show
    F3              debug overlay
    F5              reload tuning (takes effect through a reset)
    Esc             quit

The scene is glue: it builds the simulation context, the renderer and
the collaborators on enter, translates pygame events into driver /
cadence calls, and tears everything down on exit.  If a background
image loaded, the canvas fades in first and the show starts after.
"""

from __future__ import annotations
import math

import pygame

from components.dev_log import DevLog
from components.profile import Profile, load_profile
from core import tuning
from core.app import App
from core.constants import (
    BACKGROUND_COLOR, HUD_DIM, HUD_HEADER, HUD_TEXT, INTRO_FADE_STEP,
)
from core.scene import Scene
from logic.assets import PROJECT_ROOT, load_background
from logic.audio import AudioService
from logic.frame_driver import DriverState, FrameDriver
from logic.simulation import FireworkSim
from scenes.fireworks_draw import CLEAR, FireworkRenderer

_GESTURES = (pygame.MOUSEBUTTONDOWN, pygame.KEYDOWN, pygame.FINGERDOWN)


class FireworksScene(Scene):

    def __init__(self, profile: str | None = None, seed: int | None = None,
                 start_paused: bool | None = None, audio: bool = True):
        self.profile_name = profile
        self.seed = seed
        self.start_paused = start_paused
        self.audio_enabled = audio

        self.sim: FireworkSim | None = None
        self.driver: FrameDriver | None = None
        self.renderer: FireworkRenderer | None = None
        self.audio: AudioService | None = None
        self.log = DevLog()
        self.debug = False
        self.opacity = 1.0
        self.intro_step = INTRO_FADE_STEP

    # ── Lifecycle ────────────────────────────────────────────────────

    def on_enter(self, app: App):
        if self.sim is not None:
            return
        w, h = app.canvas_size
        self.sim = FireworkSim(w, h, load_profile(self.profile_name), seed=self.seed)
        self.log.attach(self.sim.bus, clock=lambda: self.sim.clock)

        background = load_background()
        self.renderer = FireworkRenderer(
            (w, h), background,
            clear_mode=tuning.get("display", "clear_mode", CLEAR),
            fade_alpha=int(tuning.get("display", "fade_alpha", 26)),
            bg_color=tuple(tuning.get("display", "background_color", BACKGROUND_COLOR)),
            line_width=int(tuning.get("display", "line_width", 1)),
        )

        self.audio = AudioService.from_tuning(PROJECT_ROOT, enabled=self.audio_enabled)
        self.audio.attach(self.sim.bus)

        paused = self.start_paused
        if paused is None:
            paused = bool(tuning.get("sim", "start_paused", True))
        self.driver = FrameDriver(self.sim, paused=paused, renderer=self.renderer)

        # Intro fade only when there is something to fade in
        self.intro_step = float(tuning.get("display", "intro_fade_step", INTRO_FADE_STEP))
        self.opacity = 0.0 if background is not None else 1.0
        print(f"[MAIN] Show ready: profile={self.sim.profile.name} "
              f"canvas={w}x{h} state={self.driver.state.value}")

    def on_exit(self, app: App):
        if self.sim is not None:
            self.sim.teardown()
        if self.audio is not None:
            self.audio.close()

    def on_resize(self, width: int, height: int, app: App):
        self.sim.resize(width, height)
        self.renderer.resize(width, height)

    def on_visibility(self, active: bool, app: App):
        self.driver.set_active(active)

    @property
    def in_intro(self) -> bool:
        return self.opacity < 1.0

    # ── Input ────────────────────────────────────────────────────────

    def handle_event(self, event: pygame.event.Event, app: App):
        if event.type in _GESTURES:
            self.audio.init()

        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key, app)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.sim.cadence.press(event.pos)
        elif event.type == pygame.MOUSEMOTION:
            self.sim.cadence.move(event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.driver.resume()
            self.sim.cadence.release(event.pos, self.sim.spawner)

    def _handle_key(self, key: int, app: App):
        if key == pygame.K_SPACE:
            self.driver.toggle_pause()
        elif key == pygame.K_ESCAPE:
            app.quit()
        elif key == pygame.K_r:
            self.reset()
        elif key == pygame.K_F3:
            self.debug = not self.debug
        elif key == pygame.K_F5:
            tuning.reload()
            self.reset(load_profile(self.profile_name))

    def reset(self, profile: Profile | None = None):
        """Start the show over with a fresh log."""
        self.log.clear()
        self.sim.reset(profile)

    # ── Frame ────────────────────────────────────────────────────────

    def update(self, dt: float, app: App):
        if self.in_intro:
            self.opacity = min(1.0, self.opacity + self.intro_step)
            return
        self.driver.frame(dt)

    def draw(self, surface: pygame.Surface, app: App):
        if self.in_intro:
            self.renderer.draw_intro(surface, self.opacity)
            return

        surface.blit(self.renderer.canvas, (0, 0))
        if self.driver.state is not DriverState.RUNNING:
            self._draw_state_banner(surface, app)
        self._draw_controls_hint(surface, app)
        if self.debug:
            self._draw_debug(surface, app)

    # ── HUD ──────────────────────────────────────────────────────────

    def _draw_state_banner(self, surface: pygame.Surface, app: App):
        """Pause icon + label in the middle of the canvas."""
        cx, cy = surface.get_width() // 2, surface.get_height() // 2
        overlay = pygame.Surface((200, 80), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 160))
        surface.blit(overlay, (cx - 100, cy - 40))

        bar_w, bar_h, gap = 12, 40, 16
        bar_y = cy - bar_h // 2 - 10
        pygame.draw.rect(surface, (255, 255, 255),
                         pygame.Rect(cx - gap // 2 - bar_w, bar_y, bar_w, bar_h))
        pygame.draw.rect(surface, (255, 255, 255),
                         pygame.Rect(cx + gap // 2, bar_y, bar_w, bar_h))

        label = app.font.render(self.driver.state.value.upper(), True, (255, 255, 255))
        surface.blit(label, label.get_rect(center=(cx, cy + 25)))

    def _draw_controls_hint(self, surface: pygame.Surface, app: App):
        hint = "[Click] Launch  [Space] Pause  [R] Reset  [F3] Debug  [Esc] Quit"
        app.draw_text(surface, hint, 10, surface.get_height() - 20,
                      color=HUD_DIM, font=app.font_sm)

    def debug_lines(self, app: App) -> list[str]:
        sim = self.sim
        due = sim.scheduler.peek_time() - sim.clock
        queued = sim.bus.pending_count()
        return [
            f"profile   {sim.profile.name}",
            f"state     {self.driver.state.value}",
            f"fps       {app.clock.get_fps():5.1f}",
            f"rockets   {len(sim.rockets)}",
            f"particles {len(sim.particles)}",
            f"pending   {sim.scheduler.pending_count()}",
            f"epoch     {sim.epoch}",
            f"hue       {sim.hue:5.1f}",
            f"audio     {'on' if self.audio.available else 'off'}",
            f"next task {due:5.2f}s" if math.isfinite(due) else "next task -",
            f"events    {sum(sim.bus.stats().values())} (+{queued} queued)",
        ]

    def _draw_debug(self, surface: pygame.Surface, app: App):
        lines = self.debug_lines(app)
        y = 8
        app.draw_text_bg(surface, "Debug", 8, y, color=HUD_HEADER)
        y += 20
        for line in lines:
            app.draw_text_bg(surface, line, 8, y, color=HUD_TEXT, font=app.font_sm)
            y += 14
        y += 6
        for entry in self.log.recent(8):
            app.draw_text_bg(surface, f"{entry['t']:7.2f} [{entry['cat']}] {entry['msg']}",
                             8, y, color=HUD_DIM, font=app.font_sm)
            y += 14
