"""
core/app.py — Pygame application shell

Handles the window, main loop, and scene stack.
You don't edit this file to build a show.
You write Scenes and push/pop them.

    app = App(title="Skyburst", width=1280, height=720)
    app.push_scene(MyScene())
    app.run()

The loop is the frame callback: ``clock.tick(fps)`` throttles it to the
display refresh and every iteration hands the scene its events, one
``update(dt)`` and one ``draw``.  Resize events are debounced before
the canvas (the fixed-size render surface) follows the window, and
minimise/restore is forwarded to the scene as a visibility signal.
"""

from __future__ import annotations
import pygame
from core.constants import DEFAULT_FPS, DEFAULT_TITLE, RESIZE_DEBOUNCE
from core.scene import Scene

# Window events that hide the canvas / bring it back (pygame 2).
_HIDE_EVENTS = (pygame.WINDOWMINIMIZED, pygame.WINDOWHIDDEN)
_SHOW_EVENTS = (pygame.WINDOWRESTORED, pygame.WINDOWSHOWN)


class App:
    def __init__(self, title: str = DEFAULT_TITLE, width: int = 1280,
                 height: int = 720, fps: int = DEFAULT_FPS):
        pygame.init()
        self._windowed_size = (width, height)
        # The canvas resolution — all rendering targets this surface.
        self._virtual_size = (width, height)
        self._render_surface = pygame.Surface((width, height))
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        pygame.display.set_caption(title)
        self.clock = pygame.time.Clock()
        self.running = True
        self.fullscreen = False
        self.fps = fps
        self.dt = 0.0
        self.visible = True

        # Pending resize: (w, h, seconds of quiet so far)
        self._pending_size: tuple[int, int] | None = None
        self._resize_quiet = 0.0

        # Scene stack — only the top scene is active
        self._scenes: list[Scene] = []

        # HUD fonts — fixed size
        self.font = pygame.font.SysFont("monospace", 14)
        self.font_sm = pygame.font.SysFont("monospace", 11)
        self.font_lg = pygame.font.SysFont("monospace", 18)

    # -- Scene management --

    @property
    def scene(self) -> Scene | None:
        return self._scenes[-1] if self._scenes else None

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self._virtual_size

    def push_scene(self, scene: Scene):
        if self._scenes:
            self._scenes[-1].on_exit(self)
        self._scenes.append(scene)
        scene.on_enter(self)

    def pop_scene(self):
        if self._scenes:
            self._scenes[-1].on_exit(self)
            self._scenes.pop()
        if self._scenes:
            self._scenes[-1].on_enter(self)

    def quit(self):
        """Ask the loop to stop after the current frame."""
        self.running = False

    # -- Coordinate mapping --

    def mouse_pos(self) -> tuple[int, int]:
        """Return mouse position mapped to canvas coordinates."""
        mx, my = pygame.mouse.get_pos()
        return self._to_canvas(mx, my)

    def _to_canvas(self, x: int, y: int) -> tuple[int, int]:
        sw, sh = self.screen.get_size()
        vw, vh = self._virtual_size
        vx = int(x * vw / max(1, sw))
        vy = int(y * vh / max(1, sh))
        return max(0, min(vx, vw - 1)), max(0, min(vy, vh - 1))

    def _remap_mouse_event(self, event: pygame.event.Event) -> pygame.event.Event:
        """Return a copy of *event* with .pos mapped to canvas coords."""
        if not hasattr(event, "pos"):
            return event
        attrs: dict = {}
        for attr in ("button", "buttons", "rel", "touch", "window"):
            if hasattr(event, attr):
                attrs[attr] = getattr(event, attr)
        attrs["pos"] = self._to_canvas(*event.pos)
        return pygame.event.Event(event.type, **attrs)

    # -- Resize / visibility --

    def _queue_resize(self, w: int, h: int):
        self._pending_size = (max(1, w), max(1, h))
        self._resize_quiet = 0.0

    def _settle_resize(self, dt: float):
        """Apply a pending resize once the window stopped changing."""
        if self._pending_size is None:
            return
        self._resize_quiet += dt
        if self._resize_quiet < RESIZE_DEBOUNCE:
            return
        w, h = self._pending_size
        self._pending_size = None
        if (w, h) == self._virtual_size:
            return
        self._virtual_size = (w, h)
        self._render_surface = pygame.Surface((w, h))
        if self.scene:
            self.scene.on_resize(w, h, self)

    def _set_visible(self, visible: bool):
        if visible == self.visible:
            return
        self.visible = visible
        if self.scene:
            self.scene.on_visibility(visible, self)

    # -- Main loop --

    def run(self):
        while self.running:
            self.dt = self.clock.tick(self.fps) / 1000.0

            # Events
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_F11:
                    self.toggle_fullscreen()
                elif event.type == pygame.VIDEORESIZE and not self.fullscreen:
                    self._windowed_size = (event.w, event.h)
                    self.screen = pygame.display.set_mode(
                        (event.w, event.h), pygame.RESIZABLE)
                    self._queue_resize(event.w, event.h)
                elif event.type in _HIDE_EVENTS:
                    self._set_visible(False)
                elif event.type in _SHOW_EVENTS:
                    self._set_visible(True)
                elif self.scene:
                    if event.type in (pygame.MOUSEBUTTONDOWN,
                                      pygame.MOUSEBUTTONUP,
                                      pygame.MOUSEMOTION):
                        event = self._remap_mouse_event(event)
                    self.scene.handle_event(event, self)

            self._settle_resize(self.dt)

            # Update
            if self.scene:
                self.scene.update(self.dt, self)

            # Draw to the canvas surface, then scale to screen
            if self.scene:
                self.scene.draw(self._render_surface, self)

            pygame.transform.scale(self._render_surface,
                                   self.screen.get_size(), self.screen)
            pygame.display.flip()

        while self._scenes:
            self._scenes[-1].on_exit(self)
            self._scenes.pop()
        pygame.quit()

    def toggle_fullscreen(self):
        """Switch between windowed and fullscreen (F11)."""
        self.fullscreen = not self.fullscreen
        if self.fullscreen:
            self.screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
            self._queue_resize(*self.screen.get_size())
        else:
            self.screen = pygame.display.set_mode(
                self._windowed_size, pygame.RESIZABLE)
            self._queue_resize(*self._windowed_size)

    # -- Convenience --

    def draw_text(self, surface: pygame.Surface, text: str, x: int, y: int,
                  color=(255, 255, 255), font=None):
        """Quick text draw. Returns the rect for layout chaining."""
        f = font or self.font
        img = f.render(text, True, color)
        rect = surface.blit(img, (x, y))
        return rect

    def draw_text_bg(self, surface: pygame.Surface, text: str, x: int, y: int,
                     color=(255, 255, 255), bg=(0, 0, 0, 160), font=None,
                     pad: int = 2):
        """Draw text with a semi-transparent background box."""
        f = font or self.font
        img = f.render(text, True, color)
        w, h = img.get_size()
        bg_surf = pygame.Surface((w + pad * 2, h + pad * 2), pygame.SRCALPHA)
        bg_surf.fill(bg)
        surface.blit(bg_surf, (x - pad, y - pad))
        return surface.blit(img, (x, y))
