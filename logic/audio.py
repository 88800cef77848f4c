"""logic/audio.py — Best-effort firework sounds over ``pygame.mixer``.

Three named sounds: ``launch``, ``explosion`` and ``cluster``.  The
service starts silent and only opens the mixer on the first user
gesture (``init()``), so every call before that is a no-op.  Any
failure while opening the mixer or loading a file disables sound for
the rest of the run; the show itself never notices.

    audio = AudioService(media_dir, {"launch": "launch.mp3", ...})
    audio.attach(sim.bus)          # plays on RocketLaunched / RocketBurst / ClusterBurst
    ...
    audio.init()                   # first click / key press
    audio.play_sound("explosion", 0.5)

Cluster sounds come in bursts of ten; they are throttled to one per
``cluster_throttle`` seconds and rotate through a pool of reserved
mixer channels so a new one cuts off the oldest.
"""

from __future__ import annotations
import time
from pathlib import Path
from typing import Callable

import pygame

from core import tuning
from core.constants import SOUND_CLUSTER, SOUND_EXPLOSION, SOUND_KINDS, SOUND_LAUNCH
from core.events import EventBus

DEFAULT_FILES = {
    SOUND_LAUNCH: "launch.mp3",
    SOUND_EXPLOSION: "explode.mp3",
    SOUND_CLUSTER: "cluster.mp3",
}


class AudioService:
    """Fire-and-forget sound playback; a permanent no-op once it fails."""

    def __init__(self, media_dir: str | Path, files: dict[str, str] | None = None, *,
                 enabled: bool = True, cluster_throttle: float = 0.05,
                 pool_size: int = 20,
                 clock: Callable[[], float] = time.monotonic):
        self.media_dir = Path(media_dir)
        self.files = dict(files or DEFAULT_FILES)
        self.enabled = enabled
        self.cluster_throttle = cluster_throttle
        self.pool_size = max(1, int(pool_size))
        self._clock = clock

        self.available = False
        self.failed = False
        self._sounds: dict[str, pygame.mixer.Sound] = {}
        self._pool: list[pygame.mixer.Channel] = []
        self._pool_index = 0
        self._last_cluster = float("-inf")
        self.played = 0

    @classmethod
    def from_tuning(cls, root: Path, *, enabled: bool = True) -> AudioService:
        """Build from ``[audio]`` and ``[assets]``; paths relative to *root*."""
        media = Path(tuning.get("assets", "media_dir", "media"))
        if not media.is_absolute():
            media = root / media
        files = dict(DEFAULT_FILES)
        files.update(tuning.section("assets.sounds"))
        return cls(
            media, files,
            enabled=enabled and bool(tuning.get("audio", "enabled", True)),
            cluster_throttle=float(tuning.get("audio", "cluster_throttle", 0.05)),
            pool_size=int(tuning.get("audio", "cluster_pool_size", 20)),
        )

    # ── Lifecycle ────────────────────────────────────────────────────

    def init(self) -> bool:
        """Open the mixer and load every sound.  Safe to call repeatedly."""
        if self.available or self.failed or not self.enabled:
            return self.available

        opened = False
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
                opened = True
            sounds = {}
            for kind in SOUND_KINDS:
                name = self.files.get(kind)
                if not name:
                    raise FileNotFoundError(f"no file configured for '{kind}'")
                sounds[kind] = pygame.mixer.Sound(str(self.media_dir / name))
            channels = max(pygame.mixer.get_num_channels(), self.pool_size + 8)
            pygame.mixer.set_num_channels(channels)
            pygame.mixer.set_reserved(self.pool_size)
            self._pool = [pygame.mixer.Channel(i) for i in range(self.pool_size)]
        except (pygame.error, OSError) as exc:
            print(f"[AUDIO] init failed: {exc} — sound disabled")
            self.failed = True
            if opened and pygame.mixer.get_init():
                pygame.mixer.quit()
            return False

        self._sounds = sounds
        self.available = True
        print(f"[AUDIO] Loaded {len(sounds)} sounds from {self.media_dir}")
        return True

    def close(self) -> None:
        """Stop everything and release the mixer."""
        if not self.available:
            return
        self.available = False
        self._sounds.clear()
        self._pool.clear()
        if pygame.mixer.get_init():
            pygame.mixer.stop()
            pygame.mixer.quit()

    # ── Playback ─────────────────────────────────────────────────────

    def play_sound(self, kind: str, volume: float = 0.5):
        """Start *kind* at *volume*.  Returns the channel, or None if silent."""
        if not self.available:
            return None
        sound = self._sounds.get(kind)
        if sound is None:
            return None
        channel = sound.play()
        if channel is not None:
            channel.set_volume(volume)
            self.played += 1
        return channel

    def play_cluster(self, volume: float = 0.3):
        """Throttled cluster sound on the next pooled channel."""
        if not self.available:
            return None
        now = self._clock()
        if now - self._last_cluster < self.cluster_throttle:
            return None
        channel = self._pool[self._pool_index]
        channel.play(self._sounds[SOUND_CLUSTER])
        channel.set_volume(volume)
        self._pool_index = (self._pool_index + 1) % len(self._pool)
        self._last_cluster = now
        self.played += 1
        return channel

    # ── Bus wiring ───────────────────────────────────────────────────

    def attach(self, bus: EventBus) -> None:
        bus.subscribe("RocketLaunched", self._on_launch)
        bus.subscribe("RocketBurst", self._on_burst)
        bus.subscribe("ClusterBurst", self._on_cluster)

    def _on_launch(self, ev) -> None:
        if ev.volume > 0:
            self.play_sound(SOUND_LAUNCH, ev.volume)

    def _on_burst(self, ev) -> None:
        if ev.volume > 0:
            self.play_sound(SOUND_EXPLOSION, ev.volume)

    def _on_cluster(self, ev) -> None:
        if ev.volume > 0:
            self.play_cluster(ev.volume)
