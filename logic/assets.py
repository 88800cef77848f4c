"""logic/assets.py — Optional background image.

The show runs with or without a background: a missing or unreadable
file is reported once and ``None`` comes back.
"""

from __future__ import annotations
from pathlib import Path

import pygame

from core import tuning

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def resolve(path: str | Path) -> Path:
    """Resolve *path* against the project root unless it is absolute."""
    p = Path(path)
    return p if p.is_absolute() else PROJECT_ROOT / p


def load_background(path: str | Path | None = None) -> pygame.Surface | None:
    """Load the background image, or None if there isn't a usable one.

    *path* defaults to ``[assets].background``.
    """
    if path is None:
        path = tuning.get("assets", "background", "media/background.jpg")
    if not path:
        return None

    p = resolve(path)
    if not p.exists():
        print(f"[ASSETS] background {p} not found — flat background")
        return None
    try:
        image = pygame.image.load(str(p))
    except (pygame.error, OSError) as exc:
        print(f"[ASSETS] background {p} failed to load ({exc}) — flat background")
        return None

    if pygame.display.get_surface() is not None:
        image = image.convert()
    print(f"[ASSETS] Loaded background {p.name} {image.get_width()}x{image.get_height()}")
    return image
