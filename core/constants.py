"""core/constants.py — Shared constants used across the codebase.

Centralises the few numbers that are not tuning (those live in
``data/tuning.toml``) so there's exactly one place to change them.

Unit System
-----------
All simulation distances are canvas **pixels**; all entity laws are
applied once per **tick** (one rendered frame), matching a display
refresh of ~60 Hz.  Only the delayed-task scheduler works in
**seconds** of simulation time, which advances by the frame ``dt``
while the driver is RUNNING.

    Position / distance     px
    Speed                   px / tick
    Gravity                 px / tick  (added to vertical displacement)
    Alpha / decay           0..1, decay per tick
    Delays                  s (simulation clock)
    Hue                     degrees 0..360
    Brightness              % lightness 0..100
"""

import math

TAU = 2.0 * math.pi

# ── Window defaults (overridden by [display]) ──────────────────────
DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 720
DEFAULT_FPS = 60
DEFAULT_TITLE = "Skyburst"

# ── Colours ────────────────────────────────────────────────────────
BACKGROUND_COLOR = (0, 0, 0)
HUD_TEXT = (220, 220, 220)
HUD_DIM = (150, 150, 150)
HUD_HEADER = (100, 180, 255)

# ── Sound kinds ────────────────────────────────────────────────────
SOUND_LAUNCH = "launch"
SOUND_EXPLOSION = "explosion"
SOUND_CLUSTER = "cluster"
SOUND_KINDS = (SOUND_LAUNCH, SOUND_EXPLOSION, SOUND_CLUSTER)

# ── Timing ─────────────────────────────────────────────────────────
RESIZE_DEBOUNCE = 0.25     # s of quiet before a resize is applied
INTRO_FADE_STEP = 0.05     # canvas opacity gained per intro frame
