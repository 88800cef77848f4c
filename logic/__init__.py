"""logic — Simulation systems package.

Top-level modules
-----------------
physics         — per-tick rocket / particle laws, sanity checks
scheduler       — delayed-task priority queue with an epoch guard
spawner         — rocket launches, bursts, secondaries; launch cadence
simulation      — FireworkSim context and its per-frame step
frame_driver    — RUNNING / PAUSED / INACTIVE frame gating
audio           — best-effort pygame.mixer sounds
assets          — optional background image
"""
