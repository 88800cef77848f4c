"""test_simulation.py — Simulation step, spawner and delayed-task scheduler.

Tests:
1. Scheduler ordering, epoch guard, peek and chained tasks
2. Plain burst: C particles spawned at the burst point
3. Super burst (cluster mode): super_count now, + K × cluster_count later
4. Super burst (rockets mode): K child rockets that burst plain
5. Rocket launched toward P bursts at P with the plain count
6. Removal accounting: one update per entity per step, removed exactly once
7. Reset / teardown abandon pending secondaries
8. Bad entity state is dropped without stopping the step
9. Spawn points are clamped into the canvas

Run:  python test_simulation.py      (or: pytest test_simulation.py)
"""
from __future__ import annotations
import math, sys, traceback
from dataclasses import replace

from components.fireworks import Particle, ParticleKind, Rocket, RocketKind, distance
from components.profile import CLASSIC, GRAND
from core import tuning
from logic.scheduler import TaskScheduler
from logic.simulation import FireworkSim
import logic.simulation as simulation_mod

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


# ── Builders ─────────────────────────────────────────────────────────

def _no_super(profile=CLASSIC):
    return replace(profile, burst=replace(profile.burst, super_chance=0.0))


def _collect(sim: FireworkSim, *names: str) -> dict[str, list]:
    got: dict[str, list] = {n: [] for n in names}
    for n in names:
        sim.bus.subscribe(n, got[n].append)
    return got


def _run_until_quiet(sim: FireworkSim, limit: int = 600) -> int:
    for frame in range(1, limit + 1):
        sim.step(DT)
        sim.bus.drain()
        if not sim.rockets and sim.scheduler.pending_count() == 0:
            return frame
    raise AssertionError(f"still busy after {limit} frames")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 1 — Scheduler
# ═══════════════════════════════════════════════════════════════════════

def test_scheduler_order_and_epoch():
    print("\n=== Test 1: Scheduler ===")
    sched = TaskScheduler()
    ran = []
    sched.register_handler("k", lambda data, now: ran.append(data["n"]))

    sched.post(0.2, "k", {"n": "late"})
    sched.post(0.1, "k", {"n": "a"})
    sched.post(0.1, "k", {"n": "b"})
    check(sched.tick(0.05) == 0 and ran == [], "1a: nothing runs before it is due")
    check(sched.tick(0.1) == 2 and ran == ["a", "b"], "1b: earliest first, FIFO on ties",
          f"ran={ran}")

    sched.post(0.3, "k", {"n": "stale"})
    sched.advance_epoch()
    check(sched.pending_count() == 0, "1c: advance_epoch invalidates pending tasks")
    sched.tick(1.0)
    check(ran == ["a", "b"], "1d: stale tasks never run", f"ran={ran}")
    check(sched.tasks_stale == 2, "1e: stale tasks counted", f"stale={sched.tasks_stale}")


def test_scheduler_peek_and_chain():
    sched = TaskScheduler()
    ran = []

    def chain(data, now):
        ran.append(data["n"])
        if data["n"] == 1:
            sched.post(now, "k", {"n": 2})

    sched.register_handler("k", chain)
    sched.register_handler("other", lambda data, now: ran.append("other"))
    sched.post(0.1, "k", {"n": 1})
    sched.post(0.4, "other")
    check(sched.peek_time() == 0.1, "1f: peek_time reports the next due task")
    sched.tick(0.1)
    check(ran == [1, 2], "1g: task posted as due runs in the same tick", f"ran={ran}")
    sched.advance_epoch()
    check(sched.peek_time() == math.inf and sched.tasks_stale == 1,
          "1h: stale tasks are skipped; empty queue peeks at infinity")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 2 — Plain burst
# ═══════════════════════════════════════════════════════════════════════

def test_plain_burst_spawns_at_point():
    print("\n=== Test 2: Plain burst ===")
    sim = FireworkSim(800, 600, CLASSIC, seed=1)
    got = _collect(sim, "RocketBurst")
    added = sim.spawner.create_burst(200.0, 150.0, False)
    sim.bus.drain()

    check(added == 30 and len(sim.particles) == 30, "2a: plain burst adds plain_count",
          f"added={added}")
    check(all((p.x, p.y) == (200.0, 150.0) for p in sim.particles),
          "2b: every particle starts at the burst point")
    check(all(set(p.trail) == {(200.0, 150.0)} for p in sim.particles),
          "2c: trails pre-filled with the burst point")
    check(all(p.alpha == 1.0 for p in sim.particles), "2d: particles start opaque")
    check(sim.scheduler.pending_count() == 0, "2e: plain burst schedules nothing")
    check(len(got["RocketBurst"]) == 1 and not got["RocketBurst"][0].is_super,
          "2f: one RocketBurst event")


def test_burst_respects_particle_cap():
    sim = FireworkSim(800, 600, CLASSIC, seed=1, max_particles=40)
    first = sim.spawner.create_burst(100.0, 100.0)
    second = sim.spawner.create_burst(100.0, 100.0)
    check(first == 30 and second == 10, "2g: bursts truncated at max_particles",
          f"first={first} second={second}")
    check(sim.stats["particles_capped"] == 20, "2h: capped particles counted")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 3 — Super burst, cluster mode
# ═══════════════════════════════════════════════════════════════════════

def test_super_burst_cluster_totals():
    print("\n=== Test 3: Super burst (cluster) ===")
    sim = FireworkSim(800, 600, CLASSIC, seed=2)
    got = _collect(sim, "ClusterBurst")
    added = sim.spawner.create_burst(400.0, 300.0, True)
    check(added == 70, "3a: super_count particles right away", f"added={added}")
    check(sim.scheduler.pending_count() == 10, "3b: one delayed task per secondary")

    sim.step(DT)
    sim.step(DT)
    check(len(sim.particles) == 70, "3c: secondaries wait for their delay")

    for _ in range(3):
        sim.step(DT)
    sim.bus.drain()
    expected = CLASSIC.super_particle_total
    check(expected == 70 + 10 * 20, "3d: super total formula")
    check(len(sim.particles) == expected, "3e: all clusters resolved after the delay",
          f"particles={len(sim.particles)} expected={expected}")
    check(sim.scheduler.pending_count() == 0, "3f: nothing left pending")

    minis = [p for p in sim.particles if p.kind is ParticleKind.MINI]
    check(len(minis) == 200, "3g: cluster particles are mini", f"minis={len(minis)}")
    gaps = [distance(ev.x, ev.y, 400.0, 300.0) for ev in got["ClusterBurst"]]
    check(len(gaps) == 10 and all(50.0 - 1e-9 <= g <= 100.0 + 1e-9 for g in gaps),
          "3h: clusters sit on the ring", f"gaps={[round(g) for g in gaps]}")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 4 — Super burst, rockets mode
# ═══════════════════════════════════════════════════════════════════════

def test_super_burst_child_rockets():
    print("\n=== Test 4: Super burst (rockets) ===")
    sim = FireworkSim(1600, 1200, GRAND, seed=3)
    got = _collect(sim, "RocketLaunched", "RocketBurst")
    added = sim.spawner.create_burst(800.0, 600.0, True)
    check(added == GRAND.burst.super_count, "4a: super_count sparks right away")
    check(GRAND.super_particle_total == GRAND.burst.super_count,
          "4b: child rockets not counted in the super total")

    _run_until_quiet(sim)
    children = [ev for ev in got["RocketLaunched"] if ev.depth == 1]
    check(len(children) == GRAND.burst.secondary_count, "4c: one child per secondary",
          f"children={len(children)}")
    reach = [distance(ev.tx, ev.ty, 800.0, 600.0) for ev in children]
    check(all(abs(d - 140.0) < 1e-6 for d in reach), "4d: children aim at the ring")

    child_bursts = [ev for ev in got["RocketBurst"] if ev.count == GRAND.burst.child_count]
    check(len(child_bursts) == len(children), "4e: every child bursts once",
          f"bursts={len(child_bursts)}")
    check(not any(ev.is_super for ev in child_bursts), "4f: child bursts are plain")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 5 — Launch to burst
# ═══════════════════════════════════════════════════════════════════════

def test_rocket_bursts_at_target_with_plain_count():
    print("\n=== Test 5: Launch → burst ===")
    sim = FireworkSim(800, 600, _no_super(), seed=4)
    rocket = sim.spawner.launch_from_ground((300.0, 150.0))
    check((rocket.sx, rocket.sy) == (400.0, 600.0), "5a: launched from bottom centre")

    for _ in range(500):
        sim.step(DT)
        if not sim.rockets:
            break
    check(not sim.rockets and rocket.exploded, "5b: rocket removed on its burst step")
    check(len(sim.particles) == 30, "5c: replaced by a plain burst",
          f"particles={len(sim.particles)}")
    check(all((p.x, p.y) == (300.0, 150.0) for p in sim.particles),
          "5d: burst at the target point")

    loose = sim.spawner.launch_from_ground((300.0, 150.0))
    sim.spawner.explode(loose)
    check(not loose.exploded and len(sim.particles) == 60,
          "5e: explode only spawns; the burst flag comes from the flight step")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 6 — Removal accounting
# ═══════════════════════════════════════════════════════════════════════

def test_each_particle_updated_once_per_step():
    print("\n=== Test 6: Removal accounting ===")
    sim = FireworkSim(800, 600, CLASSIC, seed=5)
    for i in range(4):
        sim.spawner.create_burst(100.0 + 150 * i, 200.0)

    calls: dict[int, int] = {}
    real = simulation_mod.update_particle

    def counting(p, rng):
        calls[id(p)] = calls.get(id(p), 0) + 1
        return real(p, rng)

    simulation_mod.update_particle = counting
    try:
        for frame in range(60):
            before = list(sim.particles)
            calls.clear()
            sim.step(DT)
            assert all(calls.get(id(p)) == 1 for p in before), f"frame {frame}"
            survivors = [p for p in before if not (p.alpha <= p.decay)]
            assert [id(p) for p in sim.particles] == [id(p) for p in survivors], \
                f"frame {frame}: wrong particles removed"
    finally:
        simulation_mod.update_particle = real
    ok("6a: every live particle updated exactly once per step")
    ok("6b: removed exactly the particles that crossed their floor, order kept")

    s = sim.stats
    check(len(sim.particles) == s["particles_spawned"] - s["particles_retired"],
          "6c: live = spawned − retired", f"live={len(sim.particles)} stats={dict(s)}")
    check(s["particles_retired"] > 0, "6d: some particles retired within a second")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 7 — Reset / teardown
# ═══════════════════════════════════════════════════════════════════════

def test_reset_abandons_pending_secondaries():
    print("\n=== Test 7: Reset / teardown ===")
    sim = FireworkSim(800, 600, CLASSIC, seed=6)
    sim.spawner.create_burst(400.0, 300.0, True)
    sim.spawner.launch_from_ground((100.0, 100.0))
    sim.reset()
    check(sim.live_count == 0, "7a: reset clears both collections")
    check(sim.scheduler.pending_count() == 0, "7b: reset abandons pending tasks")

    for _ in range(30):
        sim.step(DT)
    check(not sim.particles, "7c: stale secondaries never spawn after reset",
          f"particles={len(sim.particles)}")
    check(sim.scheduler.tasks_stale == 10, "7d: all ten secondaries discarded as stale")


def test_teardown_stops_stepping():
    sim = FireworkSim(800, 600, CLASSIC, seed=7)
    got = _collect(sim, "SimulationReset")
    sim.spawner.create_burst(400.0, 300.0, True)
    sim.teardown()
    check(sim.step(DT) is False, "7e: step refuses to run after teardown")
    check(sim.live_count == 0 and sim.scheduler.pending_count() == 0,
          "7f: teardown leaves nothing live or pending")
    check(len(got["SimulationReset"]) == 1 and got["SimulationReset"][0].teardown,
          "7g: teardown event emitted and drained")
    sim.teardown()
    check(len(got["SimulationReset"]) == 1, "7h: teardown is idempotent")


def test_reset_takes_new_profile():
    sim = FireworkSim(800, 600, CLASSIC, seed=8)
    sim.reset(GRAND)
    sim.spawner.create_burst(400.0, 300.0)
    check(len(sim.particles) == GRAND.burst.plain_count, "7i: reset swaps the profile")
    check(sim.cadence.style == GRAND.cadence, "7j: cadence follows the new profile")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 8 — Bad state
# ═══════════════════════════════════════════════════════════════════════

def test_bad_entities_are_dropped():
    print("\n=== Test 8: Bad entity state ===")
    sim = FireworkSim(800, 600, CLASSIC, seed=9)
    got = _collect(sim, "EntityDropped")
    sim.spawner.create_burst(200.0, 200.0)
    sim.particles.insert(10, Particle(kind=ParticleKind.STANDARD, x=5.0, y=5.0,
                                      angle=0.0, speed=float("nan")))
    sim.rockets.append(Rocket(kind=RocketKind.LAUNCH, x=0.0, y=0.0, sx=0.0, sy=0.0,
                              tx=100.0, ty=100.0, angle=0.5, speed=float("nan")))
    sim.step(DT)
    sim.bus.drain()

    check(len(sim.particles) == 30, "8a: only the bad particle is dropped",
          f"particles={len(sim.particles)}")
    check(not sim.rockets, "8b: bad rocket dropped")
    kinds = sorted(ev.kind for ev in got["EntityDropped"])
    check(kinds == ["particle", "rocket"], "8c: one EntityDropped per drop", f"kinds={kinds}")
    check(sim.stats["particles_dropped"] == 1 and sim.stats["rockets_dropped"] == 1,
          "8d: drops counted separately from retirements")


# ═══════════════════════════════════════════════════════════════════════
#  TEST 9 — Clamping and resize
# ═══════════════════════════════════════════════════════════════════════

def test_launch_points_are_clamped():
    print("\n=== Test 9: Clamping ===")
    sim = FireworkSim(800, 600, CLASSIC, seed=10)
    r = sim.spawner.launch_rocket((-50.0, 2000.0), (5000.0, -100.0))
    check((r.sx, r.sy) == (0.0, 600.0), "9a: origin clamped", f"origin=({r.sx}, {r.sy})")
    check((r.tx, r.ty) == (800.0, 0.0), "9b: target clamped", f"target=({r.tx}, {r.ty})")

    sim.resize(400, 300)
    r2 = sim.spawner.launch_from_ground((1000.0, 1000.0))
    check((r2.sx, r2.sy, r2.tx, r2.ty) == (200.0, 300.0, 400.0, 300.0),
          "9c: resize moves the launch site and the clamp bounds")
    check(r in sim.rockets, "9d: live rockets survive a resize")


def test_seeded_runs_repeat():
    a = FireworkSim(800, 600, CLASSIC, seed=11)
    b = FireworkSim(800, 600, CLASSIC, seed=11)
    for sim in (a, b):
        sim.spawner.launch_random()
        sim.spawner.create_burst(300.0, 200.0, True)
        for _ in range(40):
            sim.step(DT)
    check(a.snapshot() == b.snapshot(), "9e: same seed, same show")


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
    print(f"  Simulation Tests: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
