# heartrun/tests/world_gen_tests.py
"""
World generation checks: gap/width/height ranges, frontier lookahead,
seeded reproducibility, obstacle placement and the final level's gold rule.

Usage (from repo root):
  python -m heartrun.tests.world_gen_tests
  pytest heartrun/tests/world_gen_tests.py
"""

from __future__ import annotations
import math
import random
import sys
from dataclasses import replace

from heartrun.game.config import (
    WIDTH, GROUND_Y, LEVELS, FINAL_LEVEL, PLAT_GAP_MIN, PLAT_GAP_MAX, GAP_WIDENING,
    PLAT_MIN_W, PLAT_MAX_W, PLAT_Y_MIN, PLAT_Y_MAX, FRONTIER_START_X,
    HEART_R, GOLD_R, OBSTACLE_R, OBSTACLE_AMPLITUDE, OBSTACLE_PHASE_STEP
)
from heartrun.game.level import Heart, Obstacle, Platform, WorldGen


def make_gen(level_index: int = 0, seed: int = 123) -> WorldGen:
    return WorldGen(LEVELS[level_index], random.Random(seed), gold_only=(level_index == FINAL_LEVEL))


def test_consecutive_gaps_within_range():
    for i, lvl in enumerate(LEVELS):
        gen = make_gen(i, seed=1000 + i)
        gen.ensure_world(0.0)
        gen.ensure_world(20_000.0)
        plats = gen.platforms
        assert len(plats) > 20, "expected a long ribbon of platforms"

        lo = PLAT_GAP_MIN + (GAP_WIDENING if lvl.gap_size == "wider" else 0)
        hi = PLAT_GAP_MAX + (GAP_WIDENING if lvl.gap_size == "wider" else 0)
        assert lo <= plats[0].x - FRONTIER_START_X <= hi
        for a, b in zip(plats, plats[1:]):
            gap = b.x - a.right
            assert lo <= gap <= hi, f"level {i}: gap {gap:.1f} outside [{lo}, {hi}]"
        for p in plats:
            assert PLAT_MIN_W <= p.w <= PLAT_MAX_W
            assert PLAT_Y_MIN <= p.y <= PLAT_Y_MAX


def test_frontier_runs_two_screens_ahead_and_never_moves_back():
    gen = make_gen(1)
    last = gen.last_plat_end_x
    for cam in range(0, 12_000, 137):
        gen.ensure_world(float(cam))
        assert gen.last_plat_end_x >= cam + 2 * WIDTH
        assert gen.last_plat_end_x >= last
        last = gen.last_plat_end_x
        assert gen.platforms[-1].right == gen.last_plat_end_x


def test_ensure_world_is_noop_when_frontier_is_ahead():
    gen = make_gen(0)
    gen.ensure_world(0.0)
    n = len(gen.platforms)
    assert gen.ensure_world(0.0) == 0
    assert len(gen.platforms) == n


def test_same_seed_same_layout():
    a, b = make_gen(3, seed=42), make_gen(3, seed=42)
    a.ensure_world(5000.0)
    b.ensure_world(5000.0)
    assert a.platforms == b.platforms
    assert a.hearts == b.hearts
    assert a.obstacles == b.obstacles

    c = make_gen(3, seed=43)
    c.ensure_world(5000.0)
    assert c.platforms != a.platforms


def test_hearts_on_platform_sit_above_its_surface():
    gen = make_gen(0, seed=5)
    plat = Platform(x=1000.0, y=480.0, w=120.0)
    for _ in range(200):
        gen.hearts.clear()
        spawned = gen.spawn_hearts_on_platform(plat, gold=False)
        assert 1 <= len(spawned) <= 2
        for h in spawned:
            assert not h.gold and h.r == HEART_R and not h.collected
            assert plat.x + 20 <= h.x <= plat.right - 20
            assert plat.y - 50 <= h.y <= plat.y - 20

    gen.hearts.clear()
    gold = gen.spawn_hearts_on_platform(plat, gold=True)
    assert len(gold) == 1 and gold[0].gold and gold[0].r == GOLD_R


def test_floating_heart_within_ground_jump_reach():
    gen = make_gen(0, seed=6)
    for _ in range(200):
        h = gen.spawn_floating_heart(500.0, gold=False)
        assert 560.0 <= h.x <= 680.0
        assert GROUND_Y - 120 <= h.y <= GROUND_Y - 30


def test_obstacle_chance_and_placement():
    plat = Platform(x=1000.0, y=480.0, w=140.0)

    never = WorldGen(replace(LEVELS[0], obstacle_chance=0.0), random.Random(1))
    assert all(never.spawn_obstacle(plat) is None for _ in range(200))

    always = WorldGen(replace(LEVELS[2], obstacle_chance=1.0), random.Random(2))
    obstacles = [always.spawn_obstacle(plat) for _ in range(400)]
    assert all(o is not None for o in obstacles)
    on_plat = [o for o in obstacles if o.base_y == plat.y - OBSTACLE_R]
    on_ground = [o for o in obstacles if o.base_y == GROUND_Y - OBSTACLE_R]
    assert len(on_plat) + len(on_ground) == len(obstacles)
    assert 0.45 < len(on_plat) / len(obstacles) < 0.75
    for o in on_plat:
        assert plat.x + 20 <= o.x <= plat.right - 20
    for o in on_ground:
        assert plat.x - 100 <= o.x <= plat.x - 40
    assert any(o.moving for o in obstacles) and not all(o.moving for o in obstacles)

    still = WorldGen(replace(LEVELS[0], obstacle_chance=1.0), random.Random(3))
    assert not any(still.spawn_obstacle(plat).moving for _ in range(100))


def test_obstacle_oscillation_steps_phase():
    o = Obstacle(x=0.0, base_y=500.0, y=500.0, phase=0.0, moving=True)
    o.update_movement()
    assert o.y == 500.0 and math.isclose(o.phase, OBSTACLE_PHASE_STEP)
    o.update_movement()
    assert math.isclose(o.y, 500.0 + math.sin(OBSTACLE_PHASE_STEP) * OBSTACLE_AMPLITUDE)

    s = Obstacle(x=0.0, base_y=500.0, y=500.0, phase=1.0, moving=False)
    s.update_movement()
    assert s.y == 500.0 and s.phase == 1.0


def test_final_level_keeps_one_gold_heart_in_flight():
    gen = make_gen(FINAL_LEVEL, seed=9)
    for cam in range(0, 8000, 250):
        gen.ensure_world(float(cam))
        live = gen.uncollected_hearts()
        assert len(live) == 1 and live[0].gold

    live[0].collected = True
    gen.ensure_world(7750.0)   # frontier already far enough: nothing new
    assert len(gen.uncollected_hearts()) == 0
    gen.ensure_world(12_000.0)
    live = gen.uncollected_hearts()
    assert len(live) == 1 and live[0].gold
    assert all(h.gold for h in gen.hearts)


def test_cull_drops_objects_a_screen_behind_camera():
    gen = make_gen(0)
    gen.platforms = [Platform(x=0.0, y=480.0, w=100.0), Platform(x=900.0, y=480.0, w=100.0)]
    gen.hearts = [Heart(x=150.0, y=400.0), Heart(x=950.0, y=400.0, collected=True)]
    gen.obstacles = [Obstacle(x=199.0, base_y=546.0, y=546.0), Obstacle(x=1200.0, base_y=546.0, y=546.0)]
    gen.cull(1000.0)   # clean line at x=200
    assert [p.x for p in gen.platforms] == [900.0]
    assert [h.x for h in gen.hearts] == [950.0]
    assert [o.x for o in gen.obstacles] == [1200.0]


TESTS = [
    test_consecutive_gaps_within_range,
    test_frontier_runs_two_screens_ahead_and_never_moves_back,
    test_ensure_world_is_noop_when_frontier_is_ahead,
    test_same_seed_same_layout,
    test_hearts_on_platform_sit_above_its_surface,
    test_floating_heart_within_ground_jump_reach,
    test_obstacle_chance_and_placement,
    test_obstacle_oscillation_steps_phase,
    test_final_level_keeps_one_gold_heart_in_flight,
    test_cull_drops_objects_a_screen_behind_camera,
]


def main():
    try:
        for t in TESTS:
            t()
            print(f"✓ {t.__name__}")
    except AssertionError as e:
        print(f"✗ Test failed: {e}", file=sys.stderr)
        sys.exit(1)
    print("🎉 World generation tests passed")


if __name__ == "__main__":
    main()
