# heartrun/tests/heart_env_tests.py
"""
Quick tests for HeartRunEnv (Gymnasium environment).

Usage (from repo root):
  python -m heartrun.tests.heart_env_tests
  python -m heartrun.tests.heart_env_tests --render
  python -m heartrun.tests.heart_env_tests --no-api-check --no-determinism
"""

from __future__ import annotations
import argparse
import os
import sys
from typing import List, Tuple

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
import numpy as np
from gymnasium.utils.env_checker import check_env

from heartrun.env.heart_env import HeartRunEnv
from heartrun.env.observations import OBS_SIZE, NONE_AHEAD, build_observation
from heartrun.game.config import WIDTH, HEIGHT, FINAL_LEVEL, GOLD_R
from heartrun.game.level import Heart, Obstacle
from heartrun.game.session import GameState

SEED = 123
STEPS = 300
FRAME_SKIP = 4


def api_check(frame_skip: int = FRAME_SKIP) -> None:
    """Verify Gym API contract (spaces, step/reset signatures, types)."""
    env = HeartRunEnv(frame_skip=frame_skip)
    try:
        check_env(env, skip_render_check=True)
    finally:
        env.close()


def smoke_test(steps: int = STEPS, seed: int = SEED, frame_skip: int = FRAME_SKIP) -> None:
    """Short random rollout: no crashes, obs in space, reward type, proper terminations."""
    env = HeartRunEnv(frame_skip=frame_skip)
    try:
        obs, info = env.reset(seed=seed)
        assert env.observation_space.contains(obs), "Initial observation not in space"
        assert info["state"] == GameState.PLAYING.value

        env.action_space.seed(seed)
        for t in range(steps):
            a = env.action_space.sample()
            obs, r, term, trunc, info = env.step(a)
            assert isinstance(r, float), "Reward must be a float"
            assert env.observation_space.contains(obs), f"Step {t}: observation out of bounds"
            assert info["state"] in ("playing", "gameover", "ending")
            if term or trunc:
                break
    finally:
        env.close()


def determinism_test(steps: int = STEPS, seed: int = SEED, frame_skip: int = FRAME_SKIP) -> None:
    """Same seed + same action sequence => identical obs/reward/terminal flags."""
    def rollout(seed_val: int, action_seq: List[int]) -> List[Tuple[np.ndarray, float, bool, bool]]:
        env = HeartRunEnv(frame_skip=frame_skip)
        traj: List[Tuple[np.ndarray, float, bool, bool]] = []
        try:
            obs, _ = env.reset(seed=seed_val)
            for a in action_seq:
                obs, r, term, trunc, _ = env.step(int(a))
                traj.append((obs.copy(), float(r), bool(term), bool(trunc)))
                if term or trunc:
                    break
        finally:
            env.close()
        return traj

    # Fixed action sequence using a local RNG (not numpy global)
    rng = np.random.RandomState(42)
    action_seq = [int(rng.randint(0, 2)) for _ in range(steps)]

    t1 = rollout(seed, action_seq)
    t2 = rollout(seed, action_seq)

    assert len(t1) == len(t2), "Determinism: trajectory length mismatch"
    for i, ((o1, r1, te1, tr1), (o2, r2, te2, tr2)) in enumerate(zip(t1, t2)):
        if not np.allclose(o1, o2):
            raise AssertionError(f"Determinism: obs mismatch at step {i}")
        if not (r1 == r2 and te1 == te2 and tr1 == tr2):
            raise AssertionError(f"Determinism: transition mismatch at step {i}")


def test_api_check():
    api_check()


def test_smoke():
    smoke_test()


def test_determinism():
    determinism_test(steps=150)


def test_rgb_array_render_shape():
    env = HeartRunEnv(render_mode="rgb_array")
    try:
        env.reset(seed=7)
        frame = env.render()
        assert frame.shape == (HEIGHT, WIDTH, 3)
        assert frame.dtype == np.uint8
    finally:
        env.close()


def test_level_clear_reward_and_skip_to_next_level():
    env = HeartRunEnv(frame_skip=1)
    try:
        env.reset(seed=5)
        s = env.session
        p = s.player
        s.world.obstacles = []
        s.world.hearts = [Heart(x=p.x + s.level.run_speed, y=p.y)]
        s.hearts_collected = s.level.required - 1

        _, r, term, trunc, info = env.step(0)
        assert r == 6.0, "heart + level bonus"
        assert not term and not trunc
        # narrative and photo beats were fast-forwarded
        assert info["state"] == "playing" and info["level"] == 1 and info["hearts"] == 0
    finally:
        env.close()


def test_losing_last_life_terminates():
    env = HeartRunEnv(frame_skip=4)
    try:
        env.reset(seed=5)
        s = env.session
        p = s.player
        s.lives = 1
        s.world.hearts = []
        s.world.obstacles = [Obstacle(x=p.x + s.level.run_speed, base_y=p.y, y=p.y)]

        _, r, term, _, info = env.step(0)
        assert r == -1.0
        assert term
        assert info["state"] == "gameover" and info["lives"] == 0
    finally:
        env.close()


def test_final_gold_heart_ends_episode():
    env = HeartRunEnv(frame_skip=2, start_level=FINAL_LEVEL)
    try:
        env.reset(seed=9)
        s = env.session
        p = s.player
        s.world.obstacles = []
        s.world.hearts = [Heart(x=p.x + s.level.run_speed, y=p.y, gold=True, r=GOLD_R)]

        _, r, term, _, info = env.step(0)
        assert r == 6.0
        assert term
        assert info["state"] == "ending"
    finally:
        env.close()


def test_truncates_at_time_limit():
    env = HeartRunEnv(frame_skip=60, time_limit_seconds=3.0)
    try:
        env.reset(seed=1)
        flags = []
        for _ in range(3):
            _, _, term, trunc, _ = env.step(0)
            flags.append(trunc)
            if term:
                break
        assert flags[-1] is True and not any(flags[:-1])
    finally:
        env.close()


def test_observation_sentinels_for_empty_world():
    env = HeartRunEnv()
    try:
        env.reset(seed=2)
        s = env.session
        s.world.platforms, s.world.hearts, s.world.obstacles = [], [], []
        obs = build_observation(s)
        assert obs.shape == (OBS_SIZE,) and obs.dtype == np.float32
        assert tuple(obs[6:8]) == NONE_AHEAD
        assert tuple(obs[8:10]) == NONE_AHEAD
        assert tuple(obs[10:12]) == NONE_AHEAD
        assert obs[0] == 1.0 and obs[2] == 1.0, "standing on the ground"
        assert obs[4] == 1.0, "full lives"
    finally:
        env.close()


def test_observation_points_at_objects_ahead():
    env = HeartRunEnv()
    try:
        env.reset(seed=2)
        s = env.session
        p = s.player
        s.world.hearts = [Heart(x=p.x - 200, y=p.y), Heart(x=p.x + 80, y=p.y - 60),
                          Heart(x=p.x + 40, y=p.y, collected=True)]
        s.world.obstacles = [Obstacle(x=p.x + 4000, base_y=p.y, y=p.y)]
        obs = build_observation(s)
        assert np.isclose(obs[8], 80 / WIDTH) and np.isclose(obs[9], -60 / HEIGHT)
        assert obs[10] == 1.0, "far obstacles clip to the edge"
    finally:
        env.close()


def render_demo(steps: int, seed: int, frame_skip: int) -> None:
    """Open a window and run a short NOOP demo so you can visually verify behavior."""
    env = HeartRunEnv(render_mode="human", frame_skip=frame_skip)
    try:
        env.reset(seed=seed)
        for _ in range(steps):
            _, _, term, trunc, _ = env.step(0)
            if term or trunc:
                break
    finally:
        env.close()
    print("✓ Render demo finished")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--seed", type=int, default=SEED, help="Episode seed for tests")
    ap.add_argument("--steps", type=int, default=STEPS, help="Max decision steps per test")
    ap.add_argument("--frame-skip", type=int, default=FRAME_SKIP, help="Sim frames per decision step")
    ap.add_argument("--render", action="store_true", help="Run a short visual demo")
    ap.add_argument("--no-api-check", action="store_true", help="Skip Gym API compliance check")
    ap.add_argument("--no-smoke", action="store_true", help="Skip smoke test")
    ap.add_argument("--no-determinism", action="store_true", help="Skip determinism test")
    args = ap.parse_args()

    try:
        if not args.no_api_check:
            api_check(frame_skip=args.frame_skip)
            print("✓ API check ok")
        if not args.no_smoke:
            smoke_test(steps=args.steps, seed=args.seed, frame_skip=args.frame_skip)
            print("✓ Smoke test ok")
        if not args.no_determinism:
            determinism_test(steps=args.steps, seed=args.seed, frame_skip=args.frame_skip)
            print("✓ Determinism ok")
        if args.render:
            os.environ.pop("SDL_VIDEODRIVER", None)
            render_demo(steps=min(args.steps, 600), seed=args.seed, frame_skip=args.frame_skip)
    except AssertionError as e:
        print(f"✗ Test failed: {e}", file=sys.stderr)
        sys.exit(1)
    else:
        print("🎉 All selected tests passed")


if __name__ == "__main__":
    main()
