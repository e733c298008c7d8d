# experiments/replay.py
"""
Replay tool for HeartRunEnv

# Typical usage (run from REPO ROOT so `heartrun...` imports work)

# Replay a HEURISTIC episode by seed (uses experiments/runs/traces/heuristic/<seed>_actions.npy)
python -m experiments.replay --policy heuristic --seed 105

# Replay by pointing directly to a specific actions file
python -m experiments.replay --trace experiments/runs/traces/random/112_actions.npy --frame-skip 4

# Slow the display to ~decision rate for readability
python -m experiments.replay --policy heuristic --seed 105 --slow

# Controls during replay
SPACE = pause/resume
N     = single step (when paused)
R     = restart episode
ESC   = quit

# Notes
- Deterministic: same seed, frame_skip, start_level and action sequence reproduce the run.
- With --trace the meta file is not read; pass --frame-skip / --start-level if they differ.
"""

from __future__ import annotations
import argparse
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pygame

from heartrun.env.heart_env import HeartRunEnv
from heartrun.game.config import PLAYER_SCREEN_X, HEIGHT

DEFAULT_OUT_DIR = "experiments/runs"


def _find_trace(out_dir: Path, policy: str, seed: int) -> Path:
    p = out_dir / "traces" / policy / f"{seed}_actions.npy"
    if not p.exists():
        raise FileNotFoundError(f"Trace not found: {p}")
    return p


def _read_meta(out_dir: Path, policy: str, seed: int) -> Dict[str, str]:
    meta_path = out_dir / "traces" / policy / f"{seed}_meta.txt"
    meta = {}
    if meta_path.exists():
        for line in meta_path.read_text(encoding="utf-8").splitlines():
            if "=" in line:
                k, v = line.split("=", 1)
                meta[k.strip()] = v.strip()
    return meta


def _draw_overlay(env: HeartRunEnv, font: pygame.font.Font, step_idx: int, action: Optional[int], ret: float):
    """Debug panel over the env's own frame: step, action, return and the observation."""
    surf = pygame.display.get_surface()
    if surf is None or env.session is None:
        return
    obs = env._get_obs()
    s = env.session

    # lookahead guide at the player's column
    pygame.draw.line(surf, (90, 180, 255), (PLAYER_SCREEN_X, 0), (PLAYER_SCREEN_X, HEIGHT), 1)

    lines: List[str] = [
        f"Step={step_idx}  Action={'-' if action is None else ('JUMP' if action == 1 else 'NOOP')}",
        f"Return={ret:.1f}  Level={s.current_level + 1}  State={s.state.value}",
        f"y={obs[0]:.2f}  vy={obs[1]:+.2f}  grounded={int(obs[2])}  inv={obs[3]:.2f}",
        f"plat  dx={obs[6]:+.2f} dy={obs[7]:+.2f}",
        f"heart dx={obs[8]:+.2f} dy={obs[9]:+.2f}",
        f"obst  dx={obs[10]:+.2f} dy={obs[11]:+.2f}",
    ]

    panel = pygame.Surface((320, 20 * (len(lines) + 1)), pygame.SRCALPHA)
    panel.fill((10, 20, 35, 160))
    surf.blit(panel, (12, 70))
    for i, txt in enumerate(lines):
        surf.blit(font.render(txt, True, (210, 230, 255)), (20, 76 + i * 20))

    pygame.display.flip()


def replay_episode(seed: int, actions: np.ndarray, frame_skip: int, start_level: int = 0, slow: bool = False):
    """
    Replays an episode deterministically with an on-screen overlay.
    Controls:
      SPACE: pause/resume   N: single step when paused
      R: restart episode    ESC: quit
    """
    env = HeartRunEnv(render_mode="human", frame_skip=frame_skip, time_limit_seconds=None,
                      start_level=start_level)
    env.reset(seed=seed)
    env.render()
    font = pygame.font.SysFont("jetbrainsmono,monospace", 16)
    clock = pygame.time.Clock()

    paused = False
    single_step = False
    step_idx = 0
    ret = 0.0
    action: Optional[int] = None

    try:
        running = True
        while running and step_idx < len(actions):
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        paused = not paused
                    elif event.key == pygame.K_n and paused:
                        single_step = True
                    elif event.key == pygame.K_r:
                        env.reset(seed=seed)
                        step_idx, ret, action = 0, 0.0, None
                        paused = False

            if paused and not single_step:
                env.render()
                _draw_overlay(env, font, step_idx, action, ret)
                clock.tick(30)
                continue
            single_step = False

            action = int(actions[step_idx])
            _, r, term, trunc, _ = env.step(action)
            ret += r
            _draw_overlay(env, font, step_idx, action, ret)
            step_idx += 1

            clock.tick(15 if slow else 60)

            if term or trunc:
                # let the final frame sit for a moment
                pygame.time.delay(600)
                break
    finally:
        env.close()


def main():
    ap = argparse.ArgumentParser(description="Replay a recorded HeartRunEnv episode with overlay.")
    ap.add_argument("--seed", type=int, help="Episode seed")
    ap.add_argument("--policy", type=str, default="random",
                    help="Trace subfolder name, e.g. random / heuristic")
    ap.add_argument("--trace", type=str, default="",
                    help="Optional explicit path to a .npy action file")
    ap.add_argument("--out-dir", type=str, default=DEFAULT_OUT_DIR,
                    help="Base directory where experiments/runs live")
    ap.add_argument("--frame-skip", type=int, default=-1,
                    help="Override frame_skip. If <0, use meta or default=4")
    ap.add_argument("--start-level", type=int, default=-1,
                    help="Override start level. If <0, use meta or default=0")
    ap.add_argument("--slow", action="store_true", help="Slow display (~15 fps) for readability")
    args = ap.parse_args()

    out_dir = Path(args.out_dir)
    meta: Dict[str, str] = {}

    if args.trace:
        trace_path = Path(args.trace)
        if not trace_path.exists():
            raise FileNotFoundError(f"Trace file not found: {trace_path}")
        if args.seed is None:
            # <seed>_actions.npy
            head = trace_path.stem.split("_")[0]
            if not head.isdigit():
                raise SystemExit(f"Cannot infer a seed from {trace_path.name}; pass --seed")
            args.seed = int(head)
    else:
        if args.seed is None:
            raise SystemExit("Please provide --seed or --trace")
        trace_path = _find_trace(out_dir, args.policy, args.seed)
        meta = _read_meta(out_dir, args.policy, args.seed)

    actions = np.load(trace_path)
    if actions.ndim != 1:
        raise ValueError(f"Expected 1D action array, got shape {actions.shape}")

    fs = args.frame_skip if args.frame_skip >= 0 else int(meta.get("frame_skip", 4))
    level = args.start_level if args.start_level >= 0 else int(meta.get("start_level", 0))

    print(f"Replaying seed={args.seed}  policy={args.policy}  steps={len(actions)}  "
          f"frame_skip={fs}  start_level={level}")
    print("Controls: SPACE pause/resume | N step (when paused) | R restart | ESC quit")

    replay_episode(seed=args.seed, actions=actions, frame_skip=fs, start_level=level, slow=args.slow)


if __name__ == "__main__":
    main()
