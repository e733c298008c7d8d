# /experiments/sanity_rollout.py
"""
Sanity rollouts for HeartRunEnv:
- Runs RANDOM and/or TINY-HEURISTIC policies over fixed seeds
- Writes an episodes CSV for notebook analysis
- Saves per-episode action sequences (and optionally observations) for exact replay

Usage examples (from repo root):
  # Run both policies over 20 default seeds, frame_skip=4, save traces:
  python -m experiments.sanity_rollout --policies both --save-traces

  # Only heuristic, custom seeds, also save observations:
  python -m experiments.sanity_rollout --policies heuristic --seeds 111,222,333 --save-traces --save-obs

  # Start from the final level to exercise the ending sequence:
  python -m experiments.sanity_rollout --policies heuristic --start-level 4 --steps 2000
"""

from __future__ import annotations
import argparse
import csv
from pathlib import Path
from typing import List, Tuple

import numpy as np

from heartrun.env.heart_env import HeartRunEnv


# ------------------------ Policies ------------------------

def random_policy_init(action_seed: int, jump_prob: float = 0.1):
    rng = np.random.RandomState(action_seed)
    def act(_obs: np.ndarray) -> int:
        return int(rng.random_sample() < jump_prob)
    return act

def tiny_heuristic_policy_init():
    """
    Very small rule, only while grounded:
      - jump when an obstacle at roughly our height is about to be touched
      - jump when an uncollected heart floats above us just ahead
    """
    def act(obs: np.ndarray) -> int:
        if obs[2] < 0.5:           # airborne: a jump would be discarded anyway
            return 0
        heart_dx, heart_dy = obs[8], obs[9]
        obst_dx, obst_dy = obs[10], obs[11]
        obstacle_close = 0.0 <= obst_dx < 0.09 and abs(obst_dy) < 0.06
        heart_above = 0.0 <= heart_dx < 0.12 and heart_dy < -0.04
        return 1 if (obstacle_close or heart_above) else 0
    return act


# ------------------------ Rollout core ------------------------

def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)

def write_episode_row(csv_path: Path, header: List[str], row: List):
    exists = csv_path.exists()
    with csv_path.open("a", newline="") as f:
        w = csv.writer(f)
        if not exists:
            w.writerow(header)
        w.writerow(row)

def run_one_episode(policy_name: str,
                    seed: int,
                    frame_skip: int,
                    steps_limit: int,
                    start_level: int,
                    save_traces: bool,
                    save_obs: bool,
                    out_dir: Path) -> Tuple[int, float, int, int, bool, bool, str]:
    """
    Returns: (ep_len, ret_sum, final_level, lives, terminated, truncated, final_state)
    Also writes traces to disk if requested.
    """
    env = HeartRunEnv(frame_skip=frame_skip, start_level=start_level)

    if policy_name == "random":
        action_seed = 10_000 + seed
        policy = random_policy_init(action_seed)
    elif policy_name == "heuristic":
        action_seed = -1
        policy = tiny_heuristic_policy_init()
    else:
        raise ValueError("Unknown policy")

    actions: List[int] = []
    obs_list: List[np.ndarray] = []

    ret_sum = 0.0
    ep_len = 0
    term = trunc = False
    info = {}

    try:
        obs, info = env.reset(seed=seed)
        if save_obs:
            obs_list.append(obs.copy())

        for _ in range(steps_limit):
            a = policy(obs)
            actions.append(int(a))

            obs, r, term, trunc, info = env.step(a)
            ret_sum += float(r)
            ep_len += 1

            if save_obs:
                obs_list.append(obs.copy())

            if term or trunc:
                break
    finally:
        env.close()

    if save_traces:
        trace_dir = out_dir / "traces" / policy_name
        ensure_dir(trace_dir)
        np.save(trace_dir / f"{seed}_actions.npy", np.asarray(actions, dtype=np.int8))
        if save_obs:
            np.save(trace_dir / f"{seed}_obs.npy", np.asarray(obs_list, dtype=np.float32))

        meta_lines = [
            f"seed={seed}",
            f"frame_skip={frame_skip}",
            f"policy={policy_name}",
            f"action_rng_seed={action_seed}",
            f"steps_limit={steps_limit}",
            f"start_level={start_level}",
        ]
        (trace_dir / f"{seed}_meta.txt").write_text("\n".join(meta_lines), encoding="utf-8")

    return (ep_len, ret_sum, int(info.get("level", start_level)), int(info.get("lives", 0)),
            bool(term), bool(trunc), str(info.get("state", "")))


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--policies", type=str, default="both",
                    choices=["random", "heuristic", "both"],
                    help="Which policy to run")
    ap.add_argument("--seeds", type=str, default="",
                    help="Comma-separated seeds. If empty, uses 20 defaults: 101..120")
    ap.add_argument("--frame-skip", type=int, default=4,
                    help="Sim ticks per decision step")
    ap.add_argument("--steps", type=int, default=10_000,
                    help="Hard cap on decision steps (env may truncate earlier)")
    ap.add_argument("--start-level", type=int, default=0,
                    help="Level index the episodes start at")
    ap.add_argument("--out-dir", type=str, default="experiments/runs",
                    help="Directory to store episodes.csv and traces/")
    ap.add_argument("--save-traces", action="store_true",
                    help="Save action sequences (and optional obs) for replay")
    ap.add_argument("--save-obs", action="store_true",
                    help="Also save observations per step (larger files)")
    args = ap.parse_args()

    out_dir = Path(args.out_dir)
    ensure_dir(out_dir)

    if args.seeds.strip():
        seeds = [int(s) for s in args.seeds.split(",") if s.strip()]
    else:
        seeds = list(range(101, 121))

    episodes_csv = out_dir / "episodes.csv"
    header = [
        "env_name", "policy_name", "seed", "start_level",
        "frame_skip", "decision_hz",
        "episode_len_decisions", "return_sum", "final_level", "lives",
        "terminated", "truncated", "final_state",
    ]
    env_name = "HeartRunEnv"
    decision_hz = HeartRunEnv.metadata["render_fps"] / max(1, args.frame_skip)

    to_run = ["random", "heuristic"] if args.policies == "both" else [args.policies]

    print(f"Running policies={to_run} on {len(seeds)} seeds "
          f"(frame_skip={args.frame_skip}, decision_hz≈{decision_hz:.1f})")
    print(f"Writing summaries to {episodes_csv} and traces under {out_dir}/traces/")

    for policy_name in to_run:
        for seed in seeds:
            ep_len, ret_sum, level, lives, terminated, truncated, final_state = run_one_episode(
                policy_name=policy_name,
                seed=seed,
                frame_skip=args.frame_skip,
                steps_limit=args.steps,
                start_level=args.start_level,
                save_traces=args.save_traces,
                save_obs=args.save_obs,
                out_dir=out_dir
            )

            row = [
                env_name, policy_name, seed, args.start_level,
                args.frame_skip, decision_hz,
                ep_len, f"{ret_sum:.1f}", level, lives,
                int(terminated), int(truncated), final_state,
            ]
            write_episode_row(episodes_csv, header, row)

            print(f"[{policy_name}] seed={seed}  len={ep_len}  ret={ret_sum:.1f}  "
                  f"level={level} lives={lives}  term={terminated} trunc={truncated}  state={final_state}")

    print("✓ Sanity rollouts complete")


if __name__ == "__main__":
    main()
