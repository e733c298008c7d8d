# heartrun/env/observations.py
from __future__ import annotations
from typing import Iterable, Optional, Tuple
import numpy as np

from heartrun.game.config import (
    WIDTH, HEIGHT, GROUND_Y, PLAYER_R, MAX_LIVES, INVINCIBLE_FRAMES, JUMP_VEL
)

OBS_SIZE = 12
VY_SCALE = abs(JUMP_VEL) * 2   # |vy| rarely exceeds two jump impulses

# [y_norm, vy_norm, grounded, invincible, lives, progress,
#  plat_dx, plat_dy, heart_dx, heart_dy, obstacle_dx, obstacle_dy]
OBS_LOW = np.array([0.0, -1.0, 0.0, 0.0, 0.0, 0.0] + [-1.0] * 6, dtype=np.float32)
OBS_HIGH = np.ones(OBS_SIZE, dtype=np.float32)

# Sentinel for "nothing ahead": far right, level with the player
NONE_AHEAD = (1.0, 0.0)


def _clip(v: float, lo: float = -1.0, hi: float = 1.0) -> float:
    return lo if v < lo else (hi if v > hi else v)


def _nearest_ahead(items: Iterable, key_x, min_x: float) -> Optional[object]:
    best = None
    best_x = None
    for it in items:
        x = key_x(it)
        if x < min_x:
            continue
        if best_x is None or x < best_x:
            best, best_x = it, x
    return best


def _rel(px: float, py: float, x: Optional[float], y: Optional[float]) -> Tuple[float, float]:
    if x is None:
        return NONE_AHEAD
    return _clip((x - px) / WIDTH), _clip((y - py) / HEIGHT)


def build_observation(session) -> np.ndarray:
    """
    Fixed (12,) float32 vector describing the player and what lies just ahead:
    - y_norm in [0,1] (0 = top of screen, 1 = standing on the ground)
    - vy_norm in [-1,1]
    - grounded / invincible / lives / level progress in [0,1]
    - (dx, dy) to the next platform top, next uncollected heart and next
      obstacle, each normalised by the viewport and clipped to [-1,1];
      (1, 0) when nothing is ahead
    """
    p = session.player
    world = session.world
    px, py = p.x, p.y

    y_norm = _clip(py / float(GROUND_Y - PLAYER_R), 0.0, 1.0)
    vy_norm = _clip(p.vy / VY_SCALE)
    grounded = 1.0 if p.grounded else 0.0
    inv = _clip(session.invincible_timer / float(INVINCIBLE_FRAMES), 0.0, 1.0)
    lives = _clip(session.lives / float(MAX_LIVES), 0.0, 1.0)
    progress = _clip(session.hearts_collected / float(session.level.required), 0.0, 1.0)

    # the platform under or just ahead of the player (its right edge is still ahead)
    plat = _nearest_ahead(world.platforms, lambda q: q.right, px - PLAYER_R)
    heart = _nearest_ahead((h for h in world.hearts if not h.collected), lambda h: h.x, px - PLAYER_R)
    obstacle = _nearest_ahead(world.obstacles, lambda o: o.x, px - PLAYER_R)

    feats = [y_norm, vy_norm, grounded, inv, lives, progress]
    feats.extend(_rel(px, py + PLAYER_R, plat.x if plat else None, plat.y if plat else None))
    feats.extend(_rel(px, py, heart.x if heart else None, heart.y if heart else None))
    feats.extend(_rel(px, py, obstacle.x if obstacle else None, obstacle.y if obstacle else None))
    return np.asarray(feats, dtype=np.float32)
