# heartrun/game/level.py
from __future__ import annotations
import math
import random
from dataclasses import dataclass
from typing import List
from .config import (
    WIDTH, GROUND_Y, PLAT_H, PLAT_MIN_W, PLAT_MAX_W, PLAT_GAP_MIN, PLAT_GAP_MAX,
    PLAT_Y_MIN, PLAT_Y_MAX, FRONTIER_START_X, LOOKAHEAD_SCREENS, CLEANUP_SCREENS,
    HEART_MARGIN_X, FLOATING_HEART_CHANCE, HEART_R, GOLD_R,
    OBSTACLE_R, OBSTACLE_ON_PLATFORM_CHANCE, OBSTACLE_MOVE_CHANCE,
    OBSTACLE_AMPLITUDE, OBSTACLE_PHASE_STEP, PLAYER_START_X, SAFE_START_PX, LevelConfig
)


@dataclass(frozen=True)
class Platform:
    x: float
    y: float
    w: float
    h: float = PLAT_H

    @property
    def right(self) -> float:
        return self.x + self.w


@dataclass
class Heart:
    x: float
    y: float
    gold: bool = False
    r: float = HEART_R
    collected: bool = False


@dataclass
class Obstacle:
    """A broken heart. Touching it costs a life; it is never collected."""
    x: float
    base_y: float
    y: float
    phase: float = 0.0
    moving: bool = False
    r: float = OBSTACLE_R

    def update_movement(self):
        """Advance the vertical oscillation of moving obstacles by one tick."""
        if self.moving:
            self.y = self.base_y + math.sin(self.phase) * OBSTACLE_AMPLITUDE
            self.phase += OBSTACLE_PHASE_STEP


class WorldGen:
    """
    Generates an endless ribbon of platforms, hearts and obstacles ahead of the camera.

    A single frontier (`last_plat_end_x`) marks how far the world has been built.
    It only moves forward; a new WorldGen is created when a level (re)starts.
    All randomness comes from the injected `rng`, so a seeded Random gives an
    exact layout.
    """
    def __init__(self, level: LevelConfig, rng: random.Random, gold_only: bool = False):
        self.level = level
        self.rng = rng
        self.gold_only = gold_only
        self.platforms: List[Platform] = []
        self.hearts: List[Heart] = []
        self.obstacles: List[Obstacle] = []
        self.last_plat_end_x = FRONTIER_START_X
        self.safe_until_x = PLAYER_START_X + SAFE_START_PX

    def _uniform(self, lo: float, hi: float) -> float:
        return lo + self.rng.random() * (hi - lo)

    # --- Generation ---

    def generate_platform(self) -> Platform:
        """Place the next platform one random gap past the frontier and advance it."""
        bonus = self.level.gap_bonus
        gap = self._uniform(PLAT_GAP_MIN + bonus, PLAT_GAP_MAX + bonus)
        w = self._uniform(PLAT_MIN_W, PLAT_MAX_W)
        x = self.last_plat_end_x + gap
        y = self._uniform(PLAT_Y_MIN, PLAT_Y_MAX)
        self.last_plat_end_x = x + w
        return Platform(x=x, y=y, w=w)

    def _make_heart(self, x: float, y: float, gold: bool) -> Heart:
        return Heart(x=x, y=y, gold=gold, r=GOLD_R if gold else HEART_R)

    def spawn_hearts_on_platform(self, plat: Platform, gold: bool) -> List[Heart]:
        count = 1 if gold else 1 + int(self.rng.random() * 2)
        spawned = []
        for _ in range(count):
            hx = plat.x + HEART_MARGIN_X + self.rng.random() * (plat.w - 2 * HEART_MARGIN_X)
            # just above the surface, within jump reach
            hy = plat.y - 20 - self.rng.random() * 30
            spawned.append(self._make_heart(hx, hy, gold))
        self.hearts.extend(spawned)
        return spawned

    def spawn_floating_heart(self, after_x: float, gold: bool) -> Heart:
        hx = after_x + 60 + self.rng.random() * 120
        # a ground jump peaks ~120px above the ground
        hy = GROUND_Y - 30 - self.rng.random() * 90
        heart = self._make_heart(hx, hy, gold)
        self.hearts.append(heart)
        return heart

    def spawn_obstacle(self, plat: Platform) -> Obstacle | None:
        if self.rng.random() >= self.level.obstacle_chance:
            return None
        if self.rng.random() < OBSTACLE_ON_PLATFORM_CHANCE:
            ox = plat.x + HEART_MARGIN_X + self.rng.random() * (plat.w - 2 * HEART_MARGIN_X)
            oy = plat.y - OBSTACLE_R
        else:
            # on the ground, in the gap behind the platform
            ox = plat.x - 40 - self.rng.random() * 60
            oy = GROUND_Y - OBSTACLE_R
        if ox < self.safe_until_x:
            # keep the spawn area clear
            return None
        moving = self.level.moving and self.rng.random() < OBSTACLE_MOVE_CHANCE
        obstacle = Obstacle(x=ox, base_y=oy, y=oy, phase=self.rng.random() * math.pi * 2, moving=moving)
        self.obstacles.append(obstacle)
        return obstacle

    def uncollected_hearts(self) -> List[Heart]:
        return [h for h in self.hearts if not h.collected]

    def ensure_world(self, camera_x: float) -> int:
        """
        Generate until the frontier is LOOKAHEAD_SCREENS viewports past the camera.
        Returns the number of platforms created.
        """
        look_ahead = camera_x + WIDTH * LOOKAHEAD_SCREENS
        created = 0
        while self.last_plat_end_x < look_ahead:
            plat = self.generate_platform()
            self.platforms.append(plat)
            created += 1
            if self.gold_only:
                # never more than one gold heart in flight
                if not self.uncollected_hearts():
                    self.spawn_hearts_on_platform(plat, gold=True)
            else:
                self.spawn_hearts_on_platform(plat, gold=False)
                if self.rng.random() < FLOATING_HEART_CHANCE:
                    self.spawn_floating_heart(plat.x, gold=False)
            self.spawn_obstacle(plat)
        return created

    # --- Per-tick maintenance ---

    def update_obstacles(self):
        for obs in self.obstacles:
            obs.update_movement()

    def cull(self, camera_x: float):
        """Drop everything that scrolled more than CLEANUP_SCREENS viewports behind the camera."""
        clean_x = camera_x - WIDTH * CLEANUP_SCREENS
        self.platforms = [p for p in self.platforms if p.right > clean_x]
        self.hearts = [h for h in self.hearts if h.x > clean_x]
        self.obstacles = [o for o in self.obstacles if o.x > clean_x]
