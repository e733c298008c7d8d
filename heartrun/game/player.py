# heartrun/game/player.py
from __future__ import annotations
import math
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence
from .config import (
    WIDTH, GRAVITY, JUMP_VEL, GROUND_Y, FALL_LIMIT_Y, LANDING_SLACK,
    PLAYER_R, PLAYER_START_X
)
from .level import Platform

logger = logging.getLogger(__name__)


def circles_overlap(ax: float, ay: float, ar: float, bx: float, by: float, br: float) -> bool:
    """Strict circle-circle test on centre distance vs summed radii."""
    return math.hypot(ax - bx, ay - by) < ar + br


@dataclass
class Player:
    """
    Auto-running circle player:
    - x is world-space and advances by the level's run speed every tick
    - y is the centre, screen-space (grows downward)
    """
    x: float = PLAYER_START_X
    y: float = GROUND_Y - PLAYER_R
    vy: float = 0.0
    grounded: bool = True

    @property
    def bottom(self) -> float:
        return self.y + PLAYER_R

    def run(self, speed: float):
        self.x += speed

    def try_jump(self) -> bool:
        """Jump only from the ground. Returns True if performed."""
        if self.grounded:
            self.vy = JUMP_VEL
            self.grounded = False
            return True
        return False

    def update_physics(self):
        """One explicit Euler step under constant gravity."""
        self.vy += GRAVITY
        self.y += self.vy

    def land_on_ground(self) -> bool:
        self.grounded = False
        if self.bottom >= GROUND_Y:
            self.y = GROUND_Y - PLAYER_R
            self.vy = 0.0
            self.grounded = True
        return self.grounded

    def land_on_platforms(self, platforms: Iterable[Platform]) -> Optional[Platform]:
        """
        Land on the first platform (insertion order) whose top we just crossed.
        Only while falling, so platforms are never caught from below.
        """
        if self.vy < 0:
            return None
        for plat in platforms:
            if (self.x + PLAYER_R > plat.x and
                    self.x - PLAYER_R < plat.right and
                    self.bottom >= plat.y and
                    self.bottom <= plat.y + plat.h + self.vy + LANDING_SLACK):
                self.y = plat.y - PLAYER_R
                self.vy = 0.0
                self.grounded = True
                return plat
        return None

    def fell_out(self) -> bool:
        return self.y > FALL_LIMIT_Y

    def respawn(self, platforms: Sequence[Platform]) -> Optional[Platform]:
        """Put the player back on the last platform behind it (or on the ground)."""
        best = None
        for plat in platforms:
            if plat.right > self.x - WIDTH and plat.x < self.x:
                best = plat
        if best is not None:
            self.x = best.x + best.w / 2
            self.y = best.y - PLAYER_R
        else:
            self.y = GROUND_Y - PLAYER_R
        self.vy = 0.0
        self.grounded = True
        logger.debug("respawned at x=%.1f y=%.1f (platform=%s)", self.x, self.y, best is not None)
        return best

    def touches(self, x: float, y: float, r: float) -> bool:
        return circles_overlap(self.x, self.y, PLAYER_R, x, y, r)
