# heartrun/game/config.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

# --- Display ---
WIDTH = 800
HEIGHT = 600
FPS = 60

# --- World / Physics (per tick, not per second) ---
GRAVITY = 0.6               # added to vy every tick
JUMP_VEL = -12.0            # vy right after a jump (negative = up)
GROUND_Y = HEIGHT - 40      # y line of the ground surface
FALL_LIMIT_Y = HEIGHT + 50  # below this the player is respawned
LANDING_SLACK = 2           # px of tolerance when crossing a platform top

# --- Player ---
PLAYER_R = 16
PLAYER_SCREEN_X = WIDTH * 0.25   # player's fixed screen x (world scrolls left)
PLAYER_START_X = 300.0

# --- Level generation ---
PLAT_H = 16
PLAT_MIN_W = 80
PLAT_MAX_W = 160
PLAT_GAP_MIN = 120
PLAT_GAP_MAX = 240
GAP_WIDENING = 60           # extra gap for "wider" levels
PLAT_Y_MIN = HEIGHT - 160   # highest platform top reachable from a ground jump
PLAT_Y_MAX = GROUND_Y - 40
FRONTIER_START_X = 200.0
LOOKAHEAD_SCREENS = 2       # frontier stays this many viewports ahead of the camera
CLEANUP_SCREENS = 1         # objects further behind the camera than this are dropped
HEART_MARGIN_X = 20
FLOATING_HEART_CHANCE = 0.4

# --- Pickups ---
HEART_R = 14
GOLD_R = 20

# --- Obstacles ---
OBSTACLE_R = 14
OBSTACLE_ON_PLATFORM_CHANCE = 0.6
OBSTACLE_MOVE_CHANCE = 0.5
OBSTACLE_AMPLITUDE = 30.0
OBSTACLE_PHASE_STEP = 0.05  # radians per tick
SAFE_START_PX = 240         # no obstacles this close ahead of the spawn point
INVINCIBLE_FRAMES = 90      # ~1.5s at 60fps
BLINK_FRAMES = 4
MAX_LIVES = 5

# --- Overlay timing (ticks) ---
NARRATIVE_AUTO_TICKS = 120  # auto-dismissed narrative stays up ~2s
FADE_TICKS = 36             # ~600ms fade between acknowledgement and resume

# --- Parallax ---
CLOUD_COUNT = 8
HILL_COUNT = 6
HILL_SPEED = 0.3
PARALLAX_PERIOD = WIDTH * 3
PARALLAX_SHIFT = WIDTH * 0.5
PLATFORM_CULL_MARGIN = 50
SPRITE_CULL_MARGIN = 30

# --- Ending animation ---
FLOATER_COUNT = 30

SEED_DEFAULT = 14022

# --- Colors (RGB) ---
COLOR_BG = (253, 246, 240)
COLOR_SKY_TOP = (135, 206, 235)
COLOR_SKY_BOT = (212, 238, 255)
COLOR_CLOUD = (255, 255, 255)
COLOR_HILL = (58, 122, 48)
COLOR_DIRT = (139, 94, 60)
COLOR_GRASS = (74, 140, 63)
COLOR_GRASS_TOP = (92, 184, 92)
COLOR_BRICK = (192, 118, 58)
COLOR_HEART = (255, 77, 109)
COLOR_GOLD = (255, 209, 102)
COLOR_BROKEN = (139, 92, 246)
COLOR_PLAYER = (255, 77, 109)
COLOR_LIFE_OFF = (221, 221, 221)
COLOR_FG = (255, 255, 255)
COLOR_HINT = (240, 244, 250)
COLOR_PANEL = (20, 10, 15)

GAP_SIZES = ("normal", "wider")


class LevelConfigError(ValueError):
    """Raised at startup when the level table is malformed."""


@dataclass(frozen=True)
class LevelConfig:
    required: int
    intro: str
    end: Optional[str]
    obstacle_chance: float
    moving: bool
    run_speed: float
    gap_size: str = "normal"

    @property
    def gap_bonus(self) -> int:
        return GAP_WIDENING if self.gap_size == "wider" else 0


LEVELS: Tuple[LevelConfig, ...] = (
    LevelConfig(5, "Every story starts somewhere.", "Ours started with a moment.",
                obstacle_chance=0.2, moving=False, run_speed=3.0, gap_size="normal"),
    LevelConfig(8, "Small things became big memories.", "That's when I knew...",
                obstacle_chance=0.35, moving=False, run_speed=3.5, gap_size="normal"),
    LevelConfig(10, "Love is choosing each other.", "And we keep choosing.",
                obstacle_chance=0.45, moving=True, run_speed=4.0, gap_size="wider"),
    LevelConfig(12, 'Somewhere along the way... we became "us."', 'And "us" became my favorite place.',
                obstacle_chance=0.55, moving=True, run_speed=4.5, gap_size="wider"),
    LevelConfig(1, "Some things are worth holding onto.", None,
                obstacle_chance=0.15, moving=False, run_speed=3.0, gap_size="normal"),
)
FINAL_LEVEL = len(LEVELS) - 1

LEVEL_PHOTOS = ("photo1.jpg", "photo2.jpg", "photo3.jpg", "photo4.jpg")

TITLE_TEXT = "You've Got My Heart"
FINAL_MESSAGE_TEXT = "\U0001F4E9 1 new message received."
GAMEOVER_TEXT = "You ran out of lives..."
CONTROL_HINT = "Tap / Space to jump"


def validate_levels(levels: Sequence[LevelConfig]) -> None:
    """Fail fast on a level table the game loop could not run."""
    if not levels:
        raise LevelConfigError("at least one level is required")
    last = len(levels) - 1
    for i, lvl in enumerate(levels):
        if lvl.required <= 0:
            raise LevelConfigError(f"level {i}: required must be > 0, got {lvl.required}")
        if not 0.0 <= lvl.obstacle_chance <= 1.0:
            raise LevelConfigError(f"level {i}: obstacle_chance out of [0, 1]: {lvl.obstacle_chance}")
        if lvl.run_speed <= 0:
            raise LevelConfigError(f"level {i}: run_speed must be > 0, got {lvl.run_speed}")
        if lvl.gap_size not in GAP_SIZES:
            raise LevelConfigError(f"level {i}: unknown gap_size {lvl.gap_size!r}")
        if i < last and not lvl.end:
            raise LevelConfigError(f"level {i}: only the final level may omit its end text")


validate_levels(LEVELS)
