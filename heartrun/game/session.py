# heartrun/game/session.py
from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Sequence, Tuple
from .config import (
    PLAYER_SCREEN_X, MAX_LIVES, INVINCIBLE_FRAMES, NARRATIVE_AUTO_TICKS, FADE_TICKS,
    LEVELS, TITLE_TEXT, GAMEOVER_TEXT, LevelConfig, validate_levels
)
from .level import WorldGen
from .player import Player
from .presentation import NarrativeMode, Presenter, Resume
from .schedule import Scheduler

logger = logging.getLogger(__name__)


class GameState(str, Enum):
    INTRO = "intro"
    LEVEL_INTRO = "level_intro"
    PLAYING = "playing"
    TRANSITION = "transition"
    PHOTO = "photo"
    FINAL_INTRO = "final_intro"
    EMAIL = "email"
    ENDING = "ending"
    GAMEOVER = "gameover"


# Events posted by presenter continuations and the scheduler
PLAY = "play"
BEGIN = "begin"
NARRATIVE_DONE = "narrative_done"
PHOTO_DONE = "photo_done"
OPEN_MESSAGE = "open_message"
REPLY = "reply"
RETRY = "retry"


@dataclass
class FrameReport:
    """What happened during one update tick."""
    hearts: int = 0
    hits: int = 0
    jumped: bool = False
    respawned: bool = False
    level_cleared: bool = False


class Session:
    """
    The whole simulation context: player, world, counters and the story state machine.

    One `update()` per host frame. Only PLAYING runs physics, generation and
    collisions; every other state just lets the scheduler tick until a
    presenter continuation or timer moves the story along.
    """
    def __init__(self,
                 presenter: Optional[Presenter] = None,
                 rng: Optional[random.Random] = None,
                 seed: Optional[int] = None,
                 levels: Sequence[LevelConfig] = LEVELS):
        validate_levels(levels)
        self.levels: Tuple[LevelConfig, ...] = tuple(levels)
        self.rng = rng if rng is not None else random.Random(seed)
        self.presenter = presenter if presenter is not None else Presenter()

        self.state = GameState.INTRO
        self.current_level = 0
        self.hearts_collected = 0
        self.lives = MAX_LIVES
        self.invincible_timer = 0
        self.tick = 0
        self.version = 0

        self.player = Player()
        self.world = WorldGen(self.level, self.rng, gold_only=self.is_final_level)
        self.world_x = self.player.x - PLAYER_SCREEN_X
        self.scheduler = Scheduler()
        self.last_report = FrameReport()
        self._jump_requested = False

        self._transitions: Dict[Tuple[GameState, str], Callable[[], None]] = {
            (GameState.INTRO, PLAY): lambda: self._show_level_intro(0),
            (GameState.LEVEL_INTRO, BEGIN): self._begin_play,
            (GameState.TRANSITION, NARRATIVE_DONE): self._show_photo,
            (GameState.PHOTO, PHOTO_DONE): self._advance_level,
            (GameState.FINAL_INTRO, OPEN_MESSAGE): self._show_email,
            (GameState.EMAIL, REPLY): self._show_ending,
            (GameState.GAMEOVER, RETRY): self._begin_play,
        }

    # -------------------- Read-only views --------------------

    @property
    def level(self) -> LevelConfig:
        return self.levels[self.current_level]

    @property
    def is_final_level(self) -> bool:
        return self.current_level == len(self.levels) - 1

    @property
    def frontier(self) -> float:
        return self.world.last_plat_end_x

    # -------------------- Input --------------------

    def request_jump(self):
        """Edge-triggered jump intent; repeated calls before the next tick collapse to one."""
        if self.state == GameState.PLAYING:
            self._jump_requested = True

    # -------------------- Story / dispatcher --------------------

    def start(self):
        """Show the title card. Play resumes into the first level's intro."""
        self.presenter.present_narrative(TITLE_TEXT, NarrativeMode.BUTTON, self._resume(PLAY), button="Play")

    def start_level(self, index: int):
        """Jump straight to a level's intro card (debug / --start-level)."""
        if not 0 <= index < len(self.levels):
            raise ValueError(f"level index {index} out of range 0..{len(self.levels) - 1}")
        self._show_level_intro(index)

    def dispatch(self, event: str, version: Optional[int] = None) -> bool:
        """
        Apply one story event. Returns False when the event is stale (made for an
        older version) or not legal in the current state; such events are dropped.
        """
        if version is not None and version != self.version:
            logger.debug("dropping stale %s (v%d, now v%d)", event, version, self.version)
            return False
        handler = self._transitions.get((self.state, event))
        if handler is None:
            logger.debug("ignoring %s in state %s", event, self.state.value)
            return False
        handler()
        return True

    def _enter(self, state: GameState):
        logger.info("state %s -> %s (level %d)", self.state.value, state.value, self.current_level)
        self.state = state
        self.version += 1

    def _post(self, event: str, delay: int, version: int):
        self.scheduler.schedule(self.tick, delay, event, version)

    def _resume(self, event: str) -> Resume:
        """Single-use continuation bound to the current version; fires after the fade."""
        version = self.version
        used = False

        def resume():
            nonlocal used
            if used:
                return
            used = True
            self._post(event, FADE_TICKS, version)
        return resume

    def _show_level_intro(self, index: int):
        self.current_level = index
        self.hearts_collected = 0
        self._enter(GameState.LEVEL_INTRO)
        self.presenter.present_narrative(self.level.intro, NarrativeMode.BUTTON, self._resume(BEGIN), button="Begin")

    def _begin_play(self):
        self.reset_world()
        self.hearts_collected = 0
        self._enter(GameState.PLAYING)

    def _show_photo(self):
        self._enter(GameState.PHOTO)
        self.presenter.present_photo(self.current_level, self._resume(PHOTO_DONE))

    def _advance_level(self):
        self._show_level_intro(self.current_level + 1)

    def _show_email(self):
        self._enter(GameState.EMAIL)
        self.presenter.present_email(self._resume(REPLY))

    def _show_ending(self):
        self._enter(GameState.ENDING)
        self.presenter.present_ending()

    def _complete_level(self):
        self.last_report.level_cleared = True
        if self.is_final_level:
            self._enter(GameState.FINAL_INTRO)
            self.presenter.present_final_message(self._resume(OPEN_MESSAGE))
        else:
            self._enter(GameState.TRANSITION)
            self._post(NARRATIVE_DONE, NARRATIVE_AUTO_TICKS + FADE_TICKS, self.version)
            self.presenter.present_narrative(self.level.end, NarrativeMode.AUTO, self._resume(NARRATIVE_DONE))

    def _game_over(self):
        self._enter(GameState.GAMEOVER)
        self.presenter.present_narrative(GAMEOVER_TEXT, NarrativeMode.BUTTON, self._resume(RETRY), button="Try Again")

    # -------------------- World --------------------

    def reset_world(self):
        """Fresh world for the current level: terrain, player, lives, camera, frontier."""
        self.world = WorldGen(self.level, self.rng, gold_only=self.is_final_level)
        self.player = Player()
        self.invincible_timer = 0
        self.lives = MAX_LIVES
        self.world_x = self.player.x - PLAYER_SCREEN_X
        self._jump_requested = False
        self.world.ensure_world(self.world_x)
        logger.debug("world reset for level %d: %d platforms, frontier=%.1f",
                     self.current_level, len(self.world.platforms), self.frontier)

    # -------------------- Per-tick update --------------------

    def update(self) -> FrameReport:
        self.tick += 1
        self.last_report = FrameReport()
        for item in self.scheduler.pop_due(self.tick):
            self.dispatch(item.event, item.version)

        if self.state != GameState.PLAYING:
            self._jump_requested = False
            return self.last_report

        self._step_playing()
        return self.last_report

    def _step_playing(self):
        lvl = self.level
        player = self.player

        player.run(lvl.run_speed)
        self.world_x = player.x - PLAYER_SCREEN_X

        if self._jump_requested:
            self.last_report.jumped = player.try_jump()
        self._jump_requested = False

        player.update_physics()
        player.land_on_ground()
        player.land_on_platforms(self.world.platforms)

        if player.fell_out():
            player.respawn(self.world.platforms)
            self.last_report.respawned = True

        self._collect_hearts()

        self.world.update_obstacles()
        if self._hit_obstacles():
            return

        self.world.ensure_world(self.world_x)
        self.world.cull(self.world_x)

        if self.hearts_collected >= lvl.required:
            self._complete_level()

    def _collect_hearts(self):
        required = self.level.required
        for heart in self.world.hearts:
            if heart.collected:
                continue
            if self.player.touches(heart.x, heart.y, heart.r):
                heart.collected = True
                self.hearts_collected = min(required, self.hearts_collected + 1)
                self.last_report.hearts += 1

    def _hit_obstacles(self) -> bool:
        """Resolve obstacle contact. Returns True when the session just ended in game over."""
        hit = False
        if self.invincible_timer == 0:
            hit = any(self.player.touches(o.x, o.y, o.r) for o in self.world.obstacles)

        if not hit:
            if self.invincible_timer > 0:
                self.invincible_timer -= 1
            return False

        self.lives -= 1
        self.hearts_collected = max(0, self.hearts_collected - 1)
        self.invincible_timer = INVINCIBLE_FRAMES
        self.last_report.hits += 1
        logger.info("hit an obstacle: lives=%d hearts=%d", self.lives, self.hearts_collected)
        if self.lives <= 0:
            self._game_over()
            return True
        return False
