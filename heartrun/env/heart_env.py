# heartrun/env/heart_env.py
from __future__ import annotations
import random
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from heartrun.game.config import WIDTH, HEIGHT, FPS, LEVELS
from heartrun.game.presentation import HeadlessPresenter
from heartrun.game.render import Backdrop, build_frame, paint
from heartrun.game.session import GameState, Session
from heartrun.env.observations import OBS_LOW, OBS_HIGH, build_observation

TERMINAL_STATES = (GameState.GAMEOVER, GameState.ENDING)
STORY_TICK_LIMIT = 10_000   # guard while fast-forwarding narrative beats


class HeartRunEnv(gym.Env):
    """
    Heart Run Gymnasium environment (vector observations).
    - Simulation at 60 ticks/s, one Session.update() per tick.
    - Agent acts every `frame_skip` ticks; action 1 requests a jump.
    - Narrative beats between levels are acknowledged automatically and
      skipped over, so every decision step lands in a playing tick or a
      terminal state.
    - Rewards: +1 per heart, -1 per life lost, +5 per level cleared.
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": FPS}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 120.0,
                 start_level: int = 0):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert 0 <= start_level < len(LEVELS), f"start_level must be in 0..{len(LEVELS) - 1}"
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.start_level = int(start_level)

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(FPS * time_limit_seconds / self.frame_skip)

        # Actions: 0 = NOOP, 1 = JUMP
        self.action_space = gym.spaces.Discrete(2)
        self.observation_space = gym.spaces.Box(low=OBS_LOW, high=OBS_HIGH, dtype=np.float32)

        self.session: Optional[Session] = None
        self.backdrop: Optional[Backdrop] = None
        self.timestep: int = 0
        self.current_seed: Optional[int] = None

        self.screen = None
        self.clock = None
        self.font = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)

        # The level layout is drawn from the env's own seeded generator, so
        # reset(seed=s) always reproduces the same world.
        self.current_seed = int(self.np_random.integers(0, 2**31 - 1))
        self.session = Session(presenter=HeadlessPresenter(), seed=self.current_seed)
        self.backdrop = Backdrop.generate(random.Random(self.current_seed))
        self.session.start_level(self.start_level)
        self._advance_story()
        self.timestep = 0

        return self._get_obs(), self._get_info()

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.session is not None, "call reset() before step()"
        s = self.session

        if action == 1:
            s.request_jump()

        reward = 0.0
        for _ in range(self.frame_skip):
            report = s.update()
            reward += report.hearts - report.hits + (5.0 if report.level_cleared else 0.0)
            if s.state != GameState.PLAYING:
                break

        self._advance_story()

        self.timestep += 1
        terminated = s.state in TERMINAL_STATES
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), float(reward), terminated, truncated, self._get_info()

    # -------------------- Helpers --------------------

    def _advance_story(self):
        """Tick through non-playing beats until play resumes or the story ends."""
        s = self.session
        ticks = 0
        while s.state != GameState.PLAYING and s.state not in TERMINAL_STATES:
            s.update()
            ticks += 1
            if ticks > STORY_TICK_LIMIT:
                raise RuntimeError(f"story stuck in state {s.state.value}")

    def _get_obs(self) -> np.ndarray:
        assert self.session is not None
        return build_observation(self.session)

    def _get_info(self) -> Dict[str, Any]:
        s = self.session
        return {
            "seed": self.current_seed,
            "level": s.current_level,
            "hearts": s.hearts_collected,
            "lives": s.lives,
            "state": s.state.value,
            "tick": s.tick,
            "grounded": s.player.grounded,
        }

    # -------------------- Rendering --------------------

    def _frame_surface(self) -> pygame.Surface:
        if self.font is None:
            pygame.font.init()
            self.font = pygame.font.Font(None, 22)
        surf = self.screen if self.screen is not None else pygame.Surface((WIDTH, HEIGHT))
        if self.session is not None:
            paint(surf, build_frame(self.session, self.backdrop), self.font)
        return surf

    def render(self):
        if self.render_mode is None:
            return None

        if self.render_mode == "rgb_array":
            arr = pygame.surfarray.array3d(self._frame_surface())  # (W, H, 3)
            return np.transpose(arr, (1, 0, 2))

        if self.screen is None:
            pygame.init()
            self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
            pygame.display.set_caption("Heart Run — Gym Env")
            self.clock = pygame.time.Clock()

        # Pump minimal event queue so the OS doesn't think we're hung
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pass

        self._frame_surface()
        pygame.display.flip()
        if self.clock is not None:
            self.clock.tick(self.metadata.get("render_fps", FPS))
        return None

    def close(self):
        if self.screen is not None:
            pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
            self.font = None
