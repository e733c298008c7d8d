# heartrun/game/render.py
"""
Camera-relative draw lists and the pygame painter that turns them into pixels.

`build_frame` decides WHAT is on screen (parallax wrap, culling, blinking,
HUD) and returns plain DrawCommand tuples; `paint` is the only place that
knows about pygame drawing calls.
"""
from __future__ import annotations
import math
import random
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple
import pygame
from .config import (
    WIDTH, HEIGHT, GROUND_Y, PLAYER_R, PLAYER_SCREEN_X, MAX_LIVES, OBSTACLE_R, BLINK_FRAMES,
    CLOUD_COUNT, HILL_COUNT, HILL_SPEED, PARALLAX_PERIOD, PARALLAX_SHIFT,
    PLATFORM_CULL_MARGIN, SPRITE_CULL_MARGIN, FLOATER_COUNT, CONTROL_HINT,
    COLOR_BG, COLOR_SKY_TOP, COLOR_SKY_BOT, COLOR_CLOUD, COLOR_HILL, COLOR_DIRT, COLOR_GRASS,
    COLOR_GRASS_TOP, COLOR_BRICK, COLOR_HEART, COLOR_GOLD, COLOR_BROKEN, COLOR_PLAYER,
    COLOR_LIFE_OFF, COLOR_FG, COLOR_HINT
)
from .session import GameState

Color = Tuple[int, int, int]


class DrawCommand(NamedTuple):
    kind: str
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    color: Color = COLOR_FG
    color2: Optional[Color] = None
    text: str = ""
    align: str = "left"


# -------------------- Parallax scenery --------------------

@dataclass
class Cloud:
    x: float
    y: float
    w: float
    h: float
    speed: float


@dataclass
class Hill:
    x: float
    w: float
    h: float


@dataclass
class Backdrop:
    clouds: List[Cloud]
    hills: List[Hill]

    @classmethod
    def generate(cls, rng: random.Random) -> "Backdrop":
        clouds = [
            Cloud(x=rng.random() * WIDTH * 4,
                  y=30 + rng.random() * 140,
                  w=80 + rng.random() * 100,
                  h=30 + rng.random() * 20,
                  speed=0.2 + rng.random() * 0.2)
            for _ in range(CLOUD_COUNT)
        ]
        hills = [
            Hill(x=i * 400 + rng.random() * 200,
                 w=200 + rng.random() * 150,
                 h=60 + rng.random() * 50)
            for i in range(HILL_COUNT)
        ]
        return cls(clouds, hills)


def parallax_x(base_x: float, camera_x: float, speed: float) -> float:
    """Screen x of a background element scrolling at `speed` of the camera, wrapped."""
    return (base_x - camera_x * speed) % PARALLAX_PERIOD - PARALLAX_SHIFT


# -------------------- Visibility --------------------

def span_visible(screen_x: float, width: float, margin: float = PLATFORM_CULL_MARGIN) -> bool:
    return not (screen_x + width < -margin or screen_x > WIDTH + margin)


def point_visible(screen_x: float, margin: float = SPRITE_CULL_MARGIN) -> bool:
    return -margin <= screen_x <= WIDTH + margin


def player_visible(invincible_timer: int) -> bool:
    """Blink while invincible: BLINK_FRAMES on, BLINK_FRAMES off."""
    return invincible_timer == 0 or (invincible_timer // BLINK_FRAMES) % 2 == 0


# -------------------- Frame building --------------------

def build_frame(session, backdrop: Backdrop) -> List[DrawCommand]:
    if session.state != GameState.PLAYING:
        return [DrawCommand("fill", color=COLOR_BG)]

    cam = session.world_x
    cmds: List[DrawCommand] = [DrawCommand("gradient", color=COLOR_SKY_TOP, color2=COLOR_SKY_BOT)]

    for c in backdrop.clouds:
        cmds.append(DrawCommand("cloud", parallax_x(c.x, cam, c.speed), c.y, c.w, c.h, COLOR_CLOUD))
    for hl in backdrop.hills:
        cmds.append(DrawCommand("hill", parallax_x(hl.x, cam, HILL_SPEED), GROUND_Y, hl.w, hl.h, COLOR_HILL))

    cmds.append(DrawCommand("ground", cam, GROUND_Y, WIDTH, HEIGHT - GROUND_Y, COLOR_GRASS))

    for p in session.world.platforms:
        sx = p.x - cam
        if span_visible(sx, p.w):
            cmds.append(DrawCommand("platform", sx, p.y, p.w, p.h, COLOR_BRICK))

    for h in session.world.hearts:
        if h.collected:
            continue
        sx = h.x - cam
        if point_visible(sx):
            cmds.append(DrawCommand("heart", sx, h.y, h.r, h.r, COLOR_GOLD if h.gold else COLOR_HEART))

    for o in session.world.obstacles:
        sx = o.x - cam
        if point_visible(sx):
            cmds.append(DrawCommand("broken_heart", sx, o.y, OBSTACLE_R, OBSTACLE_R, COLOR_BROKEN))

    if player_visible(session.invincible_timer):
        cmds.append(DrawCommand("player", PLAYER_SCREEN_X, session.player.y, PLAYER_R, PLAYER_R, COLOR_PLAYER))

    cmds.extend(build_hud(session))
    return cmds


def build_hud(session) -> List[DrawCommand]:
    cmds = [
        DrawCommand("text", 16, 28, text=f"Level {session.current_level + 1}", color=COLOR_FG),
        DrawCommand("text", 16, 50, text=f"Hearts: {session.hearts_collected} / {session.level.required}",
                    color=COLOR_FG),
    ]
    for i in range(MAX_LIVES):
        color = COLOR_HEART if i < session.lives else COLOR_LIFE_OFF
        cmds.append(DrawCommand("heart", WIDTH - 24 - i * 22, 24, 8, 8, color))
    cmds.append(DrawCommand("text", WIDTH / 2, 28, text=CONTROL_HINT, color=COLOR_HINT, align="center"))
    return cmds


# -------------------- Ending celebration --------------------

@dataclass
class Floater:
    x: float
    y: float
    speed: float
    size: float
    wobble: float
    color: Color


class FloatingHearts:
    """Hearts rising forever from below the screen, wrapping back to the bottom."""
    def __init__(self, rng: random.Random, count: int = FLOATER_COUNT):
        self.rng = rng
        self.floaters = [
            Floater(x=rng.random() * WIDTH,
                    y=HEIGHT + rng.random() * 100,
                    speed=1.5 + rng.random() * 3,
                    size=8 + rng.random() * 16,
                    wobble=rng.random() * math.pi * 2,
                    color=COLOR_HEART if rng.random() > 0.3 else COLOR_GOLD)
            for _ in range(count)
        ]

    def update(self):
        for f in self.floaters:
            f.y -= f.speed
            f.wobble += 0.03
            if f.y < -f.size:
                f.y = HEIGHT + f.size
                f.x = self.rng.random() * WIDTH

    def commands(self) -> List[DrawCommand]:
        return [DrawCommand("heart", f.x + math.sin(f.wobble) * 20, f.y, f.size, f.size, f.color)
                for f in self.floaters]


# -------------------- pygame painter --------------------

_HEART_CACHE: Dict[int, List[Tuple[float, float]]] = {}


def heart_outline(size: float, steps: int = 24) -> List[Tuple[float, float]]:
    """Unit heart curve scaled to `size` (roughly the half-width), centred on the origin."""
    key = int(size * 4)
    if key not in _HEART_CACHE:
        s = size / 16.0
        pts = []
        for i in range(steps):
            t = 2 * math.pi * i / steps
            x = 16 * math.sin(t) ** 3
            y = -(13 * math.cos(t) - 5 * math.cos(2 * t) - 2 * math.cos(3 * t) - math.cos(4 * t))
            pts.append((x * s, y * s))
        _HEART_CACHE[key] = pts
    return _HEART_CACHE[key]


def _draw_heart(surf: pygame.Surface, cx: float, cy: float, size: float, color: Color):
    pts = [(cx + px, cy + py) for px, py in heart_outline(size)]
    pygame.draw.polygon(surf, color, pts)


def _draw_gradient(surf: pygame.Surface, top: Color, bot: Color):
    h = surf.get_height()
    w = surf.get_width()
    for y in range(h):
        t = y / max(1, h - 1)
        c = tuple(int(top[i] + (bot[i] - top[i]) * t) for i in range(3))
        pygame.draw.line(surf, c, (0, y), (w, y))


def _draw_cloud(surf: pygame.Surface, cmd: DrawCommand):
    x, y, w, h = cmd.x, cmd.y, cmd.w, cmd.h
    for ox, oy, rw, rh in ((0.0, 0.0, 0.35, 0.5), (0.25, -0.15, 0.3, 0.6), (0.5, 0.0, 0.3, 0.45)):
        cx, cy = x + w * ox, y + h * oy
        ew, eh = w * rw, h * rh
        pygame.draw.ellipse(surf, cmd.color, pygame.Rect(int(cx - ew), int(cy - eh), int(ew * 2), int(eh * 2)))


def _draw_ground(surf: pygame.Surface, cmd: DrawCommand):
    cam, top = cmd.x, int(cmd.y)
    pygame.draw.rect(surf, COLOR_DIRT, pygame.Rect(0, top, WIDTH, HEIGHT - top))
    pygame.draw.rect(surf, COLOR_GRASS, pygame.Rect(0, top, WIDTH, 20))
    pygame.draw.rect(surf, COLOR_GRASS_TOP, pygame.Rect(0, top, WIDTH, 4))
    brick_w, brick_h = 32, 16
    for row in range(3):
        by = top + 20 + row * brick_h
        offset = (row % 2) * (brick_w // 2)
        wx = math.floor(cam / brick_w) * brick_w - brick_w
        while wx < cam + WIDTH + brick_w:
            pygame.draw.rect(surf, (109, 68, 39), pygame.Rect(int(wx - cam + offset), by, brick_w, brick_h), 1)
            wx += brick_w


def _draw_platform(surf: pygame.Surface, cmd: DrawCommand):
    rect = pygame.Rect(int(cmd.x), int(cmd.y), int(cmd.w), int(cmd.h))
    pygame.draw.rect(surf, cmd.color, rect)
    bx = rect.left + 20
    while bx < rect.right:
        pygame.draw.line(surf, COLOR_DIRT, (bx, rect.top), (bx, rect.bottom))
        bx += 20
    pygame.draw.line(surf, COLOR_DIRT, (rect.left, rect.centery), (rect.right, rect.centery))
    pygame.draw.rect(surf, COLOR_DIRT, rect, 2)
    gx = rect.left + 8
    while gx < rect.right - 4:
        pygame.draw.line(surf, COLOR_GRASS_TOP, (gx, rect.top), (gx - 3, rect.top - 5))
        pygame.draw.line(surf, COLOR_GRASS_TOP, (gx, rect.top), (gx + 3, rect.top - 5))
        gx += 14


def _draw_broken_heart(surf: pygame.Surface, cmd: DrawCommand):
    _draw_heart(surf, cmd.x, cmd.y, cmd.w, cmd.color)
    s = cmd.w
    crack = [(cmd.x, cmd.y - s * 0.45), (cmd.x - 3, cmd.y - s * 0.15),
             (cmd.x + 3, cmd.y + s * 0.05), (cmd.x - 2, cmd.y + s * 0.3)]
    pygame.draw.lines(surf, COLOR_BG, False, crack, 2)


def _draw_player(surf: pygame.Surface, cmd: DrawCommand):
    cx, cy, r = int(cmd.x), int(cmd.y), int(cmd.w)
    pygame.draw.circle(surf, cmd.color, (cx, cy), r)
    pygame.draw.circle(surf, (255, 255, 255), (cx - 5, cy - 3), 3)
    pygame.draw.circle(surf, (255, 255, 255), (cx + 5, cy - 3), 3)
    pygame.draw.arc(surf, (255, 255, 255), pygame.Rect(cx - 5, cy - 1, 10, 10), math.pi, 2 * math.pi, 2)


def paint(surf: pygame.Surface, commands: Sequence[DrawCommand], font: Optional[pygame.font.Font] = None):
    """Execute a draw list on a pygame surface, back to front."""
    for cmd in commands:
        kind = cmd.kind
        if kind == "fill":
            surf.fill(cmd.color)
        elif kind == "gradient":
            _draw_gradient(surf, cmd.color, cmd.color2 or cmd.color)
        elif kind == "cloud":
            _draw_cloud(surf, cmd)
        elif kind == "hill":
            pygame.draw.ellipse(surf, cmd.color,
                                pygame.Rect(int(cmd.x - cmd.w / 2), int(cmd.y - cmd.h), int(cmd.w), int(cmd.h * 2)))
        elif kind == "ground":
            _draw_ground(surf, cmd)
        elif kind == "platform":
            _draw_platform(surf, cmd)
        elif kind == "heart":
            _draw_heart(surf, cmd.x, cmd.y, cmd.w, cmd.color)
        elif kind == "broken_heart":
            _draw_broken_heart(surf, cmd)
        elif kind == "player":
            _draw_player(surf, cmd)
        elif kind == "text" and font is not None:
            img = font.render(cmd.text, True, cmd.color)
            x = cmd.x - img.get_width() / 2 if cmd.align == "center" else cmd.x
            surf.blit(img, (int(x), int(cmd.y - img.get_height())))
        elif kind != "text":
            raise ValueError(f"unknown draw command {kind!r}")
