# heartrun/game/game.py
import os, sys, argparse, random, logging
from dataclasses import dataclass
from typing import List, Optional
import pygame
from pygame import K_ESCAPE, K_RETURN, K_KP_ENTER
from .config import (
    WIDTH, HEIGHT, FPS, SEED_DEFAULT, FADE_TICKS, NARRATIVE_AUTO_TICKS, LEVELS, LEVEL_PHOTOS,
    FINAL_MESSAGE_TEXT, COLOR_BG, COLOR_PANEL, COLOR_HEART, COLOR_FG
)
from .controls import handle_event
from .presentation import NarrativeMode, Presenter, Resume
from .render import Backdrop, FloatingHearts, build_frame, paint
from .session import Session

logger = logging.getLogger(__name__)

EMAIL_LINES = (
    "From: me",
    "Subject: us",
    "",
    "Every level was a year of us.",
    "Every heart was a moment I kept.",
    "",
    "Will you keep running with me?",
)
ENDING_TEXT = "Forever yours."


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--seed", type=int, default=None,
                   help="Level seed. Omit for SEED_DEFAULT, use -1 for random each launch.")
    p.add_argument("--fps", type=int, default=FPS, help="Frames per second (one update per frame)")
    p.add_argument("--start-level", type=int, default=None,
                   help=f"Skip the title and start at level 0..{len(LEVELS) - 1}")
    p.add_argument("--photos", type=str, default=".",
                   help="Directory holding photo1.jpg..photo4.jpg")
    p.add_argument("--verbose", action="store_true", help="Log debug output")
    return p.parse_args()


@dataclass
class Overlay:
    kind: str                       # "narrative" | "photo" | "final" | "email" | "ending"
    text: str = ""
    button: Optional[str] = None
    resume: Optional[Resume] = None
    ttl: Optional[int] = None       # auto-dismiss countdown (ticks)
    fade: int = 0                   # >0 while fading out
    image: Optional[pygame.Surface] = None


class PygamePresenter(Presenter):
    """Overlay cards drawn over the game frame, acknowledged by click or Enter."""
    def __init__(self, screen: pygame.Surface, font: pygame.font.Font, big_font: pygame.font.Font,
                 photo_dir: str = ".", rng: Optional[random.Random] = None):
        self.screen = screen
        self.font = font
        self.big_font = big_font
        self.photo_dir = photo_dir
        self.rng = rng or random.Random()
        self.overlay: Optional[Overlay] = None
        self.ending: Optional[FloatingHearts] = None
        btn_w, btn_h = 200, 54
        self.button_rect = pygame.Rect((WIDTH - btn_w) // 2, HEIGHT // 2 + 80, btn_w, btn_h)

    # --- Presenter API ---

    def present_narrative(self, text, mode, resume, button=None):
        ttl = NARRATIVE_AUTO_TICKS if mode == NarrativeMode.AUTO else None
        self.overlay = Overlay("narrative", text=text, button=button, resume=resume, ttl=ttl)

    def present_photo(self, level_index, resume):
        name = LEVEL_PHOTOS[level_index % len(LEVEL_PHOTOS)]
        path = os.path.join(self.photo_dir, name)
        image = None
        if os.path.exists(path):
            image = pygame.image.load(path).convert()
            image = pygame.transform.smoothscale(image, (WIDTH // 2, HEIGHT // 2))
        else:
            logger.warning("photo %s not found, showing a placeholder", path)
        self.overlay = Overlay("photo", text=name, button="Continue", resume=resume, image=image)

    def present_final_message(self, resume):
        self.overlay = Overlay("final", text=FINAL_MESSAGE_TEXT, button="Open Message", resume=resume)

    def present_email(self, resume):
        self.overlay = Overlay("email", text="\n".join(EMAIL_LINES), button="Reply", resume=resume)

    def present_ending(self):
        self.overlay = Overlay("ending", text=ENDING_TEXT)
        self.ending = FloatingHearts(self.rng)

    def render_frame(self, commands):
        paint(self.screen, commands, self.font)
        self._tick_overlay()
        if self.ending is not None:
            self.ending.update()
            paint(self.screen, self.ending.commands())
        if self.overlay is not None:
            self._draw_overlay(self.overlay)

    # --- Input ---

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Route button presses to the active overlay. True if consumed."""
        ov = self.overlay
        if ov is None or ov.button is None or ov.fade > 0:
            return False
        pressed = (
            (event.type == pygame.KEYDOWN and event.key in (K_RETURN, K_KP_ENTER)) or
            (event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and self.button_rect.collidepoint(event.pos))
        )
        if pressed:
            self._dismiss(ov)
        return pressed

    def _dismiss(self, ov: Overlay):
        ov.fade = FADE_TICKS
        if ov.resume is not None:
            ov.resume()

    def _tick_overlay(self):
        ov = self.overlay
        if ov is None:
            return
        if ov.ttl is not None:
            ov.ttl -= 1
            if ov.ttl <= 0:
                ov.ttl = None
                ov.fade = FADE_TICKS
        if ov.fade > 0:
            ov.fade -= 1
            if ov.fade == 0:
                self.overlay = None

    # --- Drawing ---

    def _draw_overlay(self, ov: Overlay):
        alpha = 235 if ov.fade == 0 else int(235 * ov.fade / FADE_TICKS)
        panel = pygame.Surface((WIDTH, HEIGHT), pygame.SRCALPHA)
        if ov.kind == "ending":
            panel.fill((0, 0, 0, 0))
        else:
            panel.fill((*COLOR_PANEL, alpha) if ov.kind in ("final", "email") else (*COLOR_BG, alpha))
        text_color = COLOR_FG if ov.kind in ("final", "email") else COLOR_HEART

        y = HEIGHT // 2 - 60
        if ov.kind == "photo":
            if ov.image is not None:
                panel.blit(ov.image, ((WIDTH - ov.image.get_width()) // 2, 40))
            else:
                pygame.draw.rect(panel, (*COLOR_HEART, alpha), pygame.Rect(WIDTH // 4, 40, WIDTH // 2, HEIGHT // 2), 3)
            y = HEIGHT // 2 + 40
        else:
            lines = ov.text.split("\n")
            y = HEIGHT // 2 - 20 * len(lines)
            font = self.font if ov.kind == "email" else self.big_font
            for line in lines:
                img = font.render(line, True, text_color)
                panel.blit(img, ((WIDTH - img.get_width()) // 2, y))
                y += img.get_height() + 6

        if ov.button is not None and ov.fade == 0:
            pygame.draw.rect(panel, COLOR_HEART, self.button_rect, border_radius=10)
            txt = self.font.render(ov.button, True, (255, 255, 255))
            panel.blit(txt, (self.button_rect.centerx - txt.get_width() // 2,
                             self.button_rect.centery - txt.get_height() // 2))
        self.screen.blit(panel, (0, 0))


def run():
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Resolve seed: None -> use SEED_DEFAULT; -1 -> random
    if args.seed is None:
        launch_seed = SEED_DEFAULT
    elif args.seed == -1:
        launch_seed = random.randrange(0, 2**32 - 1)
    else:
        launch_seed = args.seed
    logger.info("starting with seed %d", launch_seed)

    pygame.init()
    pygame.display.set_caption("Heart Run")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("system-ui,sans", 18, bold=True)
    big_font = pygame.font.SysFont("georgia,serif", 32)

    scenery_rng = random.Random(launch_seed)
    presenter = PygamePresenter(screen, font, big_font, photo_dir=args.photos, rng=scenery_rng)
    session = Session(presenter=presenter, seed=launch_seed)
    backdrop = Backdrop.generate(scenery_rng)

    if args.start_level is not None:
        session.start_level(args.start_level)
    else:
        session.start()

    while True:
        clock.tick(args.fps)

        for event in pygame.event.get():
            if event.type == pygame.QUIT or (event.type == pygame.KEYDOWN and event.key == K_ESCAPE):
                pygame.quit(); sys.exit()
            if presenter.handle_event(event):
                continue
            handle_event(session, event)

        session.update()
        presenter.render_frame(build_frame(session, backdrop))
        pygame.display.flip()


if __name__ == "__main__":
    run()
