# heartrun/game/controls.py
from __future__ import annotations
import pygame

# Space, Up arrow and W all mean "jump"
JUMP_KEYS = (pygame.K_SPACE, pygame.K_UP, pygame.K_w)


def is_jump_event(event: pygame.event.Event) -> bool:
    """Keyboard press, left click or touch: every input source collapses to one intent."""
    if event.type == pygame.KEYDOWN:
        return event.key in JUMP_KEYS
    if event.type == pygame.MOUSEBUTTONDOWN:
        return event.button == 1
    return event.type == pygame.FINGERDOWN


def handle_event(session, event: pygame.event.Event) -> bool:
    """Forward jump presses to the session. Returns True if the event was a jump press."""
    if is_jump_event(event):
        session.request_jump()
        return True
    return False
