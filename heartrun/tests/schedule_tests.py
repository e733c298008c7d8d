# heartrun/tests/schedule_tests.py
"""
Tick scheduler ordering and the input adapter that turns pygame events into
jump intents.

Usage (from repo root):
  python -m heartrun.tests.schedule_tests
"""

from __future__ import annotations
import os
import sys

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
import pygame

from heartrun.game.controls import handle_event, is_jump_event
from heartrun.game.schedule import Scheduler


class JumpRecorder:
    def __init__(self):
        self.jumps = 0

    def request_jump(self):
        self.jumps += 1


def test_events_come_due_in_tick_order():
    q = Scheduler()
    q.schedule(now=10, delay=30, event="late", version=1)
    q.schedule(now=10, delay=5, event="early", version=1)
    q.schedule(now=10, delay=5, event="early-second", version=2)
    assert len(q) == 3

    assert q.pop_due(14) == []
    due = q.pop_due(15)
    assert [d.event for d in due] == ["early", "early-second"], "ties keep insertion order"
    assert [d.version for d in due] == [1, 2]
    assert len(q) == 1
    assert [d.event for d in q.pop_due(1000)] == ["late"]
    assert len(q) == 0


def test_negative_delay_is_due_now():
    q = Scheduler()
    item = q.schedule(now=3, delay=-8, event="now", version=0)
    assert item.due_tick == 3
    assert [d.event for d in q.pop_due(3)] == ["now"]


def test_jump_inputs_collapse_to_one_intent():
    assert is_jump_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_SPACE))
    assert is_jump_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_UP))
    assert is_jump_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_w))
    assert is_jump_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(10, 10)))
    assert is_jump_event(pygame.event.Event(pygame.FINGERDOWN, x=0.5, y=0.5, finger_id=0, touch_id=0))

    assert not is_jump_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_a))
    assert not is_jump_event(pygame.event.Event(pygame.KEYUP, key=pygame.K_SPACE))
    assert not is_jump_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=(10, 10)))


def test_handle_event_forwards_to_session():
    rec = JumpRecorder()
    assert handle_event(rec, pygame.event.Event(pygame.KEYDOWN, key=pygame.K_SPACE))
    assert not handle_event(rec, pygame.event.Event(pygame.KEYDOWN, key=pygame.K_LEFT))
    assert rec.jumps == 1


TESTS = [
    test_events_come_due_in_tick_order,
    test_negative_delay_is_due_now,
    test_jump_inputs_collapse_to_one_intent,
    test_handle_event_forwards_to_session,
]


def main():
    try:
        for t in TESTS:
            t()
            print(f"✓ {t.__name__}")
    except AssertionError as e:
        print(f"✗ Test failed: {e}", file=sys.stderr)
        sys.exit(1)
    print("🎉 Schedule tests passed")


if __name__ == "__main__":
    main()
