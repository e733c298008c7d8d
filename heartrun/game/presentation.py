# heartrun/game/presentation.py
"""
Boundary between the game core and whatever shows overlays and pixels.

The session calls a Presenter at state-machine transitions. Presenters never
touch simulation data: the only way back into the core is the `resume`
continuation handed to them, which is single-use and posts an event to the
session's dispatcher.
"""
from __future__ import annotations
from enum import Enum
from typing import Callable, List, Optional, Sequence

Resume = Callable[[], None]


class NarrativeMode(str, Enum):
    AUTO = "auto"      # dismissed by the session after a fixed delay
    BUTTON = "button"  # dismissed when the player presses the button


class Presenter:
    """No-op base; subclasses override the beats they display."""

    def present_narrative(self, text: str, mode: NarrativeMode, resume: Resume,
                          button: Optional[str] = None) -> None:
        pass

    def present_photo(self, level_index: int, resume: Resume) -> None:
        pass

    def present_final_message(self, resume: Resume) -> None:
        pass

    def present_email(self, resume: Resume) -> None:
        pass

    def present_ending(self) -> None:
        pass

    def render_frame(self, commands: Sequence) -> None:
        pass


class HeadlessPresenter(Presenter):
    """
    Acknowledges every prompt immediately. Used by the environment and tests to
    run the whole story without a human at the buttons.
    """
    def __init__(self, auto_ack: bool = True):
        self.auto_ack = auto_ack
        self.beats: List[tuple] = []
        self.last_frame: Sequence = ()
        self.pending: List[Resume] = []

    def _ack(self, resume: Resume):
        if self.auto_ack:
            resume()
        else:
            self.pending.append(resume)

    def present_narrative(self, text, mode, resume, button=None):
        self.beats.append(("narrative", text, NarrativeMode(mode)))
        if mode == NarrativeMode.BUTTON:
            self._ack(resume)

    def present_photo(self, level_index, resume):
        self.beats.append(("photo", level_index))
        self._ack(resume)

    def present_final_message(self, resume):
        self.beats.append(("final_message",))
        self._ack(resume)

    def present_email(self, resume):
        self.beats.append(("email",))
        self._ack(resume)

    def present_ending(self):
        self.beats.append(("ending",))

    def render_frame(self, commands):
        self.last_frame = commands

    def press(self) -> bool:
        """Acknowledge the oldest pending prompt (manual mode). False if none."""
        if not self.pending:
            return False
        self.pending.pop(0)()
        return True
