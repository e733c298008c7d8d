# heartrun/game/schedule.py
from __future__ import annotations
import heapq
import itertools
from dataclasses import dataclass, field
from typing import List


@dataclass(order=True)
class ScheduledEvent:
    due_tick: int
    seq: int
    event: str = field(compare=False)
    version: int = field(compare=False)


class Scheduler:
    """
    Cooperative timer queue. Events come due on a tick number instead of a
    wall-clock callback; the session polls it once per tick.
    `version` is the session version at scheduling time so the receiver can
    discard events that outlived the transition they were made for.
    """
    def __init__(self):
        self._queue: List[ScheduledEvent] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._queue)

    def schedule(self, now: int, delay: int, event: str, version: int) -> ScheduledEvent:
        item = ScheduledEvent(due_tick=now + max(0, int(delay)), seq=next(self._seq),
                              event=event, version=version)
        heapq.heappush(self._queue, item)
        return item

    def pop_due(self, now: int) -> List[ScheduledEvent]:
        """Remove and return every event due at or before `now`, in due order."""
        due = []
        while self._queue and self._queue[0].due_tick <= now:
            due.append(heapq.heappop(self._queue))
        return due
