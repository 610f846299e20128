"""Explicit timer values driven by the scheduler's tick function."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class TimerState:
    """Cosmetic "saving in N" counter.

    ``interval_handle`` is set exactly while ``elapsed_ticks`` is advancing.
    """

    elapsed_ticks: int = 0
    interval_handle: Optional[int] = None
    next_tick_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self.interval_handle is not None

    def start(self, handle: int, *, now: float, interval: float) -> None:
        self.interval_handle = handle
        self.next_tick_at = now + interval

    def advance(self, now: float, interval: float) -> int:
        """Apply every tick that fell due up to ``now``; return how many."""

        if self.interval_handle is None or self.next_tick_at is None:
            return 0
        fired = 0
        while self.next_tick_at <= now:
            self.elapsed_ticks += 1
            self.next_tick_at += interval
            fired += 1
        return fired

    def stop(self) -> None:
        self.interval_handle = None
        self.next_tick_at = None

    def reset(self) -> None:
        self.stop()
        self.elapsed_ticks = 0
