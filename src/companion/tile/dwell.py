"""
Drag-enter dwell state machine.

A drag that hovers a nested tile for ENTER_DWELL_MS enters the tile's
contents. The dwell is one value with two phases; the visual progress is
derived from the elapsed time instead of being driven by a separate
animation object.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from companion.config import ENTER_DWELL_MS, DWELL_PROGRESS_START, DWELL_PROGRESS_END

NO_PROGRESS: float = -1.0


class DwellPhase(Enum):
    IDLE = auto()
    DWELLING = auto()


@dataclass
class DwellState:
    duration_ms: int = ENTER_DWELL_MS
    phase: DwellPhase = DwellPhase.IDLE
    started_at: Optional[float] = None  # seconds, same clock as `now`

    @property
    def is_dwelling(self) -> bool:
        return self.phase is DwellPhase.DWELLING

    def start(self, now: float) -> None:
        """Starts (or restarts) dwelling at `now`."""
        self.phase = DwellPhase.DWELLING
        self.started_at = now

    def cancel(self) -> None:
        """Back to IDLE. Safe to call when already idle."""
        self.phase = DwellPhase.IDLE
        self.started_at = None

    def elapsed_ms(self, now: float) -> float:
        if not self.is_dwelling or self.started_at is None:
            return 0.0
        return max(0.0, (now - self.started_at) * 1000.0)

    def progress(self, now: float) -> float:
        """Linear progress from DWELL_PROGRESS_START to DWELL_PROGRESS_END, -1.0 when idle."""
        if not self.is_dwelling:
            return NO_PROGRESS
        if self.duration_ms <= 0:
            return DWELL_PROGRESS_END
        t = min(self.elapsed_ms(now) / self.duration_ms, 1.0)
        return DWELL_PROGRESS_START + (DWELL_PROGRESS_END - DWELL_PROGRESS_START) * t

    def expired(self, now: float) -> bool:
        return self.is_dwelling and self.elapsed_ms(now) >= self.duration_ms
