"""
Progress clock and phase resolution for the particle run.

Phase boundaries are expressed on progress ``p``, never on tick counts,
so a slow host frame rate only stretches wall-clock time.
"""

from dataclasses import dataclass
from enum import Enum

from pixelmorph.errors import TickOrderError


class Phase(str, Enum):
    HOLD = "hold"
    SCATTER = "scatter"
    CONVERGE = "converge"


@dataclass(frozen=True)
class PhaseBoundaries:
    """Where HOLD ends, where SCATTER ends, and the converge lock point."""

    hold_end: float = 0.2
    scatter_end: float = 0.4
    lock_at: float = 0.95

    def phase_at(self, p: float) -> Phase:
        if p < self.hold_end:
            return Phase.HOLD
        if p < self.scatter_end:
            return Phase.SCATTER
        return Phase.CONVERGE

    def scatter_progress(self, p: float) -> float:
        """Local progress q within SCATTER."""
        return (p - self.hold_end) / (self.scatter_end - self.hold_end)

    def converge_progress(self, p: float) -> float:
        """Local progress q within CONVERGE."""
        return (p - self.scatter_end) / (1.0 - self.scatter_end)


class SimulationClock:
    """
    Maps elapsed milliseconds to progress ``p`` in [0, 1].

    Elapsed time must never go backwards between ticks.
    """

    def __init__(self, duration_ms: float):
        if duration_ms <= 0:
            raise ValueError(f"duration_ms must be > 0, got {duration_ms}")
        self.duration_ms = float(duration_ms)
        self.elapsed_ms = 0.0
        self.progress = 0.0
        self._ticked = False

    def advance(self, elapsed_ms: float) -> float:
        """
        Move the clock to ``elapsed_ms`` and return the new progress.

        Raises:
            TickOrderError: elapsed time is earlier than the previous tick.
        """
        if self._ticked and elapsed_ms < self.elapsed_ms:
            raise TickOrderError(
                f"Tick at {elapsed_ms}ms arrived after tick at {self.elapsed_ms}ms"
            )
        self._ticked = True
        self.elapsed_ms = float(elapsed_ms)
        self.progress = min(max(self.elapsed_ms / self.duration_ms, 0.0), 1.0)
        return self.progress

    def reset(self):
        self.elapsed_ms = 0.0
        self.progress = 0.0
        self._ticked = False
