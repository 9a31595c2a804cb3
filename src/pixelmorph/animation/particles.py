"""
Particle convergence simulation.

Animates a rank correspondence as particles in three phases:
- Hold: particles sit at their source positions (the source image).
- Scatter: particles fly linearly to random points inside the canvas.
- Converge: damped spring attraction pulls them onto their target
  positions, with a hard lock near the end so the run always finishes
  exactly on target whatever the frame timing was.

The engine owns no timers. An external scheduler calls ``tick`` with the
elapsed time and draws the returned batch.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

import numpy as np

from pixelmorph.animation.clock import Phase, PhaseBoundaries, SimulationClock
from pixelmorph.animation.easing import ease_out_cubic
from pixelmorph.config import AnimationConfig
from pixelmorph.core.mapper import Correspondence
from pixelmorph.errors import EmptySampleSet, InvalidDimensions, RunCancelled

Point = Tuple[float, float]


@dataclass
class Particle:
    """Snapshot of one particle's state."""
    origin: Point
    current: Point
    target: Point
    velocity: Point
    scatter_target: Optional[Point]
    color: Tuple[int, int, int, int]


@dataclass(frozen=True)
class RenderCommand:
    """Draw a filled square of ``size`` at (x, y); glow > 0 adds a halo."""
    x: int
    y: int
    size: int
    color: Tuple[int, int, int, int]
    glow: float


@dataclass
class RenderBatch:
    """All draw instructions for one tick."""
    xs: np.ndarray
    ys: np.ndarray
    colors: np.ndarray
    glow: np.ndarray
    size: int
    progress: float
    phase: Phase
    completed: bool = False

    def __len__(self) -> int:
        return len(self.xs)

    def __iter__(self) -> Iterator[RenderCommand]:
        for i in range(len(self.xs)):
            yield RenderCommand(
                x=int(self.xs[i]),
                y=int(self.ys[i]),
                size=self.size,
                color=tuple(int(c) for c in self.colors[i]),
                glow=float(self.glow[i]),
            )


class ParticleConvergenceEngine:
    """
    Drives one animation run over a correspondence.

    Particle state is held column-wise (one row per particle) and mutated
    in place; ``particle(i)`` hands out snapshots.
    """

    def __init__(
        self,
        correspondence: Correspondence,
        width: int,
        height: int,
        config: AnimationConfig | None = None,
        seed: int | None = None,
        on_complete: Callable[[], None] | None = None,
    ):
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"Canvas dimensions must be positive, got {width}x{height}")
        if len(correspondence) == 0:
            raise EmptySampleSet("Cannot start an animation with no particles")

        self.cfg = config or AnimationConfig()
        self.width = width
        self.height = height
        self.rng = np.random.default_rng(seed)
        self.on_complete = on_complete

        self.bounds = PhaseBoundaries(
            hold_end=self.cfg.hold_end,
            scatter_end=self.cfg.scatter_end,
            lock_at=self.cfg.lock_at,
        )
        self.clock = SimulationClock(self.cfg.duration_ms)

        self.origin = correspondence.source_xy.astype(np.float64)
        self.target = correspondence.target_xy.astype(np.float64)
        self.colors = correspondence.colors.copy()

        # State
        self.current = self.origin.copy()
        self.velocity = np.zeros_like(self.origin)
        self.scatter_targets: np.ndarray | None = None
        self.phase = Phase.HOLD
        self.finished = False
        self.cancelled = False

    def __len__(self) -> int:
        return len(self.origin)

    @property
    def progress(self) -> float:
        return self.clock.progress

    def particle(self, index: int) -> Particle:
        scatter = None
        if self.scatter_targets is not None:
            scatter = tuple(float(v) for v in self.scatter_targets[index])
        return Particle(
            origin=tuple(float(v) for v in self.origin[index]),
            current=tuple(float(v) for v in self.current[index]),
            target=tuple(float(v) for v in self.target[index]),
            velocity=tuple(float(v) for v in self.velocity[index]),
            scatter_target=scatter,
            color=tuple(int(c) for c in self.colors[index]),
        )

    def particles(self) -> List[Particle]:
        return [self.particle(i) for i in range(len(self))]

    def _scatter(self, q: float):
        if self.scatter_targets is None:
            n = len(self)
            self.scatter_targets = np.column_stack([
                self.rng.uniform(0, self.width, size=n),
                self.rng.uniform(0, self.height, size=n),
            ])
        self.current = self.origin + (self.scatter_targets - self.origin) * q

    def _converge(self, q: float):
        cfg = self.cfg
        if q >= self.bounds.lock_at:
            self.current[:] = self.target
            self.velocity[:] = 0.0
            return

        eased = ease_out_cubic(q)
        delta = self.target - self.current
        dist = np.hypot(delta[:, 0], delta[:, 1])
        moving = dist > cfg.snap_distance

        # Force is proportional to distance: direction * dist * k == delta * k
        force = cfg.force_constant * (1.0 - eased * 0.5)
        v = self.velocity[moving] + delta[moving] * force
        v *= cfg.damping
        self.velocity[moving] = v
        self.current[moving] += v

        settled = ~moving
        self.current[settled] = self.target[settled]
        self.velocity[settled] = 0.0

    def step(self, p: float):
        """Advance the particle state to progress ``p``."""
        self.phase = self.bounds.phase_at(p)
        if self.phase is Phase.SCATTER:
            self._scatter(self.bounds.scatter_progress(p))
        elif self.phase is Phase.CONVERGE:
            self._converge(self.bounds.converge_progress(p))

    def render_batch(self, completed: bool = False) -> RenderBatch:
        """Draw instructions for the current state."""
        cfg = self.cfg
        # Round half up to whole pixels
        xs = np.floor(self.current[:, 0] + 0.5).astype(np.int64)
        ys = np.floor(self.current[:, 1] + 0.5).astype(np.int64)
        speed = np.hypot(self.velocity[:, 0], self.velocity[:, 1])
        glow = np.where(speed > cfg.glow_speed, speed * cfg.glow_scale, 0.0)
        return RenderBatch(
            xs=xs,
            ys=ys,
            colors=self.colors,
            glow=glow,
            size=cfg.size,
            progress=self.progress,
            phase=self.phase,
            completed=completed,
        )

    def tick(self, elapsed_ms: float) -> RenderBatch:
        """
        Advance the run to ``elapsed_ms`` since start and return what to draw.

        The batch returned by the first tick that reaches p = 1 has
        ``completed`` set; that is the only completion signal. Ticks after
        completion leave the state untouched.

        Raises:
            RunCancelled: the run was cancelled.
            TickOrderError: ``elapsed_ms`` went backwards.
        """
        if self.cancelled:
            raise RunCancelled("Animation run was cancelled")

        p = self.clock.advance(elapsed_ms)
        if self.finished:
            return self.render_batch()

        self.step(p)

        completed = p >= 1.0
        if completed:
            self.finished = True
            if self.on_complete:
                self.on_complete()
        return self.render_batch(completed=completed)

    def cancel(self):
        """Stop the run; the scheduler simply stops calling tick."""
        self.cancelled = True

    def reset(self):
        """Rewind to p = 0. A fresh scatter is drawn on the next run."""
        self.clock.reset()
        self.current = self.origin.copy()
        self.velocity = np.zeros_like(self.origin)
        self.scatter_targets = None
        self.phase = Phase.HOLD
        self.finished = False
        self.cancelled = False
