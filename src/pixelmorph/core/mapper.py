"""
Brightness-rank correspondence.

Sorting both sample sets by brightness and pairing them rank for rank is
the optimal 1-D assignment whenever the cost grows with rank distance,
and it uses the full dark-to-bright range of both images even when
their brightness histograms differ.
"""

from dataclasses import dataclass
from typing import Iterator

import numpy as np

from pixelmorph.core.sampler import SampleSet
from pixelmorph.errors import EmptySampleSet


@dataclass(frozen=True)
class MappedPoint:
    """One correspondence entry."""

    rank: int
    source_x: int
    source_y: int
    target_x: int
    target_y: int
    color: tuple[int, int, int, int]


class Correspondence:
    """
    Rank-ordered pairing of source colours with target positions.

    Entry ``i`` carries the colour and original position of the i-th
    darkest source sample and the position of the i-th darkest target
    sample. All arrays are read-only.
    """

    def __init__(
        self,
        source_xy: np.ndarray,
        target_xy: np.ndarray,
        colors: np.ndarray,
        source_brightness: np.ndarray,
        target_brightness: np.ndarray,
    ):
        self.source_xy = np.array(source_xy, dtype=np.int64).reshape(-1, 2)
        self.target_xy = np.array(target_xy, dtype=np.int64).reshape(-1, 2)
        self.colors = np.array(colors, dtype=np.uint8).reshape(-1, 4)
        self.source_brightness = np.array(source_brightness, dtype=np.float64)
        self.target_brightness = np.array(target_brightness, dtype=np.float64)

        n = len(self.source_xy)
        for arr in (
            self.target_xy,
            self.colors,
            self.source_brightness,
            self.target_brightness,
        ):
            if len(arr) != n:
                raise ValueError("Correspondence columns must have equal length")
            arr.flags.writeable = False
        self.source_xy.flags.writeable = False

    def __len__(self) -> int:
        return len(self.source_xy)

    def __getitem__(self, rank: int) -> MappedPoint:
        sx, sy = self.source_xy[rank]
        tx, ty = self.target_xy[rank]
        return MappedPoint(
            rank=int(rank) if rank >= 0 else len(self) + int(rank),
            source_x=int(sx),
            source_y=int(sy),
            target_x=int(tx),
            target_y=int(ty),
            color=tuple(int(c) for c in self.colors[rank]),
        )

    def __iter__(self) -> Iterator[MappedPoint]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        return f"Correspondence(n={len(self)})"


class BrightnessRankMapper:
    """Pairs source and target samples by brightness rank."""

    @staticmethod
    def rank_order(samples: SampleSet) -> np.ndarray:
        """
        Indices that sort ``samples`` by ascending brightness.

        The sort is stable: equal-brightness samples keep their scan order.
        """
        return np.argsort(samples.brightness, kind="stable")

    def map(self, source: SampleSet, target: SampleSet) -> Correspondence:
        """
        Build the correspondence.

        Only ``min(len(source), len(target))`` entries are produced; the
        brightest tail of the larger set goes unused.

        Raises:
            EmptySampleSet: either set is empty.
        """
        if len(source) == 0:
            raise EmptySampleSet("Source sample set is empty")
        if len(target) == 0:
            raise EmptySampleSet("Target sample set is empty")

        n = min(len(source), len(target))
        src = self.rank_order(source)[:n]
        dst = self.rank_order(target)[:n]

        return Correspondence(
            source_xy=source.positions()[src],
            target_xy=target.positions()[dst],
            colors=source.colors[src],
            source_brightness=source.brightness[src],
            target_brightness=target.brightness[dst],
        )
