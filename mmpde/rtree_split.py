"""Bounding rectangles, tree branches and the quadratic node split."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from functools import reduce
from typing import Any, Iterable, Sequence


def _as_single(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


# Volumes of the unit sphere in dimensions 0..20, kept at single precision.
_UNIT_SPHERE_VOLUMES = tuple(
    _as_single(v)
    for v in (
        0.000000, 2.000000, 3.141593,
        4.188790, 4.934802, 5.263789,
        5.167713, 4.724766, 4.058712,
        3.298509, 2.550164, 1.884104,
        1.335263, 0.910629, 0.599265,
        0.381443, 0.235331, 0.140981,
        0.082146, 0.046622, 0.025807,
    )
)
MAX_DIMS = len(_UNIT_SPHERE_VOLUMES) - 1


@dataclass(frozen=True)
class Rect:
    """An axis-aligned box given by its lower and upper corners."""

    low: tuple[float, ...]
    high: tuple[float, ...]

    def __post_init__(self) -> None:
        low = tuple(float(v) for v in self.low)
        high = tuple(float(v) for v in self.high)
        if len(low) != len(high):
            raise ValueError("corners of a rectangle must have the same dimension")
        if not 1 <= len(low) <= MAX_DIMS:
            raise ValueError(f"dimension must be between 1 and {MAX_DIMS}")
        if any(lo > hi for lo, hi in zip(low, high)):
            raise ValueError("lower corner exceeds upper corner")
        object.__setattr__(self, "low", low)
        object.__setattr__(self, "high", high)

    def combine(self, other: Rect) -> Rect:
        """Return the smallest rectangle holding both rectangles."""
        return Rect(
            tuple(map(min, self.low, other.low)),
            tuple(map(max, self.high, other.high)),
        )

    def overlaps(self, other: Rect) -> bool:
        """Whether the rectangles share at least one point (touching counts)."""
        return all(
            a_lo <= b_hi and b_lo <= a_hi
            for a_lo, a_hi, b_lo, b_hi in zip(self.low, self.high, other.low, other.high)
        )

    def volume(self) -> float:
        """The n-dimensional volume of the box."""
        return math.prod(hi - lo for lo, hi in zip(self.low, self.high))

    def spherical_volume(self) -> float:
        """The volume of the sphere circumscribing the box."""
        dims = len(self.low)
        sum_of_squares = sum(((hi - lo) * 0.5) ** 2 for lo, hi in zip(self.low, self.high))
        radius = math.sqrt(sum_of_squares)
        unit = _UNIT_SPHERE_VOLUMES[dims]
        if dims == 3:
            return radius * radius * radius * unit
        if dims == 2:
            return radius * radius * unit
        return math.pow(radius, dims) * unit


@dataclass(eq=False)
class Branch:
    """A bounding rectangle together with a child node or a data item."""

    rect: Rect
    item: Any


class _Partition:
    """Bookkeeping for distributing branches between two groups."""

    def __init__(self, branches: Sequence[Branch]) -> None:
        self.branches = branches
        self.assigned: list[int | None] = [None] * len(branches)
        self.counts = [0, 0]
        self.covers: list[Rect | None] = [None, None]
        self.areas = [0.0, 0.0]

    def untaken(self) -> list[int]:
        return [i for i, group in enumerate(self.assigned) if group is None]

    def classify(self, index: int, group: int) -> None:
        self.assigned[index] = group
        rect = self.branches[index].rect
        cover = self.covers[group]
        self.covers[group] = rect if cover is None else rect.combine(cover)
        self.areas[group] = self.covers[group].spherical_volume()
        self.counts[group] += 1


def _pick_seeds(part: _Partition) -> None:
    rects = [b.rect for b in part.branches]
    areas = [r.spherical_volume() for r in rects]
    cover_area = reduce(Rect.combine, rects).spherical_volume()
    worst = -cover_area - 1
    seeds = (0, 1)
    for a, rect_a in enumerate(rects[:-1]):
        for b in range(a + 1, len(rects)):
            waste = rect_a.combine(rects[b]).spherical_volume() - areas[a] - areas[b]
            if waste > worst:
                worst = waste
                seeds = (a, b)
    part.classify(seeds[0], 0)
    part.classify(seeds[1], 1)


def split_branches(
    branches: Iterable[Branch], min_fill: int
) -> tuple[list[Branch], list[Branch]]:
    """Divide branches into two groups of at least ``min_fill`` each.

    Seeds are the pair that would waste the most space together; the rest
    are placed one at a time, most strongly attracted first. Each group
    keeps the input order.
    """
    branches = list(branches)
    total = len(branches)
    if min_fill < 1:
        raise ValueError("min_fill must be at least 1")
    if total < 2 or total < 2 * min_fill:
        raise ValueError(
            f"cannot split {total} branches into two groups of at least {min_fill}"
        )

    part = _Partition(branches)
    _pick_seeds(part)
    limit = total - min_fill

    while sum(part.counts) < total and part.counts[0] < limit and part.counts[1] < limit:
        biggest_diff = -1.0
        chosen, better_group = None, 0
        for index in part.untaken():
            rect = branches[index].rect
            growth0 = rect.combine(part.covers[0]).spherical_volume() - part.areas[0]
            growth1 = rect.combine(part.covers[1]).spherical_volume() - part.areas[1]
            diff = growth1 - growth0
            if diff >= 0:
                group = 0
            else:
                group = 1
                diff = -diff
            if diff > biggest_diff:
                biggest_diff, chosen, better_group = diff, index, group
            elif diff == biggest_diff and part.counts[group] < part.counts[better_group]:
                chosen, better_group = index, group
        part.classify(chosen, better_group)

    if sum(part.counts) < total:
        group = 1 if part.counts[0] >= limit else 0
        for index in part.untaken():
            part.classify(index, group)

    first = [b for b, g in zip(branches, part.assigned) if g == 0]
    second = [b for b, g in zip(branches, part.assigned) if g == 1]
    return first, second