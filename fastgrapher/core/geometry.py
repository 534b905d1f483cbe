"""Geometric helpers over landmark coordinates.

All helpers tolerate partial landmark sets: they work on whatever subset of the
requested indices is present and return `None` when nothing usable remains.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from fastgrapher.core.types import Face, Point

# Points in a weighted subset count this many times in `weighted_center`.
WEIGHTED_POINT_MULTIPLIER = 3


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned extent of a set of landmarks."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def is_degenerate(self) -> bool:
        """True when the box has no width or no height."""

        return self.width <= 0.0 or self.height <= 0.0


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance in pixel space."""

    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def midpoint(p1: Point, p2: Point) -> Point:
    return ((p1[0] + p2[0]) / 2.0, (p1[1] + p2[1]) / 2.0)


def safe_ratio(numerator: float, denominator: float) -> float | None:
    """Return numerator/denominator, or `None` when the ratio is indeterminate."""

    if denominator == 0.0 or not math.isfinite(denominator) or not math.isfinite(numerator):
        return None
    value = numerator / denominator
    return value if math.isfinite(value) else None


def bounding_box(face: Face, indices: Iterable[int]) -> BoundingBox | None:
    """Return the bounding box of the present landmarks among `indices`."""

    pts = face.present(indices)
    if not pts:
        return None
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    return BoundingBox(min_x=min(xs), max_x=max(xs), min_y=min(ys), max_y=max(ys))


def weighted_center(
    face: Face,
    indices: Iterable[int],
    weighted_subset: Iterable[int] = (),
) -> Point | None:
    """Mean of the present listed landmarks, weighting `weighted_subset` points.

    Gives a stable pupil estimate from a coarse mesh: the lid centers (and iris
    ring, when the model emits it) pull the estimate toward where the eye is
    actually looking.
    """

    heavy = set(int(i) for i in weighted_subset)
    sx = sy = total = 0.0
    for i in dict.fromkeys(int(i) for i in indices):
        p = face.get(i)
        if p is None:
            continue
        w = float(WEIGHTED_POINT_MULTIPLIER) if i in heavy else 1.0
        sx += p[0] * w
        sy += p[1] * w
        total += w
    if total == 0.0:
        return None
    return (sx / total, sy / total)


def mean_distance(face: Face, indices: Iterable[int], origin: Point) -> float | None:
    """Average distance from `origin` to the present landmarks among `indices`."""

    pts = face.present(indices)
    if not pts:
        return None
    return sum(distance(p, origin) for p in pts) / float(len(pts))
