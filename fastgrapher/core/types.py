"""Shared type definitions used across the engine.

This module centralizes the small, stable types (points, faces, detections and
per-photo results) so analyzers, detectors and the orchestrator stay strongly
typed. The defaults declared on the result/report types are the documented
safe defaults returned whenever a detector or analyzer cannot produce a value.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np

Image = np.ndarray

Point = tuple[float, float]
# x, y, width, height in pixels.
BBox = tuple[float, float, float, float]


@dataclass(frozen=True)
class Face:
    """Landmarks of one face, indexed by the face-mesh topology.

    Entries may be `None` (or non-finite) when the backend did not produce that
    landmark; consumers must treat such indices as absent.
    """

    points: Sequence[Point | None] = field(default_factory=tuple)

    def get(self, index: int) -> Point | None:
        """Return the landmark at `index`, or `None` if it is absent."""

        if index < 0 or index >= len(self.points):
            return None
        p = self.points[index]
        if p is None:
            return None
        x, y = p
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        return (float(x), float(y))

    def present(self, indices: Iterable[int]) -> list[Point]:
        """Return the present landmarks among `indices` (order preserved)."""

        out: list[Point] = []
        for i in indices:
            p = self.get(i)
            if p is not None:
                out.append(p)
        return out

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class Detection:
    """Raw object-detector output in pixel coordinates."""

    class_label: str
    confidence: float
    bbox: BBox


@dataclass(frozen=True)
class ClassificationResult:
    """Per-photo classification.

    Field defaults are the safe defaults: a field that could not be computed
    (model unavailable, no detection, decode failure, analyzer error) keeps its
    default rather than raising.
    """

    has_closed_eyes: bool = False
    not_looking_at_camera: bool = False
    is_group_photo: bool = False
    is_blurry: bool = False
    blur_score: float = 0.0
    is_centered: bool = True
    center_confidence: float = 0.0
    face_count: int = 0
    person_count: int = 0
