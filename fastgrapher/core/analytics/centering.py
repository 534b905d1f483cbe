"""Main-subject centering.

Picks the most prominent detection (largest box, any class) and checks whether
its center lies near the image center. The distance is normalized per axis by
the image size, so 0 is dead center and ~0.71 is a corner.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from fastgrapher.core.types import Detection

logger = logging.getLogger(__name__)

# Confidence reported when nothing was detected (an empty frame counts as centered).
NO_DETECTION_CONFIDENCE = 0.5


@dataclass
class CenteringConfig:
    """Configuration for the centering decision."""

    max_center_distance: float = 0.25


@dataclass(frozen=True)
class CenteringReport:
    """Centering verdict. The defaults are the result for a failed analysis."""

    is_centered: bool = True
    confidence: float = 0.0
    distance: float | None = None


def main_subject(detections: Sequence[Detection]) -> Detection | None:
    """Return the detection with the largest box area (first one on ties)."""

    best: Detection | None = None
    best_area = -1.0
    for d in detections:
        area = float(d.bbox[2]) * float(d.bbox[3])
        if area > best_area:
            best = d
            best_area = area
    return best


def analyze_centering(
    detections: Sequence[Detection],
    image_size: tuple[int, int],
    config: CenteringConfig | None = None,
) -> CenteringReport:
    """Return whether the main subject of the photo is centered.

    Args:
        detections: Object detections for the photo.
        image_size: (width, height) of the photo in pixels.
    """

    cfg = config or CenteringConfig()
    try:
        if not detections:
            return CenteringReport(is_centered=True, confidence=NO_DETECTION_CONFIDENCE)

        w, h = image_size
        if w <= 0 or h <= 0:
            return CenteringReport()

        subject = main_subject(detections)
        if subject is None:
            return CenteringReport()
        x, y, bw, bh = subject.bbox
        dx = abs((x + bw / 2.0) - w / 2.0) / float(w)
        dy = abs((y + bh / 2.0) - h / 2.0) / float(h)
        dist = math.sqrt(dx * dx + dy * dy)
        return CenteringReport(
            is_centered=dist < cfg.max_center_distance,
            confidence=float(subject.confidence),
            distance=dist,
        )
    except Exception:
        logger.exception("Centering analysis failed")
        return CenteringReport()
