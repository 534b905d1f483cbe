"""Eye-state analysis.

Computes the Eye Aspect Ratio (EAR) of each eye from four landmarks:

    EAR = |top lid - bottom lid| / |inner corner - outer corner|

An eye whose landmarks are missing (or whose corners coincide) is treated as
open (EAR 1.0), so partial meshes never produce a closed-eyes verdict on their
own. A face has closed eyes only when both EARs fall below the threshold.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastgrapher.core.geometry import distance, safe_ratio
from fastgrapher.core.landmarks import eye_indices
from fastgrapher.core.types import Face

logger = logging.getLogger(__name__)

# Canonical closed-eye threshold. Earlier tunings used 0.18 (lenient) and 0.23
# (strict); see `fastgrapher.core.config.presets`.
EAR_CLOSED_THRESHOLD = 0.21
# EAR reported for an eye that cannot be measured.
EAR_OPEN_DEFAULT = 1.0


@dataclass
class EyeStateConfig:
    """Configuration for the closed-eye decision."""

    ear_threshold: float = EAR_CLOSED_THRESHOLD


@dataclass(frozen=True)
class EyeState:
    """Per-face eye measurements."""

    left_ear: float
    right_ear: float
    both_closed: bool


def eye_aspect_ratio(face: Face, side: str) -> float:
    """Return the EAR of one eye, or `EAR_OPEN_DEFAULT` if it cannot be measured."""

    idx = eye_indices(side)
    top = face.get(idx["top"])
    bottom = face.get(idx["bottom"])
    inner = face.get(idx["inner"])
    outer = face.get(idx["outer"])
    if top is None or bottom is None or inner is None or outer is None:
        return EAR_OPEN_DEFAULT
    ear = safe_ratio(distance(top, bottom), distance(inner, outer))
    return EAR_OPEN_DEFAULT if ear is None else ear


def eye_state(face: Face, config: EyeStateConfig | None = None) -> EyeState:
    """Measure both eyes of a face."""

    cfg = config or EyeStateConfig()
    left = eye_aspect_ratio(face, "left")
    right = eye_aspect_ratio(face, "right")
    closed = left < cfg.ear_threshold and right < cfg.ear_threshold
    return EyeState(left_ear=left, right_ear=right, both_closed=closed)


def is_both_eyes_closed(face: Face, config: EyeStateConfig | None = None) -> bool:
    """Return True if both eyes of `face` are closed; False on any error."""

    try:
        return eye_state(face, config).both_closed
    except Exception:
        logger.exception("Eye-state analysis failed")
        return False
