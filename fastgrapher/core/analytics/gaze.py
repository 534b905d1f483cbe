"""Gaze ("looking away from the camera") analysis.

A heuristic ensemble over face-mesh landmarks. Five independent signals each
add a fixed weight to an indicator score when they fire:

1. head yaw (3): nose tip offset from the ear (and cheek) midpoint
2. iris deviation (2): weighted eye center off-center inside the eye contour
3. facial asymmetry (2): one jaw side foreshortened relative to the other
4. nose direction (1): nose tip offset from the nostril midpoint
5. eye-visibility imbalance (1): one eye contour much less complete

The face is looking away when the score reaches `score_threshold`. A signal
whose landmarks are missing, or whose ratio is indeterminate, contributes
nothing. This is not a calibrated classifier; the constants below are design
choices kept in one place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from fastgrapher.core.geometry import (
    bounding_box,
    distance,
    mean_distance,
    midpoint,
    safe_ratio,
    weighted_center,
)
from fastgrapher.core.landmarks import (
    LEFT_EYE_CONTOUR,
    LEFT_IRIS,
    LEFT_JAW,
    RIGHT_EYE_CONTOUR,
    RIGHT_IRIS,
    RIGHT_JAW,
    AnatomicalPoint,
)
from fastgrapher.core.types import Face

logger = logging.getLogger(__name__)

SIGNAL_HEAD_YAW = "head_yaw"
SIGNAL_IRIS_DEVIATION = "iris_deviation"
SIGNAL_ASYMMETRY = "facial_asymmetry"
SIGNAL_NOSE_DIRECTION = "nose_direction"
SIGNAL_EYE_VISIBILITY = "eye_visibility_imbalance"


@dataclass
class GazeConfig:
    """Thresholds and weights of the gaze ensemble."""

    # Normalized nose offset (-0.5..0.5) is mapped to a pseudo-angle.
    yaw_scale_degrees: float = 90.0
    yaw_turn_degrees: float = 15.0
    yaw_profile_degrees: float = 25.0
    # |position - 0.5| inside the eye box, position in [0, 1].
    iris_deviation_threshold: float = 0.10
    # |left - right| / max(left, right) of mean jaw-to-nose distances.
    asymmetry_threshold: float = 0.20
    # |nose - nostril midpoint| / nostril width.
    nose_offset_threshold: float = 0.20
    # |left - right| of the fraction of eye-contour landmarks present.
    visibility_imbalance_threshold: float = 0.30

    yaw_weight: int = 3
    iris_weight: int = 2
    asymmetry_weight: int = 2
    nose_weight: int = 1
    visibility_weight: int = 1

    score_threshold: int = 3


@dataclass(frozen=True)
class GazeSignal:
    """One measured signal. `value` is None when it could not be measured."""

    name: str
    value: float | None
    triggered: bool
    weight: int

    @property
    def contribution(self) -> int:
        return self.weight if self.triggered else 0


@dataclass(frozen=True)
class GazeReport:
    """Per-face gaze analysis."""

    signals: tuple[GazeSignal, ...]
    score: int
    looking_away: bool
    head_pose: str

    def signal(self, name: str) -> GazeSignal | None:
        for s in self.signals:
            if s.name == name:
                return s
        return None


def head_yaw_degrees(face: Face, config: GazeConfig | None = None) -> float | None:
    """Estimate absolute head yaw (pseudo-degrees) from ears and cheeks.

    Both estimates use the nose tip offset from the pair's midpoint, normalized
    by the pair's distance. The larger estimate wins, so either pair alone can
    reveal a turn.
    """

    cfg = config or GazeConfig()
    nose = face.get(AnatomicalPoint.NOSE_TIP)
    if nose is None:
        return None

    estimates: list[float] = []
    for left_i, right_i in (
        (AnatomicalPoint.LEFT_EAR, AnatomicalPoint.RIGHT_EAR),
        (AnatomicalPoint.LEFT_CHEEK, AnatomicalPoint.RIGHT_CHEEK),
    ):
        left = face.get(left_i)
        right = face.get(right_i)
        if left is None or right is None:
            continue
        mid = midpoint(left, right)
        offset = safe_ratio(nose[0] - mid[0], distance(left, right))
        if offset is None:
            continue
        estimates.append(abs(offset) * cfg.yaw_scale_degrees)
    return max(estimates) if estimates else None


def _eye_position(
    face: Face,
    contour: tuple[int, ...],
    iris: tuple[int, ...],
    lids: tuple[int, int],
) -> float | None:
    """Horizontal pupil position inside the eye box: 0 left, 0.5 centered, 1 right."""

    box = bounding_box(face, contour)
    if box is None or box.is_degenerate:
        return None
    center = weighted_center(face, (*contour, *iris), weighted_subset=(*iris, *lids))
    if center is None:
        return None
    return safe_ratio(center[0] - box.min_x, box.width)


def iris_deviation(face: Face) -> float | None:
    """Largest |position - 0.5| over both eyes, or None if neither is measurable."""

    positions = [
        _eye_position(
            face,
            LEFT_EYE_CONTOUR,
            LEFT_IRIS,
            (AnatomicalPoint.LEFT_EYE_TOP, AnatomicalPoint.LEFT_EYE_BOTTOM),
        ),
        _eye_position(
            face,
            RIGHT_EYE_CONTOUR,
            RIGHT_IRIS,
            (AnatomicalPoint.RIGHT_EYE_TOP, AnatomicalPoint.RIGHT_EYE_BOTTOM),
        ),
    ]
    deviations = [abs(p - 0.5) for p in positions if p is not None]
    return max(deviations) if deviations else None


def facial_asymmetry(face: Face) -> float | None:
    """Relative difference of mean jaw-to-nose distances, left vs right."""

    nose = face.get(AnatomicalPoint.NOSE_TIP)
    if nose is None:
        return None
    left = mean_distance(face, LEFT_JAW, nose)
    right = mean_distance(face, RIGHT_JAW, nose)
    if left is None or right is None:
        return None
    return safe_ratio(abs(left - right), max(left, right))


def nose_direction(face: Face) -> float | None:
    """Nose tip offset from the nostril midpoint, normalized by nostril width."""

    nose = face.get(AnatomicalPoint.NOSE_TIP)
    left = face.get(AnatomicalPoint.LEFT_NOSTRIL)
    right = face.get(AnatomicalPoint.RIGHT_NOSTRIL)
    if nose is None or left is None or right is None:
        return None
    mid = midpoint(left, right)
    return safe_ratio(abs(nose[0] - mid[0]), distance(left, right))


def eye_visibility_imbalance(face: Face) -> float | None:
    """Difference between the detected fractions of the two eye contours."""

    left = len(face.present(LEFT_EYE_CONTOUR)) / float(len(LEFT_EYE_CONTOUR))
    right = len(face.present(RIGHT_EYE_CONTOUR)) / float(len(RIGHT_EYE_CONTOUR))
    if left == 0.0 and right == 0.0:
        return None
    return abs(left - right)


def _measure(name: str, fn: Callable[[Face], float | None], face: Face) -> float | None:
    try:
        return fn(face)
    except Exception:
        logger.exception("Gaze signal %s failed", name)
        return None


def _signal(name: str, value: float | None, threshold: float, weight: int) -> GazeSignal:
    triggered = value is not None and value > threshold
    return GazeSignal(name=name, value=value, triggered=triggered, weight=weight)


def gaze_report(face: Face, config: GazeConfig | None = None) -> GazeReport:
    """Measure every gaze signal on `face` and combine them."""

    cfg = config or GazeConfig()

    yaw = _measure(SIGNAL_HEAD_YAW, lambda f: head_yaw_degrees(f, cfg), face)
    signals = (
        _signal(SIGNAL_HEAD_YAW, yaw, cfg.yaw_turn_degrees, cfg.yaw_weight),
        _signal(
            SIGNAL_IRIS_DEVIATION,
            _measure(SIGNAL_IRIS_DEVIATION, iris_deviation, face),
            cfg.iris_deviation_threshold,
            cfg.iris_weight,
        ),
        _signal(
            SIGNAL_ASYMMETRY,
            _measure(SIGNAL_ASYMMETRY, facial_asymmetry, face),
            cfg.asymmetry_threshold,
            cfg.asymmetry_weight,
        ),
        _signal(
            SIGNAL_NOSE_DIRECTION,
            _measure(SIGNAL_NOSE_DIRECTION, nose_direction, face),
            cfg.nose_offset_threshold,
            cfg.nose_weight,
        ),
        _signal(
            SIGNAL_EYE_VISIBILITY,
            _measure(SIGNAL_EYE_VISIBILITY, eye_visibility_imbalance, face),
            cfg.visibility_imbalance_threshold,
            cfg.visibility_weight,
        ),
    )

    if yaw is None:
        head_pose = "unknown"
    elif yaw > cfg.yaw_profile_degrees:
        head_pose = "profile"
    elif yaw > cfg.yaw_turn_degrees:
        head_pose = "turned"
    else:
        head_pose = "frontal"

    score = sum(s.contribution for s in signals)
    return GazeReport(
        signals=signals,
        score=score,
        looking_away=score >= cfg.score_threshold,
        head_pose=head_pose,
    )


def is_looking_away(face: Face, config: GazeConfig | None = None) -> bool:
    """Return True if `face` is looking away from the camera; False on error."""

    try:
        return gaze_report(face, config).looking_away
    except Exception:
        logger.exception("Gaze analysis failed")
        return False
