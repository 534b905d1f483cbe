from __future__ import annotations

import math

import cv2
import numpy as np
import pytest

from fastgrapher.core.landmarks import (
    LEFT_EYE_LOWER_LID,
    LEFT_EYE_UPPER_LID,
    LEFT_IRIS,
    LEFT_JAW,
    MESH_SIZE_WITH_IRIS,
    RIGHT_EYE_LOWER_LID,
    RIGHT_EYE_UPPER_LID,
    RIGHT_IRIS,
    RIGHT_JAW,
    AnatomicalPoint,
)
from fastgrapher.core.types import Detection, Face

# Lid samples along the eye, as fractions of the half-width; the middle one is
# the top/bottom lid landmark.
_LID_STEPS = (-0.75, -0.5, -0.25, 0.0, 0.25, 0.5, 0.75)
_EYE_HALF_WIDTH = 20.0
_IRIS_RADIUS = 4.0

# Left jaw side in image space; the right side mirrors it around x=200.
_LEFT_JAW_POINTS = ((110.0, 220.0), (115.0, 250.0), (125.0, 280.0), (140.0, 300.0), (160.0, 315.0))


def _place_eye(points, cx, cy, half_h, first_corner, second_corner, upper, lower, iris, iris_shift):
    points[first_corner] = (cx - _EYE_HALF_WIDTH, cy)
    points[second_corner] = (cx + _EYE_HALF_WIDTH, cy)
    for t, up_i, low_i in zip(_LID_STEPS, upper, lower):
        x = cx + t * _EYE_HALF_WIDTH
        dy = half_h * math.sqrt(1.0 - t * t)
        points[up_i] = (x, cy - dy)
        points[low_i] = (x, cy + dy)
    ix = cx + iris_shift
    center, *ring = iris
    points[center] = (ix, cy)
    for i, (ox, oy) in zip(ring, ((_IRIS_RADIUS, 0.0), (0.0, -_IRIS_RADIUS), (-_IRIS_RADIUS, 0.0), (0.0, _IRIS_RADIUS))):
        points[i] = (ix + ox, cy + oy)


def make_face(
    eye_half_height: float = 8.0,
    head_shift: float = 0.0,
    iris_shift: float = 0.0,
    nostril_shift: float = 0.0,
    drop: tuple[int, ...] = (),
) -> Face:
    """Build a synthetic frontal face (eyes open, every gaze signal at zero).

    `head_shift` moves ears and cheeks sideways (a head turn), `iris_shift`
    moves both iris rings, `nostril_shift` moves both nostrils; `drop` removes
    landmarks.
    """

    points: list[tuple[float, float] | None] = [None] * MESH_SIZE_WITH_IRIS
    _place_eye(
        points,
        150.0,
        180.0,
        eye_half_height,
        AnatomicalPoint.LEFT_EYE_OUTER,
        AnatomicalPoint.LEFT_EYE_INNER,
        LEFT_EYE_UPPER_LID,
        LEFT_EYE_LOWER_LID,
        LEFT_IRIS,
        iris_shift,
    )
    _place_eye(
        points,
        250.0,
        180.0,
        eye_half_height,
        AnatomicalPoint.RIGHT_EYE_INNER,
        AnatomicalPoint.RIGHT_EYE_OUTER,
        RIGHT_EYE_UPPER_LID,
        RIGHT_EYE_LOWER_LID,
        RIGHT_IRIS,
        iris_shift,
    )
    points[AnatomicalPoint.LEFT_EAR] = (100.0 + head_shift, 200.0)
    points[AnatomicalPoint.RIGHT_EAR] = (300.0 + head_shift, 200.0)
    points[AnatomicalPoint.LEFT_CHEEK] = (140.0 + head_shift, 230.0)
    points[AnatomicalPoint.RIGHT_CHEEK] = (260.0 + head_shift, 230.0)
    points[AnatomicalPoint.NOSE_TIP] = (200.0, 230.0)
    points[AnatomicalPoint.LEFT_NOSTRIL] = (185.0 + nostril_shift, 240.0)
    points[AnatomicalPoint.RIGHT_NOSTRIL] = (215.0 + nostril_shift, 240.0)
    points[AnatomicalPoint.FOREHEAD] = (200.0, 100.0)
    points[AnatomicalPoint.CHIN] = (200.0, 320.0)
    for left_i, right_i, (x, y) in zip(LEFT_JAW, RIGHT_JAW, _LEFT_JAW_POINTS):
        points[left_i] = (x, y)
        points[right_i] = (400.0 - x, y)
    for i in drop:
        points[i] = None
    return Face(points=tuple(points))


def person(confidence: float = 0.9, bbox=(10.0, 10.0, 20.0, 40.0)) -> Detection:
    return Detection(class_label="person", confidence=confidence, bbox=bbox)


def checkerboard(size: int = 64) -> np.ndarray:
    """0/255 single-pixel checkerboard, BGR uint8 (maximally sharp)."""

    yy, xx = np.indices((size, size))
    gray = (((xx + yy) % 2) * 255).astype(np.uint8)
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def flat_image(size: int = 64, value: int = 128) -> np.ndarray:
    return np.full((size, size, 3), value, dtype=np.uint8)


def encode_png(image: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", image)
    assert ok
    return buf.tobytes()


class StaticDetector:
    """Detector double returning a fixed list and counting calls."""

    def __init__(self, items=None, error: Exception | None = None):
        self.items = list(items or [])
        self.error = error
        self.calls = 0

    def detect(self, image):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.items)


@pytest.fixture
def frontal_face() -> Face:
    return make_face()


@pytest.fixture
def closed_face() -> Face:
    return make_face(eye_half_height=2.0)
