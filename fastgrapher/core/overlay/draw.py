"""Overlay drawing helpers (OpenCV).

Used by the CLI tooling to write annotated copies of classified photos for
manual review of the heuristics.
"""

from __future__ import annotations

from collections.abc import Sequence

import cv2
import numpy as np

from fastgrapher.core.landmarks import LEFT_EYE_CONTOUR, RIGHT_EYE_CONTOUR, AnatomicalPoint
from fastgrapher.core.types import ClassificationResult, Detection, Face

EYE_COLOR = (57, 255, 20)  # bright green
NOSE_COLOR = (255, 128, 0)  # orange
PERSON_COLOR = (0, 170, 255)
OBJECT_COLOR = (160, 160, 160)
TEXT_COLOR = (255, 255, 255)
FLAG_COLOR = (0, 0, 255)


def result_labels(result: ClassificationResult) -> list[str]:
    """Return the short labels for the flags raised on `result`."""

    labels: list[str] = []
    if result.has_closed_eyes:
        labels.append("closed eyes")
    if result.not_looking_at_camera:
        labels.append("looking away")
    if result.is_group_photo:
        labels.append("group")
    if result.is_blurry:
        labels.append("blurry")
    if not result.is_centered:
        labels.append("off-center")
    return labels


def draw_overlays(
    image: np.ndarray,
    faces: Sequence[Face],
    detections: Sequence[Detection],
    result: ClassificationResult,
) -> np.ndarray:
    """Return a copy of `image` with detections, eye landmarks and flags drawn."""

    img = image.copy()
    for det in detections:
        x, y, w, h = det.bbox
        color = PERSON_COLOR if det.class_label == "person" else OBJECT_COLOR
        cv2.rectangle(img, (int(x), int(y)), (int(x + w), int(y + h)), color, 2)
        cv2.putText(
            img,
            f"{det.class_label} {det.confidence:.2f}",
            (int(x), max(int(y) - 6, 0)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.45,
            color,
            1,
            cv2.LINE_AA,
        )

    for face in faces:
        for p in face.present((*LEFT_EYE_CONTOUR, *RIGHT_EYE_CONTOUR)):
            cv2.circle(img, (int(p[0]), int(p[1])), 1, EYE_COLOR, -1)
        nose = face.get(AnatomicalPoint.NOSE_TIP)
        if nose is not None:
            cv2.circle(img, (int(nose[0]), int(nose[1])), 3, NOSE_COLOR, -1)

    labels = result_labels(result)
    text = ", ".join(labels) if labels else "ok"
    header = f"{text} | blur {result.blur_score:.1f}"
    color = FLAG_COLOR if labels else TEXT_COLOR
    cv2.putText(img, header, (8, 22), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 0, 0), 3, cv2.LINE_AA)
    cv2.putText(img, header, (8, 22), cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 1, cv2.LINE_AA)
    return img
