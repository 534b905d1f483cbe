"""Detector availability.

Detectors are loaded once, at startup, into a `DetectorCapability`. A backend
that fails to load (missing library, missing model file, runtime error) yields
an unavailable capability: the failure is logged once and never retried, and
the fields that depend on it fall back to their safe defaults.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from fastgrapher.core.config.settings import FastGrapherSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

FACE_CAPABILITY = "face_landmarks"
OBJECT_CAPABILITY = "object_detection"


@dataclass(frozen=True)
class DetectorCapability(Generic[T]):
    """A loaded detector, or the reason it is unavailable."""

    name: str
    detector: T | None = None
    error: str | None = None

    @property
    def available(self) -> bool:
        return self.detector is not None

    @classmethod
    def unavailable(cls, name: str, error: str) -> DetectorCapability[Any]:
        return cls(name=name, detector=None, error=error)


def load_capability(name: str, factory: Callable[[], T]) -> DetectorCapability[T]:
    """Run `factory` once and wrap the outcome."""

    try:
        detector = factory()
    except Exception as e:
        logger.exception("Detector %s unavailable", name)
        return DetectorCapability(name=name, detector=None, error=f"{type(e).__name__}: {e}")
    logger.info("Detector %s loaded", name)
    return DetectorCapability(name=name, detector=detector)


def load_face_capability(settings: FastGrapherSettings) -> DetectorCapability[Any]:
    """Load the MediaPipe face-landmark detector described by `settings`."""

    def _factory() -> Any:
        from fastgrapher.core.detectors.face_mesh import FaceMeshDetector

        return FaceMeshDetector(
            model_path=settings.face_model_path,
            max_faces=settings.max_faces,
            min_confidence=settings.face_min_confidence,
        )

    return load_capability(FACE_CAPABILITY, _factory)


def load_object_capability(settings: FastGrapherSettings) -> DetectorCapability[Any]:
    """Load the YOLO object detector described by `settings`."""

    def _factory() -> Any:
        from fastgrapher.core.detectors.yolo import YoloObjectDetector

        return YoloObjectDetector(
            settings.object_model_name,
            conf=settings.object_confidence,
            imgsz=settings.object_inference_size,
        )

    return load_capability(OBJECT_CAPABILITY, _factory)
