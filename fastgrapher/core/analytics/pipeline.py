"""Photo classification orchestration.

Ties together decoding, the two detector capabilities, and the per-axis
analyzers into a single call that always returns a complete
`ClassificationResult`.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

import numpy as np

from fastgrapher.core.analytics.blur import BlurConfig, BlurReport, analyze_blur
from fastgrapher.core.analytics.centering import (
    CenteringConfig,
    CenteringReport,
    analyze_centering,
)
from fastgrapher.core.analytics.eyes import EyeStateConfig, is_both_eyes_closed
from fastgrapher.core.analytics.gaze import GazeConfig, is_looking_away
from fastgrapher.core.analytics.group import GroupConfig, count_persons, is_group_photo
from fastgrapher.core.config.settings import (
    FastGrapherSettings,
    blur_config_from_settings,
    centering_config_from_settings,
    eye_config_from_settings,
    gaze_config_from_settings,
    group_config_from_settings,
)
from fastgrapher.core.detectors.capability import (
    FACE_CAPABILITY,
    OBJECT_CAPABILITY,
    DetectorCapability,
)
from fastgrapher.core.images import ImageDecodeError, ImageSource, decode_image, image_size
from fastgrapher.core.types import ClassificationResult, Detection, Face, Image

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INFERENCE_TIMEOUT_S = 10.0
DEFAULT_WORKERS_PER_DETECTOR = 2


class DetectorBusyError(RuntimeError):
    """Raised when a capability still has a timed-out call running."""


class FaceDetector(Protocol):
    """Minimal face-landmark interface expected by `PhotoClassifier`."""

    def detect(self, image: np.ndarray) -> list[Face]:
        """Return the faces found in a BGR image."""


class ObjectDetector(Protocol):
    """Minimal object-detection interface expected by `PhotoClassifier`."""

    def detect(self, image: np.ndarray) -> list[Detection]:
        """Return object detections in image pixel coordinates."""


@dataclass(frozen=True)
class PhotoAnalysis:
    """A classification together with the detector outputs it was built from."""

    result: ClassificationResult = field(default_factory=ClassificationResult)
    faces: tuple[Face, ...] = ()
    detections: tuple[Detection, ...] = ()
    timings: dict[str, float] = field(default_factory=dict)


def _guarded(name: str, fn: Callable[[], T], default: T) -> T:
    """Run one analyzer; log and return `default` if it raises."""

    try:
        return fn()
    except Exception:
        logger.exception("Analyzer %s failed", name)
        return default


class PhotoClassifier:
    """End-to-end per-photo classification.

    Responsibilities:
    - decode the photo once
    - run the face and object capabilities (each optional, each time-bounded)
    - run the closed-eyes, gaze, group, blur and centering analyzers

    Every failure degrades to the affected fields' defaults; `classify` never
    raises. One instance can serve concurrent calls. Each capability runs on
    its own small worker pool; while a timed-out call of a capability is still
    running, that capability is skipped as busy so it never ties up workers
    needed by the other one.
    """

    def __init__(
        self,
        faces: DetectorCapability[FaceDetector] | None = None,
        objects: DetectorCapability[ObjectDetector] | None = None,
        eye_config: EyeStateConfig | None = None,
        gaze_config: GazeConfig | None = None,
        group_config: GroupConfig | None = None,
        blur_config: BlurConfig | None = None,
        centering_config: CenteringConfig | None = None,
        inference_timeout_s: float | None = DEFAULT_INFERENCE_TIMEOUT_S,
        workers_per_detector: int = DEFAULT_WORKERS_PER_DETECTOR,
    ) -> None:
        """Create a classifier with injected capabilities and configuration.

        Args:
            faces: Face-landmark capability; missing means unavailable.
            objects: Object-detection capability; missing means unavailable.
            inference_timeout_s: Upper bound for one model call. `None` or 0
                runs the detector inline without a timeout.
            workers_per_detector: Size of each capability's own worker pool.
        """

        self.faces = faces or DetectorCapability.unavailable(FACE_CAPABILITY, "not configured")
        self.objects = objects or DetectorCapability.unavailable(
            OBJECT_CAPABILITY, "not configured"
        )
        self.eye_config = eye_config or EyeStateConfig()
        self.gaze_config = gaze_config or GazeConfig()
        self.group_config = group_config or GroupConfig()
        self.blur_config = blur_config or BlurConfig()
        self.centering_config = centering_config or CenteringConfig()
        self.inference_timeout_s = inference_timeout_s or None
        self.workers_per_detector = max(1, int(workers_per_detector))
        # One pool per capability: a hung backend can only exhaust its own workers.
        self._executors: dict[str, ThreadPoolExecutor] = {}
        # Calls that timed out and are still running, per capability.
        self._stuck: dict[str, Future] = {}
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the worker pools. Terminal: later calls run detectors inline.

        Calls already submitted are allowed to finish.
        """

        with self._lock:
            self._closed = True
            executors = list(self._executors.values())
            self._executors.clear()
        for executor in executors:
            executor.shutdown(wait=False)

    def _submit(self, capability: DetectorCapability[Any], image: Image) -> Future | None:
        """Submit one call to the capability's pool.

        Returns None when the classifier is closed (run inline instead).
        Raises `DetectorBusyError` while an earlier timed-out call is still running.
        """

        detector = capability.detector
        with self._lock:
            if self._closed:
                return None
            stuck = self._stuck.get(capability.name)
            if stuck is not None:
                if not stuck.done():
                    raise DetectorBusyError(capability.name)
                del self._stuck[capability.name]
            executor = self._executors.get(capability.name)
            if executor is None:
                executor = ThreadPoolExecutor(
                    max_workers=self.workers_per_detector,
                    thread_name_prefix=f"fg-{capability.name}",
                )
                self._executors[capability.name] = executor
            return executor.submit(detector.detect, image)

    def _run_detector(self, capability: DetectorCapability[Any], image: Image) -> list[Any] | None:
        """Run one capability. Returns None when it is unavailable, busy, fails, or times out."""

        detector = capability.detector
        if detector is None:
            return None
        try:
            future = None
            if self.inference_timeout_s is not None:
                future = self._submit(capability, image)
            if future is None:
                return list(detector.detect(image))
            try:
                return list(future.result(timeout=self.inference_timeout_s))
            except FutureTimeoutError:
                with self._lock:
                    self._stuck.setdefault(capability.name, future)
                logger.warning(
                    "Detector %s timed out after %.1fs", capability.name, self.inference_timeout_s
                )
                return None
        except DetectorBusyError:
            logger.warning("Detector %s busy with a timed-out call; skipped", capability.name)
            return None
        except Exception:
            logger.exception("Detector %s failed", capability.name)
            return None

    def _analyze(self, image: Image, profile: bool) -> PhotoAnalysis:
        """Run detectors and analyzers on a decoded image."""

        timings: dict[str, float] = {}
        t_all0 = time.perf_counter() if profile else 0.0

        t0 = time.perf_counter() if profile else 0.0
        faces: list[Face] | None = self._run_detector(self.faces, image)
        if profile:
            timings["faces_ms"] = (time.perf_counter() - t0) * 1000.0

        t0 = time.perf_counter() if profile else 0.0
        detections: list[Detection] | None = self._run_detector(self.objects, image)
        if profile:
            timings["objects_ms"] = (time.perf_counter() - t0) * 1000.0

        # Frame-level verdicts are the disjunction over faces.
        t0 = time.perf_counter() if profile else 0.0
        face_list = faces or []
        closed = _guarded(
            "closed_eyes",
            lambda: any(is_both_eyes_closed(f, self.eye_config) for f in face_list),
            False,
        )
        away = _guarded(
            "gaze",
            lambda: any(is_looking_away(f, self.gaze_config) for f in face_list),
            False,
        )
        if profile:
            timings["faces_analysis_ms"] = (time.perf_counter() - t0) * 1000.0

        det_list = detections or []
        persons = _guarded("persons", lambda: count_persons(det_list, self.group_config), 0)
        group = _guarded("group", lambda: is_group_photo(det_list, self.group_config), False)
        if detections is None:
            centering = CenteringReport()
        else:
            centering = _guarded(
                "centering",
                lambda: analyze_centering(det_list, image_size(image), self.centering_config),
                CenteringReport(),
            )

        t0 = time.perf_counter() if profile else 0.0
        blur = _guarded("blur", lambda: analyze_blur(image, self.blur_config), BlurReport())
        if profile:
            timings["blur_ms"] = (time.perf_counter() - t0) * 1000.0

        result = ClassificationResult(
            has_closed_eyes=bool(closed),
            not_looking_at_camera=bool(away),
            is_group_photo=bool(group),
            is_blurry=blur.is_blurry,
            blur_score=blur.blur_score,
            is_centered=centering.is_centered,
            center_confidence=centering.confidence,
            face_count=len(face_list),
            person_count=int(persons),
        )
        if profile:
            timings["classify_ms"] = (time.perf_counter() - t_all0) * 1000.0
        return PhotoAnalysis(
            result=result,
            faces=tuple(face_list),
            detections=tuple(det_list),
            timings=timings,
        )

    def analyze_image(self, image: Image, profile: bool = False) -> PhotoAnalysis:
        """Classify a decoded BGR image and keep the detector outputs.

        Never raises: an internal failure yields a `PhotoAnalysis` with the
        default result and no detections.
        """

        try:
            return self._analyze(image, profile=profile)
        except Exception:
            logger.exception("Classification failed")
            return PhotoAnalysis()

    def classify_image(self, image: Image) -> ClassificationResult:
        """Classify an already-decoded BGR image."""

        return self.analyze_image(image).result

    def classify(self, source: ImageSource) -> ClassificationResult:
        """Classify a photo given as a file path or an encoded byte buffer.

        Never raises: an unreadable source yields `ClassificationResult()`.
        """

        result, _timings = self.classify_with_profile(source, profile=False)
        return result

    def classify_with_profile(
        self,
        source: ImageSource,
        profile: bool = True,
    ) -> tuple[ClassificationResult, dict[str, float]]:
        """Classify a photo and return (result, timings).

        The `timings` dict contains stage durations in milliseconds and is used
        by the CLI tooling.
        """

        t0 = time.perf_counter() if profile else 0.0
        try:
            image = decode_image(source)
        except ImageDecodeError as e:
            logger.warning("Classification skipped: %s", e)
            return ClassificationResult(), {}
        except Exception:
            logger.exception("Image decoding failed")
            return ClassificationResult(), {}
        decode_ms = (time.perf_counter() - t0) * 1000.0 if profile else 0.0

        try:
            analysis = self.analyze_image(image, profile=profile)
        finally:
            # Drop the decoded raster before returning, on every path.
            del image
        timings = dict(analysis.timings)
        if profile:
            timings["decode_ms"] = decode_ms
        return analysis.result, timings


def classifier_from_settings(
    settings: FastGrapherSettings,
    faces: DetectorCapability[FaceDetector] | None = None,
    objects: DetectorCapability[ObjectDetector] | None = None,
) -> PhotoClassifier:
    """Build a classifier whose thresholds and timeout come from `settings`."""

    return PhotoClassifier(
        faces=faces,
        objects=objects,
        eye_config=eye_config_from_settings(settings),
        gaze_config=gaze_config_from_settings(settings),
        group_config=group_config_from_settings(settings),
        blur_config=blur_config_from_settings(settings),
        centering_config=centering_config_from_settings(settings),
        inference_timeout_s=settings.inference_timeout_s,
    )
