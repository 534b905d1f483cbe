"""MediaPipe FaceLandmarker integration (Tasks API).

Produces one `Face` per detected face with the 478-point refined mesh (468 face
points plus the two iris rings), converted from normalized to pixel
coordinates.
"""

from __future__ import annotations

import threading
from pathlib import Path

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from fastgrapher.core.types import Face, Point

FACE_LANDMARKER_DEFAULT_MODEL = "models/face_landmarker.task"
# Smaller files are almost always an HTML error page saved by a failed download.
MIN_MODEL_BYTES = 1_000_000


class FaceMeshDetector:
    """Face-landmark detector wrapper around MediaPipe FaceLandmarker."""

    def __init__(
        self,
        model_path: str = FACE_LANDMARKER_DEFAULT_MODEL,
        max_faces: int = 10,
        min_confidence: float = 0.5,
    ):
        """Create a detector.

        Args:
            model_path: Path to a `face_landmarker.task` bundle.
            max_faces: Maximum number of faces returned per image.
            min_confidence: Floor for face detection and face presence scores.

        Raises:
            FileNotFoundError: When the model bundle is missing or truncated.
        """

        path = Path(model_path)
        if not path.is_file():
            raise FileNotFoundError(f"FaceLandmarker model not found: {path}")
        if path.stat().st_size < MIN_MODEL_BYTES:
            raise FileNotFoundError(f"FaceLandmarker model looks truncated: {path}")

        self.model_path = str(path)
        self.max_faces = int(max_faces)
        options = vision.FaceLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=self.model_path),
            running_mode=vision.RunningMode.IMAGE,
            num_faces=self.max_faces,
            min_face_detection_confidence=float(min_confidence),
            min_face_presence_confidence=float(min_confidence),
            output_face_blendshapes=False,
            output_facial_transformation_matrixes=False,
        )
        self.landmarker = vision.FaceLandmarker.create_from_options(options)
        # The MediaPipe graph is not re-entrant.
        self._lock = threading.Lock()

    def detect(self, image: np.ndarray) -> list[Face]:
        """Return the faces found in a BGR image."""

        h, w = image.shape[:2]
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(rgb))
        with self._lock:
            result = self.landmarker.detect(mp_image)

        faces: list[Face] = []
        for landmarks in result.face_landmarks or []:
            points: list[Point | None] = [
                (float(lm.x) * w, float(lm.y) * h) for lm in landmarks
            ]
            faces.append(Face(points=tuple(points)))
        return faces

    def close(self) -> None:
        with self._lock:
            self.landmarker.close()
