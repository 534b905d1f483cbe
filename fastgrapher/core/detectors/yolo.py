"""Ultralytics YOLO object detector integration.

Torch stays an optional runtime dependency: ONNX exports can run without
importing torch.
"""

from __future__ import annotations

import importlib
import os
import threading
from contextlib import nullcontext
from typing import Any

import numpy as np
from ultralytics import YOLO

from fastgrapher.core.types import Detection

YOLO11_DEFAULT_MODEL = "yolo11n.pt"


class YoloObjectDetector:
    """Object detector wrapper around Ultralytics YOLO.

    Supports both Torch `.pt` models and ONNX exports. Runs on CPU and can be
    tuned via env vars (`FG_TORCH_THREADS`, `FG_TORCH_INTEROP_THREADS`).
    """

    _torch_threads_configured: bool = False

    def __init__(
        self,
        model_name: str = YOLO11_DEFAULT_MODEL,
        conf: float = 0.25,
        imgsz: int | None = None,
    ):
        """Create a detector.

        Args:
            model_name: Model path/name understood by Ultralytics (e.g. `yolo11n.pt`
                or an `.onnx` export).
            conf: Confidence threshold applied inside the Ultralytics predictor.
            imgsz: Optional inference size; photos larger than this are
                letterboxed down by Ultralytics.
        """

        self._configure_torch_threads_from_env()

        self.model_name = model_name
        self.is_onnx = model_name.lower().endswith(".onnx")
        self.device: str = "cpu"
        self._torch_inference_mode: Any | None = None
        if not self.is_onnx:
            try:
                torch = importlib.import_module("torch")
                self._torch_inference_mode = torch.inference_mode
            except Exception:
                self._torch_inference_mode = None
        # Avoid .to(device) on ONNX exports; Ultralytics raises TypeError
        self.model = YOLO(model_name)

        if not self.is_onnx:
            try:
                self.model.to(self.device)
            except Exception:
                # predict(device='cpu') still enforces CPU.
                pass
        self.conf = conf
        # Ultralytics keeps per-call predictor state on the model.
        self._lock = threading.Lock()
        self._predict_kwargs: dict[str, Any] = {
            "conf": self.conf,
            "verbose": False,
            "device": self.device,
        }
        if imgsz:
            self._predict_kwargs["imgsz"] = int(imgsz)

    @classmethod
    def _configure_torch_threads_from_env(cls) -> None:
        """Configure torch thread counts from environment variables (one-time)."""

        if cls._torch_threads_configured:
            return
        cls._torch_threads_configured = True

        threads_s = os.getenv("FG_TORCH_THREADS")
        interop_s = os.getenv("FG_TORCH_INTEROP_THREADS")
        if threads_s is None and interop_s is None:
            return

        try:
            torch = importlib.import_module("torch")

            if threads_s is not None and threads_s.strip():
                torch.set_num_threads(max(1, int(threads_s)))
            if interop_s is not None and interop_s.strip():
                torch.set_num_interop_threads(max(1, int(interop_s)))
        except Exception:
            # If torch isn't present or refuses changes, ignore.
            return

    def detect(self, image: np.ndarray) -> list[Detection]:
        """Run inference on a single BGR image.

        Returns:
            Detections with COCO class names and (x, y, width, height) boxes in
            image pixel coordinates.
        """

        infer_ctx = (
            self._torch_inference_mode()
            if self._torch_inference_mode is not None
            else nullcontext()
        )

        with self._lock, infer_ctx:
            results = self.model.predict(image, **self._predict_kwargs)

        if not results:
            return []

        result = results[0]
        boxes = getattr(result, "boxes", None)
        if boxes is None or len(boxes) == 0:
            return []

        names = getattr(result, "names", None) or getattr(self.model, "names", None) or {}

        # Ultralytics Boxes.data = (x1,y1,x2,y2,conf,cls)
        data = getattr(boxes, "data", None)
        if data is None:
            return []
        if hasattr(data, "cpu"):
            data = data.cpu()
        data_np = data.numpy() if hasattr(data, "numpy") else np.asarray(data)
        if data_np.ndim != 2 or data_np.shape[1] < 6:
            return []

        out: list[Detection] = []
        for x1, y1, x2, y2, conf_v, cls_v in data_np[:, :6]:
            cls_i = int(cls_v)
            out.append(
                Detection(
                    class_label=str(names.get(cls_i, cls_i)),
                    confidence=float(conf_v),
                    bbox=(
                        float(x1),
                        float(y1),
                        float(x2) - float(x1),
                        float(y2) - float(y1),
                    ),
                )
            )
        return out
