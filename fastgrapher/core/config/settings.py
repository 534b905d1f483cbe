"""Engine configuration.

Settings are loaded from YAML defaults and overridden by environment variables
prefixed with `FG_`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fastgrapher.core.analytics.blur import BlurConfig
from fastgrapher.core.analytics.centering import CenteringConfig
from fastgrapher.core.analytics.eyes import EAR_CLOSED_THRESHOLD, EyeStateConfig
from fastgrapher.core.analytics.gaze import GazeConfig
from fastgrapher.core.analytics.group import GroupConfig


class FastGrapherSettings(BaseSettings):
    """Runtime configuration loaded from YAML defaults and `FG_` env overrides."""

    model_config = SettingsConfigDict(env_prefix="FG_", validate_assignment=True)

    # Face landmarks (MediaPipe FaceLandmarker bundle).
    face_model_path: str = "models/face_landmarker.task"
    max_faces: int = 10
    face_min_confidence: float = 0.5

    # Object detection (Ultralytics). yolo11n keeps CPU latency low for uploads.
    object_model_name: str = "yolo11n.pt"
    object_confidence: float = 0.25
    object_inference_size: int | None = 640

    # Upper bound for a single model call; 0 disables the timeout.
    inference_timeout_s: float = 10.0

    ear_threshold: float = EAR_CLOSED_THRESHOLD
    gaze_score_threshold: int = 3
    group_min_persons: int = 4
    group_min_confidence: float = 0.5
    blur_threshold: float = 20.0
    blur_scale: float = 100.0
    center_threshold: float = 0.25

    # Directory served by `POST /classify/files/{name}`.
    photos_dir: str = Field("uploads", description="Directory of ingested photos")

    @field_validator("max_faces", "group_min_persons", "gaze_score_threshold")
    @classmethod
    def _validate_positive_int(cls, v: int) -> int:
        if int(v) < 1:
            raise ValueError("value must be >= 1")
        return int(v)

    @field_validator("face_min_confidence", "object_confidence", "group_min_confidence")
    @classmethod
    def _validate_confidence(cls, v: float) -> float:
        if not 0.0 <= float(v) <= 1.0:
            raise ValueError("confidence must be in [0, 1]")
        return float(v)

    @field_validator("object_inference_size")
    @classmethod
    def _validate_inference_size(cls, v: int | None) -> int | None:
        if v is None:
            return v
        if v <= 0:
            raise ValueError("object_inference_size must be > 0")
        return int(v)

    @field_validator("inference_timeout_s")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v < 0:
            raise ValueError("inference_timeout_s must be >= 0")
        return float(v)

    @field_validator("ear_threshold")
    @classmethod
    def _validate_ear_threshold(cls, v: float) -> float:
        if not 0.0 < float(v) < 1.0:
            raise ValueError("ear_threshold must be in (0, 1)")
        return float(v)

    @field_validator("blur_threshold")
    @classmethod
    def _validate_blur_threshold(cls, v: float) -> float:
        if not 0.0 <= float(v) <= 100.0:
            raise ValueError("blur_threshold must be in [0, 100]")
        return float(v)

    @field_validator("blur_scale")
    @classmethod
    def _validate_blur_scale(cls, v: float) -> float:
        if float(v) <= 0.0:
            raise ValueError("blur_scale must be > 0")
        return float(v)

    @field_validator("center_threshold")
    @classmethod
    def _validate_center_threshold(cls, v: float) -> float:
        if not 0.0 < float(v) <= 1.0:
            raise ValueError("center_threshold must be in (0, 1]")
        return float(v)


def settings_to_dict(settings: FastGrapherSettings) -> dict[str, Any]:
    """Convert settings to a plain dict."""

    return settings.model_dump()


def _config_path() -> Path:
    """Return the YAML configuration path (defaults to config/fastgrapher.config.yml)."""

    return Path(os.getenv("FG_CONFIG", "config/fastgrapher.config.yml"))


def load_settings() -> FastGrapherSettings:
    """Load settings from YAML and environment variables.

    YAML provides defaults; environment variables override.
    """

    data: dict[str, Any] = {}
    path = _config_path()
    if path.exists():
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    env_settings = FastGrapherSettings()
    env_overrides: dict[str, Any] = {
        name: getattr(env_settings, name) for name in env_settings.model_fields_set
    }

    merged = {**data, **env_overrides}
    return FastGrapherSettings(**merged)


def eye_config_from_settings(settings: FastGrapherSettings) -> EyeStateConfig:
    return EyeStateConfig(ear_threshold=settings.ear_threshold)


def gaze_config_from_settings(settings: FastGrapherSettings) -> GazeConfig:
    return GazeConfig(score_threshold=settings.gaze_score_threshold)


def group_config_from_settings(settings: FastGrapherSettings) -> GroupConfig:
    return GroupConfig(
        min_confidence=settings.group_min_confidence,
        min_persons=settings.group_min_persons,
    )


def blur_config_from_settings(settings: FastGrapherSettings) -> BlurConfig:
    return BlurConfig(variance_scale=settings.blur_scale, blurry_below=settings.blur_threshold)


def centering_config_from_settings(settings: FastGrapherSettings) -> CenteringConfig:
    return CenteringConfig(max_center_distance=settings.center_threshold)
