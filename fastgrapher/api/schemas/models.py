"""Pydantic models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from fastgrapher.core.types import ClassificationResult


class ClassificationSchema(BaseModel):
    """Per-photo classification payload."""

    has_closed_eyes: bool
    not_looking_at_camera: bool
    is_group_photo: bool
    is_blurry: bool
    blur_score: float = Field(ge=0.0, le=100.0)
    is_centered: bool
    center_confidence: float
    face_count: int
    person_count: int

    @classmethod
    def from_result(cls, result: ClassificationResult) -> ClassificationSchema:
        return cls(
            has_closed_eyes=result.has_closed_eyes,
            not_looking_at_camera=result.not_looking_at_camera,
            is_group_photo=result.is_group_photo,
            is_blurry=result.is_blurry,
            blur_score=result.blur_score,
            is_centered=result.is_centered,
            center_confidence=result.center_confidence,
            face_count=result.face_count,
            person_count=result.person_count,
        )


class CapabilitySchema(BaseModel):
    """Availability of one detector backend."""

    name: str
    available: bool
    error: str | None = None


class ModelsSchema(BaseModel):
    """Availability of every detector backend."""

    models: list[CapabilitySchema]


class ConfigSchema(BaseModel):
    """Runtime-tunable configuration payload."""

    inference_timeout_s: float = Field(default=10.0, ge=0.0)
    ear_threshold: float = Field(default=0.21, gt=0.0, lt=1.0)
    gaze_score_threshold: int = Field(default=3, ge=1)
    group_min_persons: int = Field(default=4, ge=1)
    group_min_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    blur_threshold: float = Field(default=20.0, ge=0.0, le=100.0)
    blur_scale: float = Field(default=100.0, gt=0.0)
    center_threshold: float = Field(default=0.25, gt=0.0, le=1.0)
