"""Photo classification endpoints.

`/classify/files/{name}` only exposes files directly under the configured
`photos_dir`; nested paths are rejected.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, UploadFile

from fastgrapher.api.schemas.models import ClassificationSchema
from fastgrapher.api.services.state import get_classifier, get_settings
from fastgrapher.core.images import ALLOWED_IMAGE_SUFFIXES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/classify", tags=["classify"])


def _is_safe_basename(name: str) -> bool:
    """Return True if `name` is a plain filename (no path separators or dot entries)."""

    if not name or name in {".", ".."}:
        return False
    if "/" in name or "\\" in name:
        return False
    return Path(name).name == name


@router.post("", response_model=ClassificationSchema)
def classify_upload(file: UploadFile = File(...)) -> ClassificationSchema:
    """Classify an uploaded photo.

    An empty or undecodable upload still returns 200 with default fields.
    """

    data = file.file.read()
    logger.debug("Classifying upload %s (%d bytes)", file.filename, len(data))
    result = get_classifier().classify(data)
    return ClassificationSchema.from_result(result)


@router.post("/files/{name}", response_model=ClassificationSchema)
def classify_file(name: str) -> ClassificationSchema:
    """Classify a photo stored under `photos_dir`."""

    if not _is_safe_basename(name):
        raise HTTPException(status_code=400, detail="Invalid file name")
    path = Path(get_settings().photos_dir) / name
    if path.suffix.lower() not in ALLOWED_IMAGE_SUFFIXES or not path.is_file():
        raise HTTPException(status_code=404, detail="Photo not found")
    result = get_classifier().classify(path)
    return ClassificationSchema.from_result(result)
