"""In-process state for settings, detectors and the classifier.

FastAPI routes use this module to access (and hot-reload) the singleton
`PhotoClassifier`. Detectors are loaded once per process; reloading settings
rebuilds the classifier around the already-loaded detectors, so model paths
only take effect on restart.
"""

from __future__ import annotations

from threading import RLock
from typing import Any

from fastgrapher.core.analytics.pipeline import PhotoClassifier, classifier_from_settings
from fastgrapher.core.config.settings import FastGrapherSettings, load_settings, settings_to_dict
from fastgrapher.core.detectors.capability import (
    DetectorCapability,
    load_face_capability,
    load_object_capability,
)

_settings: FastGrapherSettings | None = None
_capabilities: tuple[DetectorCapability[Any], DetectorCapability[Any]] | None = None
_classifier: PhotoClassifier | None = None
_lock = RLock()


def get_settings() -> FastGrapherSettings:
    """Return cached settings, loading them on first use."""

    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
    return _settings


def get_capabilities() -> tuple[DetectorCapability[Any], DetectorCapability[Any]]:
    """Return (faces, objects) capabilities, loading both on first use only."""

    global _capabilities
    with _lock:
        if _capabilities is None:
            settings = get_settings()
            _capabilities = (load_face_capability(settings), load_object_capability(settings))
    return _capabilities


def reload_settings(data: dict | None = None) -> FastGrapherSettings:
    """Reload settings and rebuild the classifier if it exists.

    Args:
        data: Optional patch dict merged into the loaded settings.
    """

    global _settings, _classifier
    with _lock:
        base = load_settings()
        if data:
            _settings = FastGrapherSettings(**{**settings_to_dict(base), **data})
        else:
            _settings = base
        if _classifier is not None:
            _classifier.close()
            faces, objects = get_capabilities()
            _classifier = classifier_from_settings(_settings, faces, objects)
    return _settings


def get_classifier() -> PhotoClassifier:
    """Return the singleton classifier, loading detectors if needed."""

    global _classifier
    with _lock:
        if _classifier is None:
            faces, objects = get_capabilities()
            _classifier = classifier_from_settings(get_settings(), faces, objects)
    return _classifier


def shutdown() -> None:
    """Release the classifier's worker pools and discard it (if present)."""

    global _classifier
    with _lock:
        if _classifier is not None:
            _classifier.close()
            _classifier = None
