from __future__ import annotations

import argparse
import json
import logging
import time
from dataclasses import asdict, is_dataclass
from pathlib import Path

import cv2
import numpy as np

from fastgrapher.core.analytics.pipeline import (
    PhotoAnalysis,
    PhotoClassifier,
    classifier_from_settings,
)
from fastgrapher.core.config.settings import load_settings
from fastgrapher.core.detectors.capability import (
    FACE_CAPABILITY,
    OBJECT_CAPABILITY,
    DetectorCapability,
    load_face_capability,
    load_object_capability,
)
from fastgrapher.core.images import ALLOWED_IMAGE_SUFFIXES, ImageDecodeError, decode_image
from fastgrapher.core.overlay.draw import draw_overlays

logger = logging.getLogger("fastgrapher.tools.classify_photos")


class _DummyDetector:
    def detect(self, image):  # pragma: no cover - trivial
        return []


def _to_jsonable(obj):
    if is_dataclass(obj):
        return asdict(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, dict):
        return {str(k): _to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(v) for v in obj]
    if isinstance(obj, Path):
        return str(obj)
    return obj


def _iter_photos(path: Path) -> list[Path]:
    if path.is_file():
        return [path]
    if not path.is_dir():
        raise SystemExit(f"Input not found: {path}")
    return sorted(
        p for p in path.iterdir() if p.is_file() and p.suffix.lower() in ALLOWED_IMAGE_SUFFIXES
    )


def _build_classifier(args) -> PhotoClassifier:
    settings = load_settings()
    if args.mock:
        faces = DetectorCapability(name=FACE_CAPABILITY, detector=_DummyDetector())
        objects = DetectorCapability(name=OBJECT_CAPABILITY, detector=_DummyDetector())
    else:
        faces = load_face_capability(settings)
        objects = load_object_capability(settings)
    return classifier_from_settings(settings, faces, objects)


def _classify_photo(
    classifier: PhotoClassifier, photo: Path, profile: bool, annotate_dir: Path | None
) -> tuple[PhotoAnalysis, dict[str, float]]:
    """Decode and analyze `photo` once; write the overlay from the same analysis."""

    t0 = time.perf_counter()
    try:
        image = decode_image(photo)
    except ImageDecodeError as e:
        logger.warning("Classification skipped: %s", e)
        return PhotoAnalysis(), {}
    decode_ms = (time.perf_counter() - t0) * 1000.0

    analysis = classifier.analyze_image(image, profile=profile)
    timings = dict(analysis.timings)
    if profile:
        timings["decode_ms"] = decode_ms
    if annotate_dir is not None:
        annotated = draw_overlays(image, analysis.faces, analysis.detections, analysis.result)
        annotate_dir.mkdir(parents=True, exist_ok=True)
        cv2.imwrite(str(annotate_dir / f"{photo.stem}_annotated.jpg"), annotated)
    return analysis, timings


def run(args):
    photos = _iter_photos(Path(args.input))
    classifier = _build_classifier(args)
    annotate_dir = Path(args.annotate_dir) if getattr(args, "annotate_dir", None) else None
    outputs = []
    try:
        for photo in photos:
            analysis, timings = _classify_photo(classifier, photo, args.profile, annotate_dir)
            entry = {"path": str(photo), "result": _to_jsonable(analysis.result)}
            if args.profile:
                entry["timings_ms"] = _to_jsonable(timings)
            outputs.append(entry)
    finally:
        classifier.close()
    out_path = Path(args.output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(outputs, f, indent=2)
    print(f"Wrote {len(outputs)} photo classifications to {out_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Classify photos with the quality heuristics")
    parser.add_argument("--input", required=True, help="Photo file or directory of photos")
    parser.add_argument("--output", required=True, help="Where to save JSON output")
    parser.add_argument(
        "--mock", action="store_true", help="Use dummy detectors (no model download)"
    )
    parser.add_argument("--annotate-dir", default=None, help="Write annotated copies here")
    parser.add_argument("--profile", action="store_true", help="Include stage timings")
    parser.add_argument("--log-level", default="INFO")
    return parser


if __name__ == "__main__":
    cli_args = build_parser().parse_args()
    logging.basicConfig(
        level=cli_args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run(cli_args)
