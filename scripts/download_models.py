#!/usr/bin/env python3
"""Download the MediaPipe FaceLandmarker model used by the face detector.

The YOLO weights are fetched by Ultralytics on first use and need no script.

Usage:
    python scripts/download_models.py [--dest models] [--force]
"""

from __future__ import annotations

import argparse
import sys
import urllib.request
from pathlib import Path

FACE_LANDMARKER_URL = (
    "https://storage.googleapis.com/mediapipe-models/face_landmarker/"
    "face_landmarker/float16/1/face_landmarker.task"
)
FACE_LANDMARKER_FILENAME = "face_landmarker.task"
MIN_MODEL_BYTES = 1_000_000


def download_face_landmarker(dest_dir: Path, force: bool = False, show_progress: bool = True) -> Path:
    """Download the `.task` bundle into `dest_dir` and return its path.

    An existing file larger than `MIN_MODEL_BYTES` is kept unless `force`.
    A failed or truncated download is removed before the error propagates.
    """

    dest_dir.mkdir(parents=True, exist_ok=True)
    output_path = dest_dir / FACE_LANDMARKER_FILENAME
    if output_path.exists() and output_path.stat().st_size >= MIN_MODEL_BYTES and not force:
        print(f"Model already exists: {output_path}")
        return output_path

    def _hook(count: int, block_size: int, total_size: int) -> None:
        if total_size > 0:
            percent = min(100, int(count * block_size * 100 / total_size))
            print(f"\r  {percent}%", end="", flush=True)

    print(f"Downloading {FACE_LANDMARKER_URL}")
    try:
        urllib.request.urlretrieve(
            FACE_LANDMARKER_URL, output_path, reporthook=_hook if show_progress else None
        )
        if show_progress:
            print()
        if output_path.stat().st_size < MIN_MODEL_BYTES:
            raise RuntimeError(f"Downloaded file is too small: {output_path}")
    except Exception:
        output_path.unlink(missing_ok=True)
        raise
    size_mb = output_path.stat().st_size / (1024 * 1024)
    print(f"Saved {output_path} ({size_mb:.1f} MB)")
    return output_path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Download FastGrapher model files")
    parser.add_argument("--dest", default="models", help="Target directory")
    parser.add_argument("--force", action="store_true", help="Re-download even if present")
    args = parser.parse_args(argv)
    try:
        download_face_landmarker(Path(args.dest), force=args.force)
    except Exception as e:
        print(f"Download failed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
