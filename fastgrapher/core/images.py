"""Image decoding helpers (OpenCV).

The engine is agnostic to the container format: anything OpenCV can decode
into a pixel raster is accepted, from a file path or an in-memory buffer.
"""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np

from fastgrapher.core.types import Image

ImageSource = str | Path | bytes | bytearray | memoryview

ALLOWED_IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".tif", ".tiff"}


class ImageDecodeError(Exception):
    """Raised when an image source cannot be read or decoded."""


def decode_image(source: ImageSource) -> Image:
    """Decode `source` into a BGR uint8 raster.

    Raises:
        ImageDecodeError: When the path is missing/unreadable or the bytes are
            not a decodable image.
    """

    if isinstance(source, (bytes, bytearray, memoryview)):
        buf = np.frombuffer(source, dtype=np.uint8)
        if buf.size == 0:
            raise ImageDecodeError("Empty image buffer")
        image = cv2.imdecode(buf, cv2.IMREAD_COLOR)
        if image is None:
            raise ImageDecodeError("Cannot decode image buffer")
        return image

    path = Path(source)
    if not path.is_file():
        raise ImageDecodeError(f"Image file not found: {path}")
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise ImageDecodeError(f"Cannot decode image file: {path}")
    return image


def to_grayscale(image: Image) -> Image:
    """Return a single-channel view of a gray, BGR, or BGRA raster."""

    if image.ndim == 2:
        return image
    if image.ndim == 3 and image.shape[2] == 1:
        return image[:, :, 0]
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    raise ValueError(f"Unsupported image shape: {image.shape}")


def image_size(image: Image) -> tuple[int, int]:
    """Return (width, height)."""

    h, w = image.shape[:2]
    return int(w), int(h)
