"""Blur analysis (variance of the Laplacian).

The image is converted to grayscale and filtered with the 3x3 Laplacian
`[0,-1,0; -1,4,-1; 0,-1,0]`; the variance of the response measures edge
energy. The score is `clamp(variance / scale, 0, 100)`.

Known limitation: `scale` is an empirical constant and is not normalized by
resolution, so the same scene scores differently at different sizes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import cv2
import numpy as np

from fastgrapher.core.images import ImageDecodeError, ImageSource, decode_image, to_grayscale
from fastgrapher.core.types import Image

logger = logging.getLogger(__name__)

LAPLACIAN_KERNEL = np.array(
    [
        [0.0, -1.0, 0.0],
        [-1.0, 4.0, -1.0],
        [0.0, -1.0, 0.0],
    ],
    dtype=np.float64,
)

BLUR_SCORE_MAX = 100.0


@dataclass
class BlurConfig:
    """Configuration for the blur decision."""

    # Laplacian variance is divided by this to get the 0..100 score.
    variance_scale: float = 100.0
    # Photos scoring below this are blurry.
    blurry_below: float = 20.0


@dataclass(frozen=True)
class BlurReport:
    """Blur verdict. The defaults are the fail-open result for unreadable input."""

    is_blurry: bool = False
    blur_score: float = 0.0


def laplacian_variance(image: Image) -> float:
    """Return the variance of the Laplacian response over the whole image."""

    gray = to_grayscale(image).astype(np.float64, copy=False)
    if gray.size == 0:
        return 0.0
    response = cv2.filter2D(gray, cv2.CV_64F, LAPLACIAN_KERNEL, borderType=cv2.BORDER_REFLECT_101)
    return float(response.var())


def blur_from_variance(variance: float, config: BlurConfig | None = None) -> BlurReport:
    cfg = config or BlurConfig()
    score = float(np.clip(variance / cfg.variance_scale, 0.0, BLUR_SCORE_MAX))
    return BlurReport(is_blurry=score < cfg.blurry_below, blur_score=score)


def analyze_blur(source: Image | ImageSource, config: BlurConfig | None = None) -> BlurReport:
    """Score the sharpness of a decoded image or of an image path/buffer.

    An unreadable source yields `BlurReport()` (not blurry, score 0) and is
    logged rather than raised.
    """

    if isinstance(source, np.ndarray):
        image = source
    else:
        try:
            image = decode_image(source)
        except ImageDecodeError as e:
            logger.warning("Blur analysis skipped: %s", e)
            return BlurReport()
    return blur_from_variance(laplacian_variance(image), config)
