"""Face-mesh landmark topology.

Maps anatomical names to indices of the 468-point face mesh (478 points when the
model also emits the iris rings). Sides are named from the viewer's point of
view: "left" is the side with the smaller x in a frontal photo.

Every index used by the analyzers comes from this table; swap it here if the
underlying landmark model changes.
"""

from __future__ import annotations

from enum import IntEnum

MESH_SIZE = 468
MESH_SIZE_WITH_IRIS = 478


class AnatomicalPoint(IntEnum):
    """Named face-mesh landmarks."""

    LEFT_EYE_OUTER = 33
    LEFT_EYE_INNER = 133
    LEFT_EYE_TOP = 159
    LEFT_EYE_BOTTOM = 145
    LEFT_IRIS_CENTER = 468

    RIGHT_EYE_INNER = 362
    RIGHT_EYE_OUTER = 263
    RIGHT_EYE_TOP = 386
    RIGHT_EYE_BOTTOM = 374
    RIGHT_IRIS_CENTER = 473

    NOSE_TIP = 1
    LEFT_NOSTRIL = 98
    RIGHT_NOSTRIL = 327

    LEFT_EAR = 234
    RIGHT_EAR = 454
    LEFT_CHEEK = 50
    RIGHT_CHEEK = 280

    CHIN = 152
    FOREHEAD = 10


# Eye contours, ordered outer corner -> upper lid -> inner corner -> lower lid.
LEFT_EYE_UPPER_LID: tuple[int, ...] = (246, 161, 160, 159, 158, 157, 173)
LEFT_EYE_LOWER_LID: tuple[int, ...] = (7, 163, 144, 145, 153, 154, 155)
LEFT_EYE_CONTOUR: tuple[int, ...] = (
    AnatomicalPoint.LEFT_EYE_OUTER,
    *LEFT_EYE_UPPER_LID,
    AnatomicalPoint.LEFT_EYE_INNER,
    *LEFT_EYE_LOWER_LID,
)

RIGHT_EYE_UPPER_LID: tuple[int, ...] = (466, 388, 387, 386, 385, 384, 398)
RIGHT_EYE_LOWER_LID: tuple[int, ...] = (249, 390, 373, 374, 380, 381, 382)
RIGHT_EYE_CONTOUR: tuple[int, ...] = (
    AnatomicalPoint.RIGHT_EYE_OUTER,
    *RIGHT_EYE_UPPER_LID,
    AnatomicalPoint.RIGHT_EYE_INNER,
    *RIGHT_EYE_LOWER_LID,
)

# Iris rings (refined meshes only): center first, then four boundary points.
LEFT_IRIS: tuple[int, ...] = (468, 469, 470, 471, 472)
RIGHT_IRIS: tuple[int, ...] = (473, 474, 475, 476, 477)

# Jawline samples used for the left/right foreshortening comparison.
LEFT_JAW: tuple[int, ...] = (93, 132, 58, 172, 136)
RIGHT_JAW: tuple[int, ...] = (323, 361, 288, 397, 365)


def eye_indices(side: str) -> dict[str, int]:
    """Return the EAR landmark indices for `side` ("left" or "right")."""

    if side == "left":
        return {
            "top": AnatomicalPoint.LEFT_EYE_TOP,
            "bottom": AnatomicalPoint.LEFT_EYE_BOTTOM,
            "inner": AnatomicalPoint.LEFT_EYE_INNER,
            "outer": AnatomicalPoint.LEFT_EYE_OUTER,
        }
    if side == "right":
        return {
            "top": AnatomicalPoint.RIGHT_EYE_TOP,
            "bottom": AnatomicalPoint.RIGHT_EYE_BOTTOM,
            "inner": AnatomicalPoint.RIGHT_EYE_INNER,
            "outer": AnatomicalPoint.RIGHT_EYE_OUTER,
        }
    raise ValueError("side must be left|right")
