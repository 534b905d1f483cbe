import pytest

from fastgrapher.core.landmarks import (
    LEFT_EYE_CONTOUR,
    LEFT_IRIS,
    MESH_SIZE,
    MESH_SIZE_WITH_IRIS,
    RIGHT_EYE_CONTOUR,
    RIGHT_IRIS,
    AnatomicalPoint,
    eye_indices,
)


def test_named_points_fit_the_mesh():
    for p in AnatomicalPoint:
        assert 0 <= int(p) < MESH_SIZE_WITH_IRIS
    assert int(AnatomicalPoint.NOSE_TIP) < MESH_SIZE


def test_contours_include_eye_corners_and_lids():
    assert AnatomicalPoint.LEFT_EYE_OUTER in LEFT_EYE_CONTOUR
    assert AnatomicalPoint.LEFT_EYE_TOP in LEFT_EYE_CONTOUR
    assert AnatomicalPoint.RIGHT_EYE_INNER in RIGHT_EYE_CONTOUR
    assert AnatomicalPoint.RIGHT_EYE_BOTTOM in RIGHT_EYE_CONTOUR
    assert len(set(LEFT_EYE_CONTOUR)) == len(LEFT_EYE_CONTOUR) == 16
    assert not set(LEFT_EYE_CONTOUR) & set(RIGHT_EYE_CONTOUR)


def test_iris_rings_start_with_center():
    assert LEFT_IRIS[0] == AnatomicalPoint.LEFT_IRIS_CENTER
    assert RIGHT_IRIS[0] == AnatomicalPoint.RIGHT_IRIS_CENTER
    assert all(MESH_SIZE <= i < MESH_SIZE_WITH_IRIS for i in (*LEFT_IRIS, *RIGHT_IRIS))


def test_eye_indices():
    left = eye_indices("left")
    assert left["top"] == AnatomicalPoint.LEFT_EYE_TOP
    assert eye_indices("right")["outer"] == AnatomicalPoint.RIGHT_EYE_OUTER
    with pytest.raises(ValueError):
        eye_indices("center")
