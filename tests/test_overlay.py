import numpy as np

from conftest import make_face, person
from fastgrapher.core.overlay.draw import draw_overlays, result_labels
from fastgrapher.core.types import ClassificationResult, Detection


def test_result_labels():
    assert result_labels(ClassificationResult()) == []
    labels = result_labels(
        ClassificationResult(
            has_closed_eyes=True,
            not_looking_at_camera=True,
            is_group_photo=True,
            is_blurry=True,
            is_centered=False,
        )
    )
    assert labels == ["closed eyes", "looking away", "group", "blurry", "off-center"]


def test_draw_overlays_returns_annotated_copy():
    image = np.zeros((400, 400, 3), dtype=np.uint8)
    detections = [person(bbox=(10, 10, 50, 100)), Detection("car", 0.8, (200, 200, 80, 40))]
    out = draw_overlays(image, [make_face()], detections, ClassificationResult(is_blurry=True))
    assert out.shape == image.shape
    assert out.any()
    assert not image.any()


def test_draw_overlays_tolerates_partial_faces():
    image = np.zeros((50, 50, 3), dtype=np.uint8)
    out = draw_overlays(image, [make_face(drop=tuple(range(478)))], [], ClassificationResult())
    assert out.shape == image.shape
