import pytest

from fastgrapher.core.analytics.centering import (
    NO_DETECTION_CONFIDENCE,
    CenteringConfig,
    CenteringReport,
    analyze_centering,
    main_subject,
)
from fastgrapher.core.types import Detection


def _det(label, conf, bbox):
    return Detection(class_label=label, confidence=conf, bbox=bbox)


def test_no_detections_is_centered():
    report = analyze_centering([], (100, 100))
    assert report.is_centered is True
    assert report.confidence == NO_DETECTION_CONFIDENCE


def test_centered_main_subject():
    det = _det("person", 0.8, (40, 40, 20, 20))
    report = analyze_centering([det], (100, 100))
    assert report.is_centered is True
    assert report.confidence == pytest.approx(0.8)
    assert report.distance == pytest.approx(0.0)


def test_off_center_largest_subject_wins():
    small_centered = _det("cup", 0.9, (45, 45, 10, 10))
    big_corner = _det("car", 0.7, (0, 0, 40, 40))
    assert main_subject([small_centered, big_corner]) is big_corner
    report = analyze_centering([small_centered, big_corner], (100, 100))
    # center (20, 20): dx = dy = 0.3
    assert report.distance == pytest.approx((0.3**2 + 0.3**2) ** 0.5)
    assert report.is_centered is False
    assert report.confidence == pytest.approx(0.7)


def test_threshold_configurable():
    det = _det("person", 0.9, (50, 40, 20, 20))  # center (60, 50): distance 0.1
    assert analyze_centering([det], (100, 100)).is_centered is True
    assert analyze_centering([det], (100, 100), CenteringConfig(0.05)).is_centered is False


def test_unknown_image_size_returns_default():
    det = _det("person", 0.9, (0, 0, 10, 10))
    assert analyze_centering([det], (0, 100)) == CenteringReport(is_centered=True, confidence=0.0)


def test_malformed_detection_returns_default():
    bad = Detection(class_label="person", confidence=0.9, bbox=(0, 0))  # type: ignore[arg-type]
    assert analyze_centering([bad], (100, 100)) == CenteringReport()
