from fastgrapher.core.config.settings import FastGrapherSettings
from fastgrapher.core.detectors.capability import (
    FACE_CAPABILITY,
    OBJECT_CAPABILITY,
    DetectorCapability,
    load_capability,
    load_face_capability,
    load_object_capability,
)


def test_load_capability_success():
    detector = object()
    cap = load_capability("x", lambda: detector)
    assert cap.available
    assert cap.detector is detector
    assert cap.error is None


def test_load_capability_failure_is_recorded():
    calls = {"n": 0}

    def _factory():
        calls["n"] += 1
        raise FileNotFoundError("model missing")

    cap = load_capability("x", _factory)
    assert not cap.available
    assert cap.error == "FileNotFoundError: model missing"
    assert calls["n"] == 1


def test_unavailable_helper():
    cap = DetectorCapability.unavailable("faces", "nope")
    assert cap.name == "faces"
    assert not cap.available


def test_missing_face_model_is_unavailable(tmp_path):
    settings = FastGrapherSettings(face_model_path=str(tmp_path / "missing.task"))
    cap = load_face_capability(settings)
    assert cap.name == FACE_CAPABILITY
    assert not cap.available
    assert cap.error


def test_object_capability_passes_settings(monkeypatch):
    created = {}

    class _FakeDetector:
        def __init__(self, model_name, conf, imgsz):
            created.update(model_name=model_name, conf=conf, imgsz=imgsz)

    import fastgrapher.core.detectors.yolo as yolo_mod

    monkeypatch.setattr(yolo_mod, "YoloObjectDetector", _FakeDetector)
    settings = FastGrapherSettings(object_model_name="m.onnx", object_confidence=0.4)
    cap = load_object_capability(settings)
    assert cap.name == OBJECT_CAPABILITY
    assert cap.available
    assert created == {"model_name": "m.onnx", "conf": 0.4, "imgsz": 640}
