import json
import os
import subprocess
import sys
import types
from pathlib import Path

import cv2
import pytest

import fastgrapher.tools.classify_photos as cli
from conftest import checkerboard, flat_image


def _photos(tmp_path: Path) -> Path:
    photos = tmp_path / "photos"
    photos.mkdir()
    cv2.imwrite(str(photos / "sharp.png"), checkerboard())
    cv2.imwrite(str(photos / "soft.png"), flat_image())
    (photos / "notes.txt").write_text("skip me", encoding="utf-8")
    return photos


def _args(**kwargs):
    base = dict(mock=True, annotate_dir=None, profile=False)
    base.update(kwargs)
    return types.SimpleNamespace(**base)


def test_run_writes_json_for_directory(tmp_path: Path):
    photos = _photos(tmp_path)
    out = tmp_path / "out" / "result.json"
    cli.run(_args(input=str(photos), output=str(out), profile=True))

    data = json.loads(out.read_text(encoding="utf-8"))
    assert [Path(d["path"]).name for d in data] == ["sharp.png", "soft.png"]
    assert data[0]["result"]["is_blurry"] is False
    assert data[1]["result"]["is_blurry"] is True
    assert data[1]["result"]["face_count"] == 0
    assert "decode_ms" in data[0]["timings_ms"]


def test_run_single_file_with_annotations(tmp_path: Path):
    photos = _photos(tmp_path)
    out = tmp_path / "result.json"
    annotated = tmp_path / "annotated"
    cli.run(_args(input=str(photos / "sharp.png"), output=str(out), annotate_dir=str(annotated)))

    data = json.loads(out.read_text(encoding="utf-8"))
    assert len(data) == 1
    assert "timings_ms" not in data[0]
    assert (annotated / "sharp_annotated.jpg").exists()


def test_run_missing_input(tmp_path: Path):
    with pytest.raises(SystemExit):
        cli.run(_args(input=str(tmp_path / "nope"), output=str(tmp_path / "o.json")))


def test_run_uses_real_capabilities_without_mock(monkeypatch, tmp_path: Path):
    photos = _photos(tmp_path)
    loaded = []

    def _loader(name):
        def _load(settings):
            loaded.append(name)
            return cli.DetectorCapability.unavailable(name, "missing")

        return _load

    monkeypatch.setattr(cli, "load_face_capability", _loader("faces"))
    monkeypatch.setattr(cli, "load_object_capability", _loader("objects"))
    cli.run(_args(input=str(photos), output=str(tmp_path / "o.json"), mock=False))
    assert loaded == ["faces", "objects"]


def test_to_jsonable_handles_nested_values():
    import numpy as np

    out = cli._to_jsonable({1: (np.array([1, 2]), Path("a"))})
    assert out == {"1": [[1, 2], "a"]}


def test_cli_module_runs_with_mock(tmp_path: Path):
    photos = _photos(tmp_path)
    out_path = tmp_path / "out.json"

    env = os.environ.copy()
    env["PYTHONPATH"] = env.get("PYTHONPATH", ".") + os.pathsep + str(Path(__file__).resolve().parents[1])

    cmd = [
        sys.executable,
        "-m",
        "fastgrapher.tools.classify_photos",
        "--input",
        str(photos),
        "--output",
        str(out_path),
        "--mock",
    ]
    result = subprocess.run(cmd, env=env, capture_output=True, text=True)
    assert result.returncode == 0, result.stderr
    assert len(json.loads(out_path.read_text())) == 2


def test_annotate_decodes_and_detects_once_per_photo(monkeypatch, tmp_path: Path):
    photos = _photos(tmp_path)
    counts = {"decode": 0, "detect": 0}
    real_decode = cli.decode_image

    def _decode(source):
        counts["decode"] += 1
        return real_decode(source)

    class _CountingDetector:
        def detect(self, image):
            counts["detect"] += 1
            return []

    monkeypatch.setattr(cli, "decode_image", _decode)
    monkeypatch.setattr(cli, "_DummyDetector", _CountingDetector)
    out = tmp_path / "o.json"
    cli.run(
        _args(input=str(photos), output=str(out), annotate_dir=str(tmp_path / "ann"), profile=True)
    )

    # Two photos, two detectors each.
    assert counts == {"decode": 2, "detect": 4}
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data[1]["result"]["is_blurry"] is True
    assert "decode_ms" in data[0]["timings_ms"]
    assert sorted(p.name for p in (tmp_path / "ann").iterdir()) == [
        "sharp_annotated.jpg",
        "soft_annotated.jpg",
    ]


def test_unreadable_photo_yields_default_result(tmp_path: Path):
    photos = tmp_path / "photos"
    photos.mkdir()
    (photos / "broken.jpg").write_bytes(b"not a jpeg")
    out = tmp_path / "o.json"
    cli.run(_args(input=str(photos), output=str(out), annotate_dir=str(tmp_path / "ann"), profile=True))

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data[0]["result"]["blur_score"] == 0.0
    assert data[0]["timings_ms"] == {}
    assert not (tmp_path / "ann").exists()
