from __future__ import annotations

import runpy
import sys
import types

from fastapi.testclient import TestClient

from fastgrapher.api.services import state


def test_main_runs_uvicorn_when_executed_as_script(monkeypatch):
    called = {"args": None, "kwargs": None}

    uvicorn_mod = types.ModuleType("uvicorn")

    def _run(*args, **kwargs):
        called["args"] = args
        called["kwargs"] = kwargs

    uvicorn_mod.run = _run  # type: ignore[attr-defined]

    monkeypatch.setitem(sys.modules, "uvicorn", uvicorn_mod)
    monkeypatch.delitem(sys.modules, "fastgrapher.api.main", raising=False)

    runpy.run_module("fastgrapher.api.main", run_name="__main__")

    assert called["args"] == ("fastgrapher.api.main:app",)
    assert called["kwargs"]["host"] == "0.0.0.0"
    assert called["kwargs"]["port"] == 8000
    assert called["kwargs"]["reload"] is True


def test_lifespan_loads_classifier_and_shuts_down(monkeypatch):
    from fastgrapher.api.main import app

    events = []
    monkeypatch.setattr(state, "get_classifier", lambda: events.append("start"))
    monkeypatch.setattr(state, "shutdown", lambda: events.append("stop"))

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
    assert events == ["start", "stop"]
