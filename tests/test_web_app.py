from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest

from mapty.core.config import AppConfig
from mapty.ui import web_app
from mapty.ui.controller import GeolocationError, StaticGeolocator
from mapty.workout.store import FileStorage


def _patch_js(monkeypatch: pytest.MonkeyPatch, result: Any = None, exc: Exception | None = None) -> None:
    async def fake_run_javascript(code: str, timeout: float = 1.0) -> Any:
        assert "getCurrentPosition" in code
        if exc is not None:
            raise exc
        return result

    monkeypatch.setattr(web_app.ui, "run_javascript", fake_run_javascript)


def test_browser_geolocator_returns_coords(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_js(monkeypatch, result={"lat": 48.85, "lng": 2.35})

    coords = asyncio.run(web_app.BrowserGeolocator(timeout_sec=5).locate())

    assert coords == (48.85, 2.35)


@pytest.mark.parametrize(
    "result",
    [{"error": "User denied Geolocation"}, None, {"lat": "x", "lng": 1}],
)
def test_browser_geolocator_failures(monkeypatch: pytest.MonkeyPatch, result: Any) -> None:
    _patch_js(monkeypatch, result=result)

    with pytest.raises(GeolocationError):
        asyncio.run(web_app.BrowserGeolocator(timeout_sec=5).locate())


def test_browser_geolocator_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_js(monkeypatch, exc=TimeoutError())

    with pytest.raises(GeolocationError, match="Timed out"):
        asyncio.run(web_app.BrowserGeolocator(timeout_sec=5).locate())


def test_fixed_location_skips_browser() -> None:
    geolocator = web_app._geolocator_for(AppConfig(fixed_location=(1.0, 2.0)))

    assert isinstance(geolocator, StaticGeolocator)
    assert asyncio.run(geolocator.locate()) == (1.0, 2.0)


def test_file_storage_backend(tmp_path: Path) -> None:
    storage = web_app._storage_for(AppConfig(storage="file", data_dir=tmp_path))

    assert isinstance(storage, FileStorage)
    assert storage.base_dir == tmp_path
