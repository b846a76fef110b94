from __future__ import annotations

import asyncio
from dataclasses import fields
from datetime import datetime, timedelta
from typing import Callable

from mapty.core.config import DEFAULT_ZOOM
from mapty.core.state import SessionState
from mapty.ui.controller import (
    GEOLOCATION_FAILED_MESSAGE,
    GeolocationError,
    SessionController,
    StaticGeolocator,
)
from mapty.workout.model import Coords, Workout, WorkoutKind
from mapty.workout.store import WORKOUTS_KEY, MappingStorage

HOME: Coords = (48.8566, 2.3522)


class FakeMap:
    def __init__(self, center: Coords, zoom: int, on_click: Callable[[Coords], None]) -> None:
        self.center = center
        self.zoom = zoom
        self.on_click = on_click
        self.markers: list[Workout] = []
        self.views: list[tuple[Coords, int]] = []

    def add_workout_marker(self, workout: Workout) -> None:
        self.markers.append(workout)

    def fly_to(self, coords: Coords, zoom: int) -> None:
        self.views.append((coords, zoom))


class FakeList:
    def __init__(self) -> None:
        self.rows: list[Workout] = []

    def add_row(self, workout: Workout) -> None:
        self.rows.append(workout)

    def clear(self) -> None:
        self.rows.clear()


class FakeForm:
    def __init__(self) -> None:
        self.visible = False
        self.kind: WorkoutKind = "running"

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def set_type(self, kind: WorkoutKind) -> None:
        self.kind = kind


class FailingGeolocator:
    def __init__(self) -> None:
        self.calls = 0

    async def locate(self) -> Coords:
        self.calls += 1
        raise GeolocationError("User denied Geolocation")


class Page:
    """One page load wired to fakes over a shared backing store."""

    def __init__(self, backing: dict[str, object]) -> None:
        self.maps: list[FakeMap] = []
        self.rows = FakeList()
        self.form = FakeForm()
        self.alerts: list[str] = []
        start = datetime(2026, 4, 14, 9, 0)
        ticks = iter(range(1000))
        self.controller = SessionController(
            MappingStorage(backing),
            map_factory=self._make_map,
            list_view=self.rows,
            form_view=self.form,
            alert=self.alerts.append,
            clock=lambda: start + timedelta(seconds=next(ticks)),
        )

    def _make_map(self, center: Coords, zoom: int, on_click: Callable[[Coords], None]) -> FakeMap:
        fake = FakeMap(center, zoom, on_click)
        self.maps.append(fake)
        return fake

    @property
    def map(self) -> FakeMap:
        return self.maps[-1]

    def open(self) -> None:
        self.controller.load_saved()
        asyncio.run(self.controller.start(StaticGeolocator(HOME)))


def test_map_is_created_at_user_location() -> None:
    page = Page({})
    page.open()

    assert page.controller.map_ready
    assert page.map.center == HOME
    assert page.map.zoom == DEFAULT_ZOOM


def test_map_click_shows_form_and_remembers_location() -> None:
    page = Page({})
    page.open()

    page.map.on_click((48.86, 2.35))

    assert page.form.visible
    assert page.controller.form_visible
    assert page.controller.pending_click == (48.86, 2.35)


def test_submit_running_workout_renders_and_persists() -> None:
    backing: dict[str, object] = {}
    page = Page(backing)
    page.open()
    page.map.on_click((48.86, 2.35))

    workout = page.controller.submit("running", "5", "30", cadence="170")

    assert workout is not None
    assert workout.coords == (48.86, 2.35)
    assert workout.pace == 6.0
    assert page.controller.workouts == (workout,)
    assert page.map.markers == [workout]
    assert page.rows.rows == [workout]
    assert not page.form.visible
    assert page.controller.pending_click is None
    assert WORKOUTS_KEY in backing


def test_invalid_submission_alerts_without_state_change() -> None:
    for kind in ("running", "cycling"):
        backing: dict[str, object] = {}
        page = Page(backing)
        page.open()
        page.map.on_click((48.86, 2.35))

        assert page.controller.submit(kind, -5, 30, cadence=170, elevation_gain=10) is None
        assert page.controller.submit(kind, None, 30, cadence=170, elevation_gain=10) is None
        assert page.controller.submit(kind, float("nan"), 30, cadence=170, elevation_gain=10) is None

        assert page.controller.workouts == ()
        assert page.map.markers == []
        assert backing == {}
        assert page.alerts == ["Distance must be a positive number"] * 3
        assert page.form.visible


def test_submit_before_map_click_is_ignored() -> None:
    backing: dict[str, object] = {}
    page = Page(backing)
    page.open()

    assert page.controller.submit("running", 5, 30, cadence=170) is None
    assert backing == {}


def test_reload_restores_rows_first_then_markers() -> None:
    backing: dict[str, object] = {}
    first = Page(backing)
    first.open()
    for coords in ((48.1, 2.1), (48.2, 2.2), (48.3, 2.3)):
        first.map.on_click(coords)
        first.controller.submit("cycling", 20, 60, elevation_gain=120)

    second = Page(backing)
    second.controller.load_saved()

    assert [w.description for w in second.rows.rows] == [
        w.description for w in first.controller.workouts
    ]
    assert [(w.distance, w.duration) for w in second.rows.rows] == [(20.0, 60.0)] * 3
    assert second.maps == []

    asyncio.run(second.controller.start(StaticGeolocator(HOME)))

    assert [w.id for w in second.map.markers] == [w.id for w in first.controller.workouts]


def test_reset_clears_history_for_next_load() -> None:
    backing: dict[str, object] = {}
    page = Page(backing)
    page.open()
    page.map.on_click((48.86, 2.35))
    page.controller.submit("running", 5, 30, cadence=170)

    page.controller.reset()

    assert page.controller.workouts == ()
    assert page.rows.rows == []
    fresh = Page(backing)
    assert fresh.controller.load_saved() == []


def test_move_to_pans_to_stored_coordinates_at_current_zoom() -> None:
    page = Page({})
    page.open()
    page.map.on_click((48.86, 2.35))
    workout = page.controller.submit("running", 5, 30, cadence=170)
    assert workout is not None
    page.map.zoom = 15

    assert page.controller.move_to(workout.id)
    assert page.map.views == [((48.86, 2.35), 15)]


def test_move_to_unknown_id_is_a_noop() -> None:
    page = Page({})
    page.open()

    assert not page.controller.move_to("0000000000")
    assert page.map.views == []


def test_failed_geolocation_alerts_once_and_keeps_rows() -> None:
    backing: dict[str, object] = {}
    seeded = Page(backing)
    seeded.open()
    seeded.map.on_click((48.86, 2.35))
    seeded.controller.submit("running", 5, 30, cadence=170)

    page = Page(backing)
    page.controller.load_saved()
    geolocator = FailingGeolocator()
    assert not asyncio.run(page.controller.start(geolocator))
    assert not asyncio.run(page.controller.start(geolocator))

    assert geolocator.calls == 1
    assert page.alerts == [GEOLOCATION_FAILED_MESSAGE]
    assert not page.controller.map_ready
    assert len(page.rows.rows) == 1
    assert not page.controller.move_to(page.rows.rows[0].id)


def test_form_type_toggle_is_forwarded_to_view() -> None:
    page = Page({})

    page.controller.set_form_type("cycling")

    assert page.form.kind == "cycling"


def test_corrupt_history_does_not_break_page_load() -> None:
    backing: dict[str, object] = {WORKOUTS_KEY: '[{"type": "running", "distance": NaN}]'}
    page = Page(backing)
    page.open()

    assert page.controller.workouts == ()
    assert page.rows.rows == []
    assert page.controller.map_ready


def test_session_state_holds_only_controller_read_fields() -> None:
    assert {f.name for f in fields(SessionState)} == {
        "workouts",
        "map_ready",
        "location_requested",
        "pending_click",
        "form_visible",
    }
