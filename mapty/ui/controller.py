"""Session controller used by the web UI.

The controller owns the in-memory workout list, the map handle and the
remembered map click. It talks to the page only through the small view
protocols below, so the NiceGUI layer stays a thin binding and tests can
drive the full flow with fakes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol

from loguru import logger

from mapty.core.config import DEFAULT_ZOOM
from mapty.core.state import SessionState
from mapty.workout.model import Coords, Workout, WorkoutKind, create_workout
from mapty.workout.store import (
    KeyValueStorage,
    clear_workouts,
    load_workouts,
    save_workouts,
)
from mapty.workout.validation import WorkoutValidationError, parse_workout_form

GEOLOCATION_FAILED_MESSAGE = (
    "Geolocation is not available, please allow it in your browser settings!"
)


class GeolocationError(RuntimeError):
    """Raised when the user's position cannot be determined."""


class Geolocator(Protocol):
    async def locate(self) -> Coords: ...


class StaticGeolocator:
    """Resolves to a fixed position without asking the browser."""

    def __init__(self, coords: Coords) -> None:
        self._coords = coords

    async def locate(self) -> Coords:
        return self._coords


class MapView(Protocol):
    @property
    def zoom(self) -> int: ...

    def add_workout_marker(self, workout: Workout) -> None: ...

    def fly_to(self, coords: Coords, zoom: int) -> None: ...


MapFactory = Callable[[Coords, int, Callable[[Coords], None]], MapView]


class WorkoutListView(Protocol):
    def add_row(self, workout: Workout) -> None: ...

    def clear(self) -> None: ...


class FormView(Protocol):
    def show(self) -> None: ...

    def hide(self) -> None: ...

    def set_type(self, kind: WorkoutKind) -> None: ...


class SessionController:
    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        map_factory: MapFactory,
        list_view: WorkoutListView,
        form_view: FormView,
        alert: Callable[[str], None],
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._storage = storage
        self._map_factory = map_factory
        self._list_view = list_view
        self._form_view = form_view
        self._alert = alert
        self._clock = clock
        self._map: MapView | None = None
        self._state = SessionState()

    @property
    def workouts(self) -> tuple[Workout, ...]:
        return tuple(self._state.workouts)

    @property
    def map_ready(self) -> bool:
        return self._state.map_ready

    @property
    def pending_click(self) -> Coords | None:
        return self._state.pending_click

    @property
    def form_visible(self) -> bool:
        return self._state.form_visible

    def load_saved(self) -> list[Workout]:
        """Restore persisted workouts as list rows; markers wait for the map."""
        self._state.workouts = load_workouts(self._storage)
        for workout in self._state.workouts:
            self._list_view.add_row(workout)
        logger.info(f"Restored {len(self._state.workouts)} workouts")
        return list(self._state.workouts)

    async def start(self, geolocator: Geolocator) -> bool:
        if self._state.location_requested:
            return self._state.map_ready
        self._state.location_requested = True

        try:
            coords = await geolocator.locate()
        except GeolocationError as exc:
            logger.warning(f"Geolocation failed: {exc}")
            self._alert(GEOLOCATION_FAILED_MESSAGE)
            return False

        self._load_map(coords)
        return True

    def _load_map(self, coords: Coords) -> None:
        self._map = self._map_factory(coords, DEFAULT_ZOOM, self.show_form)
        self._state.map_ready = True
        logger.info(f"Map ready at {coords[0]:.5f},{coords[1]:.5f}")

        for workout in self._state.workouts:
            self._map.add_workout_marker(workout)

    def show_form(self, coords: Coords) -> None:
        self._state.pending_click = coords
        self._state.form_visible = True
        self._form_view.show()

    def set_form_type(self, kind: WorkoutKind) -> None:
        self._form_view.set_type(kind)

    def submit(
        self,
        kind: object,
        distance: object,
        duration: object,
        cadence: object = None,
        elevation_gain: object = None,
    ) -> Workout | None:
        coords = self._state.pending_click
        if coords is None or self._map is None:
            logger.debug("Submit ignored: no map click to attach the workout to")
            return None

        try:
            values = parse_workout_form(kind, distance, duration, cadence, elevation_gain)
        except WorkoutValidationError as exc:
            logger.info(f"Rejected workout input: {exc}")
            self._alert("\n".join(error.message for error in exc.errors))
            return None

        workout = create_workout(
            values.kind,
            coords,
            values.distance,
            values.duration,
            values.metric,
            now=self._clock(),
        )
        self._state.workouts.append(workout)
        self._map.add_workout_marker(workout)
        self._list_view.add_row(workout)

        self._state.pending_click = None
        self._state.form_visible = False
        self._form_view.hide()

        save_workouts(self._storage, self._state.workouts)
        logger.info(f"Logged {workout.description} ({workout.id})")
        return workout

    def move_to(self, workout_id: str) -> bool:
        if self._map is None:
            logger.debug("Move ignored: map not ready")
            return False
        workout = next((w for w in self._state.workouts if w.id == workout_id), None)
        if workout is None:
            logger.debug(f"Move ignored: unknown workout id {workout_id!r}")
            return False
        self._map.fly_to(workout.coords, self._map.zoom)
        return True

    def reset(self) -> None:
        clear_workouts(self._storage)
        self._state.workouts.clear()
        self._list_view.clear()
        logger.info("Workout history cleared")
