"""NiceGUI web UI for Mapty."""

from __future__ import annotations

from typing import Any, Callable, cast

from loguru import logger
from nicegui import Client, app, background_tasks, ui

from mapty.core.config import TILE_ATTRIBUTION, TILE_URL, AppConfig
from mapty.ui.controller import (
    GeolocationError,
    Geolocator,
    SessionController,
    StaticGeolocator,
)
from mapty.ui.rendering import popup_content, popup_options, workout_details
from mapty.workout.model import Coords, Workout, WorkoutKind
from mapty.workout.store import FileStorage, KeyValueStorage, MappingStorage

GEOLOCATION_JS = """
new Promise((resolve) => {
  if (!navigator.geolocation) {
    resolve({error: "Geolocation API unavailable"});
    return;
  }
  navigator.geolocation.getCurrentPosition(
    (pos) => resolve({lat: pos.coords.latitude, lng: pos.coords.longitude}),
    (err) => resolve({error: err.message || "Permission denied"}),
  );
})
"""

PAGE_STYLE = """
<style>
  :root {
    --mp-bg: #2d3439;
    --mp-surface: #42484d;
    --mp-text: #ececec;
    --mp-running: #00c46a;
    --mp-cycling: #ffb545;
  }
  body {
    background: var(--mp-bg);
    color: var(--mp-text);
    font-family: "Manrope", Arial, sans-serif;
  }
  .mp-card {
    background: var(--mp-surface);
    border-radius: 6px;
    cursor: pointer;
  }
  .mp-running { border-left: 5px solid var(--mp-running); }
  .mp-cycling { border-left: 5px solid var(--mp-cycling); }
  .leaflet-popup .leaflet-popup-content-wrapper {
    background: var(--mp-bg);
    color: var(--mp-text);
    border-radius: 5px;
  }
  .leaflet-popup .leaflet-popup-tip { background: var(--mp-bg); }
  .running-popup .leaflet-popup-content-wrapper { border-left: 5px solid var(--mp-running); }
  .cycling-popup .leaflet-popup-content-wrapper { border-left: 5px solid var(--mp-cycling); }
</style>
"""


class BrowserGeolocator:
    """Asks the connected browser for its position via the Geolocation API."""

    def __init__(self, timeout_sec: float) -> None:
        self._timeout_sec = timeout_sec

    async def locate(self) -> Coords:
        try:
            result = await ui.run_javascript(GEOLOCATION_JS, timeout=self._timeout_sec)
        except TimeoutError as exc:
            raise GeolocationError("Timed out waiting for browser position") from exc

        if not isinstance(result, dict):
            raise GeolocationError(f"Unexpected geolocation result: {result!r}")
        if "error" in result:
            raise GeolocationError(str(result["error"]))
        try:
            return (float(result["lat"]), float(result["lng"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise GeolocationError(f"Invalid geolocation result: {result!r}") from exc


class LeafletMapView:
    """Binds ``ui.leaflet`` to the controller's map contract."""

    def __init__(self, center: Coords, zoom: int, on_click: Callable[[Coords], None]) -> None:
        self._map = ui.leaflet(center=center, zoom=zoom).classes("w-full h-full")
        self._map.clear_layers()
        self._map.tile_layer(url_template=TILE_URL, options={"attribution": TILE_ATTRIBUTION})
        self._ready = False
        self._pending: list[Workout] = []

        def _on_map_click(e: Any) -> None:
            latlng = e.args.get("latlng", {})
            on_click((float(latlng["lat"]), float(latlng["lng"])))

        self._map.on("map-click", _on_map_click)
        background_tasks.create(self._flush_when_ready(), name="mapty-markers")

    @property
    def zoom(self) -> int:
        return int(self._map.zoom)

    async def _flush_when_ready(self) -> None:
        await self._map.initialized()
        self._ready = True
        pending, self._pending = self._pending, []
        for workout in pending:
            self._place_marker(workout)

    def add_workout_marker(self, workout: Workout) -> None:
        # Layer methods sent before the client map exists are dropped.
        if not self._ready:
            self._pending.append(workout)
            return
        self._place_marker(workout)

    def _place_marker(self, workout: Workout) -> None:
        marker = self._map.generic_layer(
            name="marker",
            args=[list(workout.coords), {"riseOnHover": True}],
        )
        marker.run_method("bindPopup", popup_content(workout), popup_options(workout))
        marker.run_method("openPopup")

    def fly_to(self, coords: Coords, zoom: int) -> None:
        self._map.run_map_method(
            "setView",
            list(coords),
            zoom,
            {"animate": True, "pan": {"duration": 1}},
        )


class WorkoutListColumn:
    def __init__(self, container: ui.column, on_select: Callable[[str], None]) -> None:
        self._container = container
        self._on_select = on_select

    def add_row(self, workout: Workout) -> None:
        with self._container:
            with ui.card().classes(f"w-full mp-card mp-{workout.type}") as card:
                ui.label(workout.description).classes("text-base font-semibold")
                with ui.row().classes("w-full gap-4"):
                    for icon, value, unit in workout_details(workout):
                        with ui.row().classes("items-baseline gap-1"):
                            ui.label(icon)
                            ui.label(value).classes("font-semibold")
                            ui.label(unit).classes("text-xs uppercase text-gray-400")
        card.on("click", lambda _, workout_id=workout.id: self._on_select(workout_id))
        card.move(target_index=0)

    def clear(self) -> None:
        self._container.clear()


class WorkoutForm:
    def __init__(self, on_submit: Callable[[], None], on_type: Callable[[WorkoutKind], None]) -> None:
        with ui.card().classes("w-full mp-card") as self.card:
            with ui.grid(columns=2).classes("w-full gap-2"):
                self.type_select = ui.select(
                    {"running": "Running", "cycling": "Cycling"},
                    value="running",
                    label="Type",
                )
                self.distance = ui.number("Distance (km)", placeholder="km")
                self.duration = ui.number("Duration (min)", placeholder="min")
                self.cadence = ui.number("Cadence (step/min)", placeholder="step/min")
                self.elevation = ui.number("Elev gain (m)", placeholder="meters")
            submit_btn = ui.button("OK")
        self.elevation.set_visibility(False)
        self.card.set_visibility(False)

        for field in (self.distance, self.duration, self.cadence, self.elevation):
            field.on("keydown.enter", lambda _: on_submit())
        submit_btn.on_click(lambda _: on_submit())
        self.type_select.on_value_change(
            lambda e: on_type(cast(WorkoutKind, e.value or "running"))
        )

    def values(self) -> dict[str, Any]:
        return {
            "kind": self.type_select.value,
            "distance": self.distance.value,
            "duration": self.duration.value,
            "cadence": self.cadence.value,
            "elevation_gain": self.elevation.value,
        }

    def show(self) -> None:
        self.card.set_visibility(True)
        self.distance.run_method("focus")

    def hide(self) -> None:
        for field in (self.distance, self.duration, self.cadence, self.elevation):
            field.set_value(None)
        self.card.set_visibility(False)

    def set_type(self, kind: WorkoutKind) -> None:
        self.cadence.set_visibility(kind == "running")
        self.elevation.set_visibility(kind == "cycling")


def _alert(message: str) -> None:
    with ui.dialog().props("persistent") as dialog, ui.card():
        for line in message.splitlines():
            ui.label(line)
        ui.button("OK", on_click=dialog.close)
    dialog.open()


def _storage_for(config: AppConfig) -> KeyValueStorage:
    if config.storage == "file":
        return FileStorage(config.resolved_data_dir)
    return MappingStorage(app.storage.user)


def _geolocator_for(config: AppConfig) -> Geolocator:
    if config.fixed_location is not None:
        return StaticGeolocator(config.fixed_location)
    return BrowserGeolocator(timeout_sec=config.geolocation_timeout_sec)


def run_web_ui(config: AppConfig) -> int:
    @ui.page("/")
    async def index(client: Client) -> None:
        ui.add_head_html(PAGE_STYLE)
        controller: SessionController

        def on_submit() -> None:
            controller.submit(**form.values())

        def on_reset() -> None:
            controller.reset()
            ui.navigate.reload()

        with ui.row().classes("w-full h-screen no-wrap gap-0"):
            with ui.column().classes("w-1/3 min-w-[360px] h-full p-4 gap-3 overflow-auto"):
                with ui.row().classes("w-full items-center justify-between"):
                    ui.label("Mapty").classes("text-2xl font-bold")
                    ui.button("Reset", on_click=on_reset).props("outline color=white")
                form = WorkoutForm(on_submit=on_submit, on_type=lambda k: controller.set_form_type(k))
                rows = ui.column().classes("w-full gap-3")
            map_container = ui.column().classes("h-full grow p-0")

        def map_factory(center: Coords, zoom: int, on_click: Callable[[Coords], None]) -> LeafletMapView:
            with map_container:
                return LeafletMapView(center, zoom, on_click)

        controller = SessionController(
            _storage_for(config),
            map_factory=map_factory,
            list_view=WorkoutListColumn(rows, on_select=lambda wid: controller.move_to(wid)),
            form_view=form,
            alert=_alert,
        )
        controller.load_saved()

        await client.connected()
        await controller.start(_geolocator_for(config))

    logger.info(f"Starting Mapty on http://{config.host}:{config.port}")
    ui.run(
        host=config.host,
        port=config.port,
        reload=False,
        title="Mapty",
        storage_secret=config.storage_secret,
        show=False,
    )
    return 0
