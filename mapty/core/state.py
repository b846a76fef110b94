"""Per-page session state owned by the session controller."""

from __future__ import annotations

from dataclasses import dataclass, field

from mapty.workout.model import Coords, Workout


@dataclass
class SessionState:
    workouts: list[Workout] = field(default_factory=list)
    map_ready: bool = False
    location_requested: bool = False
    pending_click: Coords | None = None
    form_visible: bool = False
