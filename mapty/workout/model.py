"""Workout domain models."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

WorkoutKind = Literal["running", "cycling"]
Coords = tuple[float, float]

WORKOUT_KINDS: tuple[WorkoutKind, ...] = ("running", "cycling")

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


class WorkoutDecodeError(ValueError):
    """Raised when a stored workout record cannot be rebuilt."""


def compute_pace(distance: float, duration: float) -> float:
    """Minutes per kilometer."""
    return duration / distance


def compute_speed(distance: float, duration: float) -> float:
    """Kilometers per hour."""
    return distance / (duration / 60)


def describe(kind: WorkoutKind, when: datetime) -> str:
    return f"{kind[0].upper()}{kind[1:]} on {MONTHS[when.month - 1]} {when.day}"


def workout_id(when: datetime) -> str:
    return str(int(when.timestamp() * 1000))[-10:]


@dataclass(frozen=True)
class Running:
    id: str
    coords: Coords
    distance: float
    duration: float
    date: datetime
    description: str
    cadence: float
    pace: float
    type: Literal["running"] = "running"

    @classmethod
    def create(
        cls,
        coords: Coords,
        distance: float,
        duration: float,
        cadence: float,
        *,
        now: datetime | None = None,
    ) -> Running:
        when = now or datetime.now()
        return cls(
            id=workout_id(when),
            coords=(float(coords[0]), float(coords[1])),
            distance=distance,
            duration=duration,
            date=when,
            description=describe("running", when),
            cadence=cadence,
            pace=compute_pace(distance, duration),
        )


@dataclass(frozen=True)
class Cycling:
    id: str
    coords: Coords
    distance: float
    duration: float
    date: datetime
    description: str
    elevation_gain: float
    speed: float
    type: Literal["cycling"] = "cycling"

    @classmethod
    def create(
        cls,
        coords: Coords,
        distance: float,
        duration: float,
        elevation_gain: float,
        *,
        now: datetime | None = None,
    ) -> Cycling:
        when = now or datetime.now()
        return cls(
            id=workout_id(when),
            coords=(float(coords[0]), float(coords[1])),
            distance=distance,
            duration=duration,
            date=when,
            description=describe("cycling", when),
            elevation_gain=elevation_gain,
            speed=compute_speed(distance, duration),
        )


Workout = Running | Cycling


def create_workout(
    kind: str,
    coords: Coords,
    distance: float,
    duration: float,
    metric: float,
    *,
    now: datetime | None = None,
) -> Workout:
    """Build the variant named by ``kind``.

    ``metric`` is the cadence for running and the elevation gain for cycling.
    Ranges are not checked here; see ``mapty.workout.validation``.
    """
    if kind == "running":
        return Running.create(coords, distance, duration, metric, now=now)
    if kind == "cycling":
        return Cycling.create(coords, distance, duration, metric, now=now)
    raise ValueError(f"Unknown workout type '{kind}'")


def workout_to_dict(workout: Workout) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": workout.id,
        "coords": [workout.coords[0], workout.coords[1]],
        "distance": workout.distance,
        "duration": workout.duration,
        "date": workout.date.isoformat(),
        "description": workout.description,
        "type": workout.type,
    }
    if workout.type == "running":
        payload["cadence"] = workout.cadence
        payload["pace"] = workout.pace
    else:
        payload["elevationGain"] = workout.elevation_gain
        payload["speed"] = workout.speed
    return payload


def _number(data: dict[str, Any], key: str) -> float:
    value = data.get(key)
    # bool is an int subclass but never a valid measurement
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise WorkoutDecodeError(f"Workout field '{key}' must be a number")
    # json.loads accepts NaN and Infinity literals
    if not math.isfinite(value):
        raise WorkoutDecodeError(f"Workout field '{key}' must be finite")
    return float(value)


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise WorkoutDecodeError(f"Workout field '{key}' must be a string")
    return value


def workout_from_dict(data: Any) -> Workout:
    if not isinstance(data, dict):
        raise WorkoutDecodeError("Workout record must be an object")

    kind = data.get("type")
    if kind not in WORKOUT_KINDS:
        raise WorkoutDecodeError(f"Unknown workout type '{kind}'")

    coords_obj = data.get("coords")
    if not isinstance(coords_obj, (list, tuple)) or len(coords_obj) != 2:
        raise WorkoutDecodeError("Workout field 'coords' must be a [lat, lng] pair")
    try:
        coords = (float(coords_obj[0]), float(coords_obj[1]))
    except (TypeError, ValueError) as exc:
        raise WorkoutDecodeError(f"Invalid coords: {exc}") from exc
    if not all(math.isfinite(c) for c in coords):
        raise WorkoutDecodeError("Workout field 'coords' must be finite")

    date_text = _text(data, "date")
    if date_text.endswith("Z"):
        # JSON.stringify(new Date()) form; fromisoformat only takes "Z" from 3.11
        date_text = date_text[:-1] + "+00:00"
    try:
        when = datetime.fromisoformat(date_text)
    except ValueError as exc:
        raise WorkoutDecodeError(f"Invalid date: {exc}") from exc

    common = {
        "id": _text(data, "id"),
        "coords": coords,
        "distance": _number(data, "distance"),
        "duration": _number(data, "duration"),
        "date": when,
        "description": _text(data, "description"),
    }
    if kind == "running":
        return Running(
            **common,
            cadence=_number(data, "cadence"),
            pace=_number(data, "pace"),
        )
    return Cycling(
        **common,
        elevation_gain=_number(data, "elevationGain"),
        speed=_number(data, "speed"),
    )
