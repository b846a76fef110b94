"""Form input parsing and validation for new workouts."""

from __future__ import annotations

import math
from dataclasses import dataclass

from mapty.workout.model import WORKOUT_KINDS, WorkoutKind


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class WorkoutValidationError(ValueError):
    """Raised when submitted form values cannot produce a workout."""

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__("; ".join(err.message for err in errors))
        self.errors = errors


@dataclass(frozen=True)
class WorkoutInput:
    kind: WorkoutKind
    distance: float
    duration: float
    metric: float


def parse_number(raw: object) -> float:
    """Coerce a raw form value to float, mapping blanks and junk to NaN."""
    if raw is None or isinstance(raw, bool):
        return math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return math.nan
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _positive(field: str, label: str, value: float) -> FieldError | None:
    if not math.isfinite(value) or value <= 0:
        return FieldError(field, f"{label} must be a positive number")
    return None


def _finite(field: str, label: str, value: float) -> FieldError | None:
    if not math.isfinite(value):
        return FieldError(field, f"{label} must be a number")
    return None


def validate_workout_input(
    kind: str,
    distance: float,
    duration: float,
    cadence: float | None = None,
    elevation_gain: float | None = None,
) -> list[FieldError]:
    """Check every numeric field of the ``kind`` variant; empty list means valid."""
    if kind not in WORKOUT_KINDS:
        return [FieldError("type", f"Unknown workout type '{kind}'")]

    checks = [
        _positive("distance", "Distance", distance),
        _positive("duration", "Duration", duration),
    ]
    if kind == "running":
        checks.append(_positive("cadence", "Cadence", parse_number(cadence)))
    else:
        # descending rides are legitimate, only require a real number
        checks.append(
            _finite("elevationGain", "Elevation gain", parse_number(elevation_gain))
        )
    return [err for err in checks if err is not None]


def parse_workout_form(
    kind: object,
    distance: object,
    duration: object,
    cadence: object = None,
    elevation_gain: object = None,
) -> WorkoutInput:
    kind_text = str(kind or "").strip().lower()
    distance_num = parse_number(distance)
    duration_num = parse_number(duration)
    cadence_num = parse_number(cadence)
    elevation_num = parse_number(elevation_gain)

    errors = validate_workout_input(
        kind_text, distance_num, duration_num, cadence_num, elevation_num
    )
    if errors:
        raise WorkoutValidationError(errors)

    metric = cadence_num if kind_text == "running" else elevation_num
    return WorkoutInput(
        kind=kind_text,  # type: ignore[arg-type]
        distance=distance_num,
        duration=duration_num,
        metric=metric,
    )
