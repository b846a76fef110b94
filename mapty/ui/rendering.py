"""Marker popup and list row rendering for logged workouts."""

from __future__ import annotations

from html import escape
from typing import Any

from mapty.workout.model import Workout

RUNNING_EMOJI = "🏃‍♂️"
CYCLING_EMOJI = "🚴‍♀️"


def format_number(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):d}"
    return f"{value:g}"


def workout_emoji(kind: str) -> str:
    return RUNNING_EMOJI if kind == "running" else CYCLING_EMOJI


def popup_content(workout: Workout) -> str:
    return f"{workout_emoji(workout.type)} {escape(workout.description)}"


def popup_options(workout: Workout) -> dict[str, Any]:
    return {
        "minWidth": 100,
        "maxWidth": 250,
        "autoClose": False,
        "closeOnClick": False,
        "className": f"{workout.type}-popup",
    }


def workout_details(workout: Workout) -> list[tuple[str, str, str]]:
    details = [
        (workout_emoji(workout.type), format_number(workout.distance), "km"),
        ("⏱", format_number(workout.duration), "min"),
    ]
    if workout.type == "running":
        details.append(("⚡️", f"{workout.pace:.1f}", "min/km"))
        details.append(("🦶🏼", format_number(workout.cadence), "spm"))
    else:
        details.append(("⚡️", f"{workout.speed:.1f}", "km/h"))
        details.append(("⛰", format_number(workout.elevation_gain), "m"))
    return details
