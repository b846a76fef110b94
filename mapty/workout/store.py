"""Local persistence for the logged workout list."""

from __future__ import annotations

import json
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, Iterable, Protocol

from loguru import logger

from mapty.workout.model import (
    Workout,
    WorkoutDecodeError,
    workout_from_dict,
    workout_to_dict,
)

WORKOUTS_KEY = "workouts"


def default_data_dir() -> Path:
    return Path.home() / ".mapty"


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class FileStorage:
    """Stores each key as ``<key>.json`` under a data directory."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir or default_data_dir()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _path(self, key: str) -> Path:
        return self._base_dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        target = self._path(key)
        if not target.exists():
            return None
        return target.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class MappingStorage:
    """Adapter over a mutable mapping such as NiceGUI's ``app.storage.user``."""

    def __init__(self, mapping: MutableMapping[str, Any]) -> None:
        self._mapping = mapping

    def get(self, key: str) -> str | None:
        value = self._mapping.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self._mapping[key] = value

    def remove(self, key: str) -> None:
        self._mapping.pop(key, None)


def dump_workouts(workouts: Iterable[Workout]) -> str:
    return json.dumps([workout_to_dict(w) for w in workouts], ensure_ascii=True)


def save_workouts(storage: KeyValueStorage, workouts: Iterable[Workout]) -> None:
    storage.set(WORKOUTS_KEY, dump_workouts(workouts))


def load_workouts(storage: KeyValueStorage) -> list[Workout]:
    try:
        raw = storage.get(WORKOUTS_KEY)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Ignoring unreadable workout history: {exc}")
        return []
    if raw is None:
        return []

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning(f"Ignoring unreadable workout history: {exc}")
        return []

    if not isinstance(data, list):
        logger.warning("Ignoring workout history: expected a JSON array")
        return []

    out: list[Workout] = []
    for index, item in enumerate(data):
        try:
            out.append(workout_from_dict(item))
        except WorkoutDecodeError as exc:
            logger.warning(f"Skipping stored workout {index + 1}: {exc}")
            continue
    return out


def clear_workouts(storage: KeyValueStorage) -> None:
    storage.remove(WORKOUTS_KEY)
