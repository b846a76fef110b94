"""Command line entrypoint for Mapty."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from mapty.core.config import DEFAULT_HOST, DEFAULT_PORT, AppConfig, parse_location
from mapty.core.log import setup_logging
from mapty.ui.rendering import workout_details
from mapty.workout.store import (
    WORKOUTS_KEY,
    FileStorage,
    clear_workouts,
    load_workouts,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mapty workout logger")
    parser.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch the map web UI (default when no other command is given)",
    )
    parser.add_argument("--web-host", default=DEFAULT_HOST, help="Host bind for --ui-web")
    parser.add_argument("--web-port", type=int, default=DEFAULT_PORT, help="Port for --ui-web")
    parser.add_argument(
        "--location",
        default=None,
        help="Fixed LAT,LNG used instead of asking the browser for its position",
    )
    parser.add_argument(
        "--storage",
        choices=["browser", "file"],
        default="browser",
        help="Keep history per browser (default) or in --data-dir",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory for file storage (default: ~/.mapty)",
    )
    parser.add_argument(
        "--storage-secret",
        default="mapty-local",
        help="Secret used to sign the browser storage cookie",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print workouts kept in file storage (--data-dir); browser storage is not read",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the raw workout blob from file storage (--data-dir)",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help=(
            "Delete the workout history in file storage (--data-dir); "
            "browser storage is cleared with the Reset button in the web UI"
        ),
    )
    parser.add_argument("--log-level", default="INFO", help="Loguru level (DEBUG, INFO, ...)")
    parser.add_argument("--log-file", type=Path, default=None, help="Optional rotating log file")
    return parser


def run_list(storage: FileStorage) -> int:
    workouts = load_workouts(storage)
    if not workouts:
        print("No workouts logged")
        return 0

    for workout in workouts:
        details = " | ".join(f"{value} {unit}" for _, value, unit in workout_details(workout))
        lat, lng = workout.coords
        print(f"{workout.id}  {workout.description:<22} {details}  @ {lat:.5f},{lng:.5f}")
    return 0


def run_dump(storage: FileStorage) -> int:
    raw = storage.get(WORKOUTS_KEY)
    print(raw if raw is not None else "[]")
    return 0


def run_reset(storage: FileStorage) -> int:
    clear_workouts(storage)
    print(f"Cleared workout history in {storage.base_dir}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    storage = FileStorage(args.data_dir)
    if args.reset:
        return run_reset(storage)
    if args.dump:
        return run_dump(storage)
    if args.list:
        return run_list(storage)

    fixed_location = None
    if args.location is not None:
        try:
            fixed_location = parse_location(args.location)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    config = AppConfig(
        host=args.web_host,
        port=args.web_port,
        storage=args.storage,
        data_dir=args.data_dir,
        storage_secret=args.storage_secret,
        fixed_location=fixed_location,
    )
    logger.debug(f"Web UI config: {config}")

    from mapty.ui.web_app import run_web_ui

    return run_web_ui(config)


if __name__ == "__main__":
    raise SystemExit(main())
