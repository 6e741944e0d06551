"""LifeTrack entry point.

Replays a scripted run through the tracker, optionally storing the finished
record in MongoDB and asking Claude for a summary.

Usage:
    python -m lifetrack SCRIPT [OPTIONS]

Options:
    --config PATH    Path to YAML config file
    --profile NAME   Profile name (dev, prod, test)
    --store          Save the finished run to MongoDB
    --coach          Print a generated summary of the finished run
    --dry-run        Load config and exit
    --version        Show version
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pymongo.errors import PyMongoError

from . import __version__
from .coach import CoachError, RunCoach
from .config import LifeTrackConfig
from .config.loader import load_config
from .config.profiles import detect_profile
from .storage import MongoStorageClient, RepositoryRecordSink
from .tracking import (
    ActivityRecord,
    CallbackObserver,
    LinearEnergyModel,
    PersistenceFailure,
    ProgressEvent,
    RunTracker,
    StatusEvent,
    TrackingError,
)
from .tracking.mock import MemoryRecordSink, MockClock, MockLocationSource
from .tracking.replay import load_steps, replay
from .tracking.tracker import RecordSink


def setup_logging(level: str) -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="lifetrack",
        description="LifeTrack - replay a scripted run through the run tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Script format (CSV with header):
  offset_s,action,lat,lon,accuracy
  0,start,,,
  0,fix,51.5007,-0.1246,5
  10,pause,,,

Examples:
  python -m lifetrack run.csv                 # Replay and print events
  python -m lifetrack run.csv --store         # Also save the run to MongoDB
  python -m lifetrack run.csv --coach         # Also print a coaching summary

Environment:
  LIFETRACK_PROFILE    Set profile (dev, prod, test)
  ANTHROPIC_API_KEY    Required for --coach
""",
    )

    parser.add_argument("script", nargs="?", type=Path, help="Replay script CSV")
    parser.add_argument("--config", type=Path, help="Path to YAML config file", metavar="PATH")
    parser.add_argument(
        "--profile",
        choices=["dev", "prod", "test"],
        help="Configuration profile to use",
    )
    parser.add_argument("--store", action="store_true", help="Save the run to MongoDB")
    parser.add_argument("--coach", action="store_true", help="Print a generated run summary")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load config and exit (for testing)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"LifeTrack v{__version__}",
    )

    return parser.parse_args(argv)


def print_status(event: StatusEvent) -> None:
    print(f"[{event.kind.value:>8}] {event.distance_m:8.1f} m  {event.duration_ms / 1000:7.1f} s")


def print_progress(event: ProgressEvent) -> None:
    print(
        f"[     fix] {event.distance_m:8.1f} m  {event.duration_ms / 1000:7.1f} s  "
        f"({event.fix.latitude:.5f}, {event.fix.longitude:.5f})"
    )


def print_error(error: TrackingError) -> None:
    print(f"[   error] {error}", file=sys.stderr)


def print_record(record: ActivityRecord) -> None:
    print("\n" + "=" * 50)
    print("  Run summary")
    print("=" * 50)
    print(f"  Started:   {record.start_time.isoformat()}")
    print(f"  Distance:  {record.distance_m / 1000:.3f} km")
    print(f"  Duration:  {record.duration_ms / 1000:.1f} s")
    print(f"  Speed:     {record.avg_speed_kmh:.2f} km/h")
    print(f"  Calories:  {record.calories}")
    print(f"  Points:    {len(record.location_points)}")
    print("=" * 50 + "\n")


def run_coach(config: LifeTrackConfig, record: ActivityRecord, logger: logging.Logger) -> int:
    """Print a generated summary of the run.

    Returns:
        Exit code
    """
    try:
        summary = RunCoach.from_config(config.coach).summarize(record)
    except ValueError as e:
        logger.error(f"Coach unavailable: {e}")
        return 1
    except CoachError as e:
        hint = "try again later" if e.retryable else "check the coach settings"
        logger.error(f"Coach unavailable: {e} ({hint})")
        return 1

    print(summary)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for LifeTrack.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    load_dotenv()
    args = parse_args(argv)

    try:
        if args.config:
            config = load_config(path=args.config)
        else:
            config = load_config(profile=args.profile or detect_profile().value)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e}", file=sys.stderr)
        return 1
    except (TypeError, ValueError) as e:
        print(f"Error: Invalid config: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging.level)
    logger = logging.getLogger("lifetrack")
    logger.info(f"LifeTrack v{__version__}")

    if args.dry_run:
        logger.info("Dry run mode - exiting after config load")
        logger.info(f"Location interval: {config.tracking.location_interval_ms} ms")
        logger.info(f"Accuracy threshold: {config.tracking.max_accuracy_m}")
        logger.info(f"Energy model: {config.metrics.kcal_per_km} kcal/km")
        return 0

    if args.script is None:
        print("Error: a replay script is required", file=sys.stderr)
        return 2

    try:
        steps = load_steps(args.script)
    except (OSError, ValueError) as e:
        print(f"Error: cannot read replay script: {e}", file=sys.stderr)
        return 1

    storage: MongoStorageClient | None = None
    sink: RecordSink
    if args.store:
        storage = MongoStorageClient.from_config(config.storage)
        try:
            storage.connect()
        except PyMongoError as e:
            logger.error(f"Cannot store runs: {e}")
            return 1
        sink = RepositoryRecordSink(storage.runs, user_id=config.storage.user_id)
    else:
        sink = MemoryRecordSink()

    clock = MockClock()
    source = MockLocationSource()
    tracker = RunTracker(
        source,
        sink,
        clock=clock,
        config=config.tracking,
        energy_model=LinearEnergyModel(config.metrics.kcal_per_km),
    )
    tracker.add_observer(
        CallbackObserver(on_status=print_status, on_progress=print_progress, on_error=print_error)
    )

    exit_code = 0
    try:
        with tracker:
            results = replay(steps, tracker, clock, source)
            finished = [r for r in results if r.record is not None]
            for result in finished:
                try:
                    if result.future is not None:
                        result.future.result()
                except PersistenceFailure:
                    exit_code = 1

        for result in finished:
            print_record(result.record)

        if (args.coach or config.coach.enabled) and finished and exit_code == 0:
            exit_code = run_coach(config, finished[-1].record, logger)
    finally:
        if storage is not None:
            storage.disconnect()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
