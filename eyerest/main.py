"""EyeRest application entry point.

Supports two modes:
  - GUI mode (default): launches the system tray application
  - CLI mode: prints timer status, the weekly window, history or exercises

Usage:
    python -m eyerest.main                     # GUI mode
    python -m eyerest.main --status            # timers and streak
    python -m eyerest.main --weekly            # last seven days
    python -m eyerest.main --history 30        # completed breaks, last 30 days
    python -m eyerest.main --exercises eye     # break exercises
    python -m eyerest.main --reset-streak      # start the streak over
"""

import argparse
import logging
import os
import time

from eyerest.core.config import get_default_config_path, load_config
from eyerest.core.exercises import get_exercises
from eyerest.core.models import TimerKind
from eyerest.core.orchestrator import ReminderContext, ReminderOrchestrator
from eyerest.core.scheduler import CooperativeScheduler
from eyerest.core.settings import SettingsStore
from eyerest.core.streak import StreakTracker
from eyerest.persistence.store import WellnessStore
from eyerest.platform.notifier import NotificationDispatcher
from eyerest.reporting.formatter import TextFormatter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="eyerest",
        description="EyeRest: eye-rest and posture break reminders",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.json (default: platform data directory)",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--status",
        action="store_true",
        help="Print timer state and streak, then exit",
    )
    group.add_argument(
        "--weekly",
        action="store_true",
        help="Print the last seven days of breaks, then exit",
    )
    group.add_argument(
        "--history",
        type=int,
        metavar="DAYS",
        help="Print completed breaks for the last DAYS days, then exit",
    )
    group.add_argument(
        "--exercises",
        choices=[k.value for k in TimerKind],
        help="Print break exercises for eye or posture, then exit",
    )
    group.add_argument(
        "--reset-streak",
        action="store_true",
        help="Reset the current streak (the longest streak is kept)",
    )
    return parser


def _open_orchestrator(config: dict) -> tuple[WellnessStore, ReminderOrchestrator]:
    """Build an orchestrator over the configured database without a reactor.

    Timers restored as running are credited with elapsed time but never
    tick, because nothing drives the cooperative scheduler.
    """
    db_path = os.path.expanduser(config.get("database_path", "~/.eyerest/eyerest.db"))
    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
    store = WellnessStore(db_path)
    store.init_db()
    context = ReminderContext(
        settings=SettingsStore(store),
        streak_tracker=StreakTracker(store),
        notifier=NotificationDispatcher(),
        scheduler=CooperativeScheduler(),
        store=store,
        clock=time.time,
    )
    return store, ReminderOrchestrator(context)


def _run_report(config: dict, parsed: argparse.Namespace) -> None:
    store, orch = _open_orchestrator(config)
    try:
        tracker = orch.context.streak_tracker
        if parsed.status:
            print(TextFormatter.format_status(orch.status()))
            print(TextFormatter.format_streak(
                tracker.streak_data, tracker.get_streak_message(), tracker.get_weekly_progress()
            ))
        elif parsed.weekly:
            print(TextFormatter.format_weekly(tracker.weekly_activity))
        elif parsed.history is not None:
            print(TextFormatter.format_history(orch.history(parsed.history)))
        elif parsed.reset_streak:
            orch.reset_streak()
            print(tracker.get_streak_message())
    finally:
        orch.shutdown()
        store.close()


def main(args: list[str] | None = None) -> None:
    """Entry point for EyeRest.

    When *args* is ``None`` the arguments are read from ``sys.argv``.
    """
    parser = build_parser()
    parsed = parser.parse_args(args)
    if parsed.history is not None and parsed.history <= 0:
        parser.error("--history DAYS must be positive")

    config_path = parsed.config or str(get_default_config_path())
    config = load_config(config_path)

    level_name = str(config.get("log_level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if not isinstance(level, int):
        logger.warning("Unknown log_level %r in config; using INFO", config.get("log_level"))

    if parsed.exercises:
        print(TextFormatter.format_exercises(get_exercises(parsed.exercises)))
    elif parsed.status or parsed.weekly or parsed.history is not None or parsed.reset_streak:
        try:
            _run_report(config, parsed)
        except ValueError as exc:
            parser.error(str(exc))
    else:
        # GUI mode: import here to avoid pulling in pystray/Flask for CLI usage
        from eyerest.ui.app import EyeRestApp

        app = EyeRestApp(config_path)
        app.start()


if __name__ == "__main__":
    main()
