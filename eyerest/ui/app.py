"""System tray application for EyeRest.

Provides a pystray-based system tray icon with menu items for controlling
the eye and posture timers, opening the dashboard, and quitting.  Timer
ticks run on the scheduler's reactor thread so the tray icon remains
responsive.
"""

import logging
import os
import subprocess
import sys
import webbrowser
from pathlib import Path
from typing import Optional

from eyerest.core.config import get_sound_profile, load_config
from eyerest.core.models import TimerKind
from eyerest.core.orchestrator import ReminderContext, ReminderOrchestrator
from eyerest.core.scheduler import ScheduledCall, ThreadedScheduler
from eyerest.core.settings import SettingsStore
from eyerest.core.streak import StreakTracker
from eyerest.persistence.store import WellnessStore
from eyerest.platform.factory import create_notification_backend, create_sound_player
from eyerest.platform.notifier import NotificationDispatcher

logger = logging.getLogger(__name__)


def _create_default_icon():
    """Create a simple default icon image using PIL, or load from assets."""
    try:
        from PIL import Image, ImageDraw
    except ImportError:
        return None

    # Try loading the bundled icon first
    assets_dir = Path(__file__).resolve().parent.parent.parent / "assets"
    icon_path = assets_dir / "icon.png"
    if icon_path.exists():
        try:
            return Image.open(str(icon_path))
        except Exception:
            logger.debug("Could not load icon from %s, creating default", icon_path)

    # Fallback: a blue eye on white
    img = Image.new("RGB", (64, 64), color=(255, 255, 255))
    draw = ImageDraw.Draw(img)
    draw.ellipse((6, 18, 58, 46), outline=(37, 99, 235), width=4)
    draw.ellipse((24, 24, 40, 40), fill=(37, 99, 235))
    return img


class EyeRestApp:
    """Main application class that runs EyeRest as a system tray app."""

    def __init__(self, config_path: str) -> None:
        self.config_path = config_path
        self.config = load_config(config_path)
        self.tray_icon = None
        self.store: Optional[WellnessStore] = None
        self.scheduler: Optional[ThreadedScheduler] = None
        self.settings_store: Optional[SettingsStore] = None
        self.streak_tracker: Optional[StreakTracker] = None
        self.notifier: Optional[NotificationDispatcher] = None
        self.orchestrator: Optional[ReminderOrchestrator] = None
        self._menu_refresh: Optional[ScheduledCall] = None
        self._dashboard_port = int(self.config.get("dashboard_port", 5555))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Initialize all components, start the timers' reactor, and
        display the system tray icon."""
        self._init_components()
        self.scheduler.start()
        self._start_dashboard()
        self._run_tray()

    def stop(self) -> None:
        """Stop the timers and clean up resources."""
        if self.orchestrator is not None:
            self.orchestrator.shutdown()
        if self.scheduler is not None:
            self.scheduler.cancel(self._menu_refresh)
            self._menu_refresh = None
            self.scheduler.stop()
        if self.store is not None:
            self.store.close()
            self.store = None
        if self.tray_icon is not None:
            try:
                self.tray_icon.stop()
            except Exception:
                logger.debug("Tray icon already stopped")
            self.tray_icon = None

    # ------------------------------------------------------------------
    # Component initialization
    # ------------------------------------------------------------------

    def _init_components(self) -> None:
        """Wire up all EyeRest components from config."""
        config = self.config

        # Database
        db_path = os.path.expanduser(config.get("database_path", "~/.eyerest/eyerest.db"))
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self.store = WellnessStore(db_path)
        self.store.init_db()

        # Alerts; the backend is swapped for the tray balloon once the icon exists
        sound_type, duration_ms = get_sound_profile(config)
        self.notifier = NotificationDispatcher(
            backend=create_notification_backend(),
            sound_player=create_sound_player(sound_type),
            sound_type=sound_type,
            duration_ms=duration_ms,
        )

        self.scheduler = ThreadedScheduler()
        self.settings_store = SettingsStore(self.store)
        self.streak_tracker = StreakTracker(self.store)
        self.orchestrator = ReminderOrchestrator(
            ReminderContext(
                settings=self.settings_store,
                streak_tracker=self.streak_tracker,
                notifier=self.notifier,
                scheduler=self.scheduler,
                store=self.store,
            )
        )

        # Tray labels carry the countdown; redraw them every tick
        self._menu_refresh = self.scheduler.schedule(1000, self._refresh_menu)

    # ------------------------------------------------------------------
    # System tray
    # ------------------------------------------------------------------

    def _run_tray(self) -> None:
        """Create and run the pystray system tray icon."""
        try:
            import pystray
            from pystray import MenuItem, Menu
        except ImportError:
            logger.warning(
                "pystray not available; running without system tray. "
                "Install pystray for tray icon support."
            )
            return

        icon_image = _create_default_icon()
        if icon_image is None:
            logger.warning("Could not create tray icon image; skipping tray")
            return

        menu = Menu(
            MenuItem(self._timer_label(TimerKind.EYE), lambda: self._toggle(TimerKind.EYE)),
            MenuItem(self._timer_label(TimerKind.POSTURE), lambda: self._toggle(TimerKind.POSTURE)),
            MenuItem("Reset Eye Timer", lambda: self.orchestrator.reset_timer(TimerKind.EYE)),
            MenuItem("Reset Posture Timer", lambda: self.orchestrator.reset_timer(TimerKind.POSTURE)),
            Menu.SEPARATOR,
            MenuItem("Dashboard", lambda: self._open_dashboard(), default=True),
            MenuItem("Reset Streak", lambda: self.orchestrator.reset_streak()),
            Menu.SEPARATOR,
            MenuItem("Quit", lambda: self._quit()),
        )

        self.tray_icon = pystray.Icon("EyeRest", icon_image, "EyeRest", menu)
        if sys.platform != "darwin":
            self.notifier.backend = create_notification_backend(self.tray_icon)
        self.tray_icon.run()

    def _timer_label(self, kind: TimerKind):
        def _label(item) -> str:
            timer = self.orchestrator.timer(kind)
            verb = "Pause" if timer.is_running else "Start"
            return f"{verb} {kind.value.capitalize()} Timer ({timer.format_time(timer.time_left).display})"
        return _label

    def _toggle(self, kind: TimerKind) -> None:
        self.orchestrator.toggle_timer(kind)
        if self.tray_icon is not None:
            self.tray_icon.update_menu()

    def _refresh_menu(self) -> None:
        icon = self.tray_icon
        if icon is not None:
            icon.update_menu()

    def _quit(self) -> None:
        """Quit the application cleanly."""
        self.stop()

    # ------------------------------------------------------------------
    # Web dashboard
    # ------------------------------------------------------------------

    def _start_dashboard(self) -> None:
        """Start the web dashboard in a background thread."""
        try:
            from eyerest.ui.web import start_dashboard
            start_dashboard(self, port=self._dashboard_port)
        except Exception:
            logger.exception("Failed to start web dashboard")

    def _open_dashboard(self) -> None:
        """Open the dashboard in the default browser."""
        url = f"http://127.0.0.1:{self._dashboard_port}"
        try:
            if sys.platform == "darwin":
                subprocess.Popen(["open", url])
            else:
                webbrowser.open(url)
        except Exception:
            logger.exception("Failed to open dashboard")
