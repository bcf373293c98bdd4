"""Notification back-ends and the reminder dispatcher.

The dispatcher is what the orchestrator talks to: it knows the themed eye
and posture messages, optionally plays the alert sound, and never lets a
platform failure escape.
"""

import logging
import subprocess
from typing import Optional

from eyerest.platform.base import NotificationBackend, SoundPlayer
from eyerest.platform.sound import build_tones

logger = logging.getLogger(__name__)

EYE_BREAK_TITLE = "Time for an eye break! 👁️"
EYE_BREAK_BODY = "Look at something 20 feet away for 20 seconds to rest your eyes."
POSTURE_TITLE = "Posture check time! 🧘"
POSTURE_BODY = "Take a moment to stretch and check your posture."


class OsascriptNotifier(NotificationBackend):
    """Native macOS notification via ``osascript``."""

    def notify(self, title: str, body: str, tag: str = "") -> None:
        script = (
            f'display notification "{_escape(body)}" '
            f'with title "{_escape(title)}"'
        )
        subprocess.Popen(
            ["osascript", "-e", script],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )


class TrayNotifier(NotificationBackend):
    """Notification balloon attached to the pystray icon."""

    def __init__(self, icon) -> None:
        self.icon = icon

    @property
    def available(self) -> bool:
        return bool(getattr(self.icon, "HAS_NOTIFICATION", False))

    def notify(self, title: str, body: str, tag: str = "") -> None:
        self.icon.notify(body, title)


class LogNotifier(NotificationBackend):
    """Fallback that only writes the notification to the log."""

    def notify(self, title: str, body: str, tag: str = "") -> None:
        logger.info("%s: %s", title, body)


class NotificationDispatcher:
    """Fires themed reminders with an optional alert sound."""

    def __init__(
        self,
        backend: Optional[NotificationBackend] = None,
        sound_player: Optional[SoundPlayer] = None,
        sound_type: str = "chime",
        duration_ms: int = 500,
    ) -> None:
        self.backend = backend
        self.sound_player = sound_player
        self.sound_type = sound_type
        self.duration_ms = duration_ms

    def show_notification(self, title: str, body: str, tag: str = "") -> bool:
        """Show a notification; returns False when nothing could be shown."""
        if self.backend is None or not self.backend.available:
            logger.debug("Notifications unavailable; dropping %r", tag or title)
            return False
        try:
            self.backend.notify(title, body, tag)
        except Exception:
            logger.exception("Failed to show notification %r", tag or title)
            return False
        return True

    def play_notification_sound(self) -> None:
        if self.sound_player is None:
            return
        try:
            self.sound_player.play(build_tones(self.sound_type, self.duration_ms))
        except Exception:
            logger.exception("Could not play notification sound")

    def show_eye_break_notification(self, with_sound: bool = False) -> bool:
        if with_sound:
            self.play_notification_sound()
        return self.show_notification(EYE_BREAK_TITLE, EYE_BREAK_BODY, tag="eye-break")

    def show_posture_notification(self, with_sound: bool = False) -> bool:
        if with_sound:
            self.play_notification_sound()
        return self.show_notification(POSTURE_TITLE, POSTURE_BODY, tag="posture-check")


def _escape(text: str) -> str:
    """Escape backslashes and double quotes for AppleScript string literals."""
    return text.replace("\\", "\\\\").replace('"', '\\"')
