"""Factories for the alert back-ends matching the current OS."""

import sys

from eyerest.platform.base import NotificationBackend, SoundPlayer


def create_notification_backend(tray_icon=None) -> NotificationBackend:
    """Detect the current OS and return the matching NotificationBackend.

    macOS always uses native notifications.  Elsewhere the tray icon's
    balloon is used when there is one; otherwise notifications are logged.
    """
    if sys.platform == "darwin":
        from eyerest.platform.notifier import OsascriptNotifier
        return OsascriptNotifier()

    if tray_icon is not None:
        from eyerest.platform.notifier import TrayNotifier
        return TrayNotifier(tray_icon)

    from eyerest.platform.notifier import LogNotifier
    return LogNotifier()


def create_sound_player(sound_type: str = "chime") -> SoundPlayer:
    """Return the SoundPlayer for the current OS.

    Uses lazy imports so platform-specific modules are only loaded on
    the OS where they are actually needed.
    """
    if sys.platform == "win32":
        from eyerest.platform.sound import WinBeepSound
        return WinBeepSound()

    if sys.platform == "darwin":
        from eyerest.platform.sound import MacSystemSound
        return MacSystemSound(sound_type)

    from eyerest.platform.sound import TerminalBell
    return TerminalBell()
