"""User settings for EyeRest.

Holds the AppSettings persisted in the key/value store and notifies
subscribers whenever they change, so the orchestrator can react (e.g. reset
a timer when its interval changes) without polling.
"""

import logging
from dataclasses import fields, replace
from typing import Any, Callable

from eyerest.core.models import AppSettings

logger = logging.getLogger(__name__)

SETTINGS_KEY = "eyerest-settings"

SettingsListener = Callable[[AppSettings, AppSettings], None]

_INTERVAL_FIELDS = ("eye_interval", "posture_interval")
_TOGGLE_FIELDS = ("eye_notifications", "posture_notifications", "sound_alerts", "auto_start")


def validate_setting(name: str, value: Any) -> Any:
    """Return *value* if it is acceptable for setting *name*, else raise ValueError."""
    if name in _INTERVAL_FIELDS:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"{name} must be a positive number of minutes, got {value!r}")
        return value
    if name in _TOGGLE_FIELDS:
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be true or false, got {value!r}")
        return value
    raise ValueError(f"Unknown setting: {name!r}")


class SettingsStore:
    """Read/write access to AppSettings with change notification."""

    def __init__(self, store, key: str = SETTINGS_KEY) -> None:
        self.store = store
        self.key = key
        self._listeners: list[SettingsListener] = []
        self._settings = self._load()

    @property
    def settings(self) -> AppSettings:
        return replace(self._settings)

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register *listener(old, new)*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def update(self, **changes: Any) -> AppSettings:
        """Apply *changes*, persist, and notify subscribers.

        Raises ValueError (before changing anything) if any name or value
        is invalid.
        """
        for name, value in changes.items():
            validate_setting(name, value)
        old = self._settings
        new = replace(old, **changes)
        self._apply(old, new)
        return self.settings

    def reset(self) -> AppSettings:
        """Restore the default settings."""
        self._apply(self._settings, AppSettings())
        return self.settings

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply(self, old: AppSettings, new: AppSettings) -> None:
        self._settings = new
        self._save()
        if old == new:
            return
        for listener in list(self._listeners):
            try:
                listener(replace(old), replace(new))
            except Exception:
                logger.exception("Settings listener %r failed", listener)

    def _load(self) -> AppSettings:
        try:
            data = self.store.get(self.key)
        except Exception:
            logger.exception("Failed to read settings; using defaults")
            return AppSettings()
        if data is None:
            return AppSettings()
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed settings: expected an object")
            return AppSettings()

        defaults = AppSettings()
        values = {}
        for f in fields(AppSettings):
            if f.name not in data:
                continue
            try:
                values[f.name] = validate_setting(f.name, data[f.name])
            except ValueError as exc:
                logger.warning("%s; keeping default %r", exc, getattr(defaults, f.name))
        return replace(defaults, **values)

    def _save(self) -> None:
        try:
            self.store.set(self.key, self._settings.to_dict())
        except Exception:
            logger.exception("Failed to persist settings")
