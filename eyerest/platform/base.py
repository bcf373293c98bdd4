"""Abstract base classes for platform-specific alert back-ends."""

from abc import ABC, abstractmethod


class NotificationBackend(ABC):
    """Common interface for showing a desktop notification.

    Each supported platform provides a concrete implementation behind this
    interface.  Back-ends that cannot show anything (no permission, no
    display) report ``available = False`` and are skipped silently.
    """

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    def notify(self, title: str, body: str, tag: str = "") -> None:
        """Show a notification with *title* and *body*."""
        pass


class SoundPlayer(ABC):
    """Plays an audible alert described by a list of ``(frequency_hz, ms)`` tones."""

    @abstractmethod
    def play(self, tones: list[tuple[int, int]]) -> None:
        pass
