"""Alert sounds for EyeRest.

A sound profile is a type (beep, chime, bell, nature) and a total duration.
``build_tones`` turns it into a short tone sequence that each player renders
as well as its platform allows.
"""

import logging
import subprocess
import sys
import threading

from eyerest.platform.base import SoundPlayer

logger = logging.getLogger(__name__)

# (frequency_hz, share of total duration)
TONE_PATTERNS: dict[str, list[tuple[int, float]]] = {
    "beep": [(800, 1.0)],
    "chime": [(800, 0.2), (600, 0.2), (400, 0.6)],
    "bell": [(523, 0.2), (659, 0.2), (784, 0.6)],  # C5 E5 G5
    "nature": [(300, 1.0)],
}

# macOS system sounds closest to each pattern
_MAC_SOUNDS = {
    "beep": "Tink",
    "chime": "Glass",
    "bell": "Ping",
    "nature": "Submarine",
}


def build_tones(sound_type: str, duration_ms: int) -> list[tuple[int, int]]:
    """Expand a sound profile into ``(frequency_hz, milliseconds)`` tones."""
    pattern = TONE_PATTERNS.get(sound_type, TONE_PATTERNS["chime"])
    return [(freq, max(1, int(duration_ms * share))) for freq, share in pattern]


class WinBeepSound(SoundPlayer):
    """Renders tones with ``winsound.Beep`` on a daemon thread."""

    def play(self, tones: list[tuple[int, int]]) -> None:
        threading.Thread(target=self._beep, args=(tones,), daemon=True, name="eyerest-sound").start()

    @staticmethod
    def _beep(tones: list[tuple[int, int]]) -> None:
        try:
            import winsound
            for freq, ms in tones:
                winsound.Beep(freq, ms)
        except Exception:
            logger.exception("Failed to play sound")


class MacSystemSound(SoundPlayer):
    """Plays the closest built-in macOS system sound via ``afplay``."""

    def __init__(self, sound_type: str = "chime") -> None:
        self.sound_type = sound_type

    def play(self, tones: list[tuple[int, int]]) -> None:
        name = _MAC_SOUNDS.get(self.sound_type, "Glass")
        try:
            subprocess.Popen(
                ["afplay", f"/System/Library/Sounds/{name}.aiff"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except Exception:
            logger.exception("Failed to play sound")


class TerminalBell(SoundPlayer):
    """Rings the terminal bell once per tone."""

    def play(self, tones: list[tuple[int, int]]) -> None:
        try:
            sys.stdout.write("\a" * max(1, len(tones)))
            sys.stdout.flush()
        except Exception:
            logger.debug("Terminal bell unavailable", exc_info=True)
