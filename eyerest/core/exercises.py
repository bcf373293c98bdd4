"""Built-in break exercises shown alongside reminders."""

from typing import NamedTuple

from eyerest.core.models import TimerKind


class Exercise(NamedTuple):
    id: str
    title: str
    kind: TimerKind
    duration_seconds: int  # per step
    steps: tuple[str, ...]
    description: str


EXERCISES: tuple[Exercise, ...] = (
    Exercise(
        id="eye-focus",
        title="20-20-20 Eye Exercise",
        kind=TimerKind.EYE,
        duration_seconds=20,
        steps=(
            "Look at something 20 feet away",
            "Focus on the distant object",
            "Blink naturally while focusing",
            "Take a deep breath and relax",
        ),
        description="Look at something 20 feet away for 20 seconds to reduce eye strain.",
    ),
    Exercise(
        id="eye-blink",
        title="Blink Exercise",
        kind=TimerKind.EYE,
        duration_seconds=10,
        steps=("Blink slowly and deliberately 10-15 times",),
        description="Slow blinking re-wets the eyes after long screen stretches.",
    ),
    Exercise(
        id="eye-roll",
        title="Eye Rolls",
        kind=TimerKind.EYE,
        duration_seconds=10,
        steps=(
            "Slowly roll your eyes clockwise",
            "Slowly roll your eyes counterclockwise",
        ),
        description="Gentle eye rolls loosen the eye muscles.",
    ),
    Exercise(
        id="eye-shift",
        title="Focus Shifting",
        kind=TimerKind.EYE,
        duration_seconds=10,
        steps=(
            "Focus on something close to you",
            "Shift focus to something far away",
            "Alternate a few times",
        ),
        description="Alternating between near and far objects trains focus flexibility.",
    ),
    Exercise(
        id="neck-stretch",
        title="Neck Stretch Routine",
        kind=TimerKind.POSTURE,
        duration_seconds=8,
        steps=(
            "Slowly tilt your head to the right",
            "Hold the stretch gently",
            "Return to center",
            "Slowly tilt your head to the left",
            "Hold the stretch gently",
            "Return to center",
            "Gently nod up and down",
            "Relax and breathe",
        ),
        description="Gentle neck stretches to relieve tension and improve posture.",
    ),
    Exercise(
        id="shoulder-roll",
        title="Shoulder Roll Exercise",
        kind=TimerKind.POSTURE,
        duration_seconds=10,
        steps=(
            "Roll shoulders forward slowly",
            "Continue the circular motion",
            "Roll shoulders backward slowly",
            "Feel the stretch in your shoulders",
            "Finish with shoulders relaxed",
        ),
        description="Shoulder rolls to release tension and improve circulation.",
    ),
    Exercise(
        id="posture-reset",
        title="Posture Reset",
        kind=TimerKind.POSTURE,
        duration_seconds=10,
        steps=(
            "Sit up straight, shoulders back",
            "Feet flat on the floor",
            "Monitor at eye level",
        ),
        description="A quick check of how you are sitting.",
    ),
    Exercise(
        id="wrist-flex",
        title="Wrist and Hand Stretches",
        kind=TimerKind.POSTURE,
        duration_seconds=12,
        steps=(
            "Extend your arm forward",
            "Flex your wrist up gently, then down",
            "Rotate your wrist in both directions",
            "Make fists and release",
            "Repeat with the other hand",
        ),
        description="Wrist and hand exercises to prevent repetitive strain injuries.",
    ),
    Exercise(
        id="deep-breathing",
        title="Deep Breathing Exercise",
        kind=TimerKind.POSTURE,
        duration_seconds=15,
        steps=(
            "Sit up straight and relax",
            "Inhale slowly through your nose (4 counts)",
            "Hold your breath gently (2 counts)",
            "Exhale slowly through your mouth (6 counts)",
            "Repeat 3-5 times",
        ),
        description="Deep breathing to reduce stress and improve focus.",
    ),
)


def get_exercises(kind: "TimerKind | str") -> list[Exercise]:
    """Exercises suited to the *kind* of break, in display order."""
    kind = TimerKind.parse(kind)
    return [e for e in EXERCISES if e.kind is kind]
