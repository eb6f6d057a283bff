"""Core data models shared across the engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Union

from pianodrill.config import (
    BEAT_SECONDS,
    HALF_TOLERANCE,
    QUARTER_TOLERANCE,
    WHOLE_TOLERANCE,
)


class Hand(Enum):
    LEFT = auto()
    RIGHT = auto()

    @property
    def label(self) -> str:
        return "Right" if self is Hand.RIGHT else "Left"


class HandScope(Enum):
    RIGHT = auto()
    LEFT = auto()
    SEPARATE = auto()  # either hand, one target at a time
    TOGETHER = auto()  # one note per hand, simultaneously


class LeftHandPolicy(Enum):
    NOTES = auto()
    CHORDS = auto()
    MIXED = auto()


class DurationClass(Enum):
    QUARTER = auto()
    HALF = auto()
    WHOLE = auto()

    @property
    def beats(self) -> int:
        return _BEATS[self]

    @property
    def seconds(self) -> float:
        return self.beats * BEAT_SECONDS

    @property
    def tolerance(self) -> float:
        return _TOLERANCES[self]

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def accepts(self, held: float) -> bool:
        """True if a hold of ``held`` seconds is within the tolerance window."""
        # Window edges are inclusive; rounding absorbs float noise.
        return round(abs(held - self.seconds), 9) <= self.tolerance


_BEATS = {DurationClass.QUARTER: 1, DurationClass.HALF: 2, DurationClass.WHOLE: 4}
_TOLERANCES = {
    DurationClass.QUARTER: QUARTER_TOLERANCE,
    DurationClass.HALF: HALF_TOLERANCE,
    DurationClass.WHOLE: WHOLE_TOLERANCE,
}


@dataclass
class SingleTarget:
    pitch: int  # MIDI note number
    hand: Hand
    duration: DurationClass | None = None  # None = no hold-time check

    def fresh(self) -> SingleTarget:
        return replace(self)


@dataclass
class ChordTarget:
    hand: Hand
    pitches: tuple[int, ...]
    label: str
    satisfied: set[int] = field(default_factory=set)

    @property
    def complete(self) -> bool:
        return self.satisfied >= set(self.pitches)

    def fresh(self) -> ChordTarget:
        return replace(self, satisfied=set())


@dataclass
class PairedTarget:
    right_pitch: int
    left_pitch: int
    right_satisfied: bool = False
    left_satisfied: bool = False

    @property
    def complete(self) -> bool:
        return self.right_satisfied and self.left_satisfied

    def fresh(self) -> PairedTarget:
        return replace(self, right_satisfied=False, left_satisfied=False)


Target = Union[SingleTarget, ChordTarget, PairedTarget]


def target_pitches(target: Target) -> tuple[int, ...]:
    """Every key the target asks for, low to high."""
    if isinstance(target, ChordTarget):
        return tuple(sorted(target.pitches))
    if isinstance(target, PairedTarget):
        return (target.left_pitch, target.right_pitch)
    return (target.pitch,)


class EventKind(Enum):
    PRESS = auto()
    RELEASE = auto()


@dataclass(frozen=True)
class InputEvent:
    """A key-down or key-up from any input source."""

    kind: EventKind
    pitch: int
    timestamp: float  # seconds, same clock as the session's ``now``
    velocity: int = 100


class Outcome(Enum):
    PENDING = auto()
    CORRECT = auto()
    INCORRECT = auto()


class MistakeKind(Enum):
    NOTE = auto()
    CHORD = auto()
    DURATION = auto()


@dataclass(frozen=True)
class Mistake:
    """Which ledger bucket a scored miss belongs to."""

    kind: MistakeKind
    pitch: int | None = None
    hand: Hand | None = None
    chord_label: str | None = None
    duration: DurationClass | None = None


@dataclass
class Evaluation:
    outcome: Outcome
    completed: bool = False
    mistake: Mistake | None = None
    held_seconds: float | None = None
    holding: bool = False  # a duration-checked press is being held
    ignored: bool = False  # event had no effect at all


@dataclass
class AttemptState:
    first_attempt_pending: bool = True
    processing_lock: bool = False
    press_start: float | None = None
    active_pitch: int | None = None

    def clear_press(self) -> None:
        self.press_start = None
        self.active_pitch = None


@dataclass
class Score:
    correct: int = 0
    incorrect: int = 0

    @property
    def attempts(self) -> int:
        return self.correct + self.incorrect

    @property
    def accuracy_pct(self) -> float:
        if self.attempts == 0:
            return 0.0
        return round(self.correct / self.attempts * 100.0, 1)


@dataclass
class PracticeConfig:
    hand_scope: HandScope = HandScope.SEPARATE
    left_hand_policy: LeftHandPolicy = LeftHandPolicy.NOTES
    check_durations: bool = True
    show_note_names: bool = True
