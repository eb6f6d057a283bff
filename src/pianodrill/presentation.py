"""Presentation boundary: what the session tells the outside world to show."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol, runtime_checkable

from pianodrill.models import ChordTarget, PairedTarget, Score, SingleTarget, Target
from pianodrill.pitches import note_name

logger = logging.getLogger(__name__)


class DisplayState(Enum):
    IDLE = auto()       # waiting for the player
    HOLD = auto()       # correct key down, hold it
    CORRECT = auto()
    INCORRECT = auto()
    NOTICE = auto()     # transient status message


@dataclass(frozen=True)
class FocusProgress:
    round_number: int  # 1-based
    max_rounds: int
    item_number: int  # 1-based
    item_count: int


@dataclass(frozen=True)
class Presentation:
    message: str
    state: DisplayState
    correct: int
    incorrect: int
    target: Target | None = None
    focus: FocusProgress | None = None


@runtime_checkable
class PresentationSink(Protocol):
    def show(self, presentation: Presentation) -> None: ...


class LogSink:
    """Headless sink that writes every presentation to the log."""

    def show(self, presentation: Presentation) -> None:
        focus = ""
        if presentation.focus is not None:
            f = presentation.focus
            focus = f" [focus round {f.round_number}/{f.max_rounds}, item {f.item_number}/{f.item_count}]"
        logger.info(
            "%s: %s (correct %d, wrong %d)%s",
            presentation.state.name, presentation.message,
            presentation.correct, presentation.incorrect, focus,
        )


def describe_target(target: Target, show_note_names: bool = True) -> str:
    """The prompt line shown while a target is waiting to be played."""
    if isinstance(target, PairedTarget):
        msg = "Play with both hands together"
        if show_note_names:
            msg += f" (Right: {note_name(target.right_pitch)}, Left: {note_name(target.left_pitch)})"
        return msg

    if isinstance(target, ChordTarget):
        msg = f"{target.hand.label} hand - chord"
        if show_note_names:
            msg += f" ({target.label})"
        return msg

    msg = f"{target.hand.label} hand"
    if show_note_names:
        msg += f" ({note_name(target.pitch)})"
    if target.duration is not None:
        msg += f" {target.duration.label.lower()} note"
    return msg


def describe_score(score: Score) -> str:
    return f"{score.correct} correct, {score.incorrect} wrong ({score.accuracy_pct:.0f}%)"


def hold_message(target: SingleTarget) -> str:
    return f"Hold the note... ({target.duration.label.lower()}, {target.duration.seconds:.2f}s)"


def duration_error_message(held: float, expected: float) -> str:
    diff = held - expected
    return f"Wrong length ({'+' if diff > 0 else ''}{diff:.1f}s)"
