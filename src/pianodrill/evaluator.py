"""Match evaluation — compare player input to the current target."""

from __future__ import annotations

from pianodrill.config import CHORD_SETTLE_DELAY, PAIRED_SETTLE_DELAY, SINGLE_SETTLE_DELAY
from pianodrill.models import (
    AttemptState,
    ChordTarget,
    Evaluation,
    EventKind,
    InputEvent,
    Mistake,
    MistakeKind,
    Outcome,
    PairedTarget,
    SingleTarget,
    Target,
)
from pianodrill.state import SessionState


def _ignored() -> Evaluation:
    return Evaluation(outcome=Outcome.PENDING, ignored=True)


def evaluate(target: Target, attempt: AttemptState, event: InputEvent) -> Evaluation:
    """Judge one event against the current target.

    Records partial progress on the target (chord members, paired sides) and
    press tracking on ``attempt``; scoring is left to :func:`apply_evaluation`.
    """
    if event.kind == EventKind.RELEASE:
        return _evaluate_release(target, attempt, event)

    if attempt.processing_lock:
        return _ignored()

    if isinstance(target, SingleTarget):
        return _evaluate_single_press(target, attempt, event)
    if isinstance(target, ChordTarget):
        return _evaluate_chord_press(target, event)
    if isinstance(target, PairedTarget):
        return _evaluate_paired_press(target, event)
    return _ignored()


def _evaluate_release(target: Target, attempt: AttemptState, event: InputEvent) -> Evaluation:
    if (
        not isinstance(target, SingleTarget)
        or target.duration is None
        or attempt.press_start is None
        or attempt.active_pitch != event.pitch
    ):
        return _ignored()

    held = event.timestamp - attempt.press_start
    attempt.clear_press()

    if target.duration.accepts(held):
        return Evaluation(outcome=Outcome.CORRECT, completed=True, held_seconds=held)
    return Evaluation(
        outcome=Outcome.INCORRECT,
        held_seconds=held,
        mistake=Mistake(
            kind=MistakeKind.DURATION,
            pitch=target.pitch,
            hand=target.hand,
            duration=target.duration,
        ),
    )


def _evaluate_single_press(
    target: SingleTarget, attempt: AttemptState, event: InputEvent
) -> Evaluation:
    if event.pitch != target.pitch:
        return Evaluation(
            outcome=Outcome.INCORRECT,
            mistake=Mistake(kind=MistakeKind.NOTE, pitch=target.pitch, hand=target.hand),
        )

    if target.duration is not None:
        # Scored on release
        attempt.press_start = event.timestamp
        attempt.active_pitch = event.pitch
        return Evaluation(outcome=Outcome.PENDING, holding=True)

    return Evaluation(outcome=Outcome.CORRECT, completed=True)


def _evaluate_chord_press(target: ChordTarget, event: InputEvent) -> Evaluation:
    if event.pitch not in target.pitches:
        return Evaluation(
            outcome=Outcome.INCORRECT,
            mistake=Mistake(kind=MistakeKind.CHORD, chord_label=target.label),
        )
    if event.pitch in target.satisfied:
        return _ignored()

    target.satisfied.add(event.pitch)
    if target.complete:
        return Evaluation(outcome=Outcome.CORRECT, completed=True)
    return Evaluation(outcome=Outcome.PENDING)


def _evaluate_paired_press(target: PairedTarget, event: InputEvent) -> Evaluation:
    matched = False
    if event.pitch == target.right_pitch:
        target.right_satisfied = True
        matched = True
    if event.pitch == target.left_pitch:
        target.left_satisfied = True
        matched = True

    if not matched:
        # Stray keys are not scored in two-hand mode
        return _ignored()
    if target.complete:
        return Evaluation(outcome=Outcome.CORRECT, completed=True)
    return Evaluation(outcome=Outcome.PENDING)


def apply_evaluation(state: SessionState, evaluation: Evaluation) -> Outcome | None:
    """Apply score and ledger side effects; returns the outcome if it was scored.

    Only the first decisive outcome on a target instance is scored.
    """
    attempt = state.attempt
    scored: Outcome | None = None

    if evaluation.outcome == Outcome.CORRECT:
        if attempt.first_attempt_pending:
            state.score.correct += 1
            attempt.first_attempt_pending = False
            scored = Outcome.CORRECT
        if evaluation.completed:
            attempt.processing_lock = True

    elif evaluation.outcome == Outcome.INCORRECT:
        if attempt.first_attempt_pending:
            state.score.incorrect += 1
            attempt.first_attempt_pending = False
            if evaluation.mistake is not None:
                state.ledger.record(evaluation.mistake)
            scored = Outcome.INCORRECT

    return scored


def settle_delay(target: Target) -> float:
    """Seconds to show a completed target before advancing."""
    if isinstance(target, ChordTarget):
        return CHORD_SETTLE_DELAY
    if isinstance(target, PairedTarget):
        return PAIRED_SETTLE_DELAY
    return SINGLE_SETTLE_DELAY
