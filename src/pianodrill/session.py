"""Practice session: the single owner of session state and its transitions."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import fields, replace

from pianodrill.coach.focus import FocusedPracticeController, FocusPhase, RoundResult
from pianodrill.coach.remedial import RemedialSequenceBuilder
from pianodrill.config import FOCUS_EXIT_DELAY
from pianodrill.evaluator import apply_evaluation, evaluate, settle_delay
from pianodrill.events import decode_midi, normalize_event
from pianodrill.generator import ExpectationGenerator
from pianodrill.models import (
    ChordTarget,
    Evaluation,
    InputEvent,
    MistakeKind,
    Outcome,
    PairedTarget,
    PracticeConfig,
    Score,
    SingleTarget,
    Target,
)
from pianodrill.presentation import (
    DisplayState,
    FocusProgress,
    LogSink,
    Presentation,
    PresentationSink,
    describe_score,
    describe_target,
    duration_error_message,
    hold_message,
)
from pianodrill.scheduler import Scheduler, TimerToken
from pianodrill.state import SessionState

logger = logging.getLogger(__name__)

_REGENERATING_FIELDS = {"hand_scope", "left_hand_policy"}


class PracticeSession:
    """Drives one practice session from input events and clock ticks.

    The session defines no loop and performs no I/O of its own: the owner
    feeds it events via :meth:`on_input_event` / :meth:`on_midi_message` and
    calls :meth:`tick` regularly so delayed transitions and remedial replies
    are picked up. All timestamps share one clock, in seconds.
    """

    def __init__(
        self,
        builder: RemedialSequenceBuilder,
        config: PracticeConfig | None = None,
        generator: ExpectationGenerator | None = None,
        controller: FocusedPracticeController | None = None,
        sink: PresentationSink | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.state = SessionState(config=config or PracticeConfig())
        self.generator = generator or ExpectationGenerator()
        self.controller = controller or FocusedPracticeController()
        self.builder = builder
        self.sink = sink or LogSink()
        self.scheduler = scheduler or Scheduler()

        self._advance_token: TimerToken | None = None
        self._request: tuple[int, Future] | None = None

    # -- Accessors ---------------------------------------------------------

    @property
    def target(self) -> Target | None:
        return self.state.target

    @property
    def score(self) -> Score:
        return self.state.score

    @property
    def now(self) -> float:
        return self.scheduler.now

    # -- External entry points ---------------------------------------------

    def start(self, now: float) -> None:
        self.scheduler.advance_to(now)
        self._advance_free()

    def tick(self, now: float) -> None:
        """Fire due timers and pick up a finished remedial request."""
        self.scheduler.advance_to(now)
        self._collect_sequence()

    def on_midi_message(self, data: list[int] | bytes, timestamp: float) -> Evaluation | None:
        event = decode_midi(data, timestamp)
        if event is None:
            return None
        return self.on_input_event(event)

    def on_input_event(self, event: InputEvent) -> Evaluation | None:
        """Judge one press/release against the current target.

        Returns the evaluation, or None when there was no target to judge.
        """
        event = normalize_event(event)
        self.tick(event.timestamp)

        target = self.state.target
        if target is None:
            logger.debug("No current target, dropping %s %d", event.kind.name, event.pitch)
            return None

        evaluation = evaluate(target, self.state.attempt, event)
        if evaluation.ignored:
            return evaluation

        scored = apply_evaluation(self.state, evaluation)
        if scored == Outcome.INCORRECT:
            self.controller.record_mistake()

        self._present_evaluation(target, evaluation)
        if evaluation.completed:
            self._advance_token = self.scheduler.call_later(
                settle_delay(target), self._on_settled, label="advance"
            )
        return evaluation

    def reset(self, now: float) -> None:
        """Clear score, mistakes, trigger cooldown and any focused practice."""
        self.scheduler.advance_to(now)
        self.scheduler.cancel_all()
        self._advance_token = None
        self._request = None
        self.state.score = Score()
        self.state.ledger.reset()
        self.controller.reset()
        logger.info("Session reset")
        self._notice("Score reset")
        self._install_free_target()

    def configure(self, now: float, **changes: object) -> None:
        """Change practice settings; hand changes replace the current free target."""
        self.scheduler.advance_to(now)
        names = {f.name for f in fields(PracticeConfig)}
        unknown = set(changes) - names
        if unknown:
            raise TypeError(f"Unknown practice setting(s): {', '.join(sorted(unknown))}")

        config = self.state.config
        changed = {k for k, v in changes.items() if getattr(config, k) != v}
        self.state.config = replace(config, **changes)

        if (
            changed & _REGENERATING_FIELDS
            and self.controller.phase == FocusPhase.FREE
            and self.state.target is not None
        ):
            self.scheduler.cancel(self._advance_token)
            self._install_free_target()
        elif "show_note_names" in changed and self.state.target is not None:
            self._present_target()

    def leave_focus(self, now: float) -> bool:
        """Abandon focused practice (or stop waiting for it) and resume free practice."""
        self.scheduler.advance_to(now)
        if not self.controller.abandon():
            return False
        self.scheduler.cancel(self._advance_token)
        self._request = None
        self.state.ledger.reset()
        self._notice("Focused practice paused - we'll continue later")
        self._install_free_target()
        return True

    # -- Transitions -------------------------------------------------------

    def _on_settled(self) -> None:
        self._advance_token = None
        if not self.controller.active:
            self._advance_free()
            return

        result = self.controller.advance()
        if result == RoundResult.CONTINUE:
            self._install_focus_target()
        elif result == RoundResult.REPLAY:
            self._notice(
                f"{self.controller.last_round_mistakes} mistakes - "
                f"let's try again (round {self.controller.round + 1}/{self.controller.max_rounds})"
            )
            self._install_focus_target()
        elif result == RoundResult.MASTERED:
            self._finish_focus("Great work - mastered! Back to free practice")
        else:
            self._finish_focus("Focused practice paused - we'll continue later")

    def _advance_free(self) -> None:
        request_id = self.controller.check_trigger(self.state.ledger, self.now)
        if request_id is None:
            self._install_free_target()
            return

        self.state.install_target(None)
        self._notice("Noticed repeated mistakes - preparing focused practice")
        self._request = (request_id, self.builder.submit(self.state.ledger))
        self._collect_sequence()

    def _collect_sequence(self) -> None:
        if self._request is None:
            return
        request_id, future = self._request
        if not future.done():
            return
        self._request = None
        sequence = [] if future.cancelled() else future.result()
        self._deliver_sequence(request_id, sequence)

    def _deliver_sequence(self, request_id: int, sequence: list[Target]) -> None:
        expected = self.controller.awaiting and request_id == self.controller.request_id
        if self.controller.receive_sequence(request_id, sequence):
            self._notice(f"Focused practice: {len(self.controller.sequence)} items")
            self._install_focus_target()
        elif expected:
            self._notice("Couldn't prepare focused practice - carrying on")
            self._install_free_target()

    def _finish_focus(self, message: str) -> None:
        self.state.ledger.reset()
        self.state.install_target(None)
        self._notice(message)
        self._advance_token = self.scheduler.call_later(
            FOCUS_EXIT_DELAY, self._resume_free, label="focus-exit"
        )

    def _resume_free(self) -> None:
        self._advance_token = None
        self._install_free_target()

    def _install_free_target(self) -> None:
        self.state.install_target(self.generator.next(self.state.config))
        self._present_target()

    def _install_focus_target(self) -> None:
        target = self.controller.current_target()
        if isinstance(target, SingleTarget) and not self.state.config.check_durations:
            target = replace(target, duration=None)
        self.state.install_target(target)
        self._present_target()

    # -- Presentation ------------------------------------------------------

    def _focus_progress(self) -> FocusProgress | None:
        if not self.controller.active:
            return None
        return FocusProgress(
            round_number=self.controller.round + 1,
            max_rounds=self.controller.max_rounds,
            item_number=min(self.controller.index + 1, len(self.controller.sequence)),
            item_count=len(self.controller.sequence),
        )

    def _show(self, message: str, state: DisplayState) -> None:
        self.sink.show(Presentation(
            message=message,
            state=state,
            correct=self.state.score.correct,
            incorrect=self.state.score.incorrect,
            target=self.state.target,
            focus=self._focus_progress(),
        ))

    def _notice(self, message: str) -> None:
        self._show(message, DisplayState.NOTICE)

    def _present_target(self) -> None:
        target = self.state.target
        if target is None:
            return
        self._show(describe_target(target, self.state.config.show_note_names), DisplayState.IDLE)

    def _present_evaluation(self, target: Target, evaluation: Evaluation) -> None:
        if evaluation.outcome == Outcome.CORRECT:
            self._show(f"Correct! {describe_score(self.state.score)}", DisplayState.CORRECT)
        elif evaluation.outcome == Outcome.INCORRECT:
            mistake = evaluation.mistake
            if (
                mistake is not None
                and mistake.kind == MistakeKind.DURATION
                and evaluation.held_seconds is not None
            ):
                message = duration_error_message(evaluation.held_seconds, mistake.duration.seconds)
            else:
                message = "Try again"
            self._show(message, DisplayState.INCORRECT)
        elif evaluation.holding and isinstance(target, SingleTarget):
            self._show(hold_message(target), DisplayState.HOLD)
        elif isinstance(target, (ChordTarget, PairedTarget)):
            self._present_target()
