"""Focused practice: interrupts free practice with a remedial sequence."""

from __future__ import annotations

import logging
import math
from enum import Enum, auto

from pianodrill.config import (
    FOCUS_COOLDOWN_SECONDS,
    FOCUS_MASTERY_MISTAKES,
    FOCUS_MAX_ROUNDS,
    FOCUS_TRIGGER_MISTAKES,
)
from pianodrill.ledger import MistakeLedger
from pianodrill.models import Target

logger = logging.getLogger(__name__)


class FocusPhase(Enum):
    FREE = auto()
    AWAITING_SEQUENCE = auto()
    ACTIVE = auto()


class RoundResult(Enum):
    CONTINUE = auto()  # sequence not exhausted yet
    REPLAY = auto()
    MASTERED = auto()
    PAUSED = auto()


class FocusedPracticeController:
    """State machine: FREE -> AWAITING_SEQUENCE -> ACTIVE -> FREE.

    ``round`` is the zero-based index of the pass currently being played;
    at most ``max_rounds`` passes are played before giving up.
    """

    def __init__(
        self,
        trigger_mistakes: int = FOCUS_TRIGGER_MISTAKES,
        cooldown: float = FOCUS_COOLDOWN_SECONDS,
        max_rounds: int = FOCUS_MAX_ROUNDS,
        mastery_mistakes: int = FOCUS_MASTERY_MISTAKES,
    ) -> None:
        self.trigger_mistakes = trigger_mistakes
        self.cooldown = cooldown
        self.max_rounds = max_rounds
        self.mastery_mistakes = mastery_mistakes

        self.phase = FocusPhase.FREE
        self.last_trigger_at: float | None = None
        self.request_id = 0
        self.sequence: list[Target] = []
        self.index = 0
        self.round = 0
        self.mistakes_this_round = 0
        self.last_round_mistakes = 0
        self.best_score = math.inf

    @property
    def active(self) -> bool:
        return self.phase == FocusPhase.ACTIVE

    @property
    def awaiting(self) -> bool:
        return self.phase == FocusPhase.AWAITING_SEQUENCE

    def should_trigger(self, ledger: MistakeLedger, now: float) -> bool:
        if self.phase != FocusPhase.FREE:
            return False
        if ledger.total_count() < self.trigger_mistakes:
            return False
        if self.last_trigger_at is not None and now - self.last_trigger_at < self.cooldown:
            return False
        return True

    def check_trigger(self, ledger: MistakeLedger, now: float) -> int | None:
        """Enter AWAITING_SEQUENCE if the trigger fires; returns the request id."""
        if not self.should_trigger(ledger, now):
            return None
        self.phase = FocusPhase.AWAITING_SEQUENCE
        self.last_trigger_at = now
        self.request_id += 1
        logger.info(
            "Focused practice triggered (%d mistakes), request %d",
            ledger.total_count(), self.request_id,
        )
        return self.request_id

    def receive_sequence(self, request_id: int, sequence: list[Target]) -> bool:
        """Accept a sequence for the outstanding request.

        Returns True if focused practice started. Stale replies are discarded;
        an empty reply drops back to FREE.
        """
        if self.phase != FocusPhase.AWAITING_SEQUENCE or request_id != self.request_id:
            logger.info("Discarding stale remedial sequence for request %d", request_id)
            return False
        if not sequence:
            logger.info("No remedial sequence available, resuming free practice")
            self._clear()
            return False

        self.phase = FocusPhase.ACTIVE
        self.sequence = [target.fresh() for target in sequence]
        self.index = 0
        self.round = 0
        self.mistakes_this_round = 0
        self.best_score = math.inf
        logger.info("Focused practice started with %d items", len(self.sequence))
        return True

    def current_target(self) -> Target | None:
        """A fresh copy of the item at the current index."""
        if not self.active or self.index >= len(self.sequence):
            return None
        return self.sequence[self.index].fresh()

    def record_mistake(self) -> None:
        if self.active:
            self.mistakes_this_round += 1

    def advance(self) -> RoundResult:
        """Move past the current item; decides the round when it was the last."""
        if not self.active:
            return RoundResult.CONTINUE

        self.index += 1
        if self.index < len(self.sequence):
            return RoundResult.CONTINUE

        self.best_score = min(self.best_score, self.mistakes_this_round)
        self.last_round_mistakes = self.mistakes_this_round
        logger.info(
            "Round %d finished with %d mistakes (best %s)",
            self.round + 1, self.mistakes_this_round, self.best_score,
        )

        if self.mistakes_this_round <= self.mastery_mistakes:
            self._clear()
            return RoundResult.MASTERED
        if self.round + 1 < self.max_rounds:
            self.round += 1
            self.mistakes_this_round = 0
            self.index = 0
            return RoundResult.REPLAY
        self._clear()
        return RoundResult.PAUSED

    def abandon(self) -> bool:
        """Leave focused practice (or stop waiting for a sequence)."""
        if self.phase == FocusPhase.FREE:
            return False
        logger.info("Focused practice abandoned in phase %s", self.phase.name)
        self._clear()
        return True

    def reset(self) -> None:
        """Back to FREE with no cooldown pending."""
        self._clear()
        self.last_trigger_at = None

    def _clear(self) -> None:
        self.phase = FocusPhase.FREE
        self.sequence = []
        self.index = 0
        self.mistakes_this_round = 0
