"""Mutable session state, owned by a single PracticeSession."""

from __future__ import annotations

from dataclasses import dataclass, field

from pianodrill.ledger import MistakeLedger
from pianodrill.models import AttemptState, PracticeConfig, Score, Target


@dataclass
class SessionState:
    config: PracticeConfig = field(default_factory=PracticeConfig)
    target: Target | None = None
    attempt: AttemptState = field(default_factory=AttemptState)
    score: Score = field(default_factory=Score)
    ledger: MistakeLedger = field(default_factory=MistakeLedger)

    def install_target(self, target: Target | None) -> None:
        """Make ``target`` current and start a fresh attempt on it."""
        self.target = target
        self.attempt = AttemptState()
