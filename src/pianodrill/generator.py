"""Expectation generator: draws the next free-practice target."""

from __future__ import annotations

import random
from enum import Enum, auto

from pianodrill.config import (
    LEFT_HAND_CHORDS,
    LEFT_HAND_NOTES,
    LEFT_MIXED_CHORD_PROBABILITY,
    RIGHT_HAND_NOTES,
    SEPARATE_CHORD_SHARE,
    SEPARATE_MIXED_CHORD_GATE,
)
from pianodrill.models import (
    ChordTarget,
    DurationClass,
    Hand,
    HandScope,
    LeftHandPolicy,
    PairedTarget,
    PracticeConfig,
    SingleTarget,
    Target,
)


class Draw(Enum):
    """What kind of target a table row produces."""
    RIGHT_NOTE = auto()
    LEFT_NOTE = auto()
    ANY_NOTE = auto()   # union of both pools, hand follows the pitch
    LEFT_CHORD = auto()
    PAIR = auto()


ChoiceTable = dict[tuple[HandScope, LeftHandPolicy], list[tuple[Draw, float]]]


def build_choice_table(
    left_mixed_chord: float = LEFT_MIXED_CHORD_PROBABILITY,
    separate_mixed_gate: float = SEPARATE_MIXED_CHORD_GATE,
    separate_chord_share: float = SEPARATE_CHORD_SHARE,
) -> ChoiceTable:
    """Weighted rows for every (hand scope, left-hand policy) combination.

    In SEPARATE mode a chord is offered with probability ``separate_chord_share``
    under CHORDS, and ``separate_mixed_gate * separate_chord_share`` under MIXED
    (two chained coin flips, 0.3 x 0.5 = 0.15 by default).
    """
    separate_mixed = separate_mixed_gate * separate_chord_share
    table: ChoiceTable = {}
    for policy in LeftHandPolicy:
        table[(HandScope.TOGETHER, policy)] = [(Draw.PAIR, 1.0)]
        table[(HandScope.RIGHT, policy)] = [(Draw.RIGHT_NOTE, 1.0)]

    table[(HandScope.LEFT, LeftHandPolicy.NOTES)] = [(Draw.LEFT_NOTE, 1.0)]
    table[(HandScope.LEFT, LeftHandPolicy.CHORDS)] = [(Draw.LEFT_CHORD, 1.0)]
    table[(HandScope.LEFT, LeftHandPolicy.MIXED)] = [
        (Draw.LEFT_CHORD, left_mixed_chord),
        (Draw.LEFT_NOTE, 1.0 - left_mixed_chord),
    ]

    table[(HandScope.SEPARATE, LeftHandPolicy.NOTES)] = [(Draw.ANY_NOTE, 1.0)]
    table[(HandScope.SEPARATE, LeftHandPolicy.CHORDS)] = [
        (Draw.LEFT_CHORD, separate_chord_share),
        (Draw.ANY_NOTE, 1.0 - separate_chord_share),
    ]
    table[(HandScope.SEPARATE, LeftHandPolicy.MIXED)] = [
        (Draw.LEFT_CHORD, separate_mixed),
        (Draw.ANY_NOTE, 1.0 - separate_mixed),
    ]
    return table


class ExpectationGenerator:
    """Stateless apart from its random source."""

    def __init__(
        self,
        rng: random.Random | None = None,
        table: ChoiceTable | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._table = table or build_choice_table()

    def choose_draw(self, config: PracticeConfig) -> Draw:
        rows = self._table[(config.hand_scope, config.left_hand_policy)]
        kinds = [kind for kind, _ in rows]
        weights = [weight for _, weight in rows]
        return self._rng.choices(kinds, weights=weights, k=1)[0]

    def next(self, config: PracticeConfig) -> Target:
        draw = self.choose_draw(config)

        if draw == Draw.PAIR:
            return PairedTarget(
                right_pitch=self._rng.choice(RIGHT_HAND_NOTES),
                left_pitch=self._rng.choice(LEFT_HAND_NOTES),
            )
        if draw == Draw.LEFT_CHORD:
            label, pitches = self._rng.choice(LEFT_HAND_CHORDS)
            return ChordTarget(hand=Hand.LEFT, pitches=pitches, label=label)

        if draw == Draw.RIGHT_NOTE:
            pool = RIGHT_HAND_NOTES
        elif draw == Draw.LEFT_NOTE:
            pool = LEFT_HAND_NOTES
        else:
            pool = RIGHT_HAND_NOTES + LEFT_HAND_NOTES
        pitch = self._rng.choice(pool)
        hand = Hand.RIGHT if pitch >= 60 else Hand.LEFT

        duration = None
        if config.check_durations:
            duration = self._rng.choice(list(DurationClass))
        return SingleTarget(pitch=pitch, hand=hand, duration=duration)
