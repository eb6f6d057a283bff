"""Tests for core data models and pitch naming."""

import pytest

from pianodrill.models import (
    ChordTarget,
    DurationClass,
    EventKind,
    Hand,
    InputEvent,
    PairedTarget,
    Score,
    SingleTarget,
    target_pitches,
)
from pianodrill.pitches import note_name, parse_note_name


def test_duration_seconds_follow_tempo():
    assert DurationClass.QUARTER.seconds == pytest.approx(0.75)
    assert DurationClass.HALF.seconds == pytest.approx(1.5)
    assert DurationClass.WHOLE.seconds == pytest.approx(3.0)


def test_tolerance_grows_with_duration():
    tolerances = [d.tolerance for d in (DurationClass.QUARTER, DurationClass.HALF, DurationClass.WHOLE)]
    assert tolerances == sorted(tolerances)
    assert len(set(tolerances)) == 3


def test_fresh_clears_progress_only():
    chord = ChordTarget(hand=Hand.LEFT, pitches=(48, 52, 55), label="C3+E3+G3", satisfied={48})
    copy = chord.fresh()
    assert copy.satisfied == set()
    assert chord.satisfied == {48}
    assert copy.pitches == chord.pitches

    pair = PairedTarget(right_pitch=60, left_pitch=48, right_satisfied=True)
    assert not pair.fresh().right_satisfied

    single = SingleTarget(pitch=60, hand=Hand.RIGHT, duration=DurationClass.HALF)
    assert single.fresh() == single
    assert single.fresh() is not single


def test_score_accuracy():
    assert Score().accuracy_pct == 0.0
    assert Score(correct=3, incorrect=1).accuracy_pct == 75.0


@pytest.mark.parametrize("midi,name", [(60, "C4"), (48, "C3"), (47, "B2"), (61, "C#4")])
def test_note_name(midi, name):
    assert note_name(midi) == name


@pytest.mark.parametrize(
    "name,midi",
    [("C4", 60), ("E", 64), ("F#3", 54), ("Bb2", 46), ("G3", 55), ("B2", 47)],
)
def test_parse_note_name(name, midi):
    assert parse_note_name(name) == midi


@pytest.mark.parametrize("bad", ["H4", "", "C44", "c4", "4C"])
def test_parse_note_name_rejects_garbage(bad):
    with pytest.raises(ValueError):
        parse_note_name(bad)


def test_target_pitches_low_to_high():
    assert target_pitches(SingleTarget(pitch=64, hand=Hand.RIGHT)) == (64,)
    assert target_pitches(ChordTarget(hand=Hand.LEFT, pitches=(55, 48, 52), label="x")) == (48, 52, 55)
    assert target_pitches(PairedTarget(right_pitch=67, left_pitch=50)) == (50, 67)


def test_input_event_defaults_to_audible_press():
    assert InputEvent(EventKind.PRESS, 60, 0.0).velocity > 0
