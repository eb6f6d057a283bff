"""Tests for the mistake ledger."""

from pianodrill.ledger import MistakeLedger
from pianodrill.models import DurationClass, Hand, Mistake, MistakeKind


def test_buckets_create_then_increment():
    ledger = MistakeLedger()
    ledger.record_note_miss(60, Hand.RIGHT)
    ledger.record_note_miss(60, Hand.RIGHT)
    ledger.record_note_miss(60, Hand.LEFT)
    ledger.record_chord_miss("C3+E3+G3")
    ledger.record_duration_miss(64, DurationClass.HALF, Hand.RIGHT)

    assert ledger.notes[(60, Hand.RIGHT)].count == 2
    assert ledger.notes[(60, Hand.LEFT)].count == 1
    assert ledger.chords["C3+E3+G3"].count == 1
    assert ledger.durations[(64, DurationClass.HALF)].count == 1
    assert ledger.total_count() == 5


def test_counts_never_decrease_until_reset():
    ledger = MistakeLedger()
    seen = []
    for _ in range(4):
        ledger.record_chord_miss("B2+F3+G3")
        seen.append(ledger.chords["B2+F3+G3"].count)
    assert seen == [1, 2, 3, 4]

    ledger.reset()
    assert ledger.is_empty()
    assert ledger.total_count() == 0


def test_record_routes_by_kind():
    ledger = MistakeLedger()
    ledger.record(Mistake(kind=MistakeKind.NOTE, pitch=62, hand=Hand.RIGHT))
    ledger.record(Mistake(kind=MistakeKind.CHORD, chord_label="C3+E3+G3"))
    ledger.record(Mistake(
        kind=MistakeKind.DURATION, pitch=50, hand=Hand.LEFT, duration=DurationClass.WHOLE,
    ))
    assert (62, Hand.RIGHT) in ledger.notes
    assert "C3+E3+G3" in ledger.chords
    assert ledger.durations[(50, DurationClass.WHOLE)].hand == Hand.LEFT


def test_ranked_views_most_frequent_first():
    ledger = MistakeLedger()
    ledger.record_note_miss(60, Hand.RIGHT)
    for _ in range(3):
        ledger.record_note_miss(67, Hand.RIGHT)
    ledger.record_note_miss(48, Hand.LEFT)
    ledger.record_note_miss(48, Hand.LEFT)

    assert [m.pitch for m in ledger.ranked_notes()] == [67, 48, 60]
