"""Tests for remedial prompt building and reply parsing."""

from conftest import ImmediateExecutor, ScriptedGenerator
from pianodrill.coach.llm import RemoteGenerationError
from pianodrill.coach.remedial import (
    RemedialSequenceBuilder,
    build_prompt,
    parse_line,
    parse_sequence,
)
from pianodrill.ledger import MistakeLedger
from pianodrill.models import ChordTarget, DurationClass, Hand, SingleTarget


def test_prompt_lists_note_mistakes_with_counts():
    ledger = MistakeLedger()
    ledger.record_note_miss(60, Hand.RIGHT)
    ledger.record_note_miss(60, Hand.RIGHT)
    prompt = build_prompt(ledger)

    assert "## Wrong Notes:" in prompt
    assert "- C4 (Right hand) - 2 mistakes" in prompt
    assert "## Wrong Chords:" not in prompt
    assert "## Duration Mistakes:" not in prompt
    assert "Quarter, Half, Whole" in prompt


def test_prompt_lists_chords_and_durations():
    ledger = MistakeLedger()
    ledger.record_chord_miss("C3+E3+G3")
    ledger.record_duration_miss(67, DurationClass.HALF, Hand.RIGHT)
    prompt = build_prompt(ledger)

    assert "- C3+E3+G3 (Left hand) - 1 mistake\n" in prompt
    assert "- G4 Half (Right hand) - 1 mistake\n" in prompt
    assert "## Wrong Notes:" not in prompt


def test_parse_two_singles():
    sequence = parse_sequence("C4, Right, Quarter\nE4, Right, Half\n")
    assert sequence == [
        SingleTarget(pitch=60, hand=Hand.RIGHT, duration=DurationClass.QUARTER),
        SingleTarget(pitch=64, hand=Hand.RIGHT, duration=DurationClass.HALF),
    ]


def test_parse_chord_keeps_its_text_as_label():
    target = parse_line("C3+E3+G3, Left, Quarter")
    assert isinstance(target, ChordTarget)
    assert target.pitches == (48, 52, 55)
    assert target.label == "C3+E3+G3"
    assert target.hand == Hand.LEFT
    assert target.satisfied == set()


def test_parse_repeated_chord_members_collapse_to_single():
    target = parse_line("C3+C3, Left, Whole")
    assert target == SingleTarget(pitch=48, hand=Hand.LEFT, duration=DurationClass.WHOLE)


def test_parse_tolerates_list_markers_and_spacing():
    text = "1. G4, Right, Whole\n- A3 , Left , Half\n  * F#4,Right,Quarter  \n"
    assert [t.pitch for t in parse_sequence(text)] == [67, 57, 66]


def test_parse_skips_unusable_lines():
    text = "\n".join([
        "Here is your practice sequence:",
        "C4, Right, Eighth",
        "H4, Right, Quarter",
        "C4, Both, Quarter",
        "D4, Right, Quarter",
        "Good luck!",
    ])
    assert parse_sequence(text) == [
        SingleTarget(pitch=62, hand=Hand.RIGHT, duration=DurationClass.QUARTER),
    ]


def test_parse_caps_length():
    text = "C4, Right, Quarter\n" * 30
    assert len(parse_sequence(text)) == 20
    assert len(parse_sequence(text, max_items=5)) == 5


def test_parse_empty_reply():
    assert parse_sequence("") == []


def test_builder_passes_prompt_to_generator():
    ledger = MistakeLedger()
    ledger.record_note_miss(60, Hand.RIGHT)
    text_gen = ScriptedGenerator(reply="C4, Right, Quarter\n")
    builder = RemedialSequenceBuilder(text_gen)

    assert builder.request(ledger) == [
        SingleTarget(pitch=60, hand=Hand.RIGHT, duration=DurationClass.QUARTER),
    ]
    assert "- C4 (Right hand) - 1 mistake" in text_gen.prompts[0]


def test_builder_failure_yields_empty_sequence():
    ledger = MistakeLedger()
    ledger.record_note_miss(60, Hand.RIGHT)
    failing = RemedialSequenceBuilder(ScriptedGenerator(error=RemoteGenerationError("timeout")))
    broken = RemedialSequenceBuilder(ScriptedGenerator(error=RuntimeError("bug")))
    assert failing.request(ledger) == []
    assert broken.request(ledger) == []


def test_submit_snapshots_ledger_at_call_time():
    ledger = MistakeLedger()
    ledger.record_note_miss(60, Hand.RIGHT)
    text_gen = ScriptedGenerator(reply="")
    builder = RemedialSequenceBuilder(text_gen, executor=ImmediateExecutor())

    future = builder.submit(ledger)
    ledger.reset()

    assert future.done()
    assert future.result() == []
    assert "C4 (Right hand)" in text_gen.prompts[0]
