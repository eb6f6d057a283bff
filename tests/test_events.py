"""Tests for raw MIDI decoding and event normalisation."""

import pytest

from pianodrill.events import decode_midi, normalize_event
from pianodrill.models import EventKind, InputEvent


def test_note_on_is_press():
    event = decode_midi([0x90, 60, 100], 1.5)
    assert event.kind == EventKind.PRESS
    assert event.pitch == 60
    assert event.velocity == 100
    assert event.timestamp == 1.5


def test_note_on_other_channel():
    event = decode_midi(bytes([0x93, 48, 64]), 0.0)
    assert event.kind == EventKind.PRESS
    assert event.pitch == 48


@pytest.mark.parametrize("data", [[0x90, 60, 0], [0x80, 60, 64]])
def test_release_forms(data):
    event = decode_midi(data, 2.0)
    assert event.kind == EventKind.RELEASE
    assert event.pitch == 60


@pytest.mark.parametrize(
    "data",
    [
        [0xB0, 64, 127],   # sustain pedal
        [0xF8],            # clock
        [0xE0, 0, 64],     # pitch bend
    ],
)
def test_non_note_messages_are_dropped(data):
    assert decode_midi(data, 0.0) is None


@pytest.mark.parametrize("data", [[], [0x90, 60], [0x90, 200, 100]])
def test_malformed_messages_are_dropped(data):
    assert decode_midi(data, 0.0) is None


def test_zero_velocity_press_becomes_release():
    event = normalize_event(InputEvent(EventKind.PRESS, 62, 3.0, 0))
    assert event == InputEvent(EventKind.RELEASE, 62, 3.0, 0)


def test_other_events_pass_through():
    press = InputEvent(EventKind.PRESS, 62, 3.0, 1)
    release = InputEvent(EventKind.RELEASE, 62, 3.5, 0)
    assert normalize_event(press) is press
    assert normalize_event(release) is release
