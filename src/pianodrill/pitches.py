"""Note-name <-> MIDI number conversion via music21."""

from __future__ import annotations

import re

from music21 import pitch as m21pitch

DEFAULT_OCTAVE = 4

_NOTE_NAME = re.compile(r"^(?P<step>[A-G])(?P<accidental>[#b]?)(?P<octave>\d)?$")


def note_name(midi: int) -> str:
    """Return a name such as ``C4``, ``C#4`` or ``Eb4`` for a MIDI number."""
    return m21pitch.Pitch(midi=midi).nameWithOctave.replace("-", "b")


def parse_note_name(name: str) -> int:
    """Parse ``C4``, ``F#3``, ``Bb2`` or ``E`` (octave 4) into a MIDI number.

    Raises:
        ValueError: If ``name`` is not a note name.
    """
    match = _NOTE_NAME.match(name.strip())
    if match is None:
        raise ValueError(f"Not a note name: {name!r}")
    # music21 spells flats with "-"
    accidental = "-" if match["accidental"] == "b" else match["accidental"]
    octave = match["octave"] if match["octave"] is not None else str(DEFAULT_OCTAVE)
    return m21pitch.Pitch(f"{match['step']}{accidental}{octave}").midi
