"""Metronome clicks at the practice tempo."""

from __future__ import annotations

import math

from pianodrill.config import TEMPO_BPM

# General MIDI percussion (channel 9)
ACCENT_CLICK = (76, 100)  # hi woodblock
BEAT_CLICK = (37, 70)  # side stick


class Metronome:
    """Beat clock anchored on the session clock.

    Beats fall at ``anchor + n * beat_seconds``, so a note started on a click
    lines up with the duration classes (one beat is a quarter note).
    """

    def __init__(self, bpm: float = TEMPO_BPM, beats_per_bar: int = 4) -> None:
        self.bpm = bpm
        self.beats_per_bar = beats_per_bar
        self.enabled = False
        self._anchor = 0.0
        self._next_beat = 0

    @property
    def beat_seconds(self) -> float:
        return 60.0 / self.bpm

    def start(self, now: float) -> list[tuple[int, int]]:
        """Enable, anchored at ``now``; returns the downbeat click."""
        self.enabled = True
        self._anchor = now
        self._next_beat = 1
        return [ACCENT_CLICK]

    def stop(self) -> None:
        self.enabled = False

    def clicks_until(self, now: float) -> list[tuple[int, int]]:
        """(midi_note, velocity) clicks for every beat that fell due by ``now``.

        Beats missed by a long frame are collapsed into a single click.
        """
        if not self.enabled:
            return []

        due = math.floor((now - self._anchor) / self.beat_seconds + 1e-9)
        if due < self._next_beat:
            return []
        beat = due
        self._next_beat = due + 1
        return [ACCENT_CLICK if beat % self.beats_per_bar == 0 else BEAT_CLICK]

    def beats_between(self, start: float, end: float) -> float:
        """Length of ``[start, end]`` in beats, e.g. how long a key has been held."""
        return max(0.0, end - start) / self.beat_seconds
