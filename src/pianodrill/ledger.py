"""Mistake ledger: aggregated counts of scored misses by note, chord and duration."""

from __future__ import annotations

from dataclasses import dataclass

from pianodrill.models import DurationClass, Hand, Mistake, MistakeKind


@dataclass
class NoteMiss:
    pitch: int
    hand: Hand
    count: int = 0


@dataclass
class ChordMiss:
    label: str
    count: int = 0


@dataclass
class DurationMiss:
    pitch: int
    duration: DurationClass
    hand: Hand
    count: int = 0


class MistakeLedger:
    """Counts per key only ever grow until :meth:`reset`."""

    def __init__(self) -> None:
        self.notes: dict[tuple[int, Hand], NoteMiss] = {}
        self.chords: dict[str, ChordMiss] = {}
        self.durations: dict[tuple[int, DurationClass], DurationMiss] = {}

    def record_note_miss(self, pitch: int, hand: Hand) -> None:
        entry = self.notes.setdefault((pitch, hand), NoteMiss(pitch=pitch, hand=hand))
        entry.count += 1

    def record_chord_miss(self, label: str) -> None:
        entry = self.chords.setdefault(label, ChordMiss(label=label))
        entry.count += 1

    def record_duration_miss(self, pitch: int, duration: DurationClass, hand: Hand) -> None:
        entry = self.durations.setdefault(
            (pitch, duration), DurationMiss(pitch=pitch, duration=duration, hand=hand)
        )
        entry.hand = hand
        entry.count += 1

    def record(self, mistake: Mistake) -> None:
        """Route a scored miss to the matching bucket."""
        if mistake.kind == MistakeKind.NOTE:
            self.record_note_miss(mistake.pitch, mistake.hand)
        elif mistake.kind == MistakeKind.CHORD:
            self.record_chord_miss(mistake.chord_label)
        elif mistake.kind == MistakeKind.DURATION:
            self.record_duration_miss(mistake.pitch, mistake.duration, mistake.hand)

    def total_count(self) -> int:
        return (
            sum(m.count for m in self.notes.values())
            + sum(m.count for m in self.chords.values())
            + sum(m.count for m in self.durations.values())
        )

    def is_empty(self) -> bool:
        return not (self.notes or self.chords or self.durations)

    def reset(self) -> None:
        self.notes.clear()
        self.chords.clear()
        self.durations.clear()

    # Ranked views, most frequent first

    def ranked_notes(self) -> list[NoteMiss]:
        return sorted(self.notes.values(), key=lambda m: m.count, reverse=True)

    def ranked_chords(self) -> list[ChordMiss]:
        return sorted(self.chords.values(), key=lambda m: m.count, reverse=True)

    def ranked_durations(self) -> list[DurationMiss]:
        return sorted(self.durations.values(), key=lambda m: m.count, reverse=True)
