"""Remedial sequence building: prompt construction and reply parsing."""

from __future__ import annotations

import logging
import re
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from pianodrill.coach.llm import RemoteGenerationError, TextGenerator
from pianodrill.config import REMEDIAL_MAX_ITEMS
from pianodrill.ledger import MistakeLedger
from pianodrill.models import ChordTarget, DurationClass, Hand, SingleTarget, Target
from pianodrill.pitches import note_name, parse_note_name

logger = logging.getLogger(__name__)

_NOTE = r"[A-G][#b]?\d?"
_LINE = re.compile(
    rf"^\s*(?:[-*]\s*|\d+[.)]\s*)?"
    rf"(?P<pitches>{_NOTE}(?:\+{_NOTE})*)\s*,\s*"
    rf"(?P<hand>Right|Left)\s*,\s*"
    rf"(?P<duration>Quarter|Half|Whole)\s*$"
)


def _plural(count: int) -> str:
    return f"{count} mistake{'s' if count > 1 else ''}"


def build_prompt(ledger: MistakeLedger) -> str:
    """Describe the ledger's recurring mistakes and ask for a practice sequence.

    Sections are ranked by count, most frequent first, and empty sections are
    left out.
    """
    lines = [
        "# Piano Training - Focused Practice",
        "",
        "Based on my practice session, I made the following mistakes:",
        "",
        "Use ONLY these durations: Quarter, Half, Whole.",
        "Do not include explanations or summaries.",
        "Output only the list, one item per line.",
        "",
    ]

    notes = ledger.ranked_notes()
    if notes:
        lines.append("## Wrong Notes:")
        for miss in notes:
            lines.append(
                f"- {note_name(miss.pitch)} ({miss.hand.label} hand) - {_plural(miss.count)}"
            )
        lines.append("")

    chords = ledger.ranked_chords()
    if chords:
        lines.append("## Wrong Chords:")
        for miss in chords:
            lines.append(f"- {miss.label} (Left hand) - {_plural(miss.count)}")
        lines.append("")

    durations = ledger.ranked_durations()
    if durations:
        lines.append("## Duration Mistakes:")
        for miss in durations:
            lines.append(
                f"- {note_name(miss.pitch)} {miss.duration.label} "
                f"({miss.hand.label} hand) - {_plural(miss.count)}"
            )
        lines.append("")

    lines += [
        "---",
        "",
        "Please create a focused practice sequence of 10-20 items that emphasizes "
        "the notes and chords I struggled with most.",
        "The sequence should:",
        "1. Focus heavily on my most common mistakes",
        "2. Include the correct hand for each item",
        "3. Mix in some correct notes I didn't struggle with for context",
        "4. Be playable and musical",
        "",
        "Format EXACTLY like this (no numbering, no text):",
        "NOTE_WITH_OCTAVE, Hand, Duration",
        "",
        "Examples:",
        "C4, Right, Quarter",
        "E4, Right, Half",
        "C3+E3+G3, Left, Quarter",
    ]
    return "\n".join(lines) + "\n"


def parse_line(line: str) -> Target | None:
    """Parse one ``<pitches>, <hand>, <duration>`` line, or return None."""
    match = _LINE.match(line)
    if match is None:
        return None

    names = match["pitches"].split("+")
    pitches: list[int] = []
    for name in names:
        midi = parse_note_name(name)
        if midi not in pitches:
            pitches.append(midi)

    hand = Hand.RIGHT if match["hand"] == "Right" else Hand.LEFT
    duration = DurationClass[match["duration"].upper()]

    if len(pitches) == 1:
        return SingleTarget(pitch=pitches[0], hand=hand, duration=duration)
    return ChordTarget(hand=hand, pitches=tuple(pitches), label=match["pitches"])


def parse_sequence(text: str, max_items: int = REMEDIAL_MAX_ITEMS) -> list[Target]:
    """Extract targets from free-form text, skipping lines that don't match."""
    sequence: list[Target] = []
    for line in text.splitlines():
        target = parse_line(line)
        if target is None:
            continue
        sequence.append(target)
        if len(sequence) >= max_items:
            break
    return sequence


class RemedialSequenceBuilder:
    """Turns a ledger snapshot into a remedial sequence via a TextGenerator.

    Failures never propagate: callers only ever see a (possibly empty) list.
    """

    def __init__(self, generator: TextGenerator, executor: Executor | None = None) -> None:
        self._generator = generator
        self._executor = executor

    def request(self, ledger: MistakeLedger) -> list[Target]:
        return self._generate(build_prompt(ledger))

    def submit(self, ledger: MistakeLedger) -> Future[list[Target]]:
        """Start a background request; the prompt is built now, from the current ledger."""
        prompt = build_prompt(ledger)
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="remedial")
        return self._executor.submit(self._generate, prompt)

    def _generate(self, prompt: str) -> list[Target]:
        logger.debug("Remedial prompt:\n%s", prompt)
        try:
            text = self._generator.generate(prompt)
        except RemoteGenerationError as exc:
            logger.warning("Remedial sequence request failed: %s", exc)
            return []
        except Exception:
            logger.exception("Unexpected error from text generator")
            return []

        logger.debug("Remedial reply:\n%s", text)
        sequence = parse_sequence(text or "")
        if not sequence:
            logger.warning("Remedial reply contained no usable lines")
        return sequence

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
