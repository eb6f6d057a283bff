"""Input event normalisation shared by every source; no device dependencies."""

from __future__ import annotations

import logging
from dataclasses import replace

import mido

from pianodrill.models import EventKind, InputEvent

logger = logging.getLogger(__name__)


def normalize_event(event: InputEvent) -> InputEvent:
    """A press with velocity 0 is a release (MIDI running-status convention)."""
    if event.kind == EventKind.PRESS and event.velocity == 0:
        return replace(event, kind=EventKind.RELEASE)
    return event


def decode_midi(data: list[int] | bytes, timestamp: float) -> InputEvent | None:
    """Decode one raw MIDI message into a press/release, or None.

    Anything other than note on/off (clock, control change, truncated or
    garbage bytes) is dropped.
    """
    try:
        msg = mido.Message.from_bytes(list(data))
    except (ValueError, TypeError, LookupError) as exc:
        logger.debug("Dropping malformed MIDI message %r: %s", data, exc)
        return None

    if msg.type == "note_on":
        return normalize_event(InputEvent(EventKind.PRESS, msg.note, timestamp, msg.velocity))
    if msg.type == "note_off":
        return InputEvent(EventKind.RELEASE, msg.note, timestamp, 0)
    return None
