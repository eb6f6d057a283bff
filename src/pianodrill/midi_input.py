"""Input sources: MIDI keyboards, the computer keyboard, and scripted playback."""

from __future__ import annotations

import logging
import time
from typing import Protocol, runtime_checkable

import pygame

try:
    import rtmidi
    _HAS_RTMIDI = True
except ImportError:
    _HAS_RTMIDI = False

from pianodrill.config import LEFT_HAND_NOTES, RIGHT_HAND_NOTES
from pianodrill.events import decode_midi
from pianodrill.models import EventKind, InputEvent, SingleTarget, Target, target_pitches

logger = logging.getLogger(__name__)


class MidiDeviceError(Exception):
    """Raised when no MIDI device is found or connection fails."""


@runtime_checkable
class InputSource(Protocol):
    """Common interface for MIDI and keyboard input sources."""
    def poll(self) -> InputEvent | None: ...
    def close(self) -> None: ...


# Upper letter row plays the right-hand pool, bottom row the left-hand pool
_RIGHT_KEYS = (pygame.K_q, pygame.K_w, pygame.K_e, pygame.K_r, pygame.K_t, pygame.K_y, pygame.K_u)
_LEFT_KEYS = (pygame.K_z, pygame.K_x, pygame.K_c, pygame.K_v, pygame.K_b, pygame.K_n, pygame.K_m)
_KEY_TO_PITCH: dict[int, int] = {
    **dict(zip(_RIGHT_KEYS, RIGHT_HAND_NOTES)),
    **dict(zip(_LEFT_KEYS, LEFT_HAND_NOTES)),
    pygame.K_a: 47,  # B2, root of the B2+F3+G3 chord
    pygame.K_i: 72,
}


class KeyboardInput:
    """Computer keyboard mapped to the practice pools (upper row right hand, lower row left)."""

    def __init__(self, velocity: int = 80) -> None:
        self._velocity = velocity
        self._events: list[InputEvent] = []
        self._held: set[int] = set()

    def feed_event(self, event: pygame.event.Event) -> None:
        """Call from the game loop for each pygame event."""
        if event.type == pygame.KEYDOWN and event.key in _KEY_TO_PITCH:
            pitch = _KEY_TO_PITCH[event.key]
            if pitch not in self._held:
                self._held.add(pitch)
                self._events.append(InputEvent(
                    EventKind.PRESS, pitch, time.monotonic(), self._velocity,
                ))
        elif event.type == pygame.KEYUP and event.key in _KEY_TO_PITCH:
            pitch = _KEY_TO_PITCH[event.key]
            self._held.discard(pitch)
            self._events.append(InputEvent(EventKind.RELEASE, pitch, time.monotonic(), 0))

    def poll(self) -> InputEvent | None:
        if self._events:
            return self._events.pop(0)
        return None

    def close(self) -> None:
        self._events.clear()
        self._held.clear()


class MidiInput:
    def __init__(self, port_index: int | None = None) -> None:
        if not _HAS_RTMIDI:
            raise MidiDeviceError("python-rtmidi is not available")
        try:
            self.midi_in = rtmidi.MidiIn()
        except rtmidi.RtMidiError as exc:
            raise MidiDeviceError(f"MIDI subsystem unavailable: {exc}") from exc
        self._port_index = port_index
        self._open = False
        self.port_name = ""

    @staticmethod
    def list_ports() -> list[str]:
        if not _HAS_RTMIDI:
            return []
        try:
            return rtmidi.MidiIn().get_ports()
        except rtmidi.RtMidiError as exc:
            raise MidiDeviceError(f"Cannot list MIDI ports: {exc}") from exc

    def open(self) -> None:
        try:
            ports = self.midi_in.get_ports()
        except rtmidi.RtMidiError as exc:
            raise MidiDeviceError(f"Cannot list MIDI ports: {exc}") from exc
        if not ports:
            raise MidiDeviceError("No MIDI input devices found")
        idx = self._port_index if self._port_index is not None else 0
        if not 0 <= idx < len(ports):
            raise MidiDeviceError(f"No MIDI input port {idx} (found {len(ports)})")
        try:
            self.midi_in.open_port(idx)
        except rtmidi.RtMidiError as exc:
            raise MidiDeviceError(f"Cannot open MIDI port {idx}: {exc}") from exc
        self.port_name = ports[idx]
        self._open = True
        logger.info("Listening on MIDI port %s", self.port_name)

    def poll(self) -> InputEvent | None:
        """Non-blocking poll for the next note message. Returns None if there is none."""
        if not self._open:
            return None
        while True:
            msg = self.midi_in.get_message()
            if msg is None:
                return None
            data, _delta = msg
            event = decode_midi(data, time.monotonic())
            if event is not None:
                return event

    def close(self) -> None:
        if self._open:
            self.midi_in.close_port()
            self._open = False


class VirtualInput:
    """Scripted source: queue key presses with hold times and poll them as time passes."""

    def __init__(self) -> None:
        self._queue: list[InputEvent] = []

    def play_note(self, pitch: int, at: float, hold: float = 0.5, velocity: int = 100) -> None:
        self._queue.append(InputEvent(EventKind.PRESS, pitch, at, velocity))
        self._queue.append(InputEvent(EventKind.RELEASE, pitch, at + hold, 0))
        self._queue.sort(key=lambda e: e.timestamp)

    def play_target(self, target: Target, at: float, hold: float = 0.5) -> None:
        """Queue every key of ``target``, held for its duration when it has one."""
        if isinstance(target, SingleTarget) and target.duration is not None:
            hold = target.duration.seconds
        for pitch in target_pitches(target):
            self.play_note(pitch, at, hold)

    def poll(self, now: float | None = None) -> InputEvent | None:
        """Next event due at ``now`` (or simply the next event if ``now`` is None)."""
        if self._queue and (now is None or self._queue[0].timestamp <= now):
            return self._queue.pop(0)
        return None

    def close(self) -> None:
        self._queue.clear()
