"""Audio synthesis via FluidSynth + SoundFonts (key echo, target preview, metronome)."""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

import fluidsynth

logger = logging.getLogger(__name__)

PIANO_CHANNEL = 0
PERCUSSION_CHANNEL = 9
CLICK_SECONDS = 0.03
PREVIEW_VELOCITY = 70

_DRIVERS = {"linux": "pulseaudio", "darwin": "coreaudio", "win32": "dsound"}


class AudioEngine:
    """FluidSynth wrapper; every note it starts is stopped again by time or by key release."""

    def __init__(self, soundfont_path: str | Path) -> None:
        self.fs = fluidsynth.Synth(gain=0.8)
        self.fs.start(driver=_DRIVERS.get(sys.platform, "alsa"))
        sfid = self.fs.sfload(str(soundfont_path))
        if sfid < 0:
            self.fs.delete()
            raise OSError(f"Could not load SoundFont {soundfont_path}")
        self.fs.program_select(PIANO_CHANNEL, sfid, 0, 0)
        # Bank 128 is the General MIDI drum kit
        self.fs.program_select(PERCUSSION_CHANNEL, sfid, 128, 0)
        self._held: set[int] = set()
        self._timed: list[tuple[float, int, int]] = []  # (off_time, channel, pitch)
        logger.info("Audio ready with %s", soundfont_path)

    def key_down(self, pitch: int, velocity: int) -> None:
        """Echo a key the player pressed."""
        self.fs.noteon(PIANO_CHANNEL, pitch, velocity)
        self._held.add(pitch)

    def key_up(self, pitch: int) -> None:
        if pitch in self._held:
            self.fs.noteoff(PIANO_CHANNEL, pitch)
            self._held.discard(pitch)

    def preview(self, pitches: tuple[int, ...], seconds: float) -> None:
        """Sound the given pitches together for ``seconds`` (hear the target)."""
        off_time = time.monotonic() + seconds
        for pitch in pitches:
            self.fs.noteon(PIANO_CHANNEL, pitch, PREVIEW_VELOCITY)
            self._timed.append((off_time, PIANO_CHANNEL, pitch))

    def click(self, pitch: int, velocity: int) -> None:
        self.fs.noteon(PERCUSSION_CHANNEL, pitch, velocity)
        self._timed.append((time.monotonic() + CLICK_SECONDS, PERCUSSION_CHANNEL, pitch))

    def update(self) -> None:
        """Call each frame to stop timed notes that have run out."""
        now = time.monotonic()
        due = [entry for entry in self._timed if entry[0] <= now]
        if not due:
            return
        self._timed = [entry for entry in self._timed if entry[0] > now]
        for _, channel, pitch in due:
            if channel == PIANO_CHANNEL and pitch in self._held:
                continue  # the player is holding it
            self.fs.noteoff(channel, pitch)

    def silence(self) -> None:
        for channel, pitch in {(c, p) for _, c, p in self._timed} | {(PIANO_CHANNEL, p) for p in self._held}:
            self.fs.noteoff(channel, pitch)
        self._timed.clear()
        self._held.clear()

    def shutdown(self) -> None:
        self.silence()
        self.fs.delete()
