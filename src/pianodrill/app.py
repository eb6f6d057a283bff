"""Top-level application: initializes pygame, wires inputs to the session, and runs the loop."""

from __future__ import annotations

import logging
import time

import pygame

from pianodrill.audio import AudioEngine
from pianodrill.coach.llm import ChatCompletionsClient
from pianodrill.coach.remedial import RemedialSequenceBuilder
from pianodrill.config import BEAT_SECONDS, FPS, WINDOW_HEIGHT, WINDOW_TITLE, WINDOW_WIDTH
from pianodrill.metronome import Metronome
from pianodrill.midi_input import KeyboardInput, MidiDeviceError, MidiInput, VirtualInput
from pianodrill.models import (
    EventKind,
    HandScope,
    InputEvent,
    LeftHandPolicy,
    SingleTarget,
    target_pitches,
)
from pianodrill.renderer import colors
from pianodrill.renderer.hud import HudSink, render_hud
from pianodrill.session import PracticeSession
from pianodrill.settings import PracticeSettings

logger = logging.getLogger(__name__)

_SCOPE_KEYS = {
    pygame.K_1: HandScope.RIGHT,
    pygame.K_2: HandScope.LEFT,
    pygame.K_3: HandScope.SEPARATE,
    pygame.K_4: HandScope.TOGETHER,
}
_POLICIES = list(LeftHandPolicy)


class App:
    def __init__(self, settings: PracticeSettings, demo: bool = False) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
        pygame.display.set_caption(WINDOW_TITLE)
        self.clock = pygame.time.Clock()

        # Optional subsystems degrade to None
        self.midi_input = self._try_midi(settings.midi_port)
        self.audio = self._try_audio(settings.soundfont)
        self.keyboard_input = KeyboardInput()
        # F7 plays the target, F8 a wrong key, without an instrument
        self.demo_input = VirtualInput() if demo else None
        self.metronome = Metronome()

        client = ChatCompletionsClient(
            api_key=settings.api_key,
            base_url=settings.remote_base_url,
            model=settings.remote_model,
        )
        self.builder = RemedialSequenceBuilder(client)
        self.hud = HudSink()
        self.session = PracticeSession(self.builder, config=settings.to_config(), sink=self.hud)

        if settings.metronome:
            self._toggle_metronome()

    def run(self) -> None:
        self.session.start(time.monotonic())
        running = True
        while running:
            self.clock.tick(FPS)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                else:
                    if event.type == pygame.KEYDOWN and not self._handle_command(event):
                        running = False
                    self.keyboard_input.feed_event(event)

            self._pump_input()
            self.session.tick(time.monotonic())
            self._update_audio(time.monotonic())

            self.screen.fill(colors.BG)
            render_hud(self.screen, self.hud, self._hold_beats())
            pygame.display.flip()

        self._cleanup()
        pygame.quit()

    def _pump_input(self) -> None:
        now = time.monotonic()
        if self.demo_input is not None:
            while (event := self.demo_input.poll(now)) is not None:
                self._feed(event)
        for source in (self.midi_input, self.keyboard_input):
            if source is None:
                continue
            while (event := source.poll()) is not None:
                self._feed(event)

    def _feed(self, event: InputEvent) -> None:
        if self.audio and event.kind == EventKind.PRESS and event.velocity > 0:
            self.audio.key_down(event.pitch, event.velocity)
        elif self.audio:
            self.audio.key_up(event.pitch)
        self.session.on_input_event(event)

    def _update_audio(self, now: float) -> None:
        clicks = self.metronome.clicks_until(now)
        if self.audio is None:
            return
        for pitch, velocity in clicks:
            self.audio.click(pitch, velocity)
        self.audio.update()

    def _hold_beats(self) -> float | None:
        start = self.session.state.attempt.press_start
        if start is None:
            return None
        return self.metronome.beats_between(start, time.monotonic())

    def _handle_command(self, event: pygame.event.Event) -> bool:
        """Session commands on function/number keys. Returns False to quit."""
        now = time.monotonic()
        config = self.session.state.config
        if event.key == pygame.K_ESCAPE:
            return False
        if event.key == pygame.K_F1:
            self.session.reset(now)
        elif event.key == pygame.K_F2:
            self.session.leave_focus(now)
        elif event.key == pygame.K_F3:
            self.session.configure(now, check_durations=not config.check_durations)
        elif event.key == pygame.K_F4:
            self._toggle_metronome()
        elif event.key == pygame.K_F5:
            self.session.configure(now, show_note_names=not config.show_note_names)
        elif event.key == pygame.K_F6:
            self._preview_target()
        elif event.key in (pygame.K_F7, pygame.K_F8) and self.demo_input is not None:
            self._demo_play(now, wrong=event.key == pygame.K_F8)
        elif event.key == pygame.K_TAB:
            policy = _POLICIES[(_POLICIES.index(config.left_hand_policy) + 1) % len(_POLICIES)]
            self.session.configure(now, left_hand_policy=policy)
        elif event.key in _SCOPE_KEYS:
            self.session.configure(now, hand_scope=_SCOPE_KEYS[event.key])
        return True

    def _preview_target(self) -> None:
        target = self.session.target
        if self.audio is None or target is None:
            return
        seconds = BEAT_SECONDS
        if isinstance(target, SingleTarget) and target.duration is not None:
            seconds = target.duration.seconds
        self.audio.preview(target_pitches(target), seconds)

    def _demo_play(self, now: float, wrong: bool) -> None:
        target = self.session.target
        if target is None:
            return
        if wrong:
            self.demo_input.play_note(max(target_pitches(target)) + 1, now)
        else:
            self.demo_input.play_target(target, now)

    def _toggle_metronome(self) -> None:
        if self.metronome.enabled:
            self.metronome.stop()
            return
        for pitch, velocity in self.metronome.start(time.monotonic()):
            if self.audio:
                self.audio.click(pitch, velocity)

    def _cleanup(self) -> None:
        self.builder.shutdown()
        if self.midi_input:
            self.midi_input.close()
        self.keyboard_input.close()
        if self.demo_input:
            self.demo_input.close()
        if self.audio:
            self.audio.shutdown()

    @staticmethod
    def _try_midi(port: int | None) -> MidiInput | None:
        try:
            mi = MidiInput(port)
            mi.open()
            return mi
        except MidiDeviceError as exc:
            logger.warning("MIDI input unavailable (%s); using the computer keyboard", exc)
            return None

    @staticmethod
    def _try_audio(soundfont: str) -> AudioEngine | None:
        if not soundfont:
            return None
        try:
            return AudioEngine(soundfont)
        except Exception as exc:
            logger.warning("Audio disabled: %s", exc)
            return None
