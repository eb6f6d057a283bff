"""Shared fixtures: recording sink, scripted text generator, synchronous executor."""

from __future__ import annotations

import random
from concurrent.futures import Executor, Future

import pytest

from pianodrill.coach.remedial import RemedialSequenceBuilder
from pianodrill.generator import ExpectationGenerator
from pianodrill.models import EventKind, HandScope, InputEvent, PracticeConfig
from pianodrill.presentation import DisplayState, Presentation
from pianodrill.session import PracticeSession


class RecordingSink:
    def __init__(self) -> None:
        self.shown: list[Presentation] = []

    def show(self, presentation: Presentation) -> None:
        self.shown.append(presentation)

    def notices(self) -> list[str]:
        return [p.message for p in self.shown if p.state == DisplayState.NOTICE]


class ScriptedGenerator:
    """TextGenerator that returns canned replies and remembers prompts."""

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class ImmediateExecutor(Executor):
    """Runs submitted work inline so futures are done on return."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


def press(pitch: int, t: float) -> InputEvent:
    return InputEvent(EventKind.PRESS, pitch, t, 100)


def release(pitch: int, t: float) -> InputEvent:
    return InputEvent(EventKind.RELEASE, pitch, t, 0)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_session(sink):
    """Build a right-hand, no-duration session around a scripted reply."""

    def _make(reply: str = "", error: Exception | None = None, **config) -> PracticeSession:
        text_gen = ScriptedGenerator(reply=reply, error=error)
        builder = RemedialSequenceBuilder(text_gen, executor=ImmediateExecutor())
        settings = {"hand_scope": HandScope.RIGHT, "check_durations": False, **config}
        session = PracticeSession(
            builder,
            config=PracticeConfig(**settings),
            generator=ExpectationGenerator(random.Random(7)),
            sink=sink,
        )
        session.text_gen = text_gen
        return session

    return _make

