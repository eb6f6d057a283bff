"""Heads-up display — current prompt, score and focused-practice progress."""

from __future__ import annotations

import pygame

from pianodrill.presentation import DisplayState, Presentation
from pianodrill.renderer import colors

_STATE_COLORS = {
    DisplayState.IDLE: colors.IDLE,
    DisplayState.HOLD: colors.HOLD,
    DisplayState.CORRECT: colors.CORRECT,
    DisplayState.INCORRECT: colors.INCORRECT,
    DisplayState.NOTICE: colors.NOTICE,
}


class HudSink:
    """Presentation sink that keeps the latest prompt and notice for drawing."""

    def __init__(self) -> None:
        self.latest: Presentation | None = None
        self.notice: str = ""

    def show(self, presentation: Presentation) -> None:
        if presentation.state == DisplayState.NOTICE:
            self.notice = presentation.message
        self.latest = presentation


def render_hud(surface: pygame.Surface, sink: HudSink, hold_beats: float | None = None) -> None:
    presentation = sink.latest
    if presentation is None:
        return

    font = pygame.font.SysFont("monospace", 20)
    big = pygame.font.SysFont("monospace", 28, bold=True)

    message = big.render(presentation.message, True, _STATE_COLORS[presentation.state])
    surface.blit(message, (20, 60))

    lines = [f"Correct: {presentation.correct}   Wrong: {presentation.incorrect}"]
    if hold_beats is not None and presentation.state == DisplayState.HOLD:
        lines.append(f"Held: {hold_beats:.1f} beats")
    if presentation.focus is not None:
        f = presentation.focus
        lines.append(
            f"Focused practice: round {f.round_number}/{f.max_rounds}, "
            f"item {f.item_number}/{f.item_count}"
        )
    if sink.notice and presentation.state != DisplayState.NOTICE:
        lines.append(sink.notice)

    y = 140
    for line in lines:
        text = font.render(line, True, colors.HUD_TEXT)
        surface.blit(text, (20, y))
        y += 28
