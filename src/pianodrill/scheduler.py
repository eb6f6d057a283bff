"""Virtual-time scheduler for delayed transitions (settle delay, focus exit)."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(order=True)
class TimerToken:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    label: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)


class Scheduler:
    """Runs callbacks once virtual time reaches their due time.

    Nothing runs on its own: the owner calls :meth:`advance_to` from its event
    loop (or a test fast-forwards it), so ordering is fully deterministic.
    """

    def __init__(self, now: float = 0.0) -> None:
        self.now = now
        self._pending: list[TimerToken] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None], label: str = "") -> TimerToken:
        token = TimerToken(due=self.now + delay, seq=next(self._seq), callback=callback, label=label)
        self._pending.append(token)
        return token

    def cancel(self, token: TimerToken | None) -> None:
        if token is not None:
            token.cancelled = True

    def cancel_all(self) -> None:
        for token in self._pending:
            token.cancelled = True
        self._pending.clear()

    @property
    def pending(self) -> list[TimerToken]:
        return sorted(t for t in self._pending if not t.cancelled)

    def advance_to(self, now: float) -> int:
        """Fire every timer due at or before ``now``; returns how many ran."""
        fired = 0
        until = max(now, self.now)
        while True:
            due = [t for t in self._pending if t.due <= until]
            if not due:
                break
            token = min(due)
            self._pending.remove(token)
            if token.cancelled:
                continue
            # Chained timers are scheduled relative to their parent's due time
            self.now = max(self.now, token.due)
            logger.debug("Timer %s fired at %.3f", token.label or token.seq, self.now)
            token.callback()
            fired += 1
        self.now = until
        self._pending = [t for t in self._pending if not t.cancelled]
        return fired
