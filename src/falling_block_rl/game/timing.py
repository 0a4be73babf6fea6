from __future__ import annotations

import logging
from typing import Optional

from .core import FallingBlockGame, GamePhase


logger = logging.getLogger(__name__)


class TickClock:
    """Deterministic gravity scheduler for a :class:`FallingBlockGame`.

    The caller feeds elapsed wall time through :meth:`advance`; the clock fires
    ``game.tick()`` each time the current drop interval runs out. There is at
    most one pending deadline: a newly published interval replaces it, game
    over cancels it and a reset arms it again. Paused time is not counted.
    """

    def __init__(self, game: FallingBlockGame) -> None:
        self.game = game
        self.interval_ms = game.drop_interval_ms
        self.remaining_ms: Optional[float] = None if game.game_over else float(self.interval_ms)
        self._unsubscribe = game.subscribe_interval(self._on_interval)

    def _on_interval(self, interval_ms: int) -> None:
        self.interval_ms = interval_ms
        self.remaining_ms = float(interval_ms)
        logger.debug("tick rescheduled every %d ms", interval_ms)

    @property
    def pending(self) -> bool:
        return self.remaining_ms is not None

    def advance(self, elapsed_ms: float) -> int:
        """Consume ``elapsed_ms`` of wall time and return the number of ticks fired."""
        fired = 0
        budget = float(elapsed_ms)
        while True:
            if self.game.phase is GamePhase.GAME_OVER:
                self.remaining_ms = None
                break
            if self.game.phase is GamePhase.PAUSED or self.remaining_ms is None:
                break
            if budget < self.remaining_ms:
                self.remaining_ms -= budget
                break
            budget -= self.remaining_ms
            self.remaining_ms = float(self.interval_ms)
            self.game.tick()
            fired += 1
        return fired

    def close(self) -> None:
        self._unsubscribe()
        self.remaining_ms = None
