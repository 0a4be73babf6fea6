from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, List, Optional

import numpy as np

from .controller import PieceController
from .generator import make_generator
from .grid import GameGrid
from .pieces import ActivePiece, PieceDefinition
from .rules import ScoreTracker, ScoringRules


logger = logging.getLogger(__name__)

IntervalListener = Callable[[int], None]


class GamePhase(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class Command(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    SOFT_DROP = 2
    ROTATE = 3
    HARD_DROP = 4
    TOGGLE_PAUSE = 5
    RESET = 6


def parse_command(value: Any) -> Optional[Command]:
    """Map a Command, its name or its integer value to a Command; None if unrecognised."""
    if isinstance(value, Command):
        return value
    if isinstance(value, str):
        return Command.__members__.get(value.strip().upper())
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        try:
            return Command(int(value))
        except ValueError:
            return None
    return None


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    random_seed: Optional[int] = None
    randomizer: str = "uniform"
    rules: ScoringRules = field(default_factory=ScoringRules)


@dataclass(frozen=True, eq=False)
class GameSnapshot:
    """Read-only view of the game handed to renderers and agents."""

    grid: np.ndarray
    active: Optional[ActivePiece]
    next_piece: PieceDefinition
    phase: GamePhase
    score: int
    level: int
    lines_total: int
    drop_interval_ms: int
    pieces_locked: int

    @property
    def game_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER

    def board(self) -> np.ndarray:
        # Overlay the active piece on a copy of the grid, using negative kinds
        state = self.grid.copy()
        if self.active is not None and not self.game_over:
            height, width = state.shape
            for x, y in self.active.cells():
                if 0 <= y < height and 0 <= x < width:
                    state[y, x] = -int(self.active.kind)
        return state


class FallingBlockGame:
    """Game state machine: spawn, fall, lock, clear and respawn.

    Nothing here runs on its own. A driver calls :meth:`tick` once per drop
    interval and forwards player input through :meth:`handle`; every entry
    point returns a fresh :class:`GameSnapshot`.
    """

    def __init__(self, config: Optional[GameConfig] = None) -> None:
        self.config = config or GameConfig()
        self.rules = self.config.rules
        self.generator = make_generator(self.config.randomizer, self.config.random_seed)
        self.grid = GameGrid(self.config.width, self.config.height)
        self.controller = PieceController(self.grid)
        self.tracker = ScoreTracker(self.rules)
        self.phase = GamePhase.RUNNING
        self.next_piece: PieceDefinition
        self.pieces_locked = 0
        self.last_lines_cleared = 0
        self._interval_listeners: List[IntervalListener] = []
        self.reset()

    # ---------- State ----------
    @property
    def score(self) -> int:
        return self.tracker.score

    @property
    def level(self) -> int:
        return self.tracker.level

    @property
    def lines_total(self) -> int:
        return self.tracker.lines_total

    @property
    def drop_interval_ms(self) -> int:
        return self.tracker.drop_interval_ms

    @property
    def active(self) -> Optional[ActivePiece]:
        return self.controller.active

    @property
    def game_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER

    @property
    def paused(self) -> bool:
        return self.phase is GamePhase.PAUSED

    def snapshot(self) -> GameSnapshot:
        active = self.controller.active
        if active is not None:
            active = ActivePiece(active.kind, np.array(active.shape, copy=True), active.x, active.y)
        return GameSnapshot(
            grid=self.grid.clone_state(),
            active=active,
            next_piece=self.next_piece,
            phase=self.phase,
            score=self.score,
            level=self.level,
            lines_total=self.lines_total,
            drop_interval_ms=self.drop_interval_ms,
            pieces_locked=self.pieces_locked,
        )

    # ---------- Drop interval publication ----------
    def subscribe_interval(self, listener: IntervalListener) -> Callable[[], None]:
        """Register ``listener`` for drop interval changes; returns an unsubscribe callable."""
        self._interval_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._interval_listeners:
                self._interval_listeners.remove(listener)

        return unsubscribe

    def _publish_interval(self) -> None:
        for listener in list(self._interval_listeners):
            listener(self.drop_interval_ms)

    # ---------- Transitions ----------
    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        if seed is not None:
            self.generator.reseed(seed)
        self.grid.reset()
        self.tracker.reset()
        self.controller.clear()
        self.pieces_locked = 0
        self.last_lines_cleared = 0
        self.phase = GamePhase.RUNNING
        self.next_piece = self.generator.next_piece()
        self._spawn_next()
        logger.debug("game reset, drop interval %d ms", self.drop_interval_ms)
        self._publish_interval()
        return self.snapshot()

    def _spawn_next(self) -> bool:
        if not self.controller.spawn(self.next_piece):
            self.phase = GamePhase.GAME_OVER
            logger.info("game over: score=%d level=%d lines=%d", self.score, self.level, self.lines_total)
            return False
        self.next_piece = self.generator.next_piece()
        return True

    def _land(self) -> None:
        self.controller.lock()
        self.pieces_locked += 1
        lines = self.grid.clear_full_rows()
        self.last_lines_cleared = lines
        result = self.tracker.apply_clear(lines)
        if result.level_changed:
            self._publish_interval()
        self._spawn_next()

    def tick(self) -> GameSnapshot:
        """Advance gravity by one row, landing the piece if it cannot fall."""
        if self.phase is not GamePhase.RUNNING:
            return self.snapshot()
        self.last_lines_cleared = 0
        if not self.controller.move(0, 1):
            self._land()
        return self.snapshot()

    def toggle_pause(self) -> bool:
        if self.phase is GamePhase.GAME_OVER:
            return False
        self.phase = GamePhase.PAUSED if self.phase is GamePhase.RUNNING else GamePhase.RUNNING
        logger.debug("phase -> %s", self.phase.value)
        return True

    def move_left(self) -> bool:
        return self._running() and self.controller.move(-1, 0)

    def move_right(self) -> bool:
        return self._running() and self.controller.move(1, 0)

    def soft_drop(self) -> bool:
        return self._running() and self.controller.move(0, 1)

    def rotate(self) -> bool:
        return self._running() and self.controller.rotate()

    def hard_drop(self) -> int:
        """Drop to the landing row and land immediately; returns rows fallen."""
        if not self._running():
            return 0
        self.last_lines_cleared = 0
        distance = self.controller.hard_drop_distance()
        self.controller.drop(distance)
        self._land()
        return distance

    def _running(self) -> bool:
        return self.phase is GamePhase.RUNNING and self.controller.active is not None

    def handle(self, command: Any) -> GameSnapshot:
        cmd = parse_command(command)
        if cmd is None:
            logger.debug("ignoring unrecognised command %r", command)
            return self.snapshot()
        if cmd == Command.RESET:
            return self.reset()
        if cmd == Command.TOGGLE_PAUSE:
            self.toggle_pause()
        elif cmd == Command.MOVE_LEFT:
            self.move_left()
        elif cmd == Command.MOVE_RIGHT:
            self.move_right()
        elif cmd == Command.SOFT_DROP:
            self.soft_drop()
        elif cmd == Command.ROTATE:
            self.rotate()
        elif cmd == Command.HARD_DROP:
            self.hard_drop()
        return self.snapshot()
