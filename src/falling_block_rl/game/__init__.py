"""Game module for Falling Block RL.

Exports the core game engine and supporting classes:
- GameGrid: Playfield matrix, collision queries and row clearing
- PieceController: Active piece movement and rotation against the grid
- TetrominoType / CATALOG: The seven piece definitions
- ScoringRules / ScoreTracker: Score table, levels and drop speed
- FallingBlockGame: Game state machine (spawn, fall, lock, clear, pause, game over)
- TickClock: Deterministic tick driver honouring the published drop interval
"""

from .errors import ConfigError, FallingBlockError
from .grid import GameGrid
from .pieces import CATALOG, ActivePiece, PieceDefinition, TetrominoType, rotate_clockwise
from .controller import PieceController
from .rules import ClearResult, ScoreTracker, ScoringRules
from .generator import BagGenerator, UniformGenerator, make_generator
from .core import Command, FallingBlockGame, GameConfig, GamePhase, GameSnapshot, parse_command
from .timing import TickClock

__all__ = [
    "ConfigError",
    "FallingBlockError",
    "GameGrid",
    "CATALOG",
    "ActivePiece",
    "PieceDefinition",
    "TetrominoType",
    "rotate_clockwise",
    "PieceController",
    "ClearResult",
    "ScoreTracker",
    "ScoringRules",
    "BagGenerator",
    "UniformGenerator",
    "make_generator",
    "Command",
    "FallingBlockGame",
    "GameConfig",
    "GamePhase",
    "GameSnapshot",
    "parse_command",
    "TickClock",
]
