from __future__ import annotations

from typing import Iterable

import pytest

from falling_block_rl.game import CATALOG, ActivePiece, FallingBlockGame, GameConfig, GameGrid, TetrominoType


def fill_row(grid: GameGrid, y: int, holes: Iterable[int] = (), value: int = int(TetrominoType.O)) -> None:
    grid.grid[y, :] = value
    for x in holes:
        grid.grid[y, x] = 0


def place_active(game: FallingBlockGame, kind: TetrominoType, x: int, y: int, shape=None) -> ActivePiece:
    piece = ActivePiece(kind, CATALOG[kind].shape if shape is None else shape, x, y)
    game.controller.active = piece
    return piece


@pytest.fixture
def game() -> FallingBlockGame:
    return FallingBlockGame(GameConfig(random_seed=7))


@pytest.fixture
def grid() -> GameGrid:
    return GameGrid(10, 20)
