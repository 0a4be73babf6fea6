from __future__ import annotations

import logging
from typing import Optional

from .grid import GameGrid
from .pieces import ActivePiece, PieceDefinition, Shape, TetrominoType, cells_at, rotate_clockwise


logger = logging.getLogger(__name__)


class PieceController:
    """Owns the active piece and validates every move against the grid.

    Movement and rotation are requests: an illegal one leaves the piece as it
    was and reports ``False``.
    """

    def __init__(self, grid: GameGrid) -> None:
        self.grid = grid
        self.active: Optional[ActivePiece] = None

    def can_place(self, shape: Shape, x: int, y: int) -> bool:
        return self.grid.can_place_cells(cells_at(shape, x, y))

    def spawn(self, piece: PieceDefinition) -> bool:
        """Make ``piece`` active at the top-center; False if it does not fit there."""
        candidate = ActivePiece.spawn(piece, self.grid.width)
        self.active = candidate
        placeable = self.can_place(candidate.shape, candidate.x, candidate.y)
        logger.debug("spawn %s at (%d, %d) placeable=%s", piece.kind.name, candidate.x, candidate.y, placeable)
        return placeable

    def move(self, dx: int, dy: int) -> bool:
        if self.active is None:
            return False
        candidate = self.active.moved(dx, dy)
        if not self.can_place(candidate.shape, candidate.x, candidate.y):
            return False
        self.active = candidate
        return True

    def rotate(self) -> bool:
        # No wall kicks: a rotation blocked at the current origin is rejected.
        if self.active is None:
            return False
        rotated = rotate_clockwise(self.active.shape)
        if not self.can_place(rotated, self.active.x, self.active.y):
            return False
        self.active = self.active.with_shape(rotated)
        return True

    def hard_drop_distance(self) -> int:
        if self.active is None:
            return 0
        piece = self.active
        distance = 0
        while self.can_place(piece.shape, piece.x, piece.y + distance + 1):
            distance += 1
        return distance

    def drop(self, distance: int) -> None:
        assert self.active is not None
        self.active = self.active.moved(0, distance)

    def lock(self) -> TetrominoType:
        """Write the active piece into the grid and release it."""
        assert self.active is not None, "no active piece to lock"
        piece = self.active
        self.grid.lock_piece(piece.shape, piece.kind, piece.x, piece.y)
        self.active = None
        logger.debug("locked %s at (%d, %d)", piece.kind.name, piece.x, piece.y)
        return piece.kind

    def clear(self) -> None:
        self.active = None
