from __future__ import annotations

import logging
from typing import Iterable, Tuple

import numpy as np

from .pieces import Shape, TetrominoType, cells_at


logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]


class GameGrid:
    """Fixed-size playfield.

    Row 0 is the top of the field. Cells hold 0 when empty, otherwise the
    ``TetrominoType`` value of the piece that was locked there so renderers
    can look the color up in the catalog.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_occupied(self, x: int, y: int) -> bool:
        """Collision query for a single cell.

        Columns outside [0, width) and rows at or below the floor count as
        blocked. Rows above the field (y < 0) are always free so pieces can
        overlap the top edge while spawning.
        """
        if x < 0 or x >= self.width or y >= self.height:
            return True
        if y < 0:
            return False
        return bool(self.grid[y, x] != 0)

    def can_place_cells(self, cells: Iterable[Coordinate]) -> bool:
        return not any(self.is_occupied(x, y) for x, y in cells)

    def lock_piece(self, shape: Shape, kind: int, origin_x: int, origin_y: int) -> int:
        """Write the filled cells of ``shape`` into the grid, returning how many were written.

        Cells above the visible field are dropped.
        """
        value = int(TetrominoType(kind))
        written = 0
        for x, y in cells_at(shape, origin_x, origin_y):
            if y < 0:
                continue
            assert 0 <= x < self.width and y < self.height, f"cell ({x}, {y}) outside the field"
            self.grid[y, x] = value
            written += 1
        return written

    def row_is_full(self, y: int) -> bool:
        return bool(np.all(self.grid[y] != 0))

    def clear_full_rows(self) -> int:
        """Remove full rows, shifting the rows above down, and return how many were removed.

        Rows are scanned from the bottom up. Loop invariant: every row below
        ``y`` is not full. When row ``y`` is removed, the row that was above it
        moves into index ``y``, so ``y`` is examined again before moving up.
        """
        cleared = 0
        y = self.height - 1
        while y >= 0:
            if self.row_is_full(y):
                # shift rows 0..y-1 down by one and zero-fill the top row
                self.grid[1 : y + 1] = self.grid[0:y].copy()
                self.grid[0] = 0
                cleared += 1
            else:
                y -= 1
        if cleared:
            logger.debug("cleared %d row(s)", cleared)
        return cleared

    def get_column_heights(self) -> np.ndarray:
        filled = self.grid != 0
        top = np.where(filled.any(axis=0), filled.argmax(axis=0), self.height)
        return (self.height - top).astype(np.int64)

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self.grid != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        top_index = int(non_empty_rows[0])
        return self.height - top_index

    def count_holes(self) -> int:
        holes = 0
        for x in range(self.width):
            column = self.grid[:, x]
            seen_block = False
            for cell in column:
                if cell != 0:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def get_bumpiness(self) -> int:
        heights = self.get_column_heights()
        return int(np.abs(np.diff(heights)).sum())

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
