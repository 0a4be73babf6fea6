from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray
Color = Tuple[int, int, int]


def _frozen(rows: List[List[int]]) -> Shape:
    arr = np.array(rows, dtype=np.int8)
    assert arr.ndim == 2 and arr.shape[0] == arr.shape[1], "shapes must be square"
    arr.setflags(write=False)
    return arr


def rotate_clockwise(shape: Shape) -> Shape:
    """Rotate an N x N shape 90 degrees clockwise.

    Transposes the matrix and then reverses each row, so the result keeps the
    same bounding box. The input is never modified.
    """
    rotated = np.asarray(shape).T[:, ::-1]
    return np.ascontiguousarray(rotated, dtype=np.int8)


@dataclass(frozen=True)
class PieceDefinition:
    kind: TetrominoType
    shape: Shape = field(compare=False)
    color_name: str
    rgb: Color

    @property
    def size(self) -> int:
        return int(self.shape.shape[0])


CATALOG: Dict[TetrominoType, PieceDefinition] = {
    TetrominoType.I: PieceDefinition(
        TetrominoType.I,
        _frozen([[0, 0, 0, 0], [1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0]]),
        "cyan",
        (0, 240, 240),
    ),
    TetrominoType.O: PieceDefinition(TetrominoType.O, _frozen([[1, 1], [1, 1]]), "yellow", (240, 240, 0)),
    TetrominoType.T: PieceDefinition(
        TetrominoType.T, _frozen([[0, 1, 0], [1, 1, 1], [0, 0, 0]]), "purple", (160, 0, 240)
    ),
    TetrominoType.S: PieceDefinition(
        TetrominoType.S, _frozen([[0, 1, 1], [1, 1, 0], [0, 0, 0]]), "green", (0, 240, 0)
    ),
    TetrominoType.Z: PieceDefinition(
        TetrominoType.Z, _frozen([[1, 1, 0], [0, 1, 1], [0, 0, 0]]), "red", (240, 0, 0)
    ),
    TetrominoType.J: PieceDefinition(
        TetrominoType.J, _frozen([[1, 0, 0], [1, 1, 1], [0, 0, 0]]), "blue", (0, 0, 240)
    ),
    TetrominoType.L: PieceDefinition(
        TetrominoType.L, _frozen([[0, 0, 1], [1, 1, 1], [0, 0, 0]]), "orange", (240, 160, 0)
    ),
}


def definition(kind: int) -> PieceDefinition:
    return CATALOG[TetrominoType(kind)]


@dataclass
class ActivePiece:
    """The falling piece: catalog type, current orientation and grid origin.

    (x, y) is the top-left corner of the shape's bounding box.
    """

    kind: TetrominoType
    shape: Shape
    x: int
    y: int

    @classmethod
    def spawn(cls, piece: PieceDefinition, grid_width: int) -> "ActivePiece":
        x = (grid_width - piece.size) // 2
        return cls(piece.kind, piece.shape, x, 0)

    def cells(self) -> List[Tuple[int, int]]:
        return cells_at(self.shape, self.x, self.y)

    def moved(self, dx: int, dy: int) -> "ActivePiece":
        return ActivePiece(self.kind, self.shape, self.x + dx, self.y + dy)

    def with_shape(self, shape: Shape) -> "ActivePiece":
        return ActivePiece(self.kind, shape, self.x, self.y)


def cells_at(shape: Shape, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
    cells: List[Tuple[int, int]] = []
    n_rows, n_cols = shape.shape
    for dy in range(n_rows):
        for dx in range(n_cols):
            if shape[dy, dx]:
                cells.append((origin_x + dx, origin_y + dy))
    return cells
