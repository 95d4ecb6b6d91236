from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np


class TetrominoType(IntEnum):
    """Piece identities; the value doubles as the cell code written on lock."""

    I = 1
    J = 2
    L = 3
    O = 4
    S = 5
    T = 6
    Z = 7


Shape = np.ndarray
Cell = Tuple[int, int, int]  # (row, col, code) in world space


def _pattern(rows: List[str]) -> Shape:
    shape = np.array([[int(ch) for ch in row] for row in rows], dtype=np.int8)
    shape.setflags(write=False)
    return shape


BASE_SHAPES: Dict[TetrominoType, Shape] = {
    TetrominoType.I: _pattern(["0000", "1111", "0000", "0000"]),
    TetrominoType.J: _pattern(["0000", "2220", "0020", "0000"]),
    TetrominoType.L: _pattern(["0000", "0333", "0300", "0000"]),
    TetrominoType.O: _pattern(["0000", "0440", "0440", "0000"]),
    TetrominoType.S: _pattern(["0000", "0550", "5500", "0000"]),
    TetrominoType.T: _pattern(["0000", "6660", "0600", "0000"]),
    TetrominoType.Z: _pattern(["0000", "7700", "0770", "0000"]),
}


def shape_for(kind: TetrominoType) -> Shape:
    return BASE_SHAPES[TetrominoType(kind)]


def kind_count() -> int:
    return len(BASE_SHAPES)


def rotate_cw(shape: Shape) -> Shape:
    """Transpose, then reverse each row."""
    return np.ascontiguousarray(shape.T[:, ::-1])


def rotate_ccw(shape: Shape) -> Shape:
    """Reverse each row, then transpose."""
    return np.ascontiguousarray(shape[:, ::-1].T)


def _orientations(base: Shape) -> Tuple[Shape, ...]:
    states = [base]
    for _ in range(3):
        nxt = rotate_cw(states[-1])
        nxt.setflags(write=False)
        states.append(nxt)
    return tuple(states)


# Index k holds the base shape turned clockwise k times.
ROTATIONS: Dict[TetrominoType, Tuple[Shape, ...]] = {
    kind: _orientations(shape) for kind, shape in BASE_SHAPES.items()
}


@dataclass(frozen=True)
class Piece:
    """The falling piece: kind, orientation and the world position of its 4x4 box.

    ``y`` may be negative while the piece is still entering from above the field.
    """

    kind: TetrominoType
    x: int
    y: int
    rotation: int = 0  # 0..3, clockwise quarter turns

    @classmethod
    def spawn(cls, kind: TetrominoType, x: int = 4, y: int = -3) -> "Piece":
        return cls(TetrominoType(kind), x, y, 0)

    def shape(self) -> Shape:
        return ROTATIONS[self.kind][self.rotation]

    def moved(self, dx: int, dy: int) -> "Piece":
        return Piece(self.kind, self.x + dx, self.y + dy, self.rotation)

    def rotated(self, delta: int) -> "Piece":
        return Piece(self.kind, self.x, self.y, (self.rotation + delta) % 4)

    def cells(self) -> List[Cell]:
        s = self.shape()
        cells: List[Cell] = []
        for row in range(s.shape[0]):
            for col in range(s.shape[1]):
                if s[row, col]:
                    cells.append((self.y + row, self.x + col, int(s[row, col])))
        return cells
