from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

import numpy as np

from .pieces import Piece


WIDTH = 10
HEIGHT = 20


@dataclass
class LockResult:
    cells_written: int
    game_over: bool


class GameGrid:
    """The playfield: a fixed 20x10 grid of cell codes.

    0 marks an empty cell and 1..7 a locked cell of that tetromino kind.
    Row 0 is the top visible row.
    """

    def __init__(self, width: int = WIDTH, height: int = HEIGHT) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def is_occupied(self, row: int, col: int) -> bool:
        assert self.is_inside(row, col), f"cell ({row}, {col}) outside {self.height}x{self.width} playfield"
        return bool(self.grid[row, col] != 0)

    def lock(self, piece: Piece) -> LockResult:
        """Write the piece's cells into the grid.

        A piece with any cell above row 0 has nowhere to land: nothing is
        written and the result reports game over.
        """
        cells = piece.cells()
        for row, _, _ in cells:
            if row < 0:
                return LockResult(cells_written=0, game_over=True)
        for row, col, code in cells:
            assert self.is_inside(row, col), f"cannot lock cell at ({row}, {col})"
            self.grid[row, col] = code
        return LockResult(cells_written=len(cells), game_over=False)

    def find_full_rows(self) -> List[int]:
        return [int(r) for r in np.where(np.all(self.grid != 0, axis=1))[0]]

    def clear_and_collapse(self, rows: Iterable[int]) -> int:
        """Remove ``rows`` and push the same number of empty rows in at the top."""
        rows = sorted(set(int(r) for r in rows))
        if not rows:
            return 0
        num = len(rows)
        remaining = np.delete(self.grid, rows, axis=0)
        new_rows = np.zeros((num, self.width), dtype=np.int8)
        self.grid = np.vstack((new_rows, remaining))
        assert self.grid.shape == (self.height, self.width)
        return num

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
