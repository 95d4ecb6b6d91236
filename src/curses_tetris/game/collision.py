"""Placement predicates.

Every check takes the candidate piece explicitly: callers build the moved or
rotated piece, test it, and only adopt it when it does not collide.
"""

from __future__ import annotations

from .grid import GameGrid
from .pieces import Piece


def collides_with_locked(grid: GameGrid, piece: Piece) -> bool:
    """True when the piece passes the floor or overlaps a locked cell.

    Cells at row 0 or above the field never hit locked cells; a spawning piece
    can only meet the floor. Columns outside the field are left to
    :func:`collides_with_bounds`.
    """
    for row, col, _ in piece.cells():
        if row >= grid.height:
            return True
        if row > 0 and 0 <= col < grid.width and grid.is_occupied(row, col):
            return True
    return False


def collides_with_bounds(grid: GameGrid, piece: Piece) -> bool:
    for row, col, _ in piece.cells():
        if row >= grid.height or col < 0 or col >= grid.width:
            return True
    return False


def collides(grid: GameGrid, piece: Piece) -> bool:
    return collides_with_bounds(grid, piece) or collides_with_locked(grid, piece)
