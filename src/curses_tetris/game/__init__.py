"""Game module for curses-tetris.

Exports the core game engine and supporting classes:
- GameGrid: Playfield storage, locking and line clearing
- Piece: Falling tetromino with position and orientation
- TetrominoType: Enum of the seven piece kinds
- GravityRules: Drop interval configuration
- TetrisGame: Fixed-timestep controller and state machine
"""

from .collision import collides, collides_with_bounds, collides_with_locked
from .core import GameConfig, GameState, GameView, Intent, TetrisGame, TickResult
from .grid import GameGrid, LockResult
from .pieces import Piece, TetrominoType, kind_count, rotate_ccw, rotate_cw, shape_for
from .rules import GravityRules

__all__ = [
    "GameGrid",
    "LockResult",
    "Piece",
    "TetrominoType",
    "shape_for",
    "kind_count",
    "rotate_cw",
    "rotate_ccw",
    "collides",
    "collides_with_bounds",
    "collides_with_locked",
    "GravityRules",
    "GameConfig",
    "GameState",
    "GameView",
    "Intent",
    "TetrisGame",
    "TickResult",
]
