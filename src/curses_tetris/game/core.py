from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Optional

import numpy as np

from .collision import collides, collides_with_locked
from .grid import HEIGHT, WIDTH, GameGrid
from .pieces import Piece, Shape, TetrominoType, shape_for
from .rules import GravityRules


logger = logging.getLogger(__name__)


class Intent(IntEnum):
    NONE = 0
    MOVE_LEFT = 1
    MOVE_RIGHT = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    ROTATE_CW = 5
    ROTATE_CCW = 6
    SPAWN_NEXT = 7  # debug: skip straight to the upcoming piece
    QUIT = 8
    RESTART = 9


class GameState(Enum):
    PLAYING = "playing"
    GAME_OVER_MENU = "game_over_menu"
    TERMINATED = "terminated"


@dataclass
class GameConfig:
    width: int = WIDTH
    height: int = HEIGHT
    random_seed: Optional[int] = None
    spawn_x: int = 4
    spawn_y: int = -3


@dataclass
class TickResult:
    locked: bool = False
    game_over: bool = False
    # Row indices as they were before the collapse.
    cleared_rows: List[int] = field(default_factory=list)
    grid_before_clear: Optional[np.ndarray] = None


@dataclass(frozen=True)
class GameView:
    """Everything an adapter needs to draw one frame."""

    state: GameState
    grid: np.ndarray
    piece_kind: TetrominoType
    piece_shape: Shape
    piece_x: int
    piece_y: int
    next_kind: TetrominoType
    next_shape: Shape
    shape_counts: Dict[TetrominoType, int]
    run_time_ms: int
    lines_cleared: int
    gravity_interval_ms: int


class TetrisGame:
    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[GravityRules] = None) -> None:
        self.config = config or GameConfig()
        self.rules = rules or GravityRules()
        self.rng = random.Random(self.config.random_seed)
        self.grid = GameGrid(self.config.width, self.config.height)
        self.state = GameState.PLAYING
        self.shape_counts: Dict[TetrominoType, int] = {}
        self.run_time_ms = 0
        self.drop_clock_ms = 0
        self.lines_cleared_total = 0
        self.current_piece: Optional[Piece] = None
        self.next_kind: Optional[TetrominoType] = None
        self.reset()

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.grid.reset()
        self.shape_counts = {kind: 0 for kind in TetrominoType}
        self.run_time_ms = 0
        self.drop_clock_ms = 0
        self.lines_cleared_total = 0
        self.state = GameState.PLAYING
        # A restart spawns the piece already shown as next.
        if self.next_kind is None or seed is not None:
            self.next_kind = self._random_kind()
        self._spawn_piece()

    @property
    def game_over(self) -> bool:
        return self.state is GameState.GAME_OVER_MENU

    @property
    def running(self) -> bool:
        return self.state is not GameState.TERMINATED

    @property
    def gravity_interval_ms(self) -> int:
        return self.rules.interval_for_lines(self.lines_cleared_total)

    def _random_kind(self) -> TetrominoType:
        return self.rng.choice(list(TetrominoType))

    def _spawn_piece(self) -> None:
        assert self.next_kind is not None
        kind = self.next_kind
        self.current_piece = Piece.spawn(kind, self.config.spawn_x, self.config.spawn_y)
        self.shape_counts[kind] += 1
        self.next_kind = self._random_kind()
        logger.debug("spawned %s, next %s", kind.name, self.next_kind.name)

    def _try_move(self, candidate: Piece) -> bool:
        if collides(self.grid, candidate):
            return False
        self.current_piece = candidate
        return True

    def _lock_piece(self) -> TickResult:
        assert self.current_piece is not None
        result = self.grid.lock(self.current_piece)
        if result.game_over:
            self.state = GameState.GAME_OVER_MENU
            logger.info(
                "game over after %d lines in %.1fs", self.lines_cleared_total, self.run_time_ms / 1000.0
            )
            return TickResult(game_over=True)
        self._spawn_piece()
        rows = self.grid.find_full_rows()
        if not rows:
            return TickResult(locked=True)
        before = self.grid.clone_state()
        self.lines_cleared_total += self.grid.clear_and_collapse(rows)
        if len(rows) > 1:
            logger.info("cleared %d rows, %d total", len(rows), self.lines_cleared_total)
        return TickResult(locked=True, cleared_rows=rows, grid_before_clear=before)

    def hard_drop(self) -> TickResult:
        assert self.current_piece is not None
        piece = self.current_piece
        while not collides_with_locked(self.grid, piece.moved(0, 1)):
            piece = piece.moved(0, 1)
        self.current_piece = piece
        return self._lock_piece()

    def tick(self, intent: Intent = Intent.NONE, elapsed_ms: int = 0) -> TickResult:
        """Advance the game by one frame.

        Applies ``intent``, adds ``elapsed_ms`` to the clocks, then runs gravity
        and locking. While the game-over menu is up only RESTART and QUIT do
        anything.
        """
        intent = Intent(intent)
        if self.state is GameState.TERMINATED:
            return TickResult()
        if self.state is GameState.GAME_OVER_MENU:
            if intent == Intent.RESTART:
                logger.info("restarting")
                self.reset()
            elif intent == Intent.QUIT:
                self.state = GameState.TERMINATED
            return TickResult()

        assert self.current_piece is not None
        self.drop_clock_ms += int(elapsed_ms)
        self.run_time_ms += int(elapsed_ms)

        piece = self.current_piece
        if intent == Intent.MOVE_LEFT:
            self._try_move(piece.moved(-1, 0))
        elif intent == Intent.MOVE_RIGHT:
            self._try_move(piece.moved(1, 0))
        elif intent == Intent.SOFT_DROP:
            self._try_move(piece.moved(0, 1))
        elif intent == Intent.ROTATE_CW:
            self._try_move(piece.rotated(1))
        elif intent == Intent.ROTATE_CCW:
            self._try_move(piece.rotated(-1))
        elif intent == Intent.HARD_DROP:
            # Locks immediately, gravity is skipped this frame.
            return self.hard_drop()
        elif intent == Intent.SPAWN_NEXT:
            self._spawn_piece()
        elif intent == Intent.QUIT:
            self.state = GameState.TERMINATED
            return TickResult()

        # Gravity moves without checking; an overlap is undone and locks below.
        if self.drop_clock_ms > self.gravity_interval_ms:
            self.drop_clock_ms = 0
            self.current_piece = self.current_piece.moved(0, 1)

        if collides_with_locked(self.grid, self.current_piece):
            self.current_piece = self.current_piece.moved(0, -1)
            return self._lock_piece()
        return TickResult()

    def view(self) -> GameView:
        assert self.current_piece is not None and self.next_kind is not None
        piece = self.current_piece
        return GameView(
            state=self.state,
            grid=self.grid.clone_state(),
            piece_kind=piece.kind,
            piece_shape=piece.shape(),
            piece_x=piece.x,
            piece_y=piece.y,
            next_kind=self.next_kind,
            next_shape=shape_for(self.next_kind),
            shape_counts=dict(self.shape_counts),
            run_time_ms=self.run_time_ms,
            lines_cleared=self.lines_cleared_total,
            gravity_interval_ms=self.gravity_interval_ms,
        )

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.clone_state()
        if self.current_piece is not None and self.state is GameState.PLAYING:
            for row, col, code in self.current_piece.cells():
                if self.grid.is_inside(row, col):
                    # Use negative to indicate falling piece overlay
                    state[row, col] = -code
        return state
