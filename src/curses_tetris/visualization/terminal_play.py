from __future__ import annotations

import argparse
import curses
import logging
import time
from typing import Dict, List, Optional

import numpy as np

from curses_tetris.game import GameConfig, GameState, GameView, Intent, TetrisGame, TetrominoType


logger = logging.getLogger(__name__)

# Screen layout: every playfield cell is two characters wide.
WELL_X = 30
WELL_Y = 1
NEXT_X = 12  # in cells, same units as the playfield columns
STATS_X = 53
MIN_LINES = WELL_Y + 20 + 2
MIN_COLS = STATS_X + 27

BLINKS = 4
BLINK_SECONDS = 0.2

KEY_TO_INTENT: Dict[int, Intent] = {
    curses.KEY_LEFT: Intent.MOVE_LEFT,
    curses.KEY_RIGHT: Intent.MOVE_RIGHT,
    curses.KEY_DOWN: Intent.SOFT_DROP,
    curses.KEY_UP: Intent.HARD_DROP,
    ord(" "): Intent.ROTATE_CW,
    ord("r"): Intent.ROTATE_CCW,
    ord("R"): Intent.ROTATE_CCW,
    ord("n"): Intent.SPAWN_NEXT,
    ord("q"): Intent.QUIT,
    ord("Q"): Intent.QUIT,
}

MENU_KEY_TO_INTENT: Dict[int, Intent] = {
    ord("r"): Intent.RESTART,
    ord("R"): Intent.RESTART,
    ord("q"): Intent.QUIT,
    ord("Q"): Intent.QUIT,
}

# Color pair per cell code; pair 8 is the inverted banner.
PAIR_COLORS = {
    1: curses.COLOR_CYAN,
    2: curses.COLOR_BLUE,
    3: curses.COLOR_WHITE,
    4: curses.COLOR_YELLOW,
    5: curses.COLOR_GREEN,
    6: curses.COLOR_MAGENTA,
    7: curses.COLOR_RED,
}
BANNER_PAIR = 8


def key_to_intent(key: int, state: GameState) -> Intent:
    if state is GameState.GAME_OVER_MENU:
        return MENU_KEY_TO_INTENT.get(key, Intent.NONE)
    return KEY_TO_INTENT.get(key, Intent.NONE)


class TerminalRenderer:
    """Draws game views onto one curses window.

    The window is the only terminal state the adapter touches; it is handed in
    rather than looked up globally.
    """

    WELL_ROWS = [
        "|| . . . . . . . . . .||",
        " \\+------------------+/",
        "  +------------------+",
    ]

    def __init__(self, screen) -> None:
        self.screen = screen
        self.height, self.width = screen.getmaxyx()
        self.use_color = curses.has_colors()
        if self.use_color:
            for pair, color in PAIR_COLORS.items():
                curses.init_pair(pair, color, curses.COLOR_BLACK)
            curses.init_pair(BANNER_PAIR, curses.COLOR_BLACK, curses.COLOR_WHITE)

    def _put(self, y: int, x: int, text: str, attr: int = 0) -> None:
        try:
            self.screen.addstr(y, x, text, attr)
        except curses.error:
            # Writing the bottom-right cell or past the edge raises; skip it.
            pass

    def _block_attr(self, code: int) -> int:
        attr = curses.A_REVERSE
        if self.use_color:
            attr |= curses.color_pair(code)
        return attr

    def _draw_background(self) -> None:
        left = WELL_X - 2
        for j in range(20):
            self._put(WELL_Y + j, left, self.WELL_ROWS[0])
        self._put(WELL_Y + 20, left, self.WELL_ROWS[1])
        self._put(WELL_Y + 21, left, self.WELL_ROWS[2])

    def _draw_grid(self, grid: np.ndarray) -> None:
        for row in range(grid.shape[0]):
            for col in range(grid.shape[1]):
                code = int(grid[row, col])
                if code:
                    self._put(WELL_Y + row, WELL_X + col * 2, "  ", self._block_attr(code))

    def _draw_shape(self, shape: np.ndarray, x: int, y: int, clip: bool = True) -> None:
        for row in range(shape.shape[0]):
            for col in range(shape.shape[1]):
                code = int(shape[row, col])
                screen_y = WELL_Y + y + row
                if code and (screen_y >= WELL_Y or not clip):
                    self._put(screen_y, WELL_X + (x + col) * 2, "  ", self._block_attr(code))

    def _draw_stats(self, view: GameView) -> None:
        counts = view.shape_counts
        c = {kind.name: counts.get(kind, 0) for kind in TetrominoType}
        lines = [
            (4, "Shapes"),
            (5, "======"),
            (6, f"I: {c['I']}, J: {c['J']}"),
            (7, f"L: {c['L']}, O: {c['O']}"),
            (8, f"S: {c['S']}, T: {c['T']}"),
            (9, f"Z: {c['Z']}"),
            (11, "Stats"),
            (12, "====="),
            (13, f"run time: {view.run_time_ms // 1000}s"),
            (14, f"line count: {view.lines_cleared}"),
            (15, f"drop speed: {view.gravity_interval_ms}ms"),
            (17, "Controls"),
            (18, "========"),
            (19, "Move <- or ->, up for drop"),
            (20, "Space for CW, R for CCW"),
        ]
        for y, text in lines:
            self._put(y, STATS_X, text)

    def draw(self, view: GameView) -> None:
        self.screen.erase()
        self._draw_background()
        self._draw_grid(view.grid)
        # The next piece sits in the panel above the stats, outside the well.
        self._draw_shape(view.next_shape, NEXT_X, -WELL_Y, clip=False)
        self._draw_shape(view.piece_shape, view.piece_x, view.piece_y)
        self._draw_stats(view)
        self.screen.refresh()

    def blink_rows(self, grid: np.ndarray, rows: List[int]) -> None:
        """Flash the full rows before they disappear. Blocks for the whole animation."""
        self._put(0, 0, " " * (self.width - 1), curses.A_REVERSE)
        banner = f"CLEARED: {len(rows)}"
        attr = curses.color_pair(BANNER_PAIR) if self.use_color else curses.A_REVERSE
        self._put(0, max(0, (self.width - len(banner)) // 2), banner, attr)
        for blink in range(BLINKS):
            if blink % 2 == 0:
                for row in rows:
                    self._put(WELL_Y + row, WELL_X, " ." * 10)
            else:
                self._draw_grid(grid)
            self.screen.refresh()
            time.sleep(BLINK_SECONDS)

    def draw_game_over(self) -> None:
        self.screen.erase()
        center_y = self.height // 2 - 1
        self._put(center_y, 0, " " * (self.width - 1), curses.A_REVERSE)
        title = "Game Over!"
        attr = curses.color_pair(BANNER_PAIR) if self.use_color else curses.A_REVERSE
        self._put(center_y, (self.width - len(title)) // 2, title, attr)
        instr = "R: retry, Q: quit"
        self._put(center_y + 1, (self.width - len(instr)) // 2, instr)
        self.screen.refresh()


def run_loop(screen, game: TetrisGame, fps: int = 10) -> None:
    height, width = screen.getmaxyx()
    if height < MIN_LINES or width < MIN_COLS:
        raise RuntimeError(f"terminal is {width}x{height}, need at least {MIN_COLS}x{MIN_LINES}")

    curses.curs_set(0)
    screen.nodelay(True)
    screen.keypad(True)
    renderer = TerminalRenderer(screen)
    frame = 1.0 / max(1, fps)

    last = time.monotonic()
    while game.running:
        start = time.monotonic()
        elapsed_ms = int((start - last) * 1000)
        last = start

        if game.game_over:
            renderer.draw_game_over()
            # Blocking choice: wait for a key the menu understands.
            screen.nodelay(False)
            intent = key_to_intent(screen.getch(), game.state)
            screen.nodelay(True)
            game.tick(intent)
            last = time.monotonic()
            continue

        intent = key_to_intent(screen.getch(), game.state)
        result = game.tick(intent, elapsed_ms)
        if result.cleared_rows and result.grid_before_clear is not None:
            renderer.blink_rows(result.grid_before_clear, result.cleared_rows)
        if not game.running:
            break
        if not game.game_over:
            renderer.draw(game.view())

        remaining = frame - (time.monotonic() - start)
        if remaining > 0:
            time.sleep(remaining)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Falling-block puzzle in the terminal")
    p.add_argument("--fps", type=int, default=10)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--log-file", type=str, default=None)
    p.add_argument("--log-level", type=str, default=None, help="only with --log-file (default WARNING)")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level and not args.log_file:
        parser.error("--log-level needs --log-file; logs never go to the curses screen")
    if args.log_file:
        # Never log to the terminal curses is drawing on.
        logging.basicConfig(
            filename=args.log_file,
            level=(args.log_level or "WARNING").upper(),
            format="[CURSES_TETRIS] %(asctime)s %(name)s - %(message)s",
        )

    game = TetrisGame(GameConfig(random_seed=args.seed))
    logger.info("starting at %d fps", args.fps)
    try:
        curses.wrapper(run_loop, game, args.fps)
    except KeyboardInterrupt:
        pass
    print("Thanks for playing!")


if __name__ == "__main__":  # pragma: no cover
    main()
