import curses
import unittest
from unittest import mock

import numpy as np

from curses_tetris.game import GameConfig, GameState, Intent, Piece, TetrisGame, TetrominoType
from curses_tetris.visualization import terminal_play
from curses_tetris.visualization.terminal_play import (
    STATS_X,
    WELL_X,
    WELL_Y,
    TerminalRenderer,
    key_to_intent,
    run_loop,
)


class FakeScreen:
    def __init__(self, lines: int = 24, cols: int = 80) -> None:
        self.lines = lines
        self.cols = cols
        self.writes = {}
        self.history = []
        self.nodelay_calls = []

    def getmaxyx(self):
        return self.lines, self.cols

    def addstr(self, y, x, text, attr=0):
        if y >= self.lines or x >= self.cols:
            raise curses.error("outside window")
        self.writes[(y, x)] = text
        self.history.append(text)

    def erase(self):
        self.writes = {}

    def refresh(self):
        pass

    def nodelay(self, flag):
        self.nodelay_calls.append(flag)

    def keypad(self, flag):
        pass


class TestKeyMapping(unittest.TestCase):
    def test_given_arrow_keys_when_playing_then_movement_intents(self):
        self.assertEqual(key_to_intent(curses.KEY_LEFT, GameState.PLAYING), Intent.MOVE_LEFT)
        self.assertEqual(key_to_intent(curses.KEY_RIGHT, GameState.PLAYING), Intent.MOVE_RIGHT)
        self.assertEqual(key_to_intent(curses.KEY_DOWN, GameState.PLAYING), Intent.SOFT_DROP)
        self.assertEqual(key_to_intent(curses.KEY_UP, GameState.PLAYING), Intent.HARD_DROP)

    def test_given_rotation_and_debug_keys_when_playing_then_intents(self):
        self.assertEqual(key_to_intent(ord(" "), GameState.PLAYING), Intent.ROTATE_CW)
        self.assertEqual(key_to_intent(ord("r"), GameState.PLAYING), Intent.ROTATE_CCW)
        self.assertEqual(key_to_intent(ord("n"), GameState.PLAYING), Intent.SPAWN_NEXT)
        self.assertEqual(key_to_intent(ord("Q"), GameState.PLAYING), Intent.QUIT)

    def test_given_no_key_when_polling_then_none_intent(self):
        self.assertEqual(key_to_intent(-1, GameState.PLAYING), Intent.NONE)
        self.assertEqual(key_to_intent(ord("x"), GameState.PLAYING), Intent.NONE)

    def test_given_game_over_menu_when_pressing_r_then_restart_not_rotate(self):
        self.assertEqual(key_to_intent(ord("r"), GameState.GAME_OVER_MENU), Intent.RESTART)
        self.assertEqual(key_to_intent(ord("q"), GameState.GAME_OVER_MENU), Intent.QUIT)
        self.assertEqual(key_to_intent(curses.KEY_LEFT, GameState.GAME_OVER_MENU), Intent.NONE)


class TestTerminalRenderer(unittest.TestCase):
    def _renderer(self, screen):
        with mock.patch.object(terminal_play.curses, "has_colors", return_value=False):
            return TerminalRenderer(screen)

    def test_given_view_when_drawing_then_well_and_stats_written(self):
        screen = FakeScreen()
        renderer = self._renderer(screen)
        game = TetrisGame(GameConfig(random_seed=0))
        game.grid.grid[19, 0] = 3
        renderer.draw(game.view())
        self.assertEqual(screen.writes[(WELL_Y, WELL_X - 2)], TerminalRenderer.WELL_ROWS[0])
        self.assertIn((WELL_Y + 19, WELL_X), screen.writes)
        self.assertEqual(screen.writes[(14, STATS_X)], "line count: 0")
        self.assertEqual(screen.writes[(15, STATS_X)], "drop speed: 600ms")

    def test_given_small_window_when_drawing_then_edge_errors_ignored(self):
        screen = FakeScreen(lines=10, cols=40)
        renderer = self._renderer(screen)
        renderer.draw(TetrisGame(GameConfig(random_seed=0)).view())
        renderer.draw_game_over()

    def test_given_terminal_too_small_when_starting_loop_then_runtime_error(self):
        with self.assertRaises(RuntimeError):
            run_loop(FakeScreen(lines=10, cols=40), TetrisGame())


class ScriptedScreen(FakeScreen):
    """Answers getch from a callback and records the game state at every poll."""

    def __init__(self, game: TetrisGame, next_key) -> None:
        super().__init__()
        self.game = game
        self.next_key = next_key
        self.polls = []

    def getch(self):
        if len(self.polls) > 1000:
            raise AssertionError("loop never stopped")
        key = self.next_key(self)
        self.polls.append((key, self.game.state, int(np.count_nonzero(self.game.grid.grid))))
        return key


class TestRunLoop(unittest.TestCase):
    def _run(self, screen, game):
        with mock.patch.object(terminal_play.curses, "curs_set"), \
                mock.patch.object(terminal_play.curses, "has_colors", return_value=False), \
                mock.patch.object(terminal_play.time, "sleep") as sleep:
            run_loop(screen, game, fps=10)
        return sleep

    def test_given_stack_tops_out_when_looping_then_menu_blocks_ignores_noise_and_restarts(self):
        game = TetrisGame(GameConfig(random_seed=4))
        menu_keys = [ord("x"), ord("r")]
        restarted = []

        def next_key(screen):
            if screen.game.state is GameState.GAME_OVER_MENU:
                key = menu_keys.pop(0)
                if key == ord("r"):
                    restarted.append(True)
                return key
            if not restarted:
                return curses.KEY_UP
            return ord("q")

        screen = ScriptedScreen(game, next_key)
        self._run(screen, game)

        keys = [key for key, _, _ in screen.polls]
        states = {key: state for key, state, _ in screen.polls if key in (ord("x"), ord("r"), ord("q"))}
        self.assertEqual(states[ord("x")], GameState.GAME_OVER_MENU)
        self.assertEqual(states[ord("r")], GameState.GAME_OVER_MENU)
        # x was ignored: the menu was polled again for r
        self.assertEqual(keys.index(ord("r")), keys.index(ord("x")) + 1)
        # After the restart the loop kept playing on an empty field until q
        _, q_state, q_filled = screen.polls[keys.index(ord("q"))]
        self.assertIs(q_state, GameState.PLAYING)
        self.assertEqual(q_filled, 0)
        self.assertIs(game.state, GameState.TERMINATED)
        self.assertIn("Game Over!", screen.history)
        self.assertIn("R: retry, Q: quit", screen.history)
        # The menu switches to blocking input and back
        self.assertIn(False, screen.nodelay_calls)
        self.assertIs(screen.nodelay_calls[-1], True)

    def test_given_row_completed_when_looping_then_blink_runs_before_next_frame(self):
        game = TetrisGame(GameConfig(random_seed=0))
        game.grid.grid[19, :9] = 3
        game.current_piece = Piece(TetrominoType.I, 7, -3, rotation=1)
        script = [curses.KEY_UP, ord("q")]

        screen = ScriptedScreen(game, lambda s: script.pop(0))
        sleep = self._run(screen, game)

        self.assertEqual(game.lines_cleared_total, 1)
        self.assertIn("CLEARED: 1", screen.history)
        self.assertIn(" ." * 10, screen.history)
        blink_sleeps = [c for c in sleep.call_args_list if c.args == (terminal_play.BLINK_SECONDS,)]
        self.assertEqual(len(blink_sleeps), terminal_play.BLINKS)
        self.assertIs(game.state, GameState.TERMINATED)


class TestCommandLine(unittest.TestCase):
    def test_given_defaults_when_parsing_then_no_log_level(self):
        args = terminal_play.build_parser().parse_args([])
        self.assertIsNone(args.log_file)
        self.assertIsNone(args.log_level)
        self.assertEqual(args.fps, 10)

    def test_given_log_level_without_file_when_starting_then_rejected(self):
        with mock.patch.object(terminal_play.curses, "wrapper") as wrapper:
            with self.assertRaises(SystemExit):
                terminal_play.main(["--log-level", "DEBUG"])
        wrapper.assert_not_called()

    def test_given_log_file_when_starting_then_wrapper_runs_game(self):
        with mock.patch.object(terminal_play.curses, "wrapper") as wrapper, \
                mock.patch.object(terminal_play.logging, "basicConfig") as basic_config:
            terminal_play.main(["--log-file", "game.log", "--seed", "3"])
        wrapper.assert_called_once()
        self.assertEqual(basic_config.call_args.kwargs["level"], "WARNING")
        self.assertEqual(basic_config.call_args.kwargs["filename"], "game.log")


if __name__ == "__main__":
    unittest.main()
