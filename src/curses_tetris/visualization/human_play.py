from __future__ import annotations

import argparse
import logging
from typing import Dict, List, Optional

import numpy as np
import pygame

from curses_tetris.game import GameConfig, Intent, TetrisGame
from .renderer import Renderer


logger = logging.getLogger(__name__)

KEY_TO_INTENT: Dict[int, Intent] = {
    pygame.K_LEFT: Intent.MOVE_LEFT,
    pygame.K_RIGHT: Intent.MOVE_RIGHT,
    pygame.K_DOWN: Intent.SOFT_DROP,
    pygame.K_UP: Intent.HARD_DROP,
    pygame.K_SPACE: Intent.ROTATE_CW,
    pygame.K_r: Intent.ROTATE_CCW,
    pygame.K_n: Intent.SPAWN_NEXT,
    pygame.K_q: Intent.QUIT,
    pygame.K_ESCAPE: Intent.QUIT,
}


def _blink(screen: pygame.Surface, renderer: Renderer, grid: np.ndarray, rows: List[int]) -> None:
    blank = grid.copy()
    blank[rows, :] = 0
    for blink in range(4):
        renderer.draw(screen, blank if blink % 2 == 0 else grid)
        pygame.time.wait(200)


def _wait_for_menu_choice(screen: pygame.Surface) -> Intent:
    font = pygame.font.SysFont(None, 36)
    text = font.render("Game Over - R to retry, Q to quit", True, (255, 255, 255))
    rect = text.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2))
    screen.blit(text, rect)
    pygame.display.flip()
    while True:
        event = pygame.event.wait()
        if event.type == pygame.QUIT:
            return Intent.QUIT
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_r:
                return Intent.RESTART
            if event.key in (pygame.K_q, pygame.K_ESCAPE):
                return Intent.QUIT


def run(fps: int = 10, seed: Optional[int] = None) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        game = TetrisGame(GameConfig(random_seed=seed))
        renderer = Renderer(cell_size=28)

        h, w = game.get_state().shape
        screen = pygame.display.set_mode(renderer.window_size(h, w))
        pygame.display.set_caption("curses-tetris")

        pending: List[Intent] = []
        clock.tick(fps)
        while game.running:
            elapsed_ms = clock.tick(fps)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    pending.append(Intent.QUIT)
                elif event.type == pygame.KEYDOWN:
                    intent = KEY_TO_INTENT.get(event.key)
                    if intent is not None:
                        pending.append(intent)

            # One intent per frame; extra key presses carry over.
            intent = pending.pop(0) if pending else Intent.NONE
            result = game.tick(intent, elapsed_ms)
            if result.cleared_rows and result.grid_before_clear is not None:
                _blink(screen, renderer, result.grid_before_clear, result.cleared_rows)

            if game.game_over:
                pending.clear()
                game.tick(_wait_for_menu_choice(screen))
                clock.tick(fps)
                continue

            if game.running:
                renderer.draw(screen, game.get_state(), game.view())
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Falling-block puzzle in a pygame window")
    p.add_argument("--fps", type=int, default=10)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--log-level", type=str, default="WARNING")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="[CURSES_TETRIS] %(asctime)s %(name)s - %(message)s")
    run(fps=args.fps, seed=args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
