from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np
import pygame

from curses_tetris.game import GameView, TetrominoType


def _color_for_value(v: int) -> Tuple[int, int, int]:
    palette = {
        0: (20, 20, 26),
        1: (0, 240, 240),  # I
        2: (0, 0, 240),    # J
        3: (240, 160, 0),  # L
        4: (240, 240, 0),  # O
        5: (0, 240, 0),    # S
        6: (160, 0, 240),  # T
        7: (240, 0, 0),    # Z
    }
    return palette.get(abs(v), (200, 200, 200))


class Renderer:
    def __init__(self, cell_size: int = 28, margin: int = 20, panel_cells: int = 8) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_cells = panel_cells
        self._font: Optional[pygame.font.Font] = None

    def window_size(self, rows: int, cols: int) -> Tuple[int, int]:
        width = self.margin * 3 + (cols + self.panel_cells) * self.cell_size
        height = self.margin * 2 + rows * self.cell_size
        return width, height

    def _font_or_default(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 22)
        return self._font

    def _grid_surface(self, state: np.ndarray) -> pygame.Surface:
        h, w = state.shape
        width = w * self.cell_size
        height = h * self.cell_size
        surf = pygame.Surface((width, height))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                v = int(state[y, x])
                color = _color_for_value(v)
                rect = pygame.Rect(
                    x * self.cell_size,
                    y * self.cell_size,
                    self.cell_size - 1,
                    self.cell_size - 1,
                )
                pygame.draw.rect(surf, color, rect)
        return surf

    def _panel_lines(self, view: GameView) -> List[str]:
        counts = view.shape_counts
        lines = ["Shapes"]
        lines += [f"{kind.name}: {counts.get(kind, 0)}" for kind in TetrominoType]
        lines += [
            "",
            f"run time: {view.run_time_ms // 1000}s",
            f"line count: {view.lines_cleared}",
            f"drop speed: {view.gravity_interval_ms}ms",
        ]
        return lines

    def _draw_panel(self, screen: pygame.Surface, view: GameView, left: int) -> None:
        top = self.margin
        shape = view.next_shape
        for y in range(shape.shape[0]):
            for x in range(shape.shape[1]):
                v = int(shape[y, x])
                if v:
                    rect = pygame.Rect(
                        left + x * self.cell_size,
                        top + y * self.cell_size,
                        self.cell_size - 1,
                        self.cell_size - 1,
                    )
                    pygame.draw.rect(screen, _color_for_value(v), rect)
        font = self._font_or_default()
        y_text = top + (shape.shape[0] + 1) * self.cell_size
        for i, txt in enumerate(self._panel_lines(view)):
            img = font.render(txt, True, (230, 230, 230))
            screen.blit(img, (left, y_text + i * 20))

    def draw(self, screen: pygame.Surface, state: np.ndarray, view: Optional[GameView] = None) -> None:
        grid_surf = self._grid_surface(state)
        screen.fill((10, 10, 14))
        screen.blit(grid_surf, (self.margin, self.margin))
        if view is not None:
            self._draw_panel(screen, view, self.margin * 2 + state.shape[1] * self.cell_size)
        pygame.display.flip()
