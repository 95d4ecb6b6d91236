from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from curses_tetris.game import GameConfig, Intent, TetrisGame


# Actions map onto the in-play intents NONE..ROTATE_CCW.
PLAY_INTENTS = (
    Intent.NONE,
    Intent.MOVE_LEFT,
    Intent.MOVE_RIGHT,
    Intent.SOFT_DROP,
    Intent.HARD_DROP,
    Intent.ROTATE_CW,
    Intent.ROTATE_CCW,
)


class TetrisEnv(gym.Env):
    metadata = {"render_modes": ["ansi", "rgb_array"], "render_fps": 10}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        frame_ms: int = 100,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        self.game = TetrisGame(config)
        self.render_mode = render_mode
        self.frame_ms = int(frame_ms)
        self.max_episode_steps = int(max_episode_steps)

        h, w = self.game.grid.height, self.game.grid.width
        # Locked cells are 1..7, the falling piece shows as -1..-7
        self.observation_space = spaces.Box(low=-7, high=7, shape=(h, w), dtype=np.int8)
        self.action_space = spaces.Discrete(len(PLAY_INTENTS))
        self._steps = 0

    def _get_obs(self) -> np.ndarray:
        return self.game.get_state().astype(np.int8)

    def _get_info(self) -> Dict[str, Any]:
        return {
            "lines_cleared_total": self.game.lines_cleared_total,
            "run_time_ms": self.game.run_time_ms,
            "gravity_interval_ms": self.game.gravity_interval_ms,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        intent = PLAY_INTENTS[int(action)]
        result = self.game.tick(intent, self.frame_ms)
        self._steps += 1

        reward = float(len(result.cleared_rows))
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps

        info = self._get_info()
        info["locked"] = result.locked
        info["cleared_rows"] = list(result.cleared_rows)
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[Any]:
        state = self.game.get_state()
        if self.render_mode == "ansi":
            return "\n".join("".join("#" if v else "." for v in row) for row in state)
        if self.render_mode == "rgb_array":
            cell = 12
            h, w = state.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    if state[y, x] > 0:
                        color = (70, 200, 120)
                    elif state[y, x] < 0:
                        color = (200, 180, 60)
                    else:
                        color = (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        return None

    def close(self) -> None:
        pass
