"""Gymnasium environments for curses-tetris."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Headless driver: one step is one 100 ms frame of the game loop
register(
    id="CursesTetris-v0",
    entry_point="curses_tetris.env.tetris_env:TetrisEnv",
)

__all__ = ["CursesTetris-v0"]
