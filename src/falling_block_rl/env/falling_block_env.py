from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_block_rl.game import CATALOG, Command, FallingBlockGame, GameConfig, rotate_clockwise


# Agent actions; gravity is applied after every step so NONE simply waits
ACTION_COMMANDS: Tuple[Optional[Command], ...] = (
    None,
    Command.MOVE_LEFT,
    Command.MOVE_RIGHT,
    Command.ROTATE,
    Command.SOFT_DROP,
    Command.HARD_DROP,
)


def _compute_action_mask(game: FallingBlockGame) -> np.ndarray:
    mask = np.zeros((len(ACTION_COMMANDS),), dtype=np.bool_)
    piece = game.active
    if game.game_over or piece is None:
        return mask
    ctrl = game.controller
    mask[0] = True
    mask[1] = ctrl.can_place(piece.shape, piece.x - 1, piece.y)
    mask[2] = ctrl.can_place(piece.shape, piece.x + 1, piece.y)
    mask[3] = ctrl.can_place(rotate_clockwise(piece.shape), piece.x, piece.y)
    mask[4] = ctrl.can_place(piece.shape, piece.x, piece.y + 1)
    mask[5] = True
    return mask


class FallingBlockEnv(gym.Env):
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 max_episode_steps: int = 5000,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = -1.0) -> None:
        super().__init__()
        self.game = FallingBlockGame(config)
        self.render_mode = render_mode

        # Reward shaping parameters
        self.max_episode_steps = int(max_episode_steps)
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.reward_weights: Dict[str, float] = {
            # Positive components
            "score": 0.01,           # engine score delta
            "lines": 1.0,            # reward per line cleared
            "lock": 0.01,            # reward per piece locked (survival)
            # Negative components (penalize increases)
            "holes": 0.1,
            "bumpiness": 0.01,
            "height": 0.02,
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        height = self.game.grid.height
        width = self.game.grid.width
        n_kinds = len(CATALOG)

        # Board: 0 empty, +kind locked, -kind falling piece
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-n_kinds, high=n_kinds, shape=(height, width), dtype=np.int8),
                "next_piece": spaces.Discrete(n_kinds + 1),
                "level": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(1,), dtype=np.int32),
            }
        )
        self.action_space = spaces.Discrete(len(ACTION_COMMANDS))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        snap = self.game.snapshot()
        obs: Dict[str, Any] = {
            "board": snap.board().astype(np.int8),
            "next_piece": int(snap.next_piece.kind),
            "level": np.array([snap.level], dtype=np.int32),
        }
        return obs

    def _get_info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "action_mask": _compute_action_mask(self.game),
            "score": self.game.score,
            "level": self.game.level,
            "lines_cleared_total": self.game.lines_total,
            "pieces_locked": self.game.pieces_locked,
            "steps": self._steps,
        }
        return info

    def _board_features(self) -> Dict[str, int]:
        grid = self.game.grid
        return {
            "holes": grid.count_holes(),
            "bumpiness": grid.get_bumpiness(),
            "height": grid.get_max_height(),
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        obs = self._get_obs()
        info = self._get_info()
        self._last_obs = obs
        return obs, info

    def step(self, action: int):
        command = ACTION_COMMANDS[int(action)]

        score_before = self.game.score
        lines_before = self.game.lines_total
        locked_before = self.game.pieces_locked
        features_before = self._board_features()

        if command is not None:
            self.game.handle(command)
        # Gravity, unless the command already landed the piece
        if self.game.pieces_locked == locked_before:
            self.game.tick()

        features_after = self._board_features()
        lines = self.game.lines_total - lines_before
        locked = self.game.pieces_locked - locked_before

        reward_components: Dict[str, float] = {
            "score": self.reward_weights["score"] * float(self.game.score - score_before),
            "lines": self.reward_weights["lines"] * float(lines),
            "lock": self.reward_weights["lock"] * float(locked),
        }
        for key in ("holes", "bumpiness", "height"):
            reward_components[key] = -self.reward_weights[key] * float(
                max(0, features_after[key] - features_before[key]))
        reward_components["step"] = self.step_penalty

        terminated = bool(self.game.game_over)
        self._steps += 1
        truncated = (not terminated) and self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))

        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["lines_cleared"] = lines
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            board = self._last_obs["board"] if self._last_obs is not None else self.game.snapshot().board()
            cell = 12
            h, w = board.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    v = int(board[y, x])
                    color = CATALOG[abs(v)].rgb if v else (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        # human rendering delegated to the pygame viewer; noop
        return None

    def close(self) -> None:
        pass
