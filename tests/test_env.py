from __future__ import annotations

import gymnasium as gym
import numpy as np
from gymnasium.utils.env_checker import check_env

import falling_block_rl.env  # noqa: F401
from falling_block_rl.env.falling_block_env import ACTION_COMMANDS, FallingBlockEnv
from falling_block_rl.env.wrappers import ResampleInvalidActionWrapper
from falling_block_rl.game import Command, TetrominoType

from conftest import place_active


HARD_DROP = ACTION_COMMANDS.index(Command.HARD_DROP)
LEFT = ACTION_COMMANDS.index(Command.MOVE_LEFT)


def test_env_passes_gymnasium_checker():
    check_env(FallingBlockEnv(), skip_render_check=True)


def test_registered_env():
    env = gym.make("FallingBlocks-10x20-v0")
    obs, info = env.reset(seed=0)
    assert obs["board"].shape == (20, 10)
    assert int((obs["board"] < 0).sum()) == 4
    assert 1 <= obs["next_piece"] <= 7
    assert info["score"] == 0
    env.close()


def test_step_applies_gravity():
    env = FallingBlockEnv()
    env.reset(seed=1)
    y0 = env.game.active.y
    env.step(0)
    assert env.game.active.y == y0 + 1


def test_hard_drop_locks_without_extra_tick():
    env = FallingBlockEnv()
    env.reset(seed=1)
    _, reward, terminated, truncated, info = env.step(HARD_DROP)
    assert info["pieces_locked"] == 1
    assert env.game.active.y == 0
    assert not terminated and not truncated
    assert "lock" in info["reward_components"]
    assert reward == sum(info["reward_components"].values())


def test_action_mask_follows_walls():
    env = FallingBlockEnv()
    env.reset(seed=2)
    place_active(env.game, TetrominoType.O, 0, 5)
    mask = env.get_action_mask()
    assert mask.dtype == np.bool_
    assert not mask[LEFT]
    assert mask[HARD_DROP]


def test_episode_terminates_on_stack_out():
    env = FallingBlockEnv(terminal_penalty=-5.0)
    env.reset(seed=4)
    terminated = False
    info = {}
    for _ in range(200):
        _, _, terminated, _, info = env.step(HARD_DROP)
        if terminated:
            break
    assert terminated
    assert info["reward_components"]["terminal"] == -5.0
    assert not info["action_mask"].any()


def test_truncation():
    env = FallingBlockEnv(max_episode_steps=3)
    env.reset(seed=0)
    results = [env.step(0)[3] for _ in range(3)]
    assert results == [False, False, True]


def test_rgb_render():
    env = FallingBlockEnv(render_mode="rgb_array")
    env.reset(seed=0)
    img = env.render()
    assert img.shape == (240, 120, 3)
    assert img.dtype == np.uint8


def test_resample_wrapper_replaces_illegal_action():
    env = ResampleInvalidActionWrapper(FallingBlockEnv())
    env.reset(seed=3)
    place_active(env.unwrapped.game, TetrominoType.O, 0, 5)
    assert not env.get_action_mask()[LEFT]
    _, _, _, _, info = env.step(LEFT)
    assert env.unwrapped.game.active is not None
    assert info["steps"] == 1
