from __future__ import annotations

import argparse
import json
import logging
import os
from typing import Optional

import gymnasium as gym

# Ensure envs are registered
import falling_block_rl.env  # noqa: F401
from falling_block_rl.env.wrappers import ResampleInvalidActionWrapper
from falling_block_rl.game import GameConfig, ScoringRules


logger = logging.getLogger(__name__)

ENV_ID = "FallingBlocks-10x20-v0"


def load_config(rules_path: Optional[str], randomizer: str) -> GameConfig:
    rules = ScoringRules()
    if rules_path:
        with open(rules_path, "r", encoding="utf-8") as fh:
            rules = ScoringRules.from_dict(json.load(fh))
    return GameConfig(randomizer=randomizer, rules=rules)


def make_env(config: GameConfig, seed: int | None = None) -> gym.Env:
    env = gym.make(ENV_ID, config=config)
    # Resample illegal moves for vanilla PPO; also exposes get_action_mask
    env = ResampleInvalidActionWrapper(env)
    if seed is not None:
        env.reset(seed=seed)
    return env


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--algo", choices=["ppo", "maskable"], default="ppo")
    p.add_argument("--timesteps", type=int, default=200_000)
    p.add_argument("--logdir", type=str, default="./logs/ppo")
    p.add_argument("--save_path", type=str, default="./models/ppo_fallingblocks.zip")
    p.add_argument("--n_envs", type=int, default=4)
    p.add_argument("--randomizer", choices=["uniform", "bag"], default="bag")
    p.add_argument("--rules", type=str, default=None, help="JSON file with scoring rule overrides")
    p.add_argument("--log-level", default="INFO")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    config = load_config(args.rules, args.randomizer)

    from stable_baselines3.common.vec_env import SubprocVecEnv, VecMonitor

    if args.algo == "maskable":
        # sb3-contrib MaskablePPO
        from sb3_contrib import MaskablePPO as Algo
        from sb3_contrib.common.wrappers import ActionMasker

        def mask_fn(env):
            return env.get_action_mask()

        def make_env_idx(i: int):
            def thunk():
                return ActionMasker(make_env(config), mask_fn)
            return thunk
    else:
        from stable_baselines3 import PPO as Algo

        def make_env_idx(i: int):
            def thunk():
                return make_env(config)
            return thunk

    vec_env = SubprocVecEnv([make_env_idx(i) for i in range(args.n_envs)])
    vec_env = VecMonitor(vec_env)
    model = Algo(
        policy="MultiInputPolicy",
        env=vec_env,
        verbose=1,
        tensorboard_log=args.logdir,
    )

    logger.info("training %s for %d timesteps on %d envs", args.algo, args.timesteps, args.n_envs)
    os.makedirs(os.path.dirname(args.save_path) or ".", exist_ok=True)
    model.learn(total_timesteps=args.timesteps)
    model.save(args.save_path)
    logger.info("saved model to %s", args.save_path)


if __name__ == "__main__":  # pragma: no cover
    main()
