from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

import pygame

from falling_block_rl.game import Command, FallingBlockGame, GameConfig, TickClock
from .renderer import Renderer


KEY_TO_COMMAND: Dict[int, Command] = {
    pygame.K_LEFT: Command.MOVE_LEFT,
    pygame.K_RIGHT: Command.MOVE_RIGHT,
    pygame.K_UP: Command.ROTATE,
    pygame.K_DOWN: Command.SOFT_DROP,
    pygame.K_SPACE: Command.HARD_DROP,
    pygame.K_p: Command.TOGGLE_PAUSE,
    pygame.K_r: Command.RESET,
}

# Always forwarded; everything else only reaches the game while it is running
SYSTEM_COMMANDS = (Command.TOGGLE_PAUSE, Command.RESET)


def command_for_key(key: int, game: FallingBlockGame) -> Optional[Command]:
    command = KEY_TO_COMMAND.get(key)
    if command is None:
        return None
    if command not in SYSTEM_COMMANDS and (game.paused or game.game_over):
        return None
    return command


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play the falling block game with the keyboard")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--randomizer", choices=["uniform", "bag"], default="uniform")
    p.add_argument("--cell-size", type=int, default=30)
    p.add_argument("--log-level", default="WARNING")
    return p


def run(config: Optional[GameConfig] = None, cell_size: int = 30) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        game = FallingBlockGame(config)
        ticker = TickClock(game)
        renderer = Renderer(cell_size=cell_size)

        screen = pygame.display.set_mode(renderer.window_size(game.grid.width, game.grid.height))
        pygame.display.set_caption("Falling Blocks - Human Play")

        running = True
        while running:
            # Input handling
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        command = command_for_key(event.key, game)
                        if command is not None:
                            game.handle(command)

            # Gravity
            ticker.advance(clock.get_time())

            renderer.draw(screen, game.snapshot())
            clock.tick(60)
        ticker.close()
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    run(GameConfig(random_seed=args.seed, randomizer=args.randomizer), cell_size=args.cell_size)


if __name__ == "__main__":  # pragma: no cover
    main()
