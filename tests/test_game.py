from __future__ import annotations

import numpy as np
import pytest

from falling_block_rl.game import (
    CATALOG,
    Command,
    FallingBlockGame,
    GameConfig,
    GamePhase,
    TetrominoType,
    parse_command,
    rotate_clockwise,
)

from conftest import fill_row, place_active


VERTICAL_I = rotate_clockwise(CATALOG[TetrominoType.I].shape)  # filled column index 2


def _force_game_over(game: FallingBlockGame) -> None:
    # block every spawn location, then land a piece elsewhere
    game.grid.grid[0:2, 3:7] = int(TetrominoType.Z)
    place_active(game, TetrominoType.O, 0, 10)
    game.hard_drop()


def test_reset_state(game):
    snap = game.reset()
    assert snap.phase is GamePhase.RUNNING
    assert (snap.score, snap.level, snap.lines_total) == (0, 1, 0)
    assert snap.drop_interval_ms == 800
    assert not snap.grid.any()
    assert snap.active is not None
    assert snap.active.y == 0
    assert snap.active.x == (10 - CATALOG[snap.active.kind].size) // 2


def test_reset_with_seed_is_deterministic(game):
    first = game.reset(seed=3)
    second = game.reset(seed=3)
    assert first.active.kind == second.active.kind
    assert first.next_piece.kind == second.next_piece.kind


def test_tick_moves_piece_down(game):
    y0 = game.active.y
    snap = game.tick()
    assert snap.active.y == y0 + 1


def test_tick_lands_locks_and_respawns(game):
    place_active(game, TetrominoType.O, 0, 18)
    upcoming = game.next_piece
    snap = game.tick()
    assert snap.pieces_locked == 1
    assert snap.grid[19, 0] == int(TetrominoType.O)
    assert snap.grid[18, 1] == int(TetrominoType.O)
    assert snap.active.kind == upcoming.kind
    assert snap.active.y == 0
    assert snap.phase is GamePhase.RUNNING


def test_hard_drop_tetris_scores_800(game):
    for y in range(16, 20):
        fill_row(game.grid, y, holes=[0])
    place_active(game, TetrominoType.I, -2, 0, VERTICAL_I)
    assert game.hard_drop() == 16
    assert game.score == 800
    assert game.lines_total == 4
    assert game.last_lines_cleared == 4
    assert not game.grid.grid.any()


def test_level_up_publishes_interval(game):
    received = []
    game.subscribe_interval(received.append)
    game.tracker.lines_total = 9
    fill_row(game.grid, 19, holes=[0])
    place_active(game, TetrominoType.I, -2, 0, VERTICAL_I)
    game.handle(Command.HARD_DROP)
    assert game.score == 100
    assert game.level == 2
    assert game.drop_interval_ms == 720
    assert received == [720]


def test_unsubscribe_interval(game):
    received = []
    unsubscribe = game.subscribe_interval(received.append)
    game.reset()
    unsubscribe()
    game.reset()
    assert received == [800]


def test_movement_commands(game):
    place_active(game, TetrominoType.T, 4, 5)
    game.handle(Command.MOVE_LEFT)
    assert game.active.x == 3
    game.handle("move_right")
    assert game.active.x == 4
    game.handle(int(Command.SOFT_DROP))
    assert game.active.y == 6
    game.handle("ROTATE")
    assert np.array_equal(game.active.shape, rotate_clockwise(CATALOG[TetrominoType.T].shape))


def test_illegal_moves_leave_state_unchanged(game):
    place_active(game, TetrominoType.O, 0, 18)
    assert not game.move_left()
    assert not game.soft_drop()
    assert (game.active.x, game.active.y) == (0, 18)


@pytest.mark.parametrize("command", ["JUMP", 99, None, True, 2.5, ""])
def test_unrecognised_commands_are_ignored(game, command):
    before = game.snapshot()
    after = game.handle(command)
    assert (after.active.x, after.active.y) == (before.active.x, before.active.y)
    assert after.phase is GamePhase.RUNNING
    assert parse_command(command) is None


def test_pause_twice_restores_identical_state(game):
    game.tick()
    before = game.snapshot()
    game.handle(Command.TOGGLE_PAUSE)
    assert game.phase is GamePhase.PAUSED
    game.handle(Command.TOGGLE_PAUSE)
    after = game.snapshot()
    assert after.phase is GamePhase.RUNNING
    assert np.array_equal(after.grid, before.grid)
    assert (after.active.kind, after.active.x, after.active.y) == (before.active.kind, before.active.x, before.active.y)
    assert np.array_equal(after.active.shape, before.active.shape)
    assert after.next_piece.kind == before.next_piece.kind
    assert (after.score, after.level) == (before.score, before.level)


def test_paused_game_ignores_ticks_and_moves(game):
    game.toggle_pause()
    before = game.snapshot()
    game.tick()
    for command in (Command.MOVE_LEFT, Command.MOVE_RIGHT, Command.SOFT_DROP, Command.ROTATE, Command.HARD_DROP):
        game.handle(command)
    after = game.snapshot()
    assert after.phase is GamePhase.PAUSED
    assert (after.active.x, after.active.y) == (before.active.x, before.active.y)
    assert after.pieces_locked == 0


def test_blocked_spawn_is_game_over(game):
    _force_game_over(game)
    snap = game.snapshot()
    assert snap.phase is GamePhase.GAME_OVER
    assert snap.game_over
    # the preview keeps the piece that could not enter
    assert snap.next_piece.kind == snap.active.kind


def test_game_over_is_terminal_until_reset(game):
    _force_game_over(game)
    before = game.snapshot()
    game.tick()
    game.handle(Command.HARD_DROP)
    game.handle(Command.MOVE_LEFT)
    assert not game.toggle_pause()
    game.handle(Command.TOGGLE_PAUSE)
    after = game.snapshot()
    assert after.phase is GamePhase.GAME_OVER
    assert after.score == before.score
    assert np.array_equal(after.grid, before.grid)

    snap = game.handle(Command.RESET)
    assert snap.phase is GamePhase.RUNNING
    assert not snap.grid.any()
    assert snap.pieces_locked == 0


def test_snapshot_is_a_copy(game):
    original = np.array(game.active.shape, copy=True)
    snap = game.snapshot()
    snap.grid[0, 0] = 5
    snap.active.shape[0, 0] = 9
    assert game.grid.grid[0, 0] == 0
    assert np.array_equal(game.active.shape, original)


def test_snapshot_board_overlays_active_piece(game):
    place_active(game, TetrominoType.S, 3, 10)
    game.grid.grid[19, 9] = int(TetrominoType.J)
    board = game.snapshot().board()
    assert board[10, 4] == -int(TetrominoType.S)
    assert board[11, 3] == -int(TetrominoType.S)
    assert board[19, 9] == int(TetrominoType.J)
    assert int((board < 0).sum()) == 4


def test_bag_randomizer_config():
    game = FallingBlockGame(GameConfig(random_seed=1, randomizer="bag"))
    kinds = [game.active.kind, game.next_piece.kind]
    for _ in range(5):
        game.hard_drop()
        kinds.append(game.next_piece.kind)
    assert sorted(kinds) == sorted(TetrominoType)
