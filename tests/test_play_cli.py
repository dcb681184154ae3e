import json
import random

from typer.testing import CliRunner

from board import Direction, Number, grid_from_values
from game import GameConfig, GameStatus, Session, status
from play_cli import (
    app,
    choose_random_direction,
    format_board,
    key_to_direction,
    play_random_game,
    tile_colors,
)

runner = CliRunner()


def test_key_to_direction():
    assert key_to_direction("w") is Direction.UP
    assert key_to_direction("D") is Direction.RIGHT
    assert key_to_direction("\x1b[B") is Direction.DOWN
    assert key_to_direction("\x1b[D") is Direction.LEFT
    assert key_to_direction("x") is None


def test_tile_colors():
    assert tile_colors(Number(2))[0] == (0, 0, 0)
    assert tile_colors(Number(64))[0] == (255, 255, 255)
    assert tile_colors(Number(4096))[1] == (255, 0, 0)


def test_format_board_plain():
    session = Session(grid=grid_from_values([[2, 0], [0, 1024]]), score=12)
    text = format_board(session, color=False)
    lines = text.splitlines()
    assert lines[0] == "+──────+──────+"
    assert "│    2 │  .   │" in lines
    assert "│  .   │ 1024 │" in lines
    assert lines[-1] == "Score:   12"


def test_format_board_colored_has_ansi():
    session = Session(grid=grid_from_values([[2, 0], [0, 4]]))
    assert "\x1b[" in format_board(session, color=True)


def test_random_agent_only_picks_valid_moves():
    session = Session(grid=grid_from_values([[2, 0], [0, 0]]))
    rng = random.Random(3)
    for _ in range(10):
        assert choose_random_direction(session, rng) in {Direction.DOWN, Direction.RIGHT}

    stuck = Session(grid=grid_from_values([[2, 4], [4, 2]]))
    assert choose_random_direction(stuck, rng) is None


def test_play_random_game_ends_in_terminal_state():
    session, moves = play_random_game(random.Random(9), GameConfig(size=3, target=64))
    assert moves > 0
    assert status(session) in {GameStatus.WON, GameStatus.STUCK}


def test_play_random_game_respects_move_cap():
    _, moves = play_random_game(random.Random(9), GameConfig(), max_moves=5)
    assert moves == 5


def test_simulate_command(tmp_path):
    result = runner.invoke(
        app,
        ["simulate", "--games", "3", "--seed", "1", "--size", "3", "--target", "128", "--log-dir", str(tmp_path)],
    )
    assert result.exit_code == 0, result.output
    assert "=== Summary ===" in result.output
    assert "games: 3" in result.output

    (log_file,) = tmp_path.glob("simulate_*.jsonl")
    entries = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert [e["step"] for e in entries[:3]] == [1, 2, 3]
    assert entries[-1]["games"] == 3


def test_auto_command():
    result = runner.invoke(
        app, ["auto", "--seed", "4", "--delay", "0", "--max-moves", "3", "--no-color"]
    )
    assert result.exit_code == 0, result.output
    assert "Move 3:" in result.output
    assert "Move 4:" not in result.output
    assert "Total Moves: 3" in result.output
