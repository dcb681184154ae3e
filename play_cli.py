"""
CLI 2048 client for terminal play.
Run with: python play_cli.py [command]
"""

import random
import select
import sys
import termios
import time
import tty
from pathlib import Path
from typing import Optional

import typer

from board import Direction, Number, Tile
from game import (
    GameConfig,
    GameStatus,
    RandomSource,
    Session,
    apply_direction,
    initial_session,
    max_tile,
    status,
    valid_directions,
)
from logger import MetricLogger

app = typer.Typer(help="Play the 2048 sliding-tile game in the terminal")

CELL_WIDTH = 6

KEY_TO_DIRECTION = {
    "w": Direction.UP,
    "a": Direction.LEFT,
    "s": Direction.DOWN,
    "d": Direction.RIGHT,
    "\x1b[A": Direction.UP,  # Up arrow
    "\x1b[B": Direction.DOWN,  # Down arrow
    "\x1b[C": Direction.RIGHT,  # Right arrow
    "\x1b[D": Direction.LEFT,  # Left arrow
}

QUIT_KEYS = {"q", "\x1b", "\x03"}
RESTART_KEYS = {"r"}

STATUS_TITLES = {
    GameStatus.WON: "You win!",
    GameStatus.STUCK: "Game over!",
}


def _rgb(r: int, g: int, b: int) -> tuple[int, int, int]:
    """Scale a 0-5 color cube coordinate to 0-255 RGB."""
    return (r * 51, g * 51, b * 51)


BORDER_COLOR = _rgb(2, 2, 2)
BLANK_COLOR = _rgb(3, 3, 3)
DARK_TEXT = _rgb(0, 0, 0)
LIGHT_TEXT = _rgb(5, 5, 5)

# anything above 1024 uses HOT_COLOR
TILE_BACKGROUNDS = {
    2: _rgb(5, 5, 5),
    4: _rgb(5, 5, 4),
    8: _rgb(5, 4, 4),
    16: _rgb(5, 4, 3),
    32: _rgb(5, 3, 3),
    64: _rgb(5, 3, 2),
    128: _rgb(5, 2, 2),
    256: _rgb(5, 2, 1),
    512: _rgb(5, 1, 1),
    1024: _rgb(5, 1, 0),
}
HOT_COLOR = _rgb(5, 0, 0)


def tile_colors(tile: Tile) -> tuple[tuple[int, int, int], tuple[int, int, int]]:
    """Return (foreground, background) for a tile."""
    if not isinstance(tile, Number):
        return BLANK_COLOR, BLANK_COLOR
    foreground = DARK_TEXT if tile.value <= 16 else LIGHT_TEXT
    return foreground, TILE_BACKGROUNDS.get(tile.value, HOT_COLOR)


def _cell(text: str, tile: Tile, color: bool) -> str:
    if not color:
        return text
    fg, bg = tile_colors(tile)
    return typer.style(text, fg=fg, bg=bg)


def format_board(session: Session, color: bool = True) -> str:
    """
    Render the grid and the score line.
    Every row is three lines tall: a padding line, the values, another padding line.
    """
    size = session.size
    if color:
        sep = typer.style(" ", bg=BORDER_COLOR)
        border = typer.style("─" * CELL_WIDTH, fg=BORDER_COLOR, bg=BORDER_COLOR)
        line = sep + sep.join(border for _ in range(size)) + sep
    else:
        sep = "│"
        line = "+" + "+".join("─" * CELL_WIDTH for _ in range(size)) + "+"

    lines = [line]
    for row in session.grid:
        pad = sep + sep.join(_cell(" " * CELL_WIDTH, tile, color) for tile in row) + sep
        values = []
        for tile in row:
            if isinstance(tile, Number):
                text = f" {tile.value:4} "
            else:
                text = " " * CELL_WIDTH if color else ".".center(CELL_WIDTH)
            values.append(_cell(text, tile, color))
        lines.extend([pad, sep + sep.join(values) + sep, pad, line])

    lines.append(f"Score: {session.score:4}")
    return "\n".join(lines)


def get_key() -> str:
    """Read a single keypress from the terminal."""
    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ch = sys.stdin.read(1)
        # arrow keys send ESC [ A/B/C/D, a lone ESC sends nothing after it
        if ch == "\x1b" and select.select([sys.stdin], [], [], 0.05)[0]:
            ch += sys.stdin.read(2)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
    return ch


def clear_screen():
    typer.echo("\033[2J\033[H", nl=False)


def draw(session: Session, message: str = "", color: bool = True) -> None:
    clear_screen()
    typer.echo(format_board(session, color=color))
    if message:
        typer.echo(message)
    typer.echo("\nControls: ↑/W ↓/S ←/A →/D move, R restart, Q/Esc quit")


def key_to_direction(key: str) -> Direction | None:
    return KEY_TO_DIRECTION.get(key.lower() if len(key) == 1 else key)


def choose_random_direction(session: Session, rng: RandomSource) -> Direction | None:
    """Random agent: pick uniformly among the moves that change the grid."""
    directions = valid_directions(session)
    if not directions:
        return None
    return rng.choice(directions)


def play_random_game(
    rng: RandomSource, config: GameConfig, max_moves: Optional[int] = None
) -> tuple[Session, int]:
    """Play one game with the random agent, returning (final_session, move_count)."""
    session = initial_session(rng, config)
    moves = 0
    while status(session) is GameStatus.ACTIVE:
        if max_moves is not None and moves >= max_moves:
            break
        direction = choose_random_direction(session, rng)
        session = apply_direction(session, direction, rng)
        moves += 1
    return session, moves


def make_config(size: int, target: int) -> GameConfig:
    return GameConfig(size=size, target=target)


@app.command()
def human(
    size: int = typer.Option(4, "--size", "-n", help="Width and height of the grid"),
    target: int = typer.Option(2048, "--target", help="Tile value that wins the game"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for tile spawns"),
    no_color: bool = typer.Option(False, "--no-color", help="Draw without colors"),
):
    """Play 2048 yourself! Controls: WASD or arrow keys, R to restart, Q to quit."""
    config = make_config(size, target)
    rng = random.Random(seed)
    color = not no_color

    session = initial_session(rng, config)
    draw(session, "Welcome! Use arrow keys or WASD to play.", color=color)

    while True:
        key = get_key()

        if key.lower() in QUIT_KEYS:
            clear_screen()
            typer.echo("Thanks for playing!")
            break

        if key.lower() in RESTART_KEYS:
            session = initial_session(rng, config)
            draw(session, "Game restarted!", color=color)
            continue

        direction = key_to_direction(key)
        if direction is None:
            draw(session, "Invalid key. Use WASD or arrow keys.", color=color)
            continue

        points_before = session.score
        session = apply_direction(session, direction, rng)
        gained = session.score - points_before
        draw(session, f"+{gained} points" if gained else "", color=color)

        outcome = status(session)
        if outcome is GameStatus.ACTIVE:
            continue

        typer.echo(f"\n{STATUS_TITLES[outcome]}")
        if not typer.confirm("Try again?", default=True):
            break
        session = initial_session(rng, config)
        draw(session, color=color)


@app.command()
def auto(
    size: int = typer.Option(4, "--size", "-n", help="Width and height of the grid"),
    target: int = typer.Option(2048, "--target", help="Tile value that wins the game"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for spawns and moves"),
    delay: float = typer.Option(
        0.2, "--delay", "-d", help="Delay between moves in seconds"
    ),
    max_moves: Optional[int] = typer.Option(
        None, "--max-moves", help="Stop after this many moves"
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Draw without colors"),
):
    """Watch a random agent play 2048."""
    config = make_config(size, target)
    rng = random.Random(seed)
    color = not no_color

    session = initial_session(rng, config)
    typer.echo(format_board(session, color=color))

    move_count = 0
    while status(session) is GameStatus.ACTIVE:
        if max_moves is not None and move_count >= max_moves:
            break
        direction = choose_random_direction(session, rng)
        points_before = session.score
        session = apply_direction(session, direction, rng)
        move_count += 1

        typer.echo(
            f"\nMove {move_count}: {direction.value.upper()} (+{session.score - points_before} points)"
        )
        typer.echo(format_board(session, color=color))

        if delay > 0:
            time.sleep(delay)

    outcome = status(session)
    typer.echo(f"\n{'=' * 25}")
    if outcome in STATUS_TITLES:
        typer.echo(STATUS_TITLES[outcome])
    typer.echo(f"Final Score: {session.score}")
    typer.echo(f"Total Moves: {move_count}")
    typer.echo(f"Highest Tile: {max_tile(session)}")
    typer.echo(f"{'=' * 25}")


@app.command()
def simulate(
    games: int = typer.Option(100, "--games", "-g", help="Number of games to play"),
    size: int = typer.Option(4, "--size", "-n", help="Width and height of the grid"),
    target: int = typer.Option(2048, "--target", help="Tile value that wins the game"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for spawns and moves"),
    max_moves: Optional[int] = typer.Option(
        None, "--max-moves", help="Cap on moves per game"
    ),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Directory for JSONL game logs"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Print stats for every game"
    ),
):
    """Play many games with the random agent and report score statistics."""
    config = make_config(size, target)
    rng = random.Random(seed)

    with MetricLogger(log_dir=log_dir, experiment_name="simulate") as logger:
        for game_index in range(1, games + 1):
            session, moves = play_random_game(rng, config, max_moves=max_moves)
            logger.log_game(session, moves, step=game_index, verbose=verbose)
        logger.log_summary()


def main():
    try:
        app()
    except KeyboardInterrupt:
        clear_screen()
        typer.echo("\nGame interrupted. Goodbye!")


if __name__ == "__main__":
    main()
