"""
Game session for the sliding-tile game: a grid plus a running score,
together with the spawn, win and stuck rules.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from board import (
    Direction,
    Grid,
    Number,
    blank_positions,
    check_grid,
    empty_grid,
    place_tile,
    slide,
    tile_values,
)


class GameConfig(BaseModel):
    """Rules of a game. The defaults reproduce the classic 4x4 game."""

    model_config = ConfigDict(frozen=True)

    size: int = Field(default=4, ge=1)
    target: int = 2048
    # each value is equally likely; the classic 90/10 weighting is deliberately not used
    spawn_values: tuple[int, ...] = (2, 4)
    initial_tiles: int = Field(default=2, ge=0)

    @field_validator("spawn_values")
    @classmethod
    def _non_empty_positive(cls, values: tuple[int, ...]) -> tuple[int, ...]:
        if not values or any(v <= 0 for v in values):
            raise ValueError("spawn_values must be a non-empty tuple of positive ints")
        return values


class RandomSource(Protocol):
    """
    Anything that can pick one element uniformly from a non-empty sequence.
    `random.Random` satisfies this; tests substitute scripted sources.
    """

    def choice[T](self, seq: Sequence[T]) -> T: ...


class GameStatus(Enum):
    ACTIVE = "active"
    WON = "won"
    STUCK = "stuck"


@dataclass(frozen=True)
class Session:
    grid: Grid
    score: int = 0
    # defaults to the standard rules sized to the grid
    config: GameConfig | None = None

    def __post_init__(self):
        check_grid(self.grid)
        if any(len(row) != len(self.grid) for row in self.grid):
            raise ValueError(
                f"grid must be square, got {len(self.grid)} rows of {len(self.grid[0])}"
            )
        if self.config is None:
            object.__setattr__(self, "config", GameConfig(size=len(self.grid)))
        if self.config.size != len(self.grid):
            raise ValueError(
                f"grid is {len(self.grid)}x{len(self.grid)} but config.size is {self.config.size}"
            )
        if self.score < 0:
            raise ValueError(f"score must be non-negative, got {self.score}")

    @property
    def size(self) -> int:
        return len(self.grid)


def spawn_random_tile(session: Session, rng: RandomSource) -> Session:
    """
    Place one tile on a uniformly chosen blank cell.
    The value is drawn uniformly from `config.spawn_values`. A full grid is returned unchanged.
    """
    blanks = blank_positions(session.grid)
    if not blanks:
        return session

    row, col = rng.choice(blanks)
    value = rng.choice(session.config.spawn_values)
    return Session(
        grid=place_tile(session.grid, row, col, Number(value)),
        score=session.score,
        config=session.config,
    )


def initial_session(rng: RandomSource, config: GameConfig | None = None) -> Session:
    """Start a new game: an empty grid with `config.initial_tiles` random tiles on it."""
    config = config or GameConfig()
    session = Session(grid=empty_grid(config.size), config=config)
    for _ in range(config.initial_tiles):
        session = spawn_random_tile(session, rng)
    return session


def slide_session(session: Session, direction: Direction) -> Session:
    """Slide without spawning, adding the merge points to the score."""
    new_grid, points = slide(session.grid, direction)
    return Session(grid=new_grid, score=session.score + points, config=session.config)


def apply_direction(
    session: Session, direction: Direction, rng: RandomSource
) -> Session:
    """
    Play one move: slide toward `direction`, add the merge points to the score,
    then spawn one random tile.

    The spawn happens even when the slide changed nothing, as long as a blank
    cell is left.
    """
    return spawn_random_tile(slide_session(session, direction), rng)


def is_complete(session: Session) -> bool:
    """True once any tile has reached the target value."""
    return session.config.target in tile_values(session.grid)


def direction_has_step(session: Session, direction: Direction) -> bool:
    new_grid, _ = slide(session.grid, direction)
    return new_grid != session.grid


def valid_directions(session: Session) -> list[Direction]:
    """Directions whose slide changes the grid."""
    return [d for d in Direction if direction_has_step(session, d)]


def is_stuck(session: Session) -> bool:
    """
    True when no direction changes the grid.
    Slides are compared before any spawn; spawning would make every grid with
    a blank cell look movable.
    """
    return not valid_directions(session)


def status(session: Session) -> GameStatus:
    # a win takes precedence over a board that also happens to be stuck
    if is_complete(session):
        return GameStatus.WON
    if is_stuck(session):
        return GameStatus.STUCK
    return GameStatus.ACTIVE


def max_tile(session: Session) -> int:
    return max(tile_values(session.grid), default=0)
