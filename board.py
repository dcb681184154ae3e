"""
Grid engine for the sliding-tile game.
Every operation takes a grid and returns a new one; nothing here mutates its input.
"""

from dataclasses import dataclass
from enum import Enum


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Blank:
    """An empty cell."""

    def __str__(self) -> str:
        return "."


@dataclass(frozen=True)
class Number:
    """A cell holding a tile with a power-of-two value."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


type Tile = Blank | Number
type Row = tuple[Tile, ...]
type Grid = tuple[Row, ...]

BLANK = Blank()


def check_grid(grid: Grid) -> None:
    """Raise ValueError if the rows of `grid` are not all the same length."""
    if not grid:
        return
    width = len(grid[0])
    for i, row in enumerate(grid):
        if len(row) != width:
            raise ValueError(
                f"row {i} has {len(row)} cells, expected {width} like row 0"
            )


def empty_grid(size: int) -> Grid:
    return tuple(tuple(BLANK for _ in range(size)) for _ in range(size))


def grid_from_values(values: list[list[int]]) -> Grid:
    """
    Build a grid from plain integers, where 0 marks a blank cell.
    Handy for tests and for reading boards typed out by hand.
    """
    grid = tuple(
        tuple(Number(v) if v else BLANK for v in row) for row in values
    )
    check_grid(grid)
    return grid


def grid_to_values(grid: Grid) -> list[list[int]]:
    """Inverse of grid_from_values: blanks become 0."""
    return [
        [tile.value if isinstance(tile, Number) else 0 for tile in row]
        for row in grid
    ]


def reflect(grid: Grid) -> Grid:
    """Reverse every row, so that a left slide becomes a right slide."""
    return tuple(row[::-1] for row in grid)


def transpose(grid: Grid) -> Grid:
    """Swap rows and columns, so that vertical slides become horizontal ones."""
    check_grid(grid)
    if not grid:
        return ()
    height = len(grid)
    width = len(grid[0])
    return tuple(tuple(grid[i][j] for i in range(height)) for j in range(width))


def _merge_numbers_right(numbers: list[int]) -> tuple[list[int], int]:
    """
    Merge a dense list of values toward its right end.

    Returns the merged values ordered edge-first (rightmost value first) and
    the points scored. Values are consumed from the edge inward, so a tile
    that was just produced by a merge never merges again in the same call:
    [2, 2, 2] becomes [4, 2] (edge-first), not [4, 4].
    """
    pending = list(numbers)
    merged = []
    score = 0
    while pending:
        value = pending.pop()
        if pending and pending[-1] == value:
            pending.pop()
            merged.append(value * 2)
            score += value * 2
        else:
            merged.append(value)
    return merged, score


def slide_row_right(row: Row) -> tuple[Row, int]:
    """Slide a single row toward increasing column index, returning (new_row, score_gained)."""
    numbers = [tile.value for tile in row if isinstance(tile, Number)]
    merged, score = _merge_numbers_right(numbers)
    tiles: list[Tile] = [Number(v) for v in merged]
    tiles += [BLANK] * (len(row) - len(tiles))
    return tuple(reversed(tiles)), score


def slide_right(grid: Grid) -> tuple[Grid, int]:
    check_grid(grid)
    results = [slide_row_right(row) for row in grid]
    return tuple(r[0] for r in results), sum(r[1] for r in results)


def slide_left(grid: Grid) -> tuple[Grid, int]:
    new_grid, score = slide_right(reflect(grid))
    return reflect(new_grid), score


def slide_up(grid: Grid) -> tuple[Grid, int]:
    new_grid, score = slide_left(transpose(grid))
    return transpose(new_grid), score


def slide_down(grid: Grid) -> tuple[Grid, int]:
    new_grid, score = slide_right(transpose(grid))
    return transpose(new_grid), score


SLIDES = {
    Direction.UP: slide_up,
    Direction.DOWN: slide_down,
    Direction.LEFT: slide_left,
    Direction.RIGHT: slide_right,
}


def slide(grid: Grid, direction: Direction) -> tuple[Grid, int]:
    """Slide every tile of `grid` toward `direction`, returning (new_grid, score_gained)."""
    return SLIDES[direction](grid)


def blank_positions(grid: Grid) -> list[tuple[int, int]]:
    """All blank cells as (row, col), in row-major order."""
    return [
        (i, j)
        for i, row in enumerate(grid)
        for j, tile in enumerate(row)
        if isinstance(tile, Blank)
    ]


def place_tile(grid: Grid, row: int, col: int, tile: Tile) -> Grid:
    """Return a copy of `grid` with the cell at (row, col) replaced by `tile`."""
    if not (0 <= row < len(grid) and 0 <= col < len(grid[row])):
        raise ValueError(f"cell ({row}, {col}) is outside the grid")
    new_row = grid[row][:col] + (tile,) + grid[row][col + 1 :]
    return grid[:row] + (new_row,) + grid[row + 1 :]


def tile_values(grid: Grid) -> list[int]:
    """Values of every non-blank tile, in row-major order."""
    return [tile.value for row in grid for tile in row if isinstance(tile, Number)]
