# -*- coding: utf-8 -*-
"""Grid type, box geometry and the engine's error types."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from sudoku_engine.common.constants import CANONICAL_BOX_SHAPES, EMPTY

Grid = List[List[int]]
"""A size x size grid as rows of integers (0 = empty)."""

Cell = Tuple[int, int]  # (row, col), 0-based


class InvalidMoveError(ValueError):
    """Row, column or value outside the board."""


class GivenCellError(ValueError):
    """Attempt to overwrite a cell pre-filled by the puzzle."""


class GenerationError(RuntimeError):
    """Backtracking could not fill a grid within the attempt budget."""


class GenerationCancelled(Exception):
    """Generation was abandoned through its cancellation event."""


@dataclass(frozen=True)
class BoxShape:
    """Dimensions of one box: `width` columns by `height` rows."""

    width: int
    height: int

    @property
    def size(self) -> int:
        return self.width * self.height

    def origin(self, row: int, col: int) -> Cell:
        """Top-left cell of the box containing (row, col)."""
        return (row // self.height) * self.height, (col // self.width) * self.width

    def cells(self, row: int, col: int) -> Iterator[Cell]:
        r0, c0 = self.origin(row, col)
        for r in range(r0, r0 + self.height):
            for c in range(c0, c0 + self.width):
                yield r, c


def get_box_shape(size: int, box_width: Optional[int] = None, box_height: Optional[int] = None) -> BoxShape:
    """Box decomposition for a board of `size`.

    Uses the canonical shape for 4, 6 and 9. Other sizes take the largest
    divisor not above sqrt(size) as the height. An explicit width/height pair
    overrides both and must multiply to `size`.

    Raises:
        ValueError: if no box decomposition with both sides > 1 exists.
    """
    if box_width is not None or box_height is not None:
        if box_width is None or box_height is None:
            raise ValueError("box_width and box_height must be given together")
        if box_width * box_height != size:
            raise ValueError(f"Box {box_width}x{box_height} does not tile a {size}x{size} grid")
        return BoxShape(box_width, box_height)
    if size in CANONICAL_BOX_SHAPES:
        return BoxShape(*CANONICAL_BOX_SHAPES[size])
    if size < 4:
        raise ValueError(f"Unsupported grid size: {size}")
    height = max(d for d in range(1, math.isqrt(size) + 1) if size % d == 0)
    if height == 1:
        raise ValueError(f"Grid size {size} has no box decomposition")
    return BoxShape(size // height, height)


def empty_grid(size: int) -> Grid:
    return [[EMPTY for _ in range(size)] for _ in range(size)]


def clone_grid(grid: Sequence[Sequence[int]]) -> Grid:
    return [list(row) for row in grid]


def freeze_grid(grid: Sequence[Sequence[int]]) -> Tuple[Tuple[int, ...], ...]:
    return tuple(tuple(row) for row in grid)


def iter_cells(size: int) -> Iterator[Cell]:
    """Row-major order."""
    for r in range(size):
        for c in range(size):
            yield r, c


def empty_cells(grid: Sequence[Sequence[int]]) -> List[Cell]:
    return [(r, c) for r, row in enumerate(grid) for c, v in enumerate(row) if v == EMPTY]


def count_filled(grid: Sequence[Sequence[int]]) -> int:
    return sum(1 for row in grid for v in row if v != EMPTY)


def check_cell(size: int, row: int, col: int) -> None:
    if not (0 <= row < size and 0 <= col < size):
        raise InvalidMoveError(f"Cell ({row}, {col}) is outside a {size}x{size} grid")


def check_value(size: int, value: int, allow_empty: bool = True) -> None:
    low = EMPTY if allow_empty else 1
    if not (low <= value <= size):
        raise InvalidMoveError(f"Value {value} is outside [{low}, {size}]")


def check_grid(grid: Sequence[Sequence[int]], size: int) -> None:
    """Shape and value-range check for a grid handed in from outside."""
    if len(grid) != size or any(len(row) != size for row in grid):
        raise ValueError(f"Grid must be {size}x{size}")
    for r, row in enumerate(grid):
        for c, v in enumerate(row):
            if not (EMPTY <= v <= size):
                raise ValueError(f"Value {v} at ({r}, {c}) is outside [0, {size}]")


def render_grid(grid: Sequence[Sequence[int]]) -> str:
    """Plain-text rendering, one row per line, `.` for empty cells."""
    return "\n".join(" ".join(str(v) if v != EMPTY else "." for v in row) for row in grid)
