"""Row / column / box constraint checks."""
from typing import FrozenSet, Optional, Sequence

from sudoku_engine.common.constants import EMPTY
from sudoku_engine.common.grid import (
    BoxShape,
    Cell,
    check_cell,
    check_value,
    get_box_shape,
    iter_cells,
)


def can_place(
    grid: Sequence[Sequence[int]], row: int, col: int, value: int, size: int, box: BoxShape
) -> bool:
    """Unchecked placement test for search loops that own their indices."""
    for c in range(size):
        if c != col and grid[row][c] == value:
            return False

    for r in range(size):
        if r != row and grid[r][col] == value:
            return False

    for r, c in box.cells(row, col):
        if (r != row or c != col) and grid[r][c] == value:
            return False

    return True


def _cell_conflicts(
    grid: Sequence[Sequence[int]], row: int, col: int, size: int, box: BoxShape
) -> bool:
    value = grid[row][col]
    if value == EMPTY:
        return False
    return not can_place(grid, row, col, value, size, box)


def is_valid_placement(
    grid: Sequence[Sequence[int]],
    row: int,
    col: int,
    value: int,
    size: int,
    box: Optional[BoxShape] = None,
) -> bool:
    """
    Check whether `value` may stand at (row, col).

    The cell itself is skipped, so this asks "would the placement be legal",
    whatever (row, col) currently holds.

    Args:
        grid (list[list[int]]): Current board state.
        row (int): Row index.
        col (int): Column index.
        value (int): Candidate digit, 1..size.
        size (int): Board size.
        box (BoxShape): Box decomposition; defaults to the one for `size`.

    Returns:
        bool: False if `value` occurs elsewhere in the row, column or box.

    Raises:
        InvalidMoveError: if the cell or the digit is out of range.
    """
    check_cell(size, row, col)
    check_value(size, value, allow_empty=False)
    return can_place(grid, row, col, value, size, box or get_box_shape(size))


def has_conflict(
    grid: Sequence[Sequence[int]],
    row: int,
    col: int,
    size: int,
    box: Optional[BoxShape] = None,
) -> bool:
    check_cell(size, row, col)
    return _cell_conflicts(grid, row, col, size, box or get_box_shape(size))


def find_conflicts(
    grid: Sequence[Sequence[int]], size: int, box: Optional[BoxShape] = None
) -> FrozenSet[Cell]:
    """Every filled cell whose digit repeats in its row, column or box."""
    box = box or get_box_shape(size)
    return frozenset(
        (r, c) for r, c in iter_cells(size) if _cell_conflicts(grid, r, c, size, box)
    )


def is_valid_grid(grid: Sequence[Sequence[int]], size: int, box: Optional[BoxShape] = None) -> bool:
    """True if the (possibly partial) grid holds no conflicts."""
    box = box or get_box_shape(size)
    return all(not _cell_conflicts(grid, r, c, size, box) for r, c in iter_cells(size))


def is_solved(grid: Sequence[Sequence[int]], solution: Sequence[Sequence[int]]) -> bool:
    return [list(row) for row in grid] == [list(row) for row in solution]
