"""Deterministic backtracking solver.

Candidates are tried in ascending order, so the same grid always yields the
same completion. The search keeps its own frame stack instead of recursing.
"""
from typing import Iterator, Optional, Sequence

from sudoku_engine.common.constants import EMPTY
from sudoku_engine.common.grid import (
    BoxShape,
    Grid,
    check_grid,
    clone_grid,
    empty_cells,
    get_box_shape,
)
from sudoku_engine.puzzle.validator import can_place, is_valid_grid


def iter_solutions(
    grid: Sequence[Sequence[int]], size: int, box: Optional[BoxShape] = None
) -> Iterator[Grid]:
    """Yield every completion of `grid` in ascending-candidate order.

    The input is copied; clues that already conflict yield nothing.

    Raises:
        ValueError: if `grid` is not `size` x `size` or holds a digit outside
            [0, size]. Raised on the call, before iteration starts.
    """
    check_grid(grid, size)
    box = box or get_box_shape(size)
    if not is_valid_grid(grid, size, box):
        return iter(())
    return _search(clone_grid(grid), size, box)


def _search(board: Grid, size: int, box: BoxShape) -> Iterator[Grid]:
    cells = empty_cells(board)
    # frame i: cells[i] and the lowest candidate not yet tried there
    next_candidate = [1] * len(cells)
    depth = 0
    while depth >= 0:
        if depth == len(cells):
            yield clone_grid(board)
            depth -= 1
            continue

        r, c = cells[depth]
        board[r][c] = EMPTY
        for v in range(next_candidate[depth], size + 1):
            if can_place(board, r, c, v, size, box):
                board[r][c] = v
                next_candidate[depth] = v + 1
                depth += 1
                if depth < len(cells):
                    next_candidate[depth] = 1
                break
        else:
            depth -= 1


def solve(
    grid: Sequence[Sequence[int]], size: int, box: Optional[BoxShape] = None
) -> Optional[Grid]:
    """First completion of `grid`, or None if it has none."""
    return next(iter_solutions(grid, size, box), None)


def count_solutions(
    grid: Sequence[Sequence[int]], size: int, box: Optional[BoxShape] = None, limit: int = 2
) -> int:
    """Number of completions, counting stops at `limit`."""
    count = 0
    for _ in iter_solutions(grid, size, box):
        count += 1
        if count >= limit:
            break
    return count


def has_unique_solution(
    grid: Sequence[Sequence[int]], size: int, box: Optional[BoxShape] = None
) -> bool:
    return count_solutions(grid, size, box, limit=2) == 1
