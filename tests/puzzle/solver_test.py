import numpy as np
import pytest

from sudoku_engine.common.grid import clone_grid
from sudoku_engine.puzzle.generator import generate
from sudoku_engine.puzzle.solver import count_solutions, has_unique_solution, iter_solutions, solve
from sudoku_engine.puzzle.validator import is_valid_grid
from tests.tools import PUZZLE_9, SOLUTION_4, SOLUTION_6, SOLUTION_9, carve_cells


def test_solves_classic_puzzle():
    assert solve(PUZZLE_9, 9) == SOLUTION_9


def test_does_not_mutate_input():
    puzzle = clone_grid(PUZZLE_9)
    solve(puzzle, 9)
    assert puzzle == PUZZLE_9


def test_full_valid_grid_is_its_own_solution():
    assert solve(SOLUTION_6, 6) == SOLUTION_6


def test_empty_grid_gives_lexicographically_first_board():
    solved = solve([[0] * 4 for _ in range(4)], 4)
    assert solved[0] == [1, 2, 3, 4]
    assert is_valid_grid(solved, 4)


def test_conflicting_clues_return_none():
    puzzle = carve_cells(SOLUTION_4, [(0, 1), (1, 1)])
    puzzle[0][1] = 1  # duplicates (0, 0)
    assert solve(puzzle, 4) is None


def test_unsolvable_without_direct_conflict():
    # (0, 3) must be 4 by its row but 4 already sits in column 3
    puzzle = [
        [1, 2, 3, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 4],
        [0, 0, 0, 0],
    ]
    assert solve(puzzle, 4) is None
    assert count_solutions(puzzle, 4) == 0


def test_count_solutions_respects_limit():
    empty = [[0] * 4 for _ in range(4)]
    assert count_solutions(empty, 4, limit=5) == 5
    assert not has_unique_solution(empty, 4)
    assert has_unique_solution(PUZZLE_9, 9)


def test_iter_solutions_are_distinct_and_valid():
    puzzle = carve_cells(SOLUTION_4, [(0, 0), (0, 1), (1, 0), (1, 1)])
    solutions = list(iter_solutions(puzzle, 4))
    assert SOLUTION_4 in solutions
    assert len({tuple(map(tuple, s)) for s in solutions}) == len(solutions)
    for s in solutions:
        assert is_valid_grid(s, 4)


@pytest.mark.parametrize("size", [4, 6, 9])
@pytest.mark.parametrize("difficulty", ["easy", "expert"])
def test_round_trip_on_generated_puzzles(size, difficulty):
    generated = generate(size, difficulty, rng=np.random.default_rng(size))
    solved = solve(generated.puzzle, size)

    assert solved is not None
    assert is_valid_grid(solved, size)
    for r in range(size):
        for c in range(size):
            if generated.puzzle[r][c]:
                assert solved[r][c] == generated.puzzle[r][c]
    if has_unique_solution(generated.puzzle, size):
        assert solved == generated.solution


def test_rejects_out_of_range_clue():
    puzzle = [[7, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
    with pytest.raises(ValueError):
        solve(puzzle, 4)
    with pytest.raises(ValueError):
        count_solutions(puzzle, 4)


def test_rejects_wrong_shape():
    with pytest.raises(ValueError):
        iter_solutions([[1, 2, 3], [0, 0, 0], [0, 0, 0], [0, 0, 0]], 4)
    with pytest.raises(ValueError):
        solve(SOLUTION_4, 9)
