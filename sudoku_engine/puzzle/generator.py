import threading
import time
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from sudoku_engine.common.constants import EMPTY, Difficulty
from sudoku_engine.common.grid import (
    BoxShape,
    GenerationCancelled,
    GenerationError,
    Grid,
    clone_grid,
    empty_grid,
    get_box_shape,
)
from sudoku_engine.puzzle.policy import DifficultyPolicy, TablePolicy
from sudoku_engine.puzzle.solver import solve
from sudoku_engine.puzzle.validator import can_place
from sudoku_engine.utils.log import get_logger


@dataclass(frozen=True)
class GeneratedPuzzle:
    puzzle: Grid
    solution: Grid
    difficulty: Difficulty
    size: int
    elapsed_ms: float = 0.0


class SudokuGenerator:
    """
    Sudoku puzzle generator using randomized backtracking.

    Features:
    - Supports any size with a box decomposition (4x4, 6x6, 9x9, ...)
    - Fills a complete board first, then carves holes per difficulty policy
    - Shuffles candidates at every cell so boards are not biased toward
      the lexicographically first solution
    """

    def __init__(
        self,
        size: int = 9,
        box: Optional[BoxShape] = None,
        policy: Optional[DifficultyPolicy] = None,
        rng: Optional[np.random.Generator] = None,
        max_attempts: int = 3,
        verify_solvable: bool = False,
    ):
        """
        Initialize the generator.

        Args:
            size (int): Size of the board, e.g. 9 for 9x9.
            box (BoxShape): Box decomposition; defaults to the one for `size`.
            policy (DifficultyPolicy): Maps difficulty to fill fraction.
            rng (np.random.Generator): Random source; seed it for reproducible boards.
            max_attempts (int): Fills tried with fresh randomness before giving up.
            verify_solvable (bool): Re-solve each carved puzzle and log a warning
                when the solver cannot complete it.
        """
        self.size = size
        self.box = box or get_box_shape(size)
        if self.box.size != size:
            raise ValueError(f"Box {self.box.width}x{self.box.height} does not tile size {size}")
        self.policy = policy or TablePolicy()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_attempts = max_attempts
        self.verify_solvable = verify_solvable
        self.logger = get_logger(__name__)

    def generate(
        self,
        difficulty: Union[Difficulty, str] = Difficulty.MEDIUM,
        cancel_event: Optional[threading.Event] = None,
    ) -> GeneratedPuzzle:
        """
        Generate a puzzle and its solution.

        Args:
            difficulty (str): Difficulty level ("easy", "medium", "hard", "expert").
            cancel_event (threading.Event): Checked at every cell; once set,
                generation stops with `GenerationCancelled`.

        Returns:
            GeneratedPuzzle: puzzle (zeros for empty cells) and its solution.
        """
        difficulty = Difficulty(difficulty)
        start = time.perf_counter()
        solution = self.generate_solution(cancel_event=cancel_event)
        puzzle = self.carve(solution, difficulty)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if self.verify_solvable and solve(puzzle, self.size, self.box) is None:
            self.logger.warning(
                f"Carved {self.size}x{self.size} {difficulty.value} puzzle is not solvable"
            )
        self.logger.debug(
            f"Generated {self.size}x{self.size} {difficulty.value} puzzle in {elapsed_ms:.1f} ms"
        )
        return GeneratedPuzzle(
            puzzle=puzzle,
            solution=solution,
            difficulty=difficulty,
            size=self.size,
            elapsed_ms=elapsed_ms,
        )

    def generate_solution(self, cancel_event: Optional[threading.Event] = None) -> Grid:
        """Fill an empty board, retrying with fresh randomness on exhaustion."""
        for attempt in range(1, self.max_attempts + 1):
            board = empty_grid(self.size)
            if self._fill_board(board, 0, cancel_event):
                return board
            self.logger.warning(
                f"Backtracking exhausted on attempt {attempt}/{self.max_attempts} "
                f"for size {self.size}"
            )
        raise GenerationError(
            f"Could not fill a {self.size}x{self.size} board in {self.max_attempts} attempts"
        )

    def carve(self, solution: Grid, difficulty: Union[Difficulty, str]) -> Grid:
        """
        Remove cells from a solved board to create a puzzle.

        Args:
            solution (list[list[int]]): Solved board; left untouched.
            difficulty (str): Selects the fill fraction from the policy.

        Returns:
            list[list[int]]: A copy of `solution` with the holes zeroed.
        """
        entry = self.policy.lookup(difficulty, self.size)
        holes = entry.cells_to_remove(self.size)

        board = clone_grid(solution)
        positions = self.rng.permutation(self.size * self.size)
        for index in positions[:holes].tolist():
            r, c = divmod(index, self.size)
            board[r][c] = EMPTY
        return board

    def _fill_board(
        self, board: Grid, index: int, cancel_event: Optional[threading.Event]
    ) -> bool:
        """
        Recursively fill the board in row-major order.

        Args:
            board (list[list[int]]): Current board state.
            index (int): Flat position of the next cell to fill.

        Returns:
            bool: True if the board is completely filled.
        """
        if index == self.size * self.size:
            return True
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelled("Generation cancelled")

        r, c = divmod(index, self.size)
        if board[r][c] != EMPTY:
            return self._fill_board(board, index + 1, cancel_event)

        for v in self.rng.permutation(np.arange(1, self.size + 1)).tolist():
            if can_place(board, r, c, v, self.size, self.box):
                board[r][c] = v
                if self._fill_board(board, index + 1, cancel_event):
                    return True
                board[r][c] = EMPTY

        return False


def generate(
    size: int,
    difficulty: Union[Difficulty, str],
    rng: Optional[np.random.Generator] = None,
    policy: Optional[DifficultyPolicy] = None,
) -> GeneratedPuzzle:
    """One-shot helper: build a generator and produce a puzzle."""
    return SudokuGenerator(size=size, policy=policy, rng=rng).generate(difficulty)
