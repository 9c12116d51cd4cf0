"""Generation quality report.

Generates a batch of puzzles per (difficulty, size), re-solves each one and
records how often the solver reproduces the stored solution, how many
puzzles have a unique completion, and how long generation and solving take.
"""
import time
from dataclasses import asdict, dataclass, field
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np

from sudoku_engine.common.constants import Difficulty
from sudoku_engine.common.grid import count_filled
from sudoku_engine.puzzle.generator import SudokuGenerator
from sudoku_engine.puzzle.policy import DifficultyPolicy
from sudoku_engine.puzzle.solver import count_solutions, solve
from sudoku_engine.puzzle.validator import is_valid_grid
from sudoku_engine.utils.log import get_logger

logger = get_logger(__name__)


@dataclass
class QualityReport:
    difficulty: str
    size: int
    total_generated: int = 0
    valid_solutions: int = 0  # stored solution passes the constraint check
    solver_matches: int = 0  # re-solve reproduced the stored solution
    unsolvable: int = 0
    unique_puzzles: int = 0  # exactly one completion
    distinct_solutions: int = 0
    givens: List[int] = field(default_factory=list)
    generation_ms: List[float] = field(default_factory=list)
    solve_ms: List[float] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.total_generated == 0:
            return 0.0
        return self.solver_matches / self.total_generated * 100

    @property
    def avg_generation_ms(self) -> float:
        return float(np.mean(self.generation_ms)) if self.generation_ms else 0.0

    @property
    def avg_solve_ms(self) -> float:
        return float(np.mean(self.solve_ms)) if self.solve_ms else 0.0

    def to_dict(self) -> dict:
        result = asdict(self)
        for key in ("givens", "generation_ms", "solve_ms"):
            result.pop(key)
        result.update(
            success_rate=round(self.success_rate, 2),
            avg_givens=float(np.mean(self.givens)) if self.givens else 0.0,
            avg_generation_ms=round(self.avg_generation_ms, 3),
            max_generation_ms=round(max(self.generation_ms, default=0.0), 3),
            avg_solve_ms=round(self.avg_solve_ms, 3),
        )
        return result


def evaluate(
    size: int,
    difficulty: Union[Difficulty, str],
    samples: int = 10,
    rng: Optional[np.random.Generator] = None,
    policy: Optional[DifficultyPolicy] = None,
    check_uniqueness: bool = True,
) -> QualityReport:
    """Generate `samples` puzzles and check each against the solver."""
    difficulty = Difficulty(difficulty)
    generator = SudokuGenerator(size=size, policy=policy, rng=rng)
    report = QualityReport(difficulty=difficulty.value, size=size)
    seen = set()

    for _ in range(samples):
        generated = generator.generate(difficulty)
        report.total_generated += 1
        report.generation_ms.append(generated.elapsed_ms)
        report.givens.append(count_filled(generated.puzzle))
        if is_valid_grid(generated.solution, size, generator.box):
            report.valid_solutions += 1

        start = time.perf_counter()
        solved = solve(generated.puzzle, size, generator.box)
        report.solve_ms.append((time.perf_counter() - start) * 1000)

        if solved is None:
            report.unsolvable += 1
            logger.warning(f"Generated {size}x{size} {difficulty.value} puzzle is unsolvable")
            continue
        if solved == generated.solution:
            report.solver_matches += 1
        if check_uniqueness and count_solutions(generated.puzzle, size, generator.box) == 1:
            report.unique_puzzles += 1

        key = tuple(tuple(row) for row in generated.solution)
        if key not in seen:
            seen.add(key)
            report.distinct_solutions += 1

    logger.info(
        f"{size}x{size} {difficulty.value}: {report.solver_matches}/{report.total_generated} "
        f"solver matches, {report.unique_puzzles} unique, "
        f"avg generation {report.avg_generation_ms:.1f} ms"
    )
    return report


def evaluate_all(
    sizes: Sequence[int] = (4, 6, 9),
    difficulties: Iterable[Union[Difficulty, str]] = tuple(Difficulty),
    samples: int = 10,
    seed: Optional[int] = None,
    policy: Optional[DifficultyPolicy] = None,
    check_uniqueness: bool = True,
) -> List[QualityReport]:
    rng = np.random.default_rng(seed)
    return [
        evaluate(size, difficulty, samples, rng, policy, check_uniqueness)
        for difficulty in difficulties
        for size in sizes
    ]
