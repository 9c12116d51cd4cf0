# -*- coding: utf-8 -*-
"""Game state machine.

`GameState` is immutable; commands are applied through `transition`, which
returns a new state. `GameSession` is the mutable handle a UI talks to.
"""
from __future__ import annotations

import copy
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

import numpy as np

from sudoku_engine.common.config import Config
from sudoku_engine.common.constants import EMPTY, Difficulty, GameStatus
from sudoku_engine.common.grid import (
    BoxShape,
    Cell,
    GivenCellError,
    Grid,
    check_cell,
    check_grid,
    check_value,
    clone_grid,
    empty_cells,
    freeze_grid,
    get_box_shape,
    iter_cells,
)
from sudoku_engine.puzzle.generator import GeneratedPuzzle, SudokuGenerator
from sudoku_engine.puzzle.policy import DifficultyPolicy
from sudoku_engine.puzzle.scoring import CompletionSummary, compute_score
from sudoku_engine.puzzle.solver import solve
from sudoku_engine.puzzle.validator import find_conflicts, is_valid_grid
from sudoku_engine.utils.log import get_logger

logger = get_logger(__name__)

FrozenGrid = Tuple[Tuple[int, ...], ...]


@dataclass(frozen=True)
class Move:
    """One cell mutation; stacked for undo / redo."""

    row: int
    col: int
    old_value: int
    new_value: int
    timestamp: float


@dataclass(frozen=True)
class GameState:
    size: int
    difficulty: Difficulty
    box: BoxShape
    max_hints: int
    grid: FrozenGrid = ()
    initial_grid: FrozenGrid = ()
    solution: Optional[FrozenGrid] = None
    conflicts: FrozenSet[Cell] = frozenset()
    moves: int = 0
    hints_used: int = 0
    undo_stack: Tuple[Move, ...] = ()
    redo_stack: Tuple[Move, ...] = ()

    @classmethod
    def idle(cls, size: int, difficulty: Difficulty, max_hints: int, box: Optional[BoxShape] = None):
        return cls(size=size, difficulty=difficulty, box=box or get_box_shape(size), max_hints=max_hints)

    @property
    def is_loaded(self) -> bool:
        return self.solution is not None

    @property
    def is_complete(self) -> bool:
        return self.is_loaded and self.grid == self.solution and not self.conflicts

    @property
    def status(self) -> GameStatus:
        if not self.is_loaded:
            return GameStatus.IDLE
        if self.is_complete:
            return GameStatus.COMPLETED
        if self.moves == 0:
            return GameStatus.READY
        return GameStatus.PLAYING

    @property
    def can_undo(self) -> bool:
        return len(self.undo_stack) > 0

    @property
    def can_redo(self) -> bool:
        return len(self.redo_stack) > 0

    @property
    def hints_remaining(self) -> int:
        return max(0, self.max_hints - self.hints_used)

    def is_given(self, row: int, col: int) -> bool:
        return self.is_loaded and self.initial_grid[row][col] != EMPTY


# commands


@dataclass(frozen=True)
class MakeMove:
    row: int
    col: int
    value: int


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Redo:
    pass


@dataclass(frozen=True)
class Hint:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class NewGame:
    """Start over with a fresh puzzle.

    `puzzle` carries one generated elsewhere (e.g. on a worker thread);
    without it the context's generator is called.
    """

    difficulty: Optional[Difficulty] = None
    size: Optional[int] = None
    puzzle: Optional[GeneratedPuzzle] = None


Command = Union[MakeMove, Undo, Redo, Hint, Reset, NewGame]


@dataclass
class TransitionContext:
    """Everything a transition needs beyond the state itself."""

    rng: np.random.Generator
    policy: DifficultyPolicy
    generator_factory: Callable[[int], SudokuGenerator]
    clock: Callable[[], float] = time.time
    protect_givens: bool = False
    max_hints_override: Optional[int] = None

    def max_hints(self, difficulty: Difficulty, size: int) -> int:
        if self.max_hints_override is not None:
            return self.max_hints_override
        return self.policy.lookup(difficulty, size).max_hints


def _require_loaded(state: GameState, command: Command) -> None:
    if not state.is_loaded:
        raise RuntimeError(f"{type(command).__name__} needs a puzzle; start a new game first")


def _set_cell(state: GameState, row: int, col: int, value: int) -> Tuple[FrozenGrid, FrozenSet[Cell]]:
    grid = clone_grid(state.grid)
    grid[row][col] = value
    return freeze_grid(grid), find_conflicts(grid, state.size, state.box)


def _apply_move(state: GameState, row: int, col: int, value: int, ctx: TransitionContext) -> GameState:
    move = Move(
        row=row,
        col=col,
        old_value=state.grid[row][col],
        new_value=value,
        timestamp=ctx.clock(),
    )
    grid, conflicts = _set_cell(state, row, col, value)
    return replace(
        state,
        grid=grid,
        conflicts=conflicts,
        moves=state.moves + 1,
        undo_stack=state.undo_stack + (move,),
        redo_stack=(),
    )


def _make_move(state: GameState, command: MakeMove, ctx: TransitionContext) -> GameState:
    _require_loaded(state, command)
    check_cell(state.size, command.row, command.col)
    check_value(state.size, command.value)
    if ctx.protect_givens and state.is_given(command.row, command.col):
        raise GivenCellError(f"Cell ({command.row}, {command.col}) is a given")
    return _apply_move(state, command.row, command.col, command.value, ctx)


def _undo(state: GameState, command: Undo, ctx: TransitionContext) -> GameState:
    if not state.can_undo:
        logger.debug("Nothing to undo")
        return state
    move = state.undo_stack[-1]
    grid, conflicts = _set_cell(state, move.row, move.col, move.old_value)
    return replace(
        state,
        grid=grid,
        conflicts=conflicts,
        moves=state.moves + 1,
        undo_stack=state.undo_stack[:-1],
        redo_stack=state.redo_stack + (move,),
    )


def _redo(state: GameState, command: Redo, ctx: TransitionContext) -> GameState:
    if not state.can_redo:
        logger.debug("Nothing to redo")
        return state
    move = state.redo_stack[-1]
    grid, conflicts = _set_cell(state, move.row, move.col, move.new_value)
    return replace(
        state,
        grid=grid,
        conflicts=conflicts,
        moves=state.moves + 1,
        undo_stack=state.undo_stack + (move,),
        redo_stack=state.redo_stack[:-1],
    )


def _hint(state: GameState, command: Hint, ctx: TransitionContext) -> GameState:
    if not state.is_loaded or state.hints_used >= state.max_hints:
        logger.debug("No hints left")
        return state
    cells = empty_cells(state.grid)
    if not cells:
        return state
    row, col = cells[int(ctx.rng.integers(len(cells)))]
    state = _apply_move(state, row, col, state.solution[row][col], ctx)
    return replace(state, hints_used=state.hints_used + 1)


def _reset(state: GameState, command: Reset, ctx: TransitionContext) -> GameState:
    if not state.is_loaded:
        return state
    return replace(
        state,
        grid=state.initial_grid,
        conflicts=frozenset(),
        moves=0,
        hints_used=0,
        undo_stack=(),
        redo_stack=(),
    )


def _new_game(state: GameState, command: NewGame, ctx: TransitionContext) -> GameState:
    if command.puzzle is not None:
        generated = command.puzzle
    else:
        difficulty = Difficulty(command.difficulty or state.difficulty)
        generated = ctx.generator_factory(command.size or state.size).generate(difficulty)
    return load_puzzle(
        generated.puzzle,
        generated.solution,
        difficulty=generated.difficulty,
        max_hints=ctx.max_hints(generated.difficulty, generated.size),
        box=state.box if generated.size == state.size else None,
    )


_HANDLERS: Dict[type, Callable[[GameState, Command, TransitionContext], GameState]] = {
    MakeMove: _make_move,
    Undo: _undo,
    Redo: _redo,
    Hint: _hint,
    Reset: _reset,
    NewGame: _new_game,
}


def transition(state: GameState, command: Command, ctx: TransitionContext) -> GameState:
    """Apply one command and return the next state; `state` is left untouched."""
    handler = _HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"Unknown command: {command!r}")
    return handler(state, command, ctx)


def load_puzzle(
    puzzle: Sequence[Sequence[int]],
    solution: Sequence[Sequence[int]],
    difficulty: Difficulty,
    max_hints: int,
    box: Optional[BoxShape] = None,
) -> GameState:
    """Fresh state for a (puzzle, solution) pair."""
    size = len(solution)
    check_grid(puzzle, size)
    check_grid(solution, size)
    frozen = freeze_grid(puzzle)
    return GameState(
        size=size,
        difficulty=Difficulty(difficulty),
        box=box or get_box_shape(size),
        max_hints=max_hints,
        grid=frozen,
        initial_grid=frozen,
        solution=freeze_grid(solution),
    )


def _check_completion(
    puzzle: Sequence[Sequence[int]],
    solution: Sequence[Sequence[int]],
    size: int,
    box: BoxShape,
) -> None:
    check_grid(solution, size)
    if empty_cells(solution):
        raise ValueError("Solution has empty cells")
    if not is_valid_grid(solution, size, box):
        raise ValueError("Solution breaks the row, column or box rule")
    for r, c in iter_cells(size):
        if puzzle[r][c] != EMPTY and puzzle[r][c] != solution[r][c]:
            raise ValueError(f"Given at ({r}, {c}) disagrees with the solution")


class GameSession:
    """One player's game: the live grid, history and hint budget.

    Each session owns its state and random source; sessions share nothing.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        rng: Optional[np.random.Generator] = None,
        clock: Callable[[], float] = time.time,
        start: bool = True,
    ):
        """
        Args:
            config (Config): Board, generation, policy and session settings.
            rng (np.random.Generator): Random source for boards and hints;
                defaults to one seeded from `config.generation.seed`.
            clock (callable): Timestamp source for moves.
            start (bool): Generate the first puzzle right away.
        """
        from sudoku_engine.puzzle import POLICIES

        self.config = (config or Config()).check_and_update()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.generation.seed)
        policy_cls = POLICIES.get(self.config.policy.policy_type)
        self.policy: DifficultyPolicy = policy_cls(**self.config.policy.policy_args)
        self.context = TransitionContext(
            rng=self.rng,
            policy=self.policy,
            generator_factory=self.make_generator,
            clock=clock,
            protect_givens=self.config.session.protect_givens,
            max_hints_override=self.config.session.max_hints,
        )
        size = self.config.board.size
        difficulty = self.config.difficulty
        self._state = GameState.idle(
            size=size,
            difficulty=difficulty,
            max_hints=self.context.max_hints(difficulty, size),
            box=self.config.board.box_shape,
        )
        if start:
            self.new_game()

    @classmethod
    def from_puzzle(
        cls,
        puzzle: Sequence[Sequence[int]],
        config: Optional[Config] = None,
        solution: Optional[Sequence[Sequence[int]]] = None,
        **kwargs,
    ) -> GameSession:
        """Session over an externally supplied puzzle.

        Without `solution`, the solver computes one.

        Raises:
            ValueError: if the puzzle is malformed or has no solution, or if
                `solution` is not a valid completion of it.
        """
        size = len(puzzle)
        check_grid(puzzle, size)
        config = copy.deepcopy(config) if config is not None else Config()
        config.board.size = size
        session = cls(config=config, start=False, **kwargs)
        box = session.config.board.box_shape
        if solution is None:
            solution = solve(puzzle, size, box)
            if solution is None:
                raise ValueError("Puzzle has no solution")
        else:
            _check_completion(puzzle, solution, size, box)
        generated = GeneratedPuzzle(
            puzzle=clone_grid(puzzle),
            solution=clone_grid(solution),
            difficulty=session.difficulty,
            size=len(puzzle),
        )
        session.apply(NewGame(puzzle=generated))
        return session

    def make_generator(
        self, size: int, rng: Optional[np.random.Generator] = None
    ) -> SudokuGenerator:
        box = self.config.board.box_shape if size == self.config.board.size else None
        return SudokuGenerator(
            size=size,
            box=box,
            policy=self.policy,
            rng=rng if rng is not None else self.rng,
            max_attempts=self.config.generation.max_attempts,
            verify_solvable=self.config.generation.verify_solvable,
        )

    def apply(self, command: Command) -> GameState:
        self._state = transition(self._state, command, self.context)
        return self._state

    # commands

    def make_move(self, row: int, col: int, value: int) -> None:
        self.apply(MakeMove(row, col, value))

    def clear_cell(self, row: int, col: int) -> None:
        self.make_move(row, col, EMPTY)

    def undo(self) -> None:
        self.apply(Undo())

    def redo(self) -> None:
        self.apply(Redo())

    def get_hint(self) -> None:
        self.apply(Hint())

    def reset_game(self) -> None:
        self.apply(Reset())

    def new_game(
        self, difficulty: Optional[Union[Difficulty, str]] = None, size: Optional[int] = None
    ) -> None:
        self.apply(
            NewGame(
                difficulty=Difficulty(difficulty) if difficulty is not None else None,
                size=size,
            )
        )
        logger.info(
            f"New {self.size}x{self.size} {self.difficulty.value} game, "
            f"{self.size * self.size - len(empty_cells(self._state.grid))} givens"
        )

    # views

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def size(self) -> int:
        return self._state.size

    @property
    def difficulty(self) -> Difficulty:
        return self._state.difficulty

    @property
    def status(self) -> GameStatus:
        return self._state.status

    @property
    def grid(self) -> Grid:
        return clone_grid(self._state.grid)

    @property
    def initial_grid(self) -> Grid:
        return clone_grid(self._state.initial_grid)

    @property
    def solution(self) -> Optional[Grid]:
        return clone_grid(self._state.solution) if self._state.solution is not None else None

    @property
    def conflicts(self) -> FrozenSet[Cell]:
        return self._state.conflicts

    @property
    def moves(self) -> int:
        return self._state.moves

    @property
    def hints_used(self) -> int:
        return self._state.hints_used

    @property
    def max_hints(self) -> int:
        return self._state.max_hints

    @property
    def hints_remaining(self) -> int:
        return self._state.hints_remaining

    @property
    def undo_stack(self) -> List[Move]:
        return list(self._state.undo_stack)

    @property
    def redo_stack(self) -> List[Move]:
        return list(self._state.redo_stack)

    @property
    def can_undo(self) -> bool:
        return self._state.can_undo

    @property
    def can_redo(self) -> bool:
        return self._state.can_redo

    @property
    def is_complete(self) -> bool:
        return self._state.is_complete

    @property
    def score(self) -> int:
        return compute_score(self.moves, self.hints_used)

    def is_given(self, row: int, col: int) -> bool:
        check_cell(self.size, row, col)
        return self._state.is_given(row, col)

    def check_solution(self) -> bool:
        """Grid matches the solution, conflicts aside."""
        return self._state.is_loaded and self._state.grid == self._state.solution

    def summary(self, time_elapsed: float = 0.0) -> CompletionSummary:
        return CompletionSummary(
            moves=self.moves,
            hints_used=self.hints_used,
            time_elapsed=time_elapsed,
            difficulty=self.difficulty.value,
            size=self.size,
            score=self.score,
        )
