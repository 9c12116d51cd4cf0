# -*- coding: utf-8 -*-
"""Test cases for the game state machine."""
import itertools
import unittest

import numpy as np

from sudoku_engine.common.config import Config
from sudoku_engine.common.constants import Difficulty, GameStatus
from sudoku_engine.common.grid import GivenCellError, InvalidMoveError, count_filled, empty_cells
from sudoku_engine.puzzle.session import (
    GameSession,
    GameState,
    Hint,
    MakeMove,
    NewGame,
    Undo,
    transition,
)
from sudoku_engine.puzzle.validator import is_valid_grid
from tests.tools import (
    PUZZLE_9,
    SOLUTION_4,
    SOLUTION_6,
    SOLUTION_9,
    carve_cells,
    get_template_config,
)


def make_session(puzzle, solution, difficulty="medium", **config_kwargs):
    config = Config()
    config.session.difficulty = difficulty
    for key, value in config_kwargs.items():
        setattr(config.session, key, value)
    ticks = itertools.count()
    return GameSession.from_puzzle(
        puzzle,
        config=config,
        solution=solution,
        rng=np.random.default_rng(0),
        clock=lambda: float(next(ticks)),
    )


class TestGeneratedSession(unittest.TestCase):
    def test_easy_4x4_session(self):
        session = GameSession(get_template_config(size=4, difficulty="easy"))
        self.assertEqual(count_filled(session.grid), 8)
        self.assertEqual(session.grid, session.initial_grid)
        self.assertEqual(session.status, GameStatus.READY)
        self.assertFalse(session.is_complete)

        solution = session.solution
        for r, c in empty_cells(session.grid):
            session.make_move(r, c, solution[r][c])
        self.assertTrue(session.is_complete)
        self.assertEqual(session.status, GameStatus.COMPLETED)
        self.assertEqual(session.conflicts, frozenset())

    def test_solution_is_valid(self):
        for size in (4, 6, 9):
            with self.subTest(size=size):
                session = GameSession(get_template_config(size=size))
                self.assertTrue(is_valid_grid(session.solution, size))

    def test_new_game_replaces_puzzle_and_history(self):
        session = GameSession(get_template_config(size=9, difficulty="hard"))
        r, c = empty_cells(session.grid)[0]
        session.make_move(r, c, 1)
        old_solution = session.solution

        session.new_game()
        self.assertEqual(session.moves, 0)
        self.assertEqual(session.hints_used, 0)
        self.assertFalse(session.can_undo)
        self.assertFalse(session.can_redo)
        self.assertEqual(session.grid, session.initial_grid)
        self.assertNotEqual(session.solution, old_solution)

    def test_new_game_with_other_size_and_difficulty(self):
        session = GameSession(get_template_config(size=9))
        session.new_game(difficulty="expert", size=6)
        self.assertEqual(session.size, 6)
        self.assertEqual(session.difficulty, Difficulty.EXPERT)
        self.assertEqual(session.max_hints, 2)
        self.assertEqual(count_filled(session.grid), int(36 * 0.25))

    def test_seeded_sessions_are_reproducible(self):
        first = GameSession(get_template_config(size=6, seed=11))
        second = GameSession(get_template_config(size=6, seed=11))
        self.assertEqual(first.grid, second.grid)

    def test_idle_session(self):
        session = GameSession(get_template_config(size=4), start=False)
        self.assertEqual(session.status, GameStatus.IDLE)
        session.undo()
        session.get_hint()
        session.reset_game()
        self.assertEqual(session.moves, 0)
        with self.assertRaises(RuntimeError):
            session.make_move(0, 0, 1)


class TestMoves(unittest.TestCase):
    def setUp(self):
        self.puzzle = carve_cells(SOLUTION_4, [(0, 0), (0, 1), (1, 2), (2, 3), (3, 0), (3, 3)])
        self.session = make_session(self.puzzle, SOLUTION_4)

    def test_make_move_records_history(self):
        self.session.make_move(0, 0, 1)
        self.assertEqual(self.session.grid[0][0], 1)
        self.assertEqual(self.session.moves, 1)
        self.assertEqual(self.session.status, GameStatus.PLAYING)
        move = self.session.undo_stack[-1]
        self.assertEqual((move.row, move.col, move.old_value, move.new_value), (0, 0, 0, 1))
        self.assertEqual(move.timestamp, 0.0)

    def test_move_then_undo_restores_grid(self):
        before = self.session.grid
        self.session.make_move(0, 0, 1)
        self.session.undo()
        self.assertEqual(self.session.grid, before)
        self.assertEqual(self.session.moves, 2)
        self.assertTrue(self.session.can_redo)

    def test_undo_all_then_redo_all(self):
        moves = [(0, 0, 1), (0, 1, 3), (1, 2, 1), (0, 0, 4), (3, 3, 1)]
        for move in moves:
            self.session.make_move(*move)
        played = self.session.grid

        for _ in moves:
            self.session.undo()
        self.assertEqual(self.session.grid, self.puzzle)
        self.assertFalse(self.session.can_undo)

        for _ in moves:
            self.session.redo()
        self.assertEqual(self.session.grid, played)
        self.assertFalse(self.session.can_redo)
        self.assertEqual(self.session.moves, 3 * len(moves))

    def test_new_move_clears_redo(self):
        self.session.make_move(0, 0, 1)
        self.session.undo()
        self.assertTrue(self.session.can_redo)
        self.session.make_move(0, 1, 2)
        self.assertFalse(self.session.can_redo)

    def test_undo_and_redo_on_empty_stacks_are_noops(self):
        state = self.session.state
        self.session.undo()
        self.session.redo()
        self.assertIs(self.session.state, state)
        self.assertEqual(self.session.moves, 0)

    def test_conflicts_track_both_cells(self):
        self.session.make_move(0, 0, 2)  # 2 already sits at (2, 0)
        self.assertEqual(self.session.conflicts, frozenset({(0, 0), (2, 0)}))
        self.session.clear_cell(0, 0)
        self.assertEqual(self.session.conflicts, frozenset())
        self.session.undo()
        self.assertEqual(self.session.conflicts, frozenset({(0, 0), (2, 0)}))

    def test_complete_requires_solution_match(self):
        for r, c in empty_cells(self.puzzle):
            self.session.make_move(r, c, SOLUTION_4[r][c])
        self.assertTrue(self.session.is_complete)
        self.assertTrue(self.session.check_solution())
        self.session.undo()
        self.assertFalse(self.session.is_complete)

    def test_out_of_range_inputs_are_rejected(self):
        for row, col, value in [(-1, 0, 1), (0, 4, 1), (4, 4, 1), (0, 0, 5), (0, 0, -1)]:
            with self.subTest(row=row, col=col, value=value):
                with self.assertRaises(InvalidMoveError):
                    self.session.make_move(row, col, value)
        self.assertEqual(self.session.moves, 0)

    def test_given_cells_are_writable_by_default(self):
        self.assertTrue(self.session.is_given(0, 2))
        self.session.make_move(0, 2, 4)
        self.assertEqual(self.session.grid[0][2], 4)

    def test_protected_givens(self):
        session = make_session(self.puzzle, SOLUTION_4, protect_givens=True)
        with self.assertRaises(GivenCellError):
            session.make_move(0, 2, 4)
        session.make_move(0, 0, 1)
        self.assertEqual(session.grid[0][0], 1)

    def test_reset_restores_initial_grid(self):
        self.session.make_move(0, 0, 1)
        self.session.make_move(0, 1, 3)
        self.session.get_hint()
        solution = self.session.solution

        self.session.reset_game()
        self.assertEqual(self.session.grid, self.puzzle)
        self.assertEqual(self.session.moves, 0)
        self.assertEqual(self.session.hints_used, 0)
        self.assertEqual(self.session.conflicts, frozenset())
        self.assertFalse(self.session.can_undo)
        self.assertFalse(self.session.can_redo)
        self.assertEqual(self.session.solution, solution)
        self.assertEqual(self.session.status, GameStatus.READY)

    def test_score_and_summary(self):
        self.assertEqual(self.session.score, 1000)
        self.session.get_hint()
        self.assertEqual(self.session.score, 950)
        summary = self.session.summary(time_elapsed=12.5)
        self.assertEqual(summary.moves, 1)
        self.assertEqual(summary.hints_used, 1)
        self.assertEqual(summary.difficulty, "medium")
        self.assertEqual(summary.size, 4)
        self.assertEqual(summary.to_dict()["time_elapsed"], 12.5)


class TestHints(unittest.TestCase):
    def test_hints_fill_empty_cells_with_solution(self):
        session = make_session(carve_cells(SOLUTION_4, [(0, 0), (1, 1), (2, 2), (3, 3)]), SOLUTION_4)
        session.make_move(0, 0, 3)  # wrong digit; the cell is no longer empty
        for _ in range(3):
            before = session.grid
            session.get_hint()
            after = session.grid
            changed = [
                (r, c) for r in range(4) for c in range(4) if before[r][c] != after[r][c]
            ]
            self.assertEqual(len(changed), 1)
            r, c = changed[0]
            self.assertEqual(before[r][c], 0)
            self.assertEqual(after[r][c], SOLUTION_4[r][c])
        self.assertEqual(session.grid[0][0], 3)
        self.assertEqual(session.hints_used, 3)
        self.assertEqual(session.moves, 4)
        # a hint is an ordinary move on the undo stack
        session.undo()
        self.assertEqual(session.hints_used, 3)
        self.assertEqual(len(empty_cells(session.grid)), 1)

    def test_medium_6x6_hint_budget(self):
        cells = [(r, c) for r in range(6) for c in range(6) if (r + c) % 2 == 0]
        session = make_session(carve_cells(SOLUTION_6, cells), SOLUTION_6, difficulty="medium")
        self.assertEqual(session.max_hints, 5)
        for _ in range(5):
            session.get_hint()
        self.assertEqual(session.hints_used, 5)
        self.assertEqual(session.hints_remaining, 0)

        grid, moves = session.grid, session.moves
        session.get_hint()
        self.assertEqual(session.hints_used, 5)
        self.assertEqual(session.grid, grid)
        self.assertEqual(session.moves, moves)

    def test_hint_on_full_grid_is_noop(self):
        session = make_session(carve_cells(SOLUTION_4, [(1, 1)]), SOLUTION_4)
        session.make_move(1, 1, 2)
        session.get_hint()
        self.assertEqual(session.hints_used, 0)
        self.assertEqual(session.moves, 1)

    def test_max_hints_override(self):
        session = make_session(
            carve_cells(SOLUTION_4, [(0, 0), (1, 1)]), SOLUTION_4, max_hints=0
        )
        session.get_hint()
        self.assertEqual(session.hints_used, 0)


class TestFromPuzzle(unittest.TestCase):
    def test_solution_is_computed_when_missing(self):
        session = GameSession.from_puzzle(PUZZLE_9)
        self.assertEqual(session.solution, SOLUTION_9)
        self.assertEqual(session.size, 9)

    def test_unsolvable_puzzle(self):
        puzzle = [[1, 2, 3, 0], [0, 0, 0, 0], [0, 0, 0, 4], [0, 0, 0, 0]]
        with self.assertRaises(ValueError):
            GameSession.from_puzzle(puzzle)

    def test_caller_config_is_not_modified(self):
        config = Config()
        GameSession.from_puzzle(carve_cells(SOLUTION_4, [(0, 0)]), config=config)
        self.assertEqual(config.board.size, 9)

    def test_malformed_puzzle(self):
        with self.assertRaises(ValueError):
            GameSession.from_puzzle([[1, 2, 3], [0, 0, 0], [0, 0, 0], [0, 0, 0]])
        with self.assertRaises(ValueError):
            GameSession.from_puzzle([[7, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]])

    def test_supplied_solution_is_checked(self):
        puzzle = carve_cells(SOLUTION_4, [(0, 0), (1, 1)])
        incomplete = carve_cells(SOLUTION_4, [(3, 3)])
        broken = [row[:] for row in SOLUTION_4]
        broken[0][0], broken[0][1] = broken[0][1], broken[0][0]
        disagreeing = [row[::-1] for row in SOLUTION_4]
        for solution in (incomplete, broken, disagreeing, [[1, 2], [2, 1]]):
            with self.subTest(solution=solution):
                with self.assertRaises(ValueError):
                    GameSession.from_puzzle(puzzle, solution=solution)

    def test_supplied_solution_is_used(self):
        puzzle = carve_cells(SOLUTION_4, [(0, 0), (1, 1)])
        session = GameSession.from_puzzle(puzzle, solution=SOLUTION_4)
        self.assertEqual(session.solution, SOLUTION_4)
        self.assertEqual(session.initial_grid, puzzle)


class TestTransition(unittest.TestCase):
    def setUp(self):
        self.session = make_session(carve_cells(SOLUTION_4, [(0, 0), (1, 1)]), SOLUTION_4)

    def test_transition_is_pure(self):
        state = self.session.state
        next_state = transition(state, MakeMove(0, 0, 1), self.session.context)
        self.assertEqual(state.grid[0][0], 0)
        self.assertEqual(next_state.grid[0][0], 1)
        self.assertEqual(state.moves, 0)
        self.assertEqual(self.session.state, state)

    def test_commands_chain(self):
        state = self.session.state
        for command in (MakeMove(0, 0, 1), Hint(), Undo()):
            state = transition(state, command, self.session.context)
        self.assertEqual(state.moves, 3)
        self.assertEqual(state.hints_used, 1)
        self.assertIsInstance(state, GameState)

    def test_new_game_command_with_supplied_puzzle(self):
        generated = self.session.make_generator(6).generate("easy")
        state = transition(self.session.state, NewGame(puzzle=generated), self.session.context)
        self.assertEqual(state.size, 6)
        self.assertEqual(state.max_hints, 8)
        self.assertEqual([list(r) for r in state.solution], generated.solution)

    def test_unknown_command(self):
        with self.assertRaises(TypeError):
            transition(self.session.state, object(), self.session.context)
