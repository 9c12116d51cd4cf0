# -*- coding: utf-8 -*-
"""Puzzle engine: validation, generation, solving and the game state machine."""
from sudoku_engine.puzzle.generator import GeneratedPuzzle, SudokuGenerator, generate
from sudoku_engine.puzzle.policy import DifficultyPolicy, PolicyEntry, TablePolicy
from sudoku_engine.puzzle.session import GameSession, GameState, Move, transition
from sudoku_engine.puzzle.solver import count_solutions, has_unique_solution, solve
from sudoku_engine.puzzle.validator import (
    find_conflicts,
    has_conflict,
    is_solved,
    is_valid_grid,
    is_valid_placement,
)
from sudoku_engine.utils.registry import Registry

POLICIES: Registry = Registry(
    "difficulty_policies",
    default_mapping={
        "table": "sudoku_engine.puzzle.policy.TablePolicy",
    },
)

__all__ = [
    "POLICIES",
    "DifficultyPolicy",
    "GameSession",
    "GameState",
    "GeneratedPuzzle",
    "Move",
    "PolicyEntry",
    "SudokuGenerator",
    "TablePolicy",
    "count_solutions",
    "find_conflicts",
    "generate",
    "has_conflict",
    "has_unique_solution",
    "is_solved",
    "is_valid_grid",
    "is_valid_placement",
    "solve",
    "transition",
]
