"""Difficulty policies: (difficulty, size) -> hint budget and fill fraction."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Union

from sudoku_engine.common.constants import Difficulty
from sudoku_engine.utils.log import get_logger


@dataclass(frozen=True)
class PolicyEntry:
    max_hints: int
    fill_fraction: float  # share of cells left as givens, in (0, 1)

    def __post_init__(self):
        if not 0.0 < self.fill_fraction < 1.0:
            raise ValueError(f"fill_fraction must be in (0, 1), got {self.fill_fraction}")
        if self.max_hints < 0:
            raise ValueError(f"max_hints must be >= 0, got {self.max_hints}")

    def cells_to_keep(self, size: int) -> int:
        # int() floors the non-negative product
        return int(size * size * self.fill_fraction)

    def cells_to_remove(self, size: int) -> int:
        return size * size - self.cells_to_keep(size)


DEFAULT_TABLE: Dict[Difficulty, Dict[int, PolicyEntry]] = {
    Difficulty.EASY: {
        4: PolicyEntry(max_hints=5, fill_fraction=0.5),
        6: PolicyEntry(max_hints=8, fill_fraction=0.5),
        9: PolicyEntry(max_hints=10, fill_fraction=0.4),
    },
    Difficulty.MEDIUM: {
        4: PolicyEntry(max_hints=3, fill_fraction=0.5),
        6: PolicyEntry(max_hints=5, fill_fraction=0.4),
        9: PolicyEntry(max_hints=7, fill_fraction=0.3),
    },
    Difficulty.HARD: {
        4: PolicyEntry(max_hints=2, fill_fraction=0.4),
        6: PolicyEntry(max_hints=3, fill_fraction=0.3),
        9: PolicyEntry(max_hints=5, fill_fraction=0.25),
    },
    Difficulty.EXPERT: {
        4: PolicyEntry(max_hints=1, fill_fraction=0.3),
        6: PolicyEntry(max_hints=2, fill_fraction=0.25),
        9: PolicyEntry(max_hints=3, fill_fraction=0.2),
    },
}


class DifficultyPolicy(ABC):
    """Base class of difficulty policies registered in `POLICIES`."""

    @abstractmethod
    def lookup(self, difficulty: Union[Difficulty, str], size: int) -> PolicyEntry:
        """Hint budget and fill fraction for a board."""


class TablePolicy(DifficultyPolicy):
    """Fixed lookup table keyed by difficulty, then board size.

    Sizes missing from a difficulty's row use the nearest tabulated size,
    preferring the larger one on a tie.
    """

    def __init__(self, table: Optional[Mapping] = None):
        """
        Args:
            table (`dict`): Optional override in config form, e.g.
                ``{"easy": {4: {"max_hints": 5, "fill_fraction": 0.6}}}``.
                Difficulties it leaves out keep the default rows.
        """
        self.logger = get_logger(__name__)
        self.table: Dict[Difficulty, Dict[int, PolicyEntry]] = {
            d: dict(row) for d, row in DEFAULT_TABLE.items()
        }
        for difficulty, row in (table or {}).items():
            self.table[Difficulty(difficulty)] = {
                int(size): entry if isinstance(entry, PolicyEntry) else PolicyEntry(**entry)
                for size, entry in row.items()
            }

    def lookup(self, difficulty: Union[Difficulty, str], size: int) -> PolicyEntry:
        row = self.table[Difficulty(difficulty)]
        if not row:
            raise ValueError(f"No policy entries for difficulty {difficulty}")
        if size in row:
            return row[size]
        nearest = min(row, key=lambda s: (abs(s - size), -s))
        self.logger.debug(f"No policy entry for size {size}, using size {nearest}")
        return row[nearest]
