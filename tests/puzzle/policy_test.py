import pytest

from sudoku_engine.common.constants import Difficulty
from sudoku_engine.puzzle.policy import PolicyEntry, TablePolicy


@pytest.mark.parametrize(
    "difficulty, size, max_hints, fill_fraction",
    [
        ("easy", 4, 5, 0.5),
        ("easy", 9, 10, 0.4),
        ("medium", 6, 5, 0.4),
        ("hard", 9, 5, 0.25),
        ("expert", 4, 1, 0.3),
        ("expert", 6, 2, 0.25),
    ],
)
def test_default_table(difficulty, size, max_hints, fill_fraction):
    entry = TablePolicy().lookup(difficulty, size)
    assert entry.max_hints == max_hints
    assert entry.fill_fraction == fill_fraction


def test_difficulty_names_are_case_insensitive():
    policy = TablePolicy()
    assert policy.lookup("HARD", 9) == policy.lookup(Difficulty.HARD, 9)
    assert policy.lookup("Normal", 6) == policy.lookup("medium", 6)


def test_unknown_difficulty():
    with pytest.raises(ValueError):
        TablePolicy().lookup("impossible", 9)


def test_nearest_size_fallback():
    policy = TablePolicy()
    assert policy.lookup("medium", 8) == policy.lookup("medium", 9)
    assert policy.lookup("medium", 16) == policy.lookup("medium", 9)
    # 5 sits between 4 and 6; the tie goes to the larger size
    assert policy.lookup("medium", 5) == policy.lookup("medium", 6)


def test_cells_to_remove_floors_kept_cells():
    entry = PolicyEntry(max_hints=7, fill_fraction=0.3)
    assert entry.cells_to_keep(9) == 24
    assert entry.cells_to_remove(9) == 57


def test_override_table_from_config_form():
    policy = TablePolicy(table={"hard": {6: {"max_hints": 4, "fill_fraction": 0.35}}})
    assert policy.lookup("hard", 6) == PolicyEntry(max_hints=4, fill_fraction=0.35)
    # untouched difficulties keep the defaults
    assert policy.lookup("easy", 6).max_hints == 8


@pytest.mark.parametrize("fill_fraction", [0.0, 1.0, 1.5])
def test_entry_rejects_bad_fill_fraction(fill_fraction):
    with pytest.raises(ValueError):
        PolicyEntry(max_hints=1, fill_fraction=fill_fraction)
