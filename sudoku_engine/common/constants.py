# -*- coding: utf-8 -*-
"""Constants."""
from enum import Enum, EnumMeta

# env var names

LOG_LEVEL_ENV_VAR = "SUDOKU_ENGINE_LOG_LEVEL"  # global log level
SEED_ENV_VAR = "SUDOKU_ENGINE_SEED"  # default seed when the config leaves it unset


# constants

EMPTY = 0

# canonical (box_width, box_height) per board size
CANONICAL_BOX_SHAPES = {
    4: (2, 2),
    6: (3, 2),
    9: (3, 3),
}

BASE_SCORE = 1000
FREE_MOVES = 50  # moves beyond this cost MOVE_PENALTY each
MOVE_PENALTY = 2
HINT_PENALTY = 50


# enumerate types


class CaseInsensitiveEnumMeta(EnumMeta):
    name_aliases = {}

    def __getitem__(cls, name):
        name = cls.name_aliases.get(name.lower(), name)
        return super().__getitem__(name.upper())

    def __getattr__(cls, name):
        if not name.startswith("_"):
            return cls[name.upper()]
        return super().__getattr__(name)

    def __call__(cls, value, *args, **kwargs):
        if isinstance(value, str):
            value = cls.name_aliases.get(value.lower(), value).lower()
        return super().__call__(value, *args, **kwargs)


class CaseInsensitiveEnum(Enum, metaclass=CaseInsensitiveEnumMeta):
    pass


class DifficultyEnumMeta(CaseInsensitiveEnumMeta):
    name_aliases = {
        "beginner": "easy",
        "normal": "medium",
    }


class Difficulty(CaseInsensitiveEnum, metaclass=DifficultyEnumMeta):
    """Difficulty level."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class GameStatus(CaseInsensitiveEnum):
    """Lifecycle of a game session."""

    IDLE = "idle"  # no puzzle yet
    READY = "ready"  # fresh puzzle, nothing played
    PLAYING = "playing"
    COMPLETED = "completed"
