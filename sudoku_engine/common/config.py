# -*- coding: utf-8 -*-
"""Configs for the puzzle engine."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from omegaconf import OmegaConf

from sudoku_engine.common.constants import SEED_ENV_VAR, Difficulty
from sudoku_engine.common.grid import BoxShape, get_box_shape
from sudoku_engine.utils.log import get_logger

logger = get_logger(__name__)


@dataclass
class BoardConfig:
    """Board geometry."""

    size: int = 9
    # leave both unset to use the default decomposition for `size`
    box_width: Optional[int] = None
    box_height: Optional[int] = None

    @property
    def box_shape(self) -> BoxShape:
        return get_box_shape(self.size, self.box_width, self.box_height)


@dataclass
class GenerationConfig:
    seed: Optional[int] = None  # None: read SUDOKU_ENGINE_SEED, else fresh entropy
    max_attempts: int = 3  # fresh-randomness retries after a failed fill
    verify_solvable: bool = False  # re-solve every carved puzzle and warn on failure


@dataclass
class PolicyConfig:
    """Difficulty policy lookup, resolved through `POLICIES`."""

    policy_type: str = "table"
    policy_args: dict = field(default_factory=dict)


@dataclass
class SessionConfig:
    difficulty: str = Difficulty.MEDIUM.value
    protect_givens: bool = False  # reject moves on cells pre-filled by the puzzle
    max_hints: Optional[int] = None  # overrides the policy's hint budget


@dataclass
class Config:
    """Global Configuration"""

    name: str = "sudoku"
    log_level: Optional[str] = None
    board: BoardConfig = field(default_factory=BoardConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    session: SessionConfig = field(default_factory=SessionConfig)

    def save(self, config_path: str) -> None:
        """Save config to file."""
        with open(config_path, "w", encoding="utf-8") as f:
            OmegaConf.save(self, f)

    @property
    def difficulty(self) -> Difficulty:
        return Difficulty(self.session.difficulty)

    def _check_board(self) -> None:
        try:
            shape = self.board.box_shape
        except ValueError as e:
            raise ValueError(f"Invalid board config: {e}") from e
        logger.debug(f"Board {self.board.size}x{self.board.size}, box {shape.width}x{shape.height}")

    def _check_generation(self) -> None:
        if self.generation.max_attempts < 1:
            raise ValueError("generation.max_attempts must be >= 1")
        if self.generation.seed is None and os.environ.get(SEED_ENV_VAR):
            self.generation.seed = int(os.environ[SEED_ENV_VAR])
            logger.info(f"Using seed {self.generation.seed} from {SEED_ENV_VAR}")

    def _check_session(self) -> None:
        try:
            self.session.difficulty = Difficulty(self.session.difficulty).value
        except (KeyError, ValueError):
            raise ValueError(
                f"Invalid difficulty {self.session.difficulty!r}; "
                f"choose from {[d.value for d in Difficulty]}"
            )
        if self.session.max_hints is not None and self.session.max_hints < 0:
            raise ValueError("session.max_hints must be >= 0")

    def _check_policy(self) -> None:
        from sudoku_engine.puzzle import POLICIES

        policy_cls = POLICIES.get(self.policy.policy_type)
        # resolve once so a bad table fails here rather than mid-game
        policy_cls(**self.policy.policy_args).lookup(self.difficulty, self.board.size)

    def check_and_update(self) -> Config:
        """Validate the config and fill in derived fields."""
        if self.log_level is not None:
            get_logger(level=self.log_level)
        self._check_board()
        self._check_generation()
        self._check_session()
        self._check_policy()
        return self


def load_config(config_path: str) -> Config:
    """Load the configuration from the given path."""
    schema = OmegaConf.structured(Config)
    yaml_config = OmegaConf.load(config_path)
    try:
        config = OmegaConf.merge(schema, yaml_config)
        return OmegaConf.to_object(config)
    except Exception as e:
        raise ValueError(f"Invalid configuration: {e}") from e
