"""Display score and the completion summary handed to leaderboards."""
from dataclasses import asdict, dataclass

from sudoku_engine.common.constants import BASE_SCORE, FREE_MOVES, HINT_PENALTY, MOVE_PENALTY


def compute_score(moves: int, hints_used: int) -> int:
    moves_penalty = max(0, moves - FREE_MOVES) * MOVE_PENALTY
    hints_penalty = hints_used * HINT_PENALTY
    return max(0, BASE_SCORE - moves_penalty - hints_penalty)


@dataclass(frozen=True)
class CompletionSummary:
    moves: int
    hints_used: int
    time_elapsed: float  # seconds, measured by the caller
    difficulty: str
    size: int
    score: int

    def to_dict(self) -> dict:
        return asdict(self)
