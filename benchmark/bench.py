"""Generation quality benchmark.

Generates puzzles for every (difficulty, size) pair, re-solves them and prints
a table of solver agreement, uniqueness and timing.

Example:
    python benchmark/bench.py --sizes 4 6 9 --samples 20 --seed 7 --output report.yaml
"""
import argparse
import sys

import yaml

from sudoku_engine.common.config import load_config
from sudoku_engine.common.constants import Difficulty
from sudoku_engine.puzzle import POLICIES
from sudoku_engine.puzzle.quality import evaluate_all
from sudoku_engine.utils.log import get_logger

logger = get_logger("bench")

COLUMNS = [
    ("difficulty", "difficulty"),
    ("size", "size"),
    ("n", "total_generated"),
    ("matches", "solver_matches"),
    ("unique", "unique_puzzles"),
    ("distinct", "distinct_solutions"),
    ("givens", "avg_givens"),
    ("gen ms", "avg_generation_ms"),
    ("solve ms", "avg_solve_ms"),
]


def format_table(reports):
    rows = [[str(r.to_dict()[key]) for _, key in COLUMNS] for r in reports]
    headers = [title for title, _ in COLUMNS]
    col_widths = [max(len(h), *(len(row[i]) for row in rows)) for i, h in enumerate(headers)]
    lines = [" | ".join(h.ljust(w) for h, w in zip(headers, col_widths))]
    lines.append("-+-".join("-" * w for w in col_widths))
    for row in rows:
        lines.append(" | ".join(cell.ljust(w) for cell, w in zip(row, col_widths)))
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Sudoku generation quality benchmark")
    parser.add_argument("--sizes", type=int, nargs="+", default=[4, 6, 9])
    parser.add_argument(
        "--difficulties",
        type=str,
        nargs="+",
        default=[d.value for d in Difficulty],
    )
    parser.add_argument("--samples", type=int, default=10)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--config", type=str, default=None, help="YAML config providing the difficulty policy"
    )
    parser.add_argument(
        "--skip-uniqueness", action="store_true", help="do not count solutions per puzzle"
    )
    parser.add_argument("--output", type=str, default=None, help="write the report as YAML")
    args = parser.parse_args(argv)

    policy = None
    if args.config is not None:
        config = load_config(args.config).check_and_update()
        policy = POLICIES.get(config.policy.policy_type)(**config.policy.policy_args)

    reports = evaluate_all(
        sizes=args.sizes,
        difficulties=args.difficulties,
        samples=args.samples,
        seed=args.seed,
        policy=policy,
        check_uniqueness=not args.skip_uniqueness,
    )
    print(format_table(reports))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            yaml.safe_dump([r.to_dict() for r in reports], f, sort_keys=False)
        logger.info(f"Report written to {args.output}")

    return 0 if all(r.unsolvable == 0 for r in reports) else 1


if __name__ == "__main__":
    sys.exit(main())
