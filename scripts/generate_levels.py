#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import time
from pathlib import Path
from typing import Any

from snake_logic.config import settings
from snake_logic.services.generator import GeneratorConfig, generate_level
from snake_logic.services.geometry import Snake
from snake_logic.services.solver import validate_board


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate boards for a range of levels and check that each one is solvable."
    )
    parser.add_argument("--start-level", type=int, default=1, help="First level to generate.")
    parser.add_argument("--end-level", type=int, default=30, help="Last level to generate (inclusive).")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Base seed; level N uses seed + N. Random seeds when omitted.",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Write each board to OUT/level_<n>.json. Without this flag, only report.",
    )
    return parser.parse_args(argv)


def generate_one(level: int, seed: int | None, config: GeneratorConfig) -> tuple[dict[str, Any], dict[str, Any], float]:
    started = time.monotonic()
    board = generate_level(level, seed=seed, config=config)
    elapsed_ms = (time.monotonic() - started) * 1000

    snakes = [Snake.from_dict(s) for s in board["snakes"]]
    report = validate_board(snakes, config.tolerance) if snakes else {"valid": False, "errors": ["generation failed"]}
    return board, report, elapsed_ms


def write_board(out_dir: Path, board: dict[str, Any]) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"level_{board['level']}.json"
    path.write_text(json.dumps(board, ensure_ascii=False, indent="\t") + "\n", encoding="utf-8")
    return path


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.start_level < 1 or args.end_level < args.start_level:
        raise SystemExit(f"Invalid level range: {args.start_level}..{args.end_level}")

    config = GeneratorConfig.from_settings(settings)
    failed = 0

    for level in range(args.start_level, args.end_level + 1):
        seed = None if args.seed is None else args.seed + level
        board, report, elapsed_ms = generate_one(level, seed, config)

        status = "ok" if report["valid"] else "FAILED"
        print(
            f"Level {level:3d} {status:6s} | {elapsed_ms:7.1f}ms | tier={board['tier']} "
            f"seed={board['seed']} snakes={board['meta']['snake_count']} attempts={board['meta']['attempts']}"
        )
        if not report["valid"]:
            failed += 1
            for error in report["errors"][:5]:
                print(f"  - {error}")
            continue

        if args.out is not None:
            write_board(args.out, board)

    total = args.end_level - args.start_level + 1
    print(f"Generated {total - failed}/{total} level(s).")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
