"""
Snake Logic - Solvability

Simulates the clearing process: keep removing the first snake whose exit
ray is free until nothing more can leave. Removing a snake never blocks
another one, so the greedy fixed point empties the board exactly when
some removal order does.
"""

from typing import Dict, List, Optional

from .collision import DEFAULT_TOLERANCE, collides
from .geometry import Snake, is_axis_aligned


def _others(snakes: List[Snake], index: int) -> List[Snake]:
    return snakes[:index] + snakes[index + 1:]


def get_full_solution(snakes: List[Snake], tolerance: float = DEFAULT_TOLERANCE) -> List[str]:
    """
    Removal order found by the greedy scan.

    Shorter than the board when the remaining snakes deadlock.
    """
    remaining = list(snakes)
    solution = []

    changed = True
    while changed and remaining:
        changed = False
        for i, snake in enumerate(remaining):
            if not collides(snake, _others(remaining, i), tolerance):
                solution.append(snake.id)
                del remaining[i]
                changed = True
                break

    return solution


def is_solvable(snakes: List[Snake], tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """True if the board can be cleared by legal removals."""
    return len(get_full_solution(snakes, tolerance)) == len(snakes)


def find_hintable(snakes: List[Snake], tolerance: float = DEFAULT_TOLERANCE) -> Optional[Snake]:
    """First snake that can leave right now."""
    for i, snake in enumerate(snakes):
        if not collides(snake, _others(snakes, i), tolerance):
            return snake
    return None


# ============================================
# VALIDATION
# ============================================

def validate_board(snakes: List[Snake], tolerance: float = DEFAULT_TOLERANCE) -> Dict:
    """Structural checks plus solvability, for tooling and the API."""
    errors = []

    seen_ids = set()
    for snake in snakes:
        if snake.id in seen_ids:
            errors.append(f"Snake {snake.id}: duplicate id")
        seen_ids.add(snake.id)

    for snake in snakes:
        if len(snake.points) < 2:
            errors.append(f"Snake {snake.id} has less than 2 points")
            continue

        if len(set(snake.points)) != len(snake.points):
            errors.append(f"Snake {snake.id}: repeated point")

        for i, (p1, p2) in enumerate(snake.segments()):
            if not is_axis_aligned(p1, p2):
                errors.append(f"Snake {snake.id} not axis-aligned at segment {i}")
                break

    solution = []
    if not errors:
        solution = get_full_solution(snakes, tolerance)
        if len(solution) != len(snakes):
            errors.append(f"Board not solvable: {len(solution)}/{len(snakes)} snakes removable")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "solution": solution,
    }
