"""
Snake Logic - Exit Ray Collision

A snake can leave the board only if the ray cast from its head along its
heading misses the bodies of every other snake still on the board. Bodies
have a visual thickness, so a segment blocks the ray when its centreline
passes within half the stroke width of it.
"""

import math
from typing import Iterable

from .geometry import Heading, Snake


# ============================================
# CONSTANTS
# ============================================

SNAKE_STROKE_WIDTH = 18

# The exit ray runs on past any board edge.
RAY_FAR_LOW = -math.inf
RAY_FAR_HIGH = math.inf

# Segments whose endpoints differ by less than this on an axis are flat on it.
AXIS_EPSILON = 0.1

# Open bound: a segment touching the head itself does not block.
HEAD_CLEARANCE = 1


def collision_tolerance(stroke_width: float = SNAKE_STROKE_WIDTH) -> float:
    """Half the body thickness, minus a little slack for touching edges."""
    return stroke_width / 2 - 0.5


DEFAULT_TOLERANCE = collision_tolerance()


# ============================================
# RAY / SEGMENT TEST
# ============================================

def ray_hits_segment(
    rx1: float, ry1: float, rx2: float, ry2: float,
    sx1: float, sy1: float, sx2: float, sy2: float,
    tolerance: float,
) -> bool:
    """
    Axis-aligned ray (rx1, ry1) → (rx2, ry2) against the segment
    (sx1, sy1) – (sx2, sy2).

    The ray origin is the moving head; only the part strictly ahead of it
    counts.
    """
    ray_horizontal = abs(ry1 - ry2) < AXIS_EPSILON
    seg_horizontal = abs(sy1 - sy2) < AXIS_EPSILON

    if ray_horizontal:
        if seg_horizontal:
            # Both horizontal: same row, x-range ahead of the head
            if abs(ry1 - sy1) > tolerance:
                return False
            s_min_x, s_max_x = min(sx1, sx2), max(sx1, sx2)
            if rx2 > rx1:
                return s_max_x > rx1 + HEAD_CLEARANCE and s_min_x < rx2
            return s_min_x < rx1 - HEAD_CLEARANCE and s_max_x > rx2

        # Ray horizontal, segment vertical
        s_x = sx1
        s_min_y, s_max_y = min(sy1, sy2), max(sy1, sy2)
        if ry1 < s_min_y - tolerance or ry1 > s_max_y + tolerance:
            return False
        if rx2 > rx1:
            return rx1 + HEAD_CLEARANCE < s_x < rx2
        return rx2 < s_x < rx1 - HEAD_CLEARANCE

    if not seg_horizontal:
        # Both vertical: same column, y-range ahead of the head
        if abs(rx1 - sx1) > tolerance:
            return False
        s_min_y, s_max_y = min(sy1, sy2), max(sy1, sy2)
        if ry2 > ry1:
            return s_max_y > ry1 + HEAD_CLEARANCE and s_min_y < ry2
        return s_min_y < ry1 - HEAD_CLEARANCE and s_max_y > ry2

    # Ray vertical, segment horizontal
    s_y = sy1
    s_min_x, s_max_x = min(sx1, sx2), max(sx1, sx2)
    if rx1 < s_min_x - tolerance or rx1 > s_max_x + tolerance:
        return False
    if ry2 > ry1:
        return ry1 + HEAD_CLEARANCE < s_y < ry2
    return ry2 < s_y < ry1 - HEAD_CLEARANCE


def exit_ray(snake: Snake):
    """(x1, y1, x2, y2) of the ray from the head to past the board edge."""
    hx, hy = snake.head
    heading = snake.heading

    x2 = RAY_FAR_LOW if heading == Heading.LEFT else (RAY_FAR_HIGH if heading == Heading.RIGHT else hx)
    y2 = RAY_FAR_LOW if heading == Heading.UP else (RAY_FAR_HIGH if heading == Heading.DOWN else hy)
    return hx, hy, x2, y2


# ============================================
# PUBLIC API
# ============================================

def collides(snake: Snake, others: Iterable[Snake], tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """True if any segment of `others` blocks `snake`'s exit."""
    rx1, ry1, rx2, ry2 = exit_ray(snake)

    for other in others:
        for (sx1, sy1), (sx2, sy2) in other.segments():
            if ray_hits_segment(rx1, ry1, rx2, ry2, sx1, sy1, sx2, sy2, tolerance):
                return True

    return False


def find_blockers(snake: Snake, others: Iterable[Snake], tolerance: float = DEFAULT_TOLERANCE) -> list:
    """Ids of every snake in `others` that blocks `snake`."""
    rx1, ry1, rx2, ry2 = exit_ray(snake)
    blockers = []

    for other in others:
        for (sx1, sy1), (sx2, sy2) in other.segments():
            if ray_hits_segment(rx1, ry1, rx2, ry2, sx1, sy1, sx2, sy2, tolerance):
                blockers.append(other.id)
                break

    return blockers
