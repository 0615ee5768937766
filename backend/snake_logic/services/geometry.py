"""
Snake Logic - Board Geometry

Headings, points and the Snake entity shared by the generator,
the collision test and the exit animation.
"""

import math
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple


Point = Tuple[float, float]


# ============================================
# HEADINGS
# ============================================

class Heading(str, Enum):
    """Axis-aligned exit direction. Screen coordinates: y grows downward."""

    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


DIRECTIONS: List[Heading] = [Heading.UP, Heading.DOWN, Heading.LEFT, Heading.RIGHT]

DIRECTION_VECTORS: Dict[Heading, Tuple[int, int]] = {
    Heading.UP: (0, -1),
    Heading.DOWN: (0, 1),
    Heading.LEFT: (-1, 0),
    Heading.RIGHT: (1, 0),
}

OPPOSITES: Dict[Heading, Heading] = {
    Heading.UP: Heading.DOWN,
    Heading.DOWN: Heading.UP,
    Heading.LEFT: Heading.RIGHT,
    Heading.RIGHT: Heading.LEFT,
}

SNAKE_COLORS = [
    "#84cc16",  # lime
    "#06b6d4",  # cyan
    "#8b5cf6",  # violet
    "#f59e0b",  # amber
    "#f43f5e",  # rose
    "#3b82f6",  # blue
    "#10b981",  # emerald
]


def move_in_direction(pos: Point, heading: Heading, distance: float) -> Point:
    """Point reached after moving `distance` along `heading`."""
    dx, dy = DIRECTION_VECTORS[heading]
    return (pos[0] + dx * distance, pos[1] + dy * distance)


def get_direction_between(from_pos: Point, to_pos: Point) -> Optional[Heading]:
    """Heading of an axis-aligned step, or None for a zero-length step."""
    dx = to_pos[0] - from_pos[0]
    dy = to_pos[1] - from_pos[1]

    if dx > 0:
        return Heading.RIGHT
    elif dx < 0:
        return Heading.LEFT
    elif dy > 0:
        return Heading.DOWN
    elif dy < 0:
        return Heading.UP
    return None


def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def is_axis_aligned(p1: Point, p2: Point) -> bool:
    """True for a non-degenerate purely horizontal or vertical step."""
    return (p1[0] == p2[0]) != (p1[1] == p2[1])


# ============================================
# SNAKE
# ============================================

class Snake:
    """
    One removable path on the board.

    Attributes
    ----------
    id      : str        – unique within a board.
    points  : list       – [(x, y), ...] ordered **tail → head**;
                           points[-1] is always the head.
    heading : Heading    – direction the head exits along.
    color   : str        – cosmetic palette colour.
    """

    def __init__(self, snake_id: str, points: List[Point], heading: Heading, color: str = SNAKE_COLORS[0]):
        self.id = snake_id
        self.points = list(points)
        self.heading = Heading(heading)
        self.color = color

    @property
    def head(self) -> Point:
        return self.points[-1]

    def segments(self) -> Iterator[Tuple[Point, Point]]:
        """Consecutive point pairs, tail first."""
        for i in range(len(self.points) - 1):
            yield self.points[i], self.points[i + 1]

    def copy(self) -> "Snake":
        return Snake(self.id, list(self.points), self.heading, self.color)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "points": [{"x": x, "y": y} for x, y in self.points],
            "heading": self.heading.value,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Snake":
        points = [(p["x"], p["y"]) for p in data["points"]]
        return cls(str(data["id"]), points, Heading(data["heading"]), data.get("color", SNAKE_COLORS[0]))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snake):
            return NotImplemented
        return (
            self.id == other.id
            and self.points == other.points
            and self.heading == other.heading
            and self.color == other.color
        )

    def __repr__(self) -> str:
        return f"Snake(id={self.id!r}, heading={self.heading.value}, points={self.points!r})"
