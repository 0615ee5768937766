"""
Snake Logic - Exit Animation

Chain-follow motion: the head slides along its heading a fixed distance
per frame and every other point is pulled after the point ahead of it,
never letting a segment grow past the length it had when the snake was
selected. The tail straightens out naturally as the snake leaves.
"""

import math
from typing import List, Tuple

from .geometry import Snake, distance, move_in_direction


SNAKE_SPEED = 5
CANVAS_SIZE = 400
EXIT_MARGIN = 100


def capture_rest_lengths(snake: Snake) -> List[float]:
    """Length of each segment, tail first, at the moment of selection."""
    return [distance(p1, p2) for p1, p2 in snake.segments()]


def is_off_board(snake: Snake, canvas_size: float = CANVAS_SIZE, margin: float = EXIT_MARGIN) -> bool:
    """True once every point sits beyond the play area plus margin."""
    low, high = -margin, canvas_size + margin
    return all(
        x < low or x > high or y < low or y > high
        for x, y in snake.points
    )


def step_animation(
    snake: Snake,
    rest_lengths: List[float],
    speed: float = SNAKE_SPEED,
    canvas_size: float = CANVAS_SIZE,
    margin: float = EXIT_MARGIN,
) -> Tuple[Snake, bool]:
    """
    Advance one frame.

    Returns a moved copy of the snake and whether it has fully left the
    board. The input snake is not modified.
    """
    points = list(snake.points)
    head_index = len(points) - 1

    points[head_index] = move_in_direction(points[head_index], snake.heading, speed)

    for i in range(head_index - 1, -1, -1):
        lx, ly = points[i + 1]
        fx, fy = points[i]
        dx, dy = lx - fx, ly - fy
        dist = math.hypot(dx, dy)
        rest = rest_lengths[i]

        if dist > rest:
            ratio = (dist - rest) / dist
            points[i] = (fx + dx * ratio, fy + dy * ratio)

    moved = Snake(snake.id, points, snake.heading, snake.color)
    return moved, is_off_board(moved, canvas_size, margin)


class ExitAnimation:
    """One snake sliding off the board, with its rest lengths."""

    def __init__(
        self,
        snake: Snake,
        speed: float = SNAKE_SPEED,
        canvas_size: float = CANVAS_SIZE,
        margin: float = EXIT_MARGIN,
    ):
        self.snake = snake.copy()
        self.rest_lengths = capture_rest_lengths(snake)
        self.speed = speed
        self.canvas_size = canvas_size
        self.margin = margin
        self.frames = 0
        self.done = False

    def step(self) -> bool:
        if self.done:
            return True
        self.snake, self.done = step_animation(
            self.snake, self.rest_lengths, self.speed, self.canvas_size, self.margin
        )
        self.frames += 1
        return self.done

    def run(self, frames: int) -> bool:
        """Step up to `frames` times, stopping early once off-board."""
        for _ in range(frames):
            if self.step():
                break
        return self.done
