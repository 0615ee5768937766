"""
Snake Logic - Level Generator

Builds boards of coiled snakes on a square canvas and keeps only boards
that the greedy removal simulation can clear.

Pipeline per attempt:
  1. Grow snakes one at a time as spiral-biased random walks over free
     grid cells (OccupancyGrid).
  2. Drop snakes whose head stares straight at another head (a pair that
     can never be resolved one at a time).
  3. Accept the board if it is dense enough for its tier and solvable;
     otherwise throw the whole attempt away and start over.
"""

import logging
import math
import random
from typing import Dict, List, Optional, Set, Tuple

from .collision import DEFAULT_TOLERANCE, collision_tolerance
from .geometry import DIRECTION_VECTORS, DIRECTIONS, Heading, Point, SNAKE_COLORS, Snake
from .solver import is_solvable


logger = logging.getLogger(__name__)


# ============================================
# CONFIG
# ============================================

class GeneratorConfig:
    """Board geometry, attempt budgets and tier thresholds."""

    def __init__(
        self,
        canvas_size: int = 400,
        grid_step: int = 40,
        margin: int = 40,
        walk_margin: int = 20,
        max_attempts: int = 1000,
        max_snake_attempts: int = 400,
        titan_reshuffle_chance: float = 0.3,
        extreme_min_ratio: float = 0.7,
        titan_min_snakes: int = 4,
        tolerance: float = DEFAULT_TOLERANCE,
    ):
        self.canvas_size = canvas_size
        self.grid_step = grid_step
        self.margin = margin
        self.walk_margin = walk_margin
        self.max_attempts = max_attempts
        self.max_snake_attempts = max_snake_attempts
        self.titan_reshuffle_chance = titan_reshuffle_chance
        self.extreme_min_ratio = extreme_min_ratio
        self.titan_min_snakes = titan_min_snakes
        self.tolerance = tolerance

    @classmethod
    def from_settings(cls, settings) -> "GeneratorConfig":
        return cls(
            canvas_size=settings.CANVAS_SIZE,
            grid_step=settings.GRID_STEP,
            margin=settings.MARGIN,
            walk_margin=settings.WALK_MARGIN,
            max_attempts=settings.GEN_MAX_ATTEMPTS,
            max_snake_attempts=settings.GEN_MAX_SNAKE_ATTEMPTS,
            titan_reshuffle_chance=settings.TITAN_RESHUFFLE_CHANCE,
            extreme_min_ratio=settings.EXTREME_MIN_RATIO,
            titan_min_snakes=settings.TITAN_MIN_SNAKES,
            tolerance=collision_tolerance(settings.SNAKE_STROKE_WIDTH),
        )


# ============================================
# DIFFICULTY TIERS
# ============================================

TIER_NORMAL = "normal"
TIER_MEDIUM = "medium"
TIER_HARD = "hard"
TIER_EXTREME = "extreme"
TIER_TITAN = "titan"

# tier -> (target snake count, max segments per ordinary snake)
TIER_RULES: Dict[str, Tuple[int, int]] = {
    TIER_NORMAL: (5, 6),
    TIER_MEDIUM: (10, 6),
    TIER_HARD: (18, 14),
    TIER_EXTREME: (25, 22),
    TIER_TITAN: (8, 22),
}

TITAN_SNAKES_PER_LEVEL = 2
MIN_SEGMENTS = 4


def get_tier(level: int) -> str:
    """Difficulty tier by level number."""
    if level >= 21:
        return TIER_TITAN
    elif level >= 16:
        return TIER_EXTREME
    elif level >= 11:
        return TIER_HARD
    elif level >= 6:
        return TIER_MEDIUM
    return TIER_NORMAL


def get_titan_segments(level: int) -> int:
    """Titans grow longer as the level rises."""
    return int(25 + level * 0.8)


def get_min_snake_count(tier: str, config: GeneratorConfig) -> int:
    """
    Snakes a finished attempt must hold to be accepted.

    Extreme boards are packed so tightly that a full count is rarely
    reachable, so that tier accepts a fraction of its target. Titan
    boards need only a fixed handful next to the two titans.
    """
    target, _ = TIER_RULES[tier]
    if tier == TIER_EXTREME:
        return math.ceil(target * config.extreme_min_ratio)
    if tier == TIER_TITAN:
        return min(target, config.titan_min_snakes)
    return target


# ============================================
# OCCUPANCY GRID
# ============================================

class OccupancyGrid:
    """Grid cells covered by snakes already placed on the board."""

    def __init__(self, grid_step: int):
        self.grid_step = grid_step
        self.occupied: Set[Tuple[int, int]] = set()

    def _line_cells(self, p1: Point, p2: Point):
        min_x, max_x = int(min(p1[0], p2[0])), int(max(p1[0], p2[0]))
        min_y, max_y = int(min(p1[1], p2[1])), int(max(p1[1], p2[1]))
        for x in range(min_x, max_x + 1, self.grid_step):
            for y in range(min_y, max_y + 1, self.grid_step):
                yield (x, y)

    def is_occupied(self, pos: Point) -> bool:
        return (int(pos[0]), int(pos[1])) in self.occupied

    def mark_occupied(self, p1: Point, p2: Point):
        """Mark every cell on the axis-aligned line p1–p2, both ends included."""
        for cell in self._line_cells(p1, p2):
            self.occupied.add(cell)

    def is_clear(self, p1: Point, p2: Point) -> bool:
        """True if no cell on the line p1–p2 is taken."""
        return not any(cell in self.occupied for cell in self._line_cells(p1, p2))

    def mark_snake(self, snake: Snake):
        for p1, p2 in snake.segments():
            self.mark_occupied(p1, p2)


# ============================================
# PATH BUILDING (SPIRAL-BIASED WALK)
# ============================================

CLOCKWISE = 1
COUNTERCLOCKWISE = -1

# Heading order after each last heading: turn first, then straight,
# then the other turn. Never back.
COIL_TURNS: Dict[int, Dict[Heading, List[Heading]]] = {
    CLOCKWISE: {
        Heading.UP: [Heading.RIGHT, Heading.UP, Heading.LEFT],
        Heading.DOWN: [Heading.LEFT, Heading.DOWN, Heading.RIGHT],
        Heading.LEFT: [Heading.UP, Heading.LEFT, Heading.DOWN],
        Heading.RIGHT: [Heading.DOWN, Heading.RIGHT, Heading.UP],
    },
    COUNTERCLOCKWISE: {
        Heading.UP: [Heading.LEFT, Heading.UP, Heading.RIGHT],
        Heading.DOWN: [Heading.RIGHT, Heading.DOWN, Heading.LEFT],
        Heading.LEFT: [Heading.DOWN, Heading.LEFT, Heading.UP],
        Heading.RIGHT: [Heading.UP, Heading.RIGHT, Heading.DOWN],
    },
}


def candidate_headings(
    last_heading: Optional[Heading],
    coil: int,
    is_titan: bool,
    rng: random.Random,
    reshuffle_chance: float,
) -> List[Heading]:
    """Order in which the walk tries its next step."""
    if last_heading is None:
        headings = list(DIRECTIONS)
        rng.shuffle(headings)
        return headings

    headings = list(COIL_TURNS[coil][last_heading])
    # Titans sometimes drop the spiral to wrap loosely around other snakes
    if is_titan and rng.random() < reshuffle_chance:
        rng.shuffle(headings)
    return headings


def pick_start(rng: random.Random, config: GeneratorConfig) -> Tuple[int, int]:
    """Random grid cell inside the board margin (may be occupied)."""
    span = config.canvas_size - 2 * config.margin
    step = config.grid_step
    x = int((rng.random() * span + config.margin) // step) * step
    y = int((rng.random() * span + config.margin) // step) * step
    return (x, y)


def in_walk_bounds(pos: Point, config: GeneratorConfig) -> bool:
    low = config.walk_margin
    high = config.canvas_size - config.walk_margin
    return low <= pos[0] <= high and low <= pos[1] <= high


def build_snake_path(
    start: Tuple[int, int],
    target_segments: int,
    is_titan: bool,
    grid: OccupancyGrid,
    rng: random.Random,
    config: GeneratorConfig,
) -> Tuple[List[Tuple[int, int]], Optional[Heading]]:
    """
    Walk up to `target_segments` grid steps from `start`.

    The grid is only read here; the caller marks the path once the snake
    is accepted. Returns the points (tail → head) and the last heading,
    which becomes the snake's exit heading.

    An ordinary walk ends where its preferred step would land on its own
    body, so a tight coil stays as compact as the loop it closes. Titans
    steer around their own body and keep growing.
    """
    coil = CLOCKWISE if rng.random() > 0.5 else COUNTERCLOCKWISE
    points = [start]
    visited = {start}
    current = start
    last_heading: Optional[Heading] = None

    for _ in range(target_segments):
        step = None
        for heading in candidate_headings(last_heading, coil, is_titan, rng, config.titan_reshuffle_chance):
            dx, dy = DIRECTION_VECTORS[heading]
            nxt = (current[0] + dx * config.grid_step, current[1] + dy * config.grid_step)

            if not in_walk_bounds(nxt, config) or not grid.is_clear(current, nxt):
                continue
            if is_titan and nxt in visited:
                continue

            step = (heading, nxt)
            break

        if step is None or step[1] in visited:
            break

        heading, nxt = step
        points.append(nxt)
        visited.add(nxt)
        current = nxt
        last_heading = heading

    return points, last_heading


# ============================================
# HEAD-TO-HEAD CONFLICTS
# ============================================

def heads_face_off(a: Snake, b: Snake) -> bool:
    """True if the two heads point straight at each other on one line."""
    (ax, ay), (bx, by) = a.head, b.head

    if ay == by:
        if a.heading == Heading.RIGHT and b.heading == Heading.LEFT and ax < bx:
            return True
        if a.heading == Heading.LEFT and b.heading == Heading.RIGHT and ax > bx:
            return True

    if ax == bx:
        if a.heading == Heading.DOWN and b.heading == Heading.UP and ay < by:
            return True
        if a.heading == Heading.UP and b.heading == Heading.DOWN and ay > by:
            return True

    return False


def has_head_conflict(new_snake: Snake, existing: List[Snake]) -> bool:
    return any(heads_face_off(new_snake, snake) for snake in existing)


# ============================================
# MAIN GENERATION
# ============================================

def _target_segments(tier: str, level: int, is_titan: bool, rng: random.Random) -> int:
    if is_titan:
        return get_titan_segments(level)
    _, max_segments = TIER_RULES[tier]
    return int(rng.random() * max(0, max_segments - MIN_SEGMENTS)) + MIN_SEGMENTS


def _build_attempt(
    level: int,
    tier: str,
    attempt: int,
    rng: random.Random,
    config: GeneratorConfig,
) -> List[Snake]:
    """One full pass of snake placement; no solvability check yet."""
    target_count, _ = TIER_RULES[tier]
    grid = OccupancyGrid(config.grid_step)
    snakes: List[Snake] = []

    snake_attempts = 0
    while len(snakes) < target_count and snake_attempts < config.max_snake_attempts:
        snake_attempts += 1

        start = pick_start(rng, config)
        if grid.is_occupied(start):
            continue

        is_titan = tier == TIER_TITAN and len(snakes) < TITAN_SNAKES_PER_LEVEL
        target_segments = _target_segments(tier, level, is_titan, rng)
        points, heading = build_snake_path(start, target_segments, is_titan, grid, rng, config)

        if len(points) < 2:
            continue

        candidate = Snake(
            f"s-{attempt}-{len(snakes)}",
            points,
            heading,
            rng.choice(SNAKE_COLORS),
        )
        if has_head_conflict(candidate, snakes):
            continue

        grid.mark_snake(candidate)
        snakes.append(candidate)

    return snakes


def generate(level: int, rng: Optional[random.Random] = None, config: Optional[GeneratorConfig] = None) -> Tuple[List[Snake], int]:
    """
    Generate a solvable board for `level`.

    Returns (snakes, attempts used). An empty list means the attempt
    budget ran out; callers must not start play on it.
    """
    rng = rng or random.Random()
    config = config or GeneratorConfig()

    tier = get_tier(level)
    min_count = get_min_snake_count(tier, config)

    for attempt in range(1, config.max_attempts + 1):
        snakes = _build_attempt(level, tier, attempt, rng, config)

        if len(snakes) < min_count:
            continue
        if not is_solvable(snakes, config.tolerance):
            continue

        logger.debug(f"[Generator] level={level} tier={tier} snakes={len(snakes)} attempts={attempt}")
        return snakes, attempt

    logger.warning(f"[Generator] level={level} tier={tier} gave up after {config.max_attempts} attempts")
    return [], config.max_attempts


def generate_level(level: int, seed: Optional[int] = None, config: Optional[GeneratorConfig] = None) -> Dict:
    """
    Generate a board in wire form.

    The seed makes the board reproducible; a fresh one is drawn when
    none is given. `snakes` is empty when generation failed.
    """
    if seed is None:
        seed = random.randrange(2 ** 31)

    config = config or GeneratorConfig()
    rng = random.Random(seed)
    tier = get_tier(level)

    snakes, attempts = generate(level, rng, config)
    titan_count = TITAN_SNAKES_PER_LEVEL if tier == TIER_TITAN and snakes else 0

    return {
        "level": level,
        "seed": seed,
        "tier": tier,
        "canvas_size": config.canvas_size,
        "grid_step": config.grid_step,
        "snakes": [snake.to_dict() for snake in snakes],
        "meta": {
            "snake_count": len(snakes),
            "titan_count": min(titan_count, len(snakes)),
            "attempts": attempts,
        },
    }
