"""
Tests for tiers, the occupancy grid, path building, head conflicts and
full level generation.
"""

import random

import pytest

from conftest import make_snake
from snake_logic.services.generator import (
    CLOCKWISE,
    COUNTERCLOCKWISE,
    GeneratorConfig,
    OccupancyGrid,
    TIER_RULES,
    build_snake_path,
    candidate_headings,
    generate,
    generate_level,
    get_min_snake_count,
    get_tier,
    get_titan_segments,
    has_head_conflict,
    heads_face_off,
    in_walk_bounds,
    pick_start,
)
from snake_logic.services.geometry import DIRECTIONS, OPPOSITES, Heading, Snake, get_direction_between
from snake_logic.services.solver import is_solvable


# ============================================
# TIERS
# ============================================

@pytest.mark.parametrize(
    "level, tier",
    [(1, "normal"), (5, "normal"), (6, "medium"), (10, "medium"), (11, "hard"),
     (15, "hard"), (16, "extreme"), (20, "extreme"), (21, "titan"), (40, "titan")],
)
def test_get_tier_boundaries(level, tier):
    assert get_tier(level) == tier


def test_min_snake_count_per_tier():
    config = GeneratorConfig()

    assert get_min_snake_count("normal", config) == TIER_RULES["normal"][0]
    assert get_min_snake_count("hard", config) == 18
    assert get_min_snake_count("extreme", config) == 18  # ceil(25 * 0.7)
    assert get_min_snake_count("titan", config) == 4


def test_titan_segments_grow_with_level():
    assert get_titan_segments(21) == 41
    assert get_titan_segments(30) == 49
    assert get_titan_segments(31) > get_titan_segments(30)


# ============================================
# OCCUPANCY GRID
# ============================================

def test_mark_occupied_covers_whole_line():
    grid = OccupancyGrid(40)
    grid.mark_occupied((120, 40), (40, 40))

    assert grid.occupied == {(40, 40), (80, 40), (120, 40)}
    assert grid.is_occupied((80, 40))
    assert not grid.is_occupied((160, 40))


def test_is_clear_checks_both_endpoints():
    grid = OccupancyGrid(40)
    grid.mark_occupied((40, 40), (120, 40))

    assert grid.is_clear((120, 40), (120, 80)) is False
    assert grid.is_clear((120, 80), (120, 40)) is False
    assert grid.is_clear((160, 40), (160, 80)) is True


def test_mark_snake_marks_every_segment():
    grid = OccupancyGrid(40)
    grid.mark_snake(make_snake("a", [(40, 40), (40, 80), (80, 80)], "RIGHT"))
    assert grid.occupied == {(40, 40), (40, 80), (80, 80)}


# ============================================
# PATH BUILDING
# ============================================

def test_coil_order_after_a_heading():
    rng = random.Random(0)

    assert candidate_headings(Heading.UP, CLOCKWISE, False, rng, 0.3) == [Heading.RIGHT, Heading.UP, Heading.LEFT]
    assert candidate_headings(Heading.UP, COUNTERCLOCKWISE, False, rng, 0.3) == [Heading.LEFT, Heading.UP, Heading.RIGHT]
    assert candidate_headings(Heading.RIGHT, CLOCKWISE, False, rng, 0.3) == [Heading.DOWN, Heading.RIGHT, Heading.UP]


def test_coil_order_never_reverses():
    rng = random.Random(0)

    for coil in (CLOCKWISE, COUNTERCLOCKWISE):
        for heading in DIRECTIONS:
            for _ in range(10):
                order = candidate_headings(heading, coil, True, rng, 1.0)
                assert OPPOSITES[heading] not in order
                assert len(order) == 3


def test_first_step_tries_every_heading():
    order = candidate_headings(None, CLOCKWISE, False, random.Random(3), 0.3)
    assert sorted(order) == sorted(DIRECTIONS)


def test_titan_reshuffle_keeps_same_candidates():
    rng = random.Random(9)
    base = candidate_headings(Heading.LEFT, CLOCKWISE, False, rng, 1.0)
    shuffled = candidate_headings(Heading.LEFT, CLOCKWISE, True, rng, 1.0)

    assert base == [Heading.UP, Heading.LEFT, Heading.DOWN]
    assert sorted(shuffled) == sorted(base)


def test_pick_start_is_on_grid_inside_margin():
    config = GeneratorConfig()
    rng = random.Random(5)

    for _ in range(200):
        x, y = pick_start(rng, config)
        assert x % config.grid_step == 0 and y % config.grid_step == 0
        assert config.margin <= x < config.canvas_size - config.margin
        assert config.margin <= y < config.canvas_size - config.margin


def test_build_snake_path_walks_free_grid_steps():
    config = GeneratorConfig()
    grid = OccupancyGrid(config.grid_step)
    grid.mark_occupied((40, 40), (360, 40))

    for seed in range(20):
        rng = random.Random(seed)
        points, heading = build_snake_path((200, 200), 12, False, grid, rng, config)

        assert 1 <= len(points) <= 13
        assert len(set(points)) == len(points)
        for p1, p2 in zip(points, points[1:]):
            assert abs(p1[0] - p2[0]) + abs(p1[1] - p2[1]) == config.grid_step
            assert not grid.is_occupied(p2)
            assert in_walk_bounds(p2, config)
        if len(points) >= 2:
            assert heading == get_direction_between(points[-2], points[-1])


def test_ordinary_walk_stops_where_it_would_close_its_coil():
    config = GeneratorConfig()
    grid = OccupancyGrid(config.grid_step)

    for seed in range(10):
        points, heading = build_snake_path((200, 200), 10, False, grid, random.Random(seed), config)

        # Three turns the same way bring the walk back to its start
        assert len(points) == 4
        assert abs(points[0][0] - points[-1][0]) + abs(points[0][1] - points[-1][1]) == config.grid_step
        assert heading == get_direction_between(points[-2], points[-1])


def test_titan_walk_steers_around_its_own_body():
    config = GeneratorConfig(titan_reshuffle_chance=0.0)
    grid = OccupancyGrid(config.grid_step)

    points, _ = build_snake_path((200, 200), 20, True, grid, random.Random(4), config)

    assert len(points) == 21
    assert len(set(points)) == len(points)


def test_build_snake_path_does_not_mark_grid():
    config = GeneratorConfig()
    grid = OccupancyGrid(config.grid_step)
    build_snake_path((200, 200), 6, False, grid, random.Random(1), config)
    assert grid.occupied == set()


def test_boxed_in_start_yields_single_point():
    config = GeneratorConfig()
    grid = OccupancyGrid(config.grid_step)
    for cell in [(160, 200), (240, 200), (200, 160), (200, 240)]:
        grid.mark_occupied(cell, cell)

    points, heading = build_snake_path((200, 200), 5, False, grid, random.Random(0), config)
    assert points == [(200, 200)]
    assert heading is None


# ============================================
# HEAD CONFLICTS
# ============================================

def test_heads_facing_on_a_row_conflict():
    a = make_snake("A", [(340, 100), (300, 100)], "LEFT")
    b = make_snake("B", [(60, 100), (100, 100)], "RIGHT")

    assert has_head_conflict(a, [b]) is True
    assert has_head_conflict(b, [a]) is True


def test_heads_facing_on_a_column_conflict():
    down = make_snake("D", [(100, 40), (100, 80)], "DOWN")
    up = make_snake("U", [(100, 320), (100, 280)], "UP")

    assert heads_face_off(down, up) is True
    assert heads_face_off(up, down) is True


def test_heads_facing_away_do_not_conflict():
    a = make_snake("A", [(140, 100), (100, 100)], "LEFT")
    b = make_snake("B", [(260, 100), (300, 100)], "RIGHT")

    assert has_head_conflict(a, [b]) is False
    assert has_head_conflict(b, [a]) is False


def test_heads_on_different_rows_do_not_conflict():
    a = make_snake("A", [(340, 100), (300, 100)], "LEFT")
    b = make_snake("B", [(60, 140), (100, 140)], "RIGHT")
    assert has_head_conflict(a, [b]) is False


# ============================================
# GENERATION
# ============================================

def _cells(snakes):
    cells = []
    for snake in snakes:
        cells.extend(snake.points)
    return cells


def _assert_well_formed(snakes, config):
    ids = [s.id for s in snakes]
    assert len(set(ids)) == len(ids)

    # Every path steps one grid cell at a time, so points are the cells
    cells = _cells(snakes)
    assert len(set(cells)) == len(cells)

    for snake in snakes:
        assert len(snake.points) >= 2
        for p1, p2 in snake.segments():
            assert abs(p1[0] - p2[0]) + abs(p1[1] - p2[1]) == config.grid_step
        assert snake.heading == get_direction_between(snake.points[-2], snake.points[-1])

    for i, snake in enumerate(snakes):
        assert not has_head_conflict(snake, snakes[:i] + snakes[i + 1:])


@pytest.mark.parametrize("level", [1, 3, 6, 9])
def test_generate_normal_and_medium_boards(level):
    config = GeneratorConfig()
    snakes, attempts = generate(level, random.Random(level * 17), config)

    assert snakes
    assert 1 <= attempts <= config.max_attempts
    assert len(snakes) >= get_min_snake_count(get_tier(level), config)
    assert is_solvable(snakes)
    _assert_well_formed(snakes, config)


@pytest.mark.parametrize("level, seed", [(11, 0), (13, 3), (16, 0), (18, 5)])
def test_hard_and_extreme_boards_generate(level, seed):
    config = GeneratorConfig()
    snakes, attempts = generate(level, random.Random(seed), config)

    assert snakes, f"level {level} seed {seed} gave up after {attempts} attempts"
    assert len(snakes) >= get_min_snake_count(get_tier(level), config)
    assert is_solvable(snakes)
    _assert_well_formed(snakes, config)


@pytest.mark.parametrize("level", [21, 25])
def test_titan_boards_generate(level):
    config = GeneratorConfig()
    snakes, _ = generate(level, random.Random(level), config)

    assert snakes
    assert len(snakes) >= get_min_snake_count("titan", config)
    assert is_solvable(snakes)
    _assert_well_formed(snakes, config)

    longest_ordinary = TIER_RULES["titan"][1]
    assert all(len(s.points) <= get_titan_segments(level) + 1 for s in snakes[:2])
    assert all(len(s.points) <= longest_ordinary for s in snakes[2:])


def test_hard_level_board_wire_form():
    board = generate_level(14, seed=2)

    assert board["tier"] == "hard"
    assert board["meta"]["snake_count"] >= 18
    assert is_solvable([Snake.from_dict(s) for s in board["snakes"]])


def test_exhausted_budget_returns_empty_board():
    # One snake per attempt can never reach the five a normal board needs
    config = GeneratorConfig(max_attempts=3, max_snake_attempts=1)
    snakes, attempts = generate(1, random.Random(0), config)

    assert snakes == []
    assert attempts == 3


def test_generate_level_is_reproducible_by_seed():
    first = generate_level(4, seed=42)
    second = generate_level(4, seed=42)

    assert first == second
    assert first["seed"] == 42
    assert first["tier"] == "normal"
    assert first["meta"]["snake_count"] == len(first["snakes"])
    assert first["meta"]["titan_count"] == 0


def test_generate_level_wire_form_round_trips_snakes():
    board = generate_level(2, seed=7)
    snakes = [Snake.from_dict(s) for s in board["snakes"]]

    assert snakes
    assert is_solvable(snakes)
    assert board["canvas_size"] == 400
    assert board["grid_step"] == 40


def test_generate_level_failure_has_no_snakes():
    board = generate_level(1, seed=1, config=GeneratorConfig(max_attempts=2, max_snake_attempts=1))

    assert board["snakes"] == []
    assert board["meta"]["snake_count"] == 0
