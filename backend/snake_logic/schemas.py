"""
Snake Logic - Pydantic Schemas

All request/response schemas in one file.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .services.geometry import Heading, SNAKE_COLORS, Snake, is_axis_aligned


# ============================================
# BOARD
# ============================================

class Point(BaseModel):
    """Board coordinate."""
    x: float
    y: float


class BoardSnake(BaseModel):
    """Snake as it appears on the wire; shape is not checked."""
    id: str
    points: List[Point]
    heading: Heading
    color: str = SNAKE_COLORS[0]

    def to_snake(self) -> Snake:
        return Snake(self.id, [(p.x, p.y) for p in self.points], self.heading, self.color)


class SnakeIn(BoardSnake):
    """Snake posted for a geometry query; must be well-formed."""

    @model_validator(mode="after")
    def check_shape(self):
        if len(self.points) < 2:
            raise ValueError(f"snake {self.id} needs at least 2 points")
        coords = [(p.x, p.y) for p in self.points]
        if len(set(coords)) != len(coords):
            raise ValueError(f"snake {self.id} repeats a point")
        for p1, p2 in zip(coords, coords[1:]):
            if not is_axis_aligned(p1, p2):
                raise ValueError(f"snake {self.id} has a non axis-aligned segment {p1} -> {p2}")
        return self


class LevelMeta(BaseModel):
    """Generation metadata."""
    snake_count: int
    titan_count: int = 0
    attempts: int


class LevelResponse(BaseModel):
    """Generated board."""
    level: int
    seed: int
    tier: str
    canvas_size: int
    grid_step: int
    snakes: List[BoardSnake]
    meta: LevelMeta


class ArchiveEntry(BaseModel):
    """Archived board summary."""
    id: int
    level: int
    seed: int
    tier: str
    snake_count: int
    attempts: int
    created_at: Optional[datetime] = None


class ArchiveResponse(BaseModel):
    level: int
    boards: List[ArchiveEntry]


# ============================================
# GEOMETRY QUERIES
# ============================================

class CollidesRequest(BaseModel):
    snake: SnakeIn
    others: List[SnakeIn] = []


class CollidesResponse(BaseModel):
    collides: bool
    blocked_by: List[str] = []


class SolvableRequest(BaseModel):
    snakes: List[SnakeIn]


class SolvableResponse(BaseModel):
    solvable: bool
    solution: List[str]


class ValidateRequest(BaseModel):
    snakes: List[BoardSnake]


class ValidateResponse(BaseModel):
    valid: bool
    errors: List[str]
    solution: List[str] = []


# ============================================
# AUDIO CUES
# ============================================

class Tone(BaseModel):
    wave: str
    start_freq: float
    end_freq: float
    offset: float = 0.0
    duration: float
    peak_gain: float


class Cue(BaseModel):
    event: str
    tones: List[Tone]


# ============================================
# SESSIONS
# ============================================

class SessionCreateRequest(BaseModel):
    level: int = Field(ge=1)
    seed: Optional[int] = Field(default=None, ge=0)


class SessionResponse(BaseModel):
    session_id: str
    level: int
    seed: int
    tier: str
    snakes: List[BoardSnake]
    moving: Optional[BoardSnake] = None
    removed: List[str] = []
    mistakes: int = 0
    processing: bool = False
    hinted_snake_id: Optional[str] = None
    cleared: bool = False


class SelectRequest(BaseModel):
    snake_id: str


class SelectResponse(BaseModel):
    outcome: str  # 'accepted' | 'rejected' | 'ignored'
    snake_id: str
    blocked_by: List[str] = []
    events: List[str] = []
    cues: List[Cue] = []
    session: SessionResponse


class TickRequest(BaseModel):
    frames: int = Field(default=1, ge=1)


class TickResponse(BaseModel):
    moving: Optional[BoardSnake] = None
    exited: Optional[str] = None
    frames: int = 0
    events: List[str] = []
    cues: List[Cue] = []
    session: SessionResponse


class HintResponse(BaseModel):
    snake_id: Optional[str] = None
    events: List[str] = []
    cues: List[Cue] = []
