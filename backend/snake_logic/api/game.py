"""
Snake Logic - Game API

Stateless geometry queries plus play sessions: select a snake, tick its
exit animation frame by frame, ask for a hint.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..middleware.security import limiter, GAME_RATE_LIMIT, LEVELS_RATE_LIMIT, validate_json_size
from ..schemas import (
    CollidesRequest, CollidesResponse, SolvableRequest, SolvableResponse,
    SessionCreateRequest, SessionResponse, SelectRequest, SelectResponse,
    TickRequest, TickResponse, HintResponse,
)
from ..services.collision import collides, find_blockers
from ..services.events import AudioCueMapper
from ..services.generator import GeneratorConfig, get_tier
from ..services.geometry import Snake
from ..services.session import GameSession, SessionStore
from ..services.solver import get_full_solution
from .levels import get_generator_config, load_or_generate


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/game", tags=["game"])

session_store = SessionStore(max_sessions=settings.MAX_SESSIONS)


def get_session_store() -> SessionStore:
    return session_store


def get_cue_mapper() -> AudioCueMapper:
    return AudioCueMapper(muted=settings.AUDIO_MUTED)


def _get_session_or_404(store: SessionStore, session_id: str) -> GameSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# ============================================
# GEOMETRY QUERIES
# ============================================

@router.post("/collides", response_model=CollidesResponse, dependencies=[Depends(validate_json_size)])
async def check_collision(
    request: CollidesRequest,
    config: GeneratorConfig = Depends(get_generator_config),
):
    snake = request.snake.to_snake()
    others = [s.to_snake() for s in request.others if s.id != snake.id]
    blocked = collides(snake, others, config.tolerance)
    return CollidesResponse(
        collides=blocked,
        blocked_by=find_blockers(snake, others, config.tolerance) if blocked else [],
    )


@router.post("/solvable", response_model=SolvableResponse, dependencies=[Depends(validate_json_size)])
async def check_solvable(
    request: SolvableRequest,
    config: GeneratorConfig = Depends(get_generator_config),
):
    snakes = [s.to_snake() for s in request.snakes]
    ids = [s.id for s in snakes]
    if len(set(ids)) != len(ids):
        raise HTTPException(status_code=400, detail="Snake ids must be unique")

    solution = get_full_solution(snakes, config.tolerance)
    return SolvableResponse(solvable=len(solution) == len(snakes), solution=solution)


# ============================================
# SESSIONS
# ============================================

@router.post("/sessions", response_model=SessionResponse)
@limiter.limit(LEVELS_RATE_LIMIT)
async def create_session(
    request: Request,
    body: SessionCreateRequest,
    config: GeneratorConfig = Depends(get_generator_config),
    store: SessionStore = Depends(get_session_store),
    db: AsyncSession = Depends(get_db),
):
    board = await load_or_generate(db, body.level, body.seed, config)
    if not board["snakes"]:
        # Never start play on an empty board
        raise HTTPException(status_code=503, detail="Level generation failed, try again")

    session = store.create(
        board["level"],
        board["seed"],
        board.get("tier") or get_tier(body.level),
        [Snake.from_dict(s) for s in board["snakes"]],
        tolerance=config.tolerance,
        speed=settings.SNAKE_SPEED,
        canvas_size=config.canvas_size,
        exit_margin=settings.EXIT_MARGIN,
        reject_flash_seconds=settings.REJECT_FLASH_SECONDS,
        hint_duration_seconds=settings.HINT_DURATION_SECONDS,
    )
    logger.info(f"[Session] {session.id} started level={session.level} seed={session.seed} snakes={len(session.snakes)}")
    return SessionResponse(**session.to_dict())


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
):
    session = _get_session_or_404(store, session_id)
    return SessionResponse(**session.to_dict())


@router.post("/sessions/{session_id}/select", response_model=SelectResponse)
@limiter.limit(GAME_RATE_LIMIT)
async def select_snake(
    request: Request,
    session_id: str,
    body: SelectRequest,
    store: SessionStore = Depends(get_session_store),
    cues: AudioCueMapper = Depends(get_cue_mapper),
):
    session = _get_session_or_404(store, session_id)

    result = session.select(body.snake_id)
    state = session.to_dict()

    return SelectResponse(
        **result,
        cues=cues.cues_for(result["events"]),
        session=SessionResponse(**state),
    )


@router.post("/sessions/{session_id}/tick", response_model=TickResponse)
@limiter.limit(GAME_RATE_LIMIT)
async def tick_session(
    request: Request,
    session_id: str,
    body: TickRequest,
    store: SessionStore = Depends(get_session_store),
    cues: AudioCueMapper = Depends(get_cue_mapper),
):
    session = _get_session_or_404(store, session_id)
    frames = min(body.frames, settings.MAX_TICKS_PER_REQUEST)

    result = session.tick(frames)
    state = session.to_dict()

    moving = result["moving"]
    return TickResponse(
        moving=moving.to_dict() if moving is not None else None,
        exited=result["exited"],
        frames=result["frames"],
        events=result["events"],
        cues=cues.cues_for(result["events"]),
        session=SessionResponse(**state),
    )


@router.post("/sessions/{session_id}/hint", response_model=HintResponse)
@limiter.limit(GAME_RATE_LIMIT)
async def hint_session(
    request: Request,
    session_id: str,
    store: SessionStore = Depends(get_session_store),
    cues: AudioCueMapper = Depends(get_cue_mapper),
):
    session = _get_session_or_404(store, session_id)

    result = session.hint()

    return HintResponse(
        snake_id=result["snake_id"],
        events=result["events"],
        cues=cues.cues_for(result["events"]),
    )


@router.delete("/sessions/{session_id}")
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
):
    if not store.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}
