"""
Snake Logic - Levels API

Board generation, the level archive and board validation.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..middleware.security import limiter, LEVELS_RATE_LIMIT, validate_json_size
from ..models import GeneratedLevel
from ..schemas import ArchiveEntry, ArchiveResponse, LevelResponse, ValidateRequest, ValidateResponse
from ..services.generator import GeneratorConfig, generate_level, get_tier, TIER_TITAN, TITAN_SNAKES_PER_LEVEL
from ..services.solver import validate_board


router = APIRouter(prefix="/levels", tags=["levels"])


def get_generator_config() -> GeneratorConfig:
    return GeneratorConfig.from_settings(settings)


# ============================================
# ARCHIVE
# ============================================

def _board_from_record(record: GeneratedLevel, config: GeneratorConfig) -> Dict:
    titan_count = TITAN_SNAKES_PER_LEVEL if record.tier == TIER_TITAN else 0
    return {
        "level": record.level_number,
        "seed": record.seed,
        "tier": record.tier,
        "canvas_size": config.canvas_size,
        "grid_step": config.grid_step,
        "snakes": record.snakes,
        "meta": {
            "snake_count": record.snake_count,
            "titan_count": min(titan_count, record.snake_count),
            "attempts": record.attempts,
        },
    }


async def archive_board(db: AsyncSession, board: Dict) -> GeneratedLevel:
    record = GeneratedLevel(
        level_number=board["level"],
        seed=board["seed"],
        tier=board["tier"],
        snake_count=board["meta"]["snake_count"],
        attempts=board["meta"]["attempts"],
        snakes=board["snakes"],
    )
    db.add(record)
    await db.commit()
    return record


async def load_or_generate(
    db: AsyncSession,
    level_num: int,
    seed: Optional[int],
    config: GeneratorConfig,
) -> Dict:
    """
    Board for (level, seed). A known seed is served from the archive;
    anything else is generated off the event loop and archived.

    `snakes` is empty when generation failed; nothing is archived then.
    """
    if seed is not None:
        result = await db.execute(
            select(GeneratedLevel)
            .where(GeneratedLevel.level_number == level_num, GeneratedLevel.seed == seed)
            .order_by(GeneratedLevel.id.desc())
            .limit(1)
        )
        record = result.scalar_one_or_none()
        if record is not None:
            return _board_from_record(record, config)

    board = await run_in_threadpool(generate_level, level_num, seed, config)
    if board["snakes"]:
        await archive_board(db, board)
    return board


# ============================================
# ENDPOINTS
# ============================================

@router.get("/{level_num}", response_model=LevelResponse)
@limiter.limit(LEVELS_RATE_LIMIT)
async def get_level(
    request: Request,
    level_num: int,
    seed: Optional[int] = Query(None, ge=0),
    config: GeneratorConfig = Depends(get_generator_config),
    db: AsyncSession = Depends(get_db),
):
    if level_num < 1:
        raise HTTPException(status_code=400, detail="Invalid level number")

    board = await load_or_generate(db, level_num, seed, config)
    if not board["snakes"]:
        raise HTTPException(status_code=503, detail="Level generation failed, try again")

    return LevelResponse(**board)


@router.get("/{level_num}/archive", response_model=ArchiveResponse)
async def get_level_archive(
    level_num: int,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(GeneratedLevel)
        .where(GeneratedLevel.level_number == level_num)
        .order_by(GeneratedLevel.id.desc())
        .limit(settings.ARCHIVE_LIMIT)
    )
    records = result.scalars().all()
    return ArchiveResponse(
        level=level_num,
        boards=[ArchiveEntry(**record.to_dict()) for record in records],
    )


@router.post("/validate", response_model=ValidateResponse, dependencies=[Depends(validate_json_size)])
async def validate_level(
    request: ValidateRequest,
    config: GeneratorConfig = Depends(get_generator_config),
):
    snakes = [s.to_snake() for s in request.snakes]
    report = validate_board(snakes, config.tolerance)
    return ValidateResponse(**report)


@router.get("/{level_num}/tier")
async def get_level_tier(level_num: int):
    if level_num < 1:
        raise HTTPException(status_code=400, detail="Invalid level number")
    return {"level": level_num, "tier": get_tier(level_num)}
