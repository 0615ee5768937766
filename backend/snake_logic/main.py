"""
Snake Logic - FastAPI Application

Backend entry point.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from .config import settings
from .database import init_db, close_db
from .api import game, levels
from .middleware.security import limiter, add_security_headers


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ============================================
# LIFESPAN
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events."""
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}, debug: {settings.DEBUG}")

    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    game.session_store.clear()
    await close_db()
    logger.info("Database connections closed")


# ============================================
# APP
# ============================================

app = FastAPI(
    title=settings.APP_NAME,
    description="Snake Logic API - solvable snake extraction puzzles",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# Rate limiter state
app.state.limiter = limiter


# ============================================
# MIDDLEWARE
# ============================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(add_security_headers)


# ============================================
# ERROR HANDLERS
# ============================================

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please try again later."}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Hide internals outside debug mode."""
    logger.exception(f"[Error] {request.method} {request.url.path}: {exc}")
    detail = str(exc) if settings.DEBUG else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"detail": detail}
    )


# ============================================
# ROUTES
# ============================================

api_prefix = settings.API_PREFIX

app.include_router(levels.router, prefix=api_prefix)
app.include_router(game.router, prefix=api_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "version": VERSION,
    }


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": VERSION,
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/health",
    }


# ============================================
# RUN
# ============================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "snake_logic.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
