"""
Snake Logic - Security Middleware

Rate limiting, request size guard, security headers.
"""

from fastapi import Request, HTTPException, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from typing import Callable

from ..config import settings


# ============================================
# RATE LIMITER
# ============================================

limiter = Limiter(key_func=get_remote_address)

GAME_RATE_LIMIT = f"{settings.RATE_LIMIT_GAME}/minute"
LEVELS_RATE_LIMIT = f"{settings.RATE_LIMIT_LEVELS}/minute"


# ============================================
# REQUEST VALIDATORS
# ============================================

MAX_JSON_SIZE = 1024 * 256


async def validate_json_size(request: Request):
    """
    Reject oversized bodies before parsing them.
    Posted boards are small; 256KB is plenty.
    """
    content_length = request.headers.get("content-length")

    if content_length and int(content_length) > MAX_JSON_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Request too large"
        )


# ============================================
# SECURITY HEADERS MIDDLEWARE
# ============================================

async def add_security_headers(request: Request, call_next: Callable):
    """Add security headers to every response."""
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    if settings.is_production:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    return response
