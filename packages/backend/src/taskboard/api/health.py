"""Health check endpoint.

Learn: Public (on the gate's allowlist). Reports whether the database and
Redis answer, each check capped at two seconds so a dead dependency shows
up as "degraded" instead of a stuck health check.
"""

import asyncio

import structlog
from fastapi import APIRouter
from sqlalchemy import text

from taskboard import __version__
from taskboard.config import settings
from taskboard.db.engine import engine

logger = structlog.get_logger()

router = APIRouter()

CHECK_TIMEOUT_SECONDS = 2.0


async def _check_database() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def _check_redis() -> None:
    from redis.asyncio import from_url

    r = from_url(settings.redis_url)
    try:
        await r.ping()
    finally:
        await r.aclose()


@router.get("/health")
async def health_check():
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    for name, check in (("database", _check_database), ("redis", _check_redis)):
        try:
            await asyncio.wait_for(check(), timeout=CHECK_TIMEOUT_SECONDS)
            checks[name] = "ok"
        except Exception as e:
            # Details go to the log; this endpoint is public.
            logger.warning("health.check_failed", dependency=name, error=repr(e))
            checks[name] = "error"

    status = "healthy" if all(
        v == "ok" for k, v in checks.items() if k != "version"
    ) else "degraded"

    return {"status": status, **checks}
