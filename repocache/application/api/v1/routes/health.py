"""Health check endpoints."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from repocache.domain.repository.service.coalescer import RequestCoalescer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"], route_class=DishkaRoute)


async def _database_up(engine: AsyncEngine) -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)
        return False
    return True


@router.get("")
async def health(
    engine: FromDishka[AsyncEngine],
    coalescer: FromDishka[RequestCoalescer],
) -> dict:
    """Overall status with per-dependency checks."""
    db_up = await _database_up(engine)
    return {
        "status": "healthy" if db_up else "unhealthy",
        "checks": {"database": "up" if db_up else "down"},
        "pending_requests": coalescer.pending_count(),
    }


@router.get("/live")
async def liveness() -> dict:
    return {"status": "ok"}


@router.get("/ready")
async def readiness(engine: FromDishka[AsyncEngine]) -> JSONResponse:
    if not await _database_up(engine):
        return JSONResponse(status_code=503, content={"status": "not ready", "database": "down"})
    return JSONResponse(content={"status": "ready"})
