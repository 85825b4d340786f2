import asyncio

from fastapi import APIRouter, Depends, HTTPException
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.app.core import redis_client as redis_module
from backend.app.db.session import get_sessionmaker


router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, bool]:
    """Basic liveness check."""
    return {"ok": True}


@router.get("/readiness")
async def readiness(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessionmaker),
) -> dict[str, bool]:
    """Ensure the reservation store and the room-lock Redis are reachable."""
    if redis_module.redis_client is None:
        raise HTTPException(status_code=503, detail="Redis unavailable")

    try:
        async with sessions() as session:
            await session.execute(text("SELECT 1"))
    except (DBAPIError, OSError, asyncio.TimeoutError) as exc:
        raise HTTPException(status_code=503, detail="Database unavailable") from exc

    try:
        await redis_module.redis_client.ping()
    except RedisError as exc:
        raise HTTPException(status_code=503, detail="Redis unavailable") from exc

    return {"ready": True}
