# app/routers/health.py
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from redis import asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.dependencies import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health(
    db: Session = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis_client),
):
    """Проверка БД и Redis. Любая недоступная зависимость - 503."""
    result = {"status": "healthy", "database": "ok", "cache": "ok"}

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check: database unavailable: {e}")
        result["status"] = "unhealthy"
        result["database"] = "error"

    try:
        await redis_client.ping()
    except (RedisError, OSError) as e:
        logger.error(f"Health check: cache unavailable: {e}")
        result["status"] = "unhealthy"
        result["cache"] = "error"

    status_code = status.HTTP_200_OK if result["status"] == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=result)
