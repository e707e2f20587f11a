# app/routers/v1/endpoints/admin/general.py

from fastapi import APIRouter, Depends
from redis import asyncio as redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.dependencies import get_db
from app.schemas.admin import AdminDashboardStats
from app.services import admin as admin_service

router = APIRouter()


@router.get("/dashboard", response_model=AdminDashboardStats)
async def get_dashboard(
    db: Session = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis_client),
):
    """
    [АДМИН] Сводная статистика по рефералам, кодам и выплатам.
    """
    return await admin_service.get_dashboard_stats(db, redis_client)
