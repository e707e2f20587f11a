# app/routers/v1/endpoints/admin/referrers.py

import uuid

from fastapi import APIRouter, Depends
from redis import asyncio as redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.dependencies import get_db, get_page_params
from app.schemas.admin import MarkReferrerPaidResponse, ReferrerStats
from app.schemas.common import PageParams, PaginatedResponse
from app.services import admin as admin_service

router = APIRouter()


@router.get("", response_model=PaginatedResponse[ReferrerStats])
async def get_referrers(
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
):
    """[АДМИН] Статистика по пригласившим, по убыванию заработка."""
    return admin_service.get_paginated_referrers(db, params)


@router.post("/{referrer_id}/paid", response_model=MarkReferrerPaidResponse)
async def mark_referrer_paid(
    referrer_id: uuid.UUID,
    db: Session = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis_client),
):
    """[АДМИН] Все ожидающие рефералы пригласившего -> paid."""
    updated = admin_service.mark_referrer_paid(db, referrer_id)
    await admin_service.invalidate_dashboard_cache(redis_client)
    return {"message": "referrals marked as paid", "updated": updated}
