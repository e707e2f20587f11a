# app/routers/v1/endpoints/admin/payouts.py

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Query
from redis import asyncio as redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.dependencies import get_admin_user, get_db, get_page_params
from app.models.user import User
from app.schemas.common import MessageResponse, PageParams, PaginatedResponse
from app.schemas.payout import Payout, UpdatePayoutStatusRequest
from app.services import admin as admin_service

router = APIRouter()


@router.get("", response_model=PaginatedResponse[Payout])
async def get_payouts(
    params: PageParams = Depends(get_page_params),
    status: Literal["pending", "approved", "rejected"] | None = Query(None, description="Фильтр по статусу"),
    db: Session = Depends(get_db),
):
    """[АДМИН] Заявки на выплату, опционально с фильтром по статусу."""
    return admin_service.get_paginated_payouts(db, params, status=status)


@router.patch("/{payout_id}", response_model=MessageResponse)
async def update_payout_status(
    payout_id: uuid.UUID,
    data: UpdatePayoutStatusRequest,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis_client),
):
    """[АДМИН] pending -> approved | rejected."""
    admin_service.update_payout_status(db, admin, payout_id, data.status)
    await admin_service.invalidate_dashboard_cache(redis_client)
    return {"message": "payout status updated"}
