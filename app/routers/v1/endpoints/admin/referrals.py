# app/routers/v1/endpoints/admin/referrals.py

import uuid

from fastapi import APIRouter, Depends
from redis import asyncio as redis
from sqlalchemy.orm import Session

from app.core.redis import get_redis_client
from app.dependencies import get_db, get_page_params
from app.schemas.common import MessageResponse, PageParams, PaginatedResponse
from app.schemas.referral import AdminReferral, UpdateReferralStatusRequest
from app.services import admin as admin_service

router = APIRouter()


@router.get("", response_model=PaginatedResponse[AdminReferral])
async def get_referrals(
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
):
    """[АДМИН] Все рефералы с именем пригласившего ("-" для прямых регистраций)."""
    return admin_service.get_paginated_referrals(db, params)


@router.post("/{referral_id}/paid", response_model=MessageResponse)
async def mark_referral_paid(
    referral_id: uuid.UUID,
    db: Session = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis_client),
):
    """[АДМИН] pending -> paid для одного реферала."""
    admin_service.mark_referral_paid(db, referral_id)
    await admin_service.invalidate_dashboard_cache(redis_client)
    return {"message": "referral marked as paid"}


@router.patch("/{referral_id}/status", response_model=MessageResponse)
async def update_referral_status(
    referral_id: uuid.UUID,
    data: UpdateReferralStatusRequest,
    db: Session = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis_client),
):
    """[АДМИН] pending -> paid | rejected."""
    admin_service.update_referral_status(db, referral_id, data.status)
    await admin_service.invalidate_dashboard_cache(redis_client)
    return {"message": "referral status updated"}
