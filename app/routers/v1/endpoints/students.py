# app/routers/v1/endpoints/students.py
from fastapi import APIRouter, Depends, Request, status
from redis import asyncio as redis
from sqlalchemy.orm import Session

from app.core.limiter import get_client_ip
from app.core.redis import get_redis_client
from app.dependencies import get_db
from app.schemas.common import MessageResponse
from app.schemas.referral import (
    StudentRegistrationRequest,
    StudentRegistrationResponse,
    TrackClickRequest,
)
from app.services import referral as referral_service
from app.services.pricing import PricingProvider, get_pricing_provider

router = APIRouter(prefix="/students")


@router.post(
    "/register",
    response_model=StudentRegistrationResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def register_student(
    data: StudentRegistrationRequest,
    db: Session = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis_client),
    pricing: PricingProvider = Depends(get_pricing_provider),
):
    """
    Публичная регистрация студента на курс.
    Неизвестный реферальный код не приводит к ошибке: это просто прямая регистрация.
    """
    return await referral_service.register_student(db, redis_client, pricing, data)


@router.post("/track-click", response_model=MessageResponse)
async def track_click(data: TrackClickRequest, request: Request, db: Session = Depends(get_db)):
    referral_service.track_click(
        db,
        referral_code=data.referral_code,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    return {"message": "click recorded"}
