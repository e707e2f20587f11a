# app/services/referral.py

import logging

from redis import asyncio as redis
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.crud import click as crud_click
from app.crud import referral as crud_referral
from app.crud import user as crud_user
from app.models.user import ROLE_ADMIN, User
from app.schemas.referral import StudentRegistrationRequest, StudentRegistrationResponse
from app.services import email as email_service
from app.services.admin import invalidate_dashboard_cache
from app.services.pricing import PricingProvider

logger = logging.getLogger(__name__)

DIRECT_SIGNUP_LABEL = "Direct Sign-up"


def resolve_referrer(db: Session, referral_code: str | None) -> User | None:
    """
    Находит пригласившего по коду.
    Неизвестный код, код админа или заблокированного пользователя - это прямая регистрация.
    """
    code = (referral_code or "").strip()
    if not code:
        return None

    referrer = crud_user.get_user_by_referral_code(db, code)
    if referrer is None:
        logger.info(f"Unknown referral code '{code}', treating as direct sign-up.")
        return None
    if referrer.role == ROLE_ADMIN or referrer.is_blocked:
        logger.info(f"Referral code '{code}' belongs to an admin or blocked user, treating as direct sign-up.")
        return None
    return referrer


async def register_student(
    db: Session,
    redis_client: redis.Redis,
    pricing: PricingProvider,
    data: StudentRegistrationRequest,
) -> StudentRegistrationResponse:
    """
    Регистрирует студента:
    цена курса -> пригласивший -> комиссия -> запись реферала -> письма -> сброс кеша.
    Запись реферала создается всегда, даже без пригласившего.
    """
    course_price = pricing.get_course_price(data.course)
    referrer = resolve_referrer(db, data.referral_code)
    earnings = pricing.compute_commission(course_price, referred=referrer is not None)

    referral = crud_referral.create_referral(
        db,
        referrer_id=referrer.id if referrer else None,
        referred_name=data.name,
        referred_email=data.email,
        referred_phone=data.phone,
        course=data.course,
        course_price=course_price,
        earnings=earnings,
    )
    logger.info(
        f"Student registered: referral {referral.id}, course '{data.course}', "
        f"referrer {referrer.id if referrer else None}, earnings {earnings}."
    )

    # Письма уходят в фоне, их ошибки не влияют на ответ
    email_service.send_student_confirmation(data.email, data.name, data.course)
    if referrer:
        email_service.send_referral_notification(referrer.email, referrer.name, data.name, data.course, earnings)
        email_service.send_admin_new_student_alert(data.name, data.email, data.course, referrer.name)
    else:
        email_service.send_admin_new_student_alert(data.name, data.email, data.course, DIRECT_SIGNUP_LABEL)

    await invalidate_dashboard_cache(redis_client)

    if referrer:
        return StudentRegistrationResponse(
            message="Student registered successfully", referral="applied", referrer=referrer.name
        )
    return StudentRegistrationResponse(message="Student registered successfully")


def track_click(db: Session, referral_code: str | None, ip_address: str | None, user_agent: str | None) -> None:
    code = (referral_code or "").strip()
    if not code:
        raise ValidationError("referral_code is required")

    # Клик привязывается к владельцу кода, если он существует
    owner = crud_user.get_user_by_referral_code(db, code)
    crud_click.record_click(
        db,
        referral_code=code,
        ip_address=ip_address,
        user_agent=user_agent,
        user_id=owner.id if owner else None,
    )
