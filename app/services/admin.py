# app/services/admin.py

import logging
import uuid

from redis import asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.crud import payout as crud_payout
from app.crud import referral as crud_referral
from app.crud import user as crud_user
from app.models.payout import Payout
from app.models.referral import REFERRAL_PAID, Referral
from app.models.user import User
from app.schemas.admin import AdminDashboardStats
from app.schemas.common import PageParams, page_response

logger = logging.getLogger(__name__)

DASHBOARD_CACHE_KEY = "dashboard_stats:all"
DIRECT_SIGNUP = "-"


# --- Дашборд и кеш ---

async def get_dashboard_stats(db: Session, redis_client: redis.Redis) -> AdminDashboardStats:
    """
    Собирает агрегаты для админки. Результат кешируется в Redis;
    недоступный Redis не мешает ответу, агрегаты просто считаются заново.
    """
    try:
        cached_data = await redis_client.get(DASHBOARD_CACHE_KEY)
        if cached_data:
            logger.debug("Dashboard stats served from cache.")
            return AdminDashboardStats.model_validate_json(cached_data)
    except (RedisError, OSError) as e:
        logger.warning(f"Could not read dashboard cache: {e}")

    totals = crud_referral.get_total_stats(db)
    approved_payouts, pending_payouts = crud_payout.get_payout_totals(db)
    stats_data = AdminDashboardStats(
        **totals,
        total_payouts=approved_payouts,
        pending_payouts=pending_payouts,
    )

    try:
        await redis_client.set(DASHBOARD_CACHE_KEY, stats_data.model_dump_json(), ex=settings.DASHBOARD_CACHE_TTL_SECONDS)
    except (RedisError, OSError) as e:
        logger.warning(f"Could not write dashboard cache: {e}")
    return stats_data


async def invalidate_dashboard_cache(redis_client: redis.Redis) -> None:
    """Удаляет кешированные агрегаты дашборда. Ошибки Redis только логируются."""
    try:
        if await redis_client.delete(DASHBOARD_CACHE_KEY):
            logger.debug("Dashboard cache invalidated.")
    except (RedisError, OSError) as e:
        logger.warning(f"Could not invalidate dashboard cache: {e}")


# --- Списки ---

def _admin_referral(referral: Referral, referrer_name: str | None) -> dict:
    return {
        "id": referral.id,
        "referrer_id": referral.referrer_id,
        "referrer_name": referrer_name or DIRECT_SIGNUP,
        "referred_name": referral.referred_name,
        "referred_email": referral.referred_email,
        "referred_phone": referral.referred_phone,
        "course": referral.course,
        "course_price": referral.course_price,
        "earnings": referral.earnings,
        "status": referral.status,
        "created_at": referral.created_at,
    }


def get_paginated_referrals(db: Session, params: PageParams) -> dict:
    rows, total = crud_referral.get_all_referrals(db, skip=params.skip, limit=params.per_page)
    data = [_admin_referral(referral, referrer_name) for referral, referrer_name in rows]
    return page_response(data, total, params)


def get_paginated_students(db: Session, params: PageParams) -> dict:
    """Студенты - это записи о регистрации (рефералы), включая прямые регистрации."""
    rows, total = crud_referral.get_all_referrals(db, skip=params.skip, limit=params.per_page)
    data = [
        {
            "id": referral.id,
            "name": referral.referred_name,
            "email": referral.referred_email,
            "phone": referral.referred_phone,
            "course": referral.course,
            "course_price": referral.course_price,
            "referred_by": referrer_name or DIRECT_SIGNUP,
            "status": referral.status,
            "created_at": referral.created_at,
        }
        for referral, referrer_name in rows
    ]
    return page_response(data, total, params)


def get_paginated_referrers(db: Session, params: PageParams) -> dict:
    stats, total = crud_referral.get_referrers_stats(db, skip=params.skip, limit=params.per_page)
    return page_response(stats, total, params)


def get_paginated_payouts(db: Session, params: PageParams, status: str | None = None) -> dict:
    items, total = crud_payout.get_payouts(db, skip=params.skip, limit=params.per_page, status=status)
    return page_response(items, total, params)


# --- Изменение статусов ---

def update_referral_status(db: Session, referral_id: uuid.UUID, status: str) -> Referral:
    """pending -> paid | rejected. Финальные статусы не меняются."""
    if crud_referral.get_referral(db, referral_id) is None:
        raise NotFoundError("referral not found")
    if not crud_referral.update_status(db, referral_id, status):
        # Запись успели обработать параллельно: перечитываем актуальное состояние
        referral = crud_referral.get_referral(db, referral_id)
        if referral is None:
            raise NotFoundError("referral not found")
        raise ConflictError("referral is not pending", message=f"current status: {referral.status}")
    referral = crud_referral.get_referral(db, referral_id)
    logger.info(f"Referral {referral.id} moved to '{status}'.")
    return referral


def mark_referral_paid(db: Session, referral_id: uuid.UUID) -> Referral:
    return update_referral_status(db, referral_id, REFERRAL_PAID)


def mark_referrer_paid(db: Session, referrer_id: uuid.UUID) -> int:
    """Помечает выплаченными все ожидающие рефералы одного пригласившего."""
    if crud_user.get_user_by_id(db, referrer_id) is None:
        raise NotFoundError("user not found")
    updated = crud_referral.mark_referrer_paid(db, referrer_id)
    logger.info(f"{updated} pending referral(s) of referrer {referrer_id} marked as paid.")
    return updated


def update_payout_status(db: Session, admin: User, payout_id: uuid.UUID, status: str) -> Payout:
    """pending -> approved | rejected, с фиксацией админа, принявшего решение."""
    if crud_payout.get_payout(db, payout_id) is None:
        raise NotFoundError("payout not found")
    if not crud_payout.update_status(db, payout_id, status, approved_by=admin.id):
        payout = crud_payout.get_payout(db, payout_id)
        if payout is None:
            raise NotFoundError("payout not found")
        raise ConflictError("payout is not pending", message=f"current status: {payout.status}")
    payout = crud_payout.get_payout(db, payout_id)
    logger.info(f"Payout {payout.id} {status} by admin {admin.id}.")
    return payout


def set_user_blocked(db: Session, admin: User, user_id: uuid.UUID, is_blocked: bool) -> User:
    if user_id == admin.id:
        raise ValidationError("cannot block yourself")
    user = crud_user.get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("user not found")
    user = crud_user.set_blocked(db, user, is_blocked)
    logger.info(f"User {user.id} {'blocked' if is_blocked else 'unblocked'} by admin {admin.id}.")
    return user
