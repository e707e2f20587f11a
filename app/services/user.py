# app/services/user.py

import logging

from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.crud import click as crud_click
from app.crud import payout as crud_payout
from app.crud import referral as crud_referral
from app.crud import user as crud_user
from app.models.payout import Payout
from app.models.user import User
from app.schemas.common import PageParams, page_response
from app.schemas.user import UpdateProfileRequest, UserDashboardStats

logger = logging.getLogger(__name__)


def get_dashboard(db: Session, user: User) -> UserDashboardStats:
    total_referrals, paid_earnings, pending_earnings = crud_referral.get_stats_by_referrer(db, user.id)
    return UserDashboardStats(
        total_earnings=paid_earnings,
        pending_balance=pending_earnings,
        total_referrals=total_referrals,
        total_clicks=crud_click.count_clicks_by_user(db, user.id),
    )


def get_my_referrals(db: Session, user: User, params: PageParams) -> dict:
    items, total = crud_referral.get_referrals_by_referrer(db, user.id, skip=params.skip, limit=params.per_page)
    return page_response(items, total, params)


def update_profile(db: Session, user: User, data: UpdateProfileRequest) -> User:
    """Меняет только переданные непустые поля."""
    fields = data.model_dump(exclude_none=True)
    if "name" in fields:
        fields["name"] = fields["name"].strip()
    return crud_user.update_user(db, user, **fields)


def get_available_balance(db: Session, user: User) -> int:
    """Ожидающий заработок минус все выплаты, кроме отклоненных."""
    _, _, pending_earnings = crud_referral.get_stats_by_referrer(db, user.id)
    return pending_earnings - crud_payout.get_reserved_amount_by_user(db, user.id)


def request_payout(db: Session, user: User, amount: int) -> Payout:
    """
    Проверка баланса и создание выплаты идут в одной транзакции под блокировкой
    строки пользователя.
    """
    crud_user.lock_user(db, user.id)
    available = get_available_balance(db, user)
    if amount > available:
        db.rollback()
        raise ValidationError("insufficient balance", message=f"available balance: {max(available, 0)}")
    payout = crud_payout.create_payout(db, user.id, amount)
    logger.info(f"User {user.id} requested payout {payout.id} of {amount}.")
    return payout


def get_my_payouts(db: Session, user: User, params: PageParams) -> dict:
    items, total = crud_payout.get_payouts_by_user(db, user.id, skip=params.skip, limit=params.per_page)
    return page_response(items, total, params)
