# app/crud/payout.py
import uuid
from datetime import datetime, timezone
from typing import List, Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.models.payout import Payout, PAYOUT_APPROVED, PAYOUT_PENDING, PAYOUT_REJECTED


def create_payout(db: Session, user_id: uuid.UUID, amount: int) -> Payout:
    db_payout = Payout(user_id=user_id, amount=amount, status=PAYOUT_PENDING)
    db.add(db_payout)
    db.commit()
    db.refresh(db_payout)
    return db_payout


def get_payout(db: Session, payout_id: uuid.UUID) -> Payout | None:
    return db.query(Payout).filter(Payout.id == payout_id).first()


def get_payouts_by_user(db: Session, user_id: uuid.UUID, skip: int = 0, limit: int = 10) -> Tuple[List[Payout], int]:
    query = db.query(Payout).filter(Payout.user_id == user_id)
    total = query.count()
    items = query.order_by(Payout.created_at.desc()).offset(skip).limit(limit).all()
    return items, total


def get_payouts(db: Session, skip: int = 0, limit: int = 10, status: str | None = None) -> Tuple[List[Payout], int]:
    query = db.query(Payout)
    if status:
        query = query.filter(Payout.status == status)
    total = query.count()
    items = query.order_by(Payout.created_at.desc()).offset(skip).limit(limit).all()
    return items, total


def update_status(db: Session, payout_id: uuid.UUID, status: str, approved_by: uuid.UUID) -> bool:
    """
    Фиксирует решение админа одним условным UPDATE: строка меняется, только
    если выплата еще в 'pending'. paid_at ставится только при одобрении.
    Возвращает False, если выплату уже обработали.
    """
    values = {Payout.status: status, Payout.approved_by: approved_by}
    if status == PAYOUT_APPROVED:
        values[Payout.paid_at] = datetime.now(timezone.utc)
    updated = (
        db.query(Payout)
        .filter(Payout.id == payout_id, Payout.status == PAYOUT_PENDING)
        .update(values, synchronize_session=False)
    )
    db.commit()
    return updated == 1


def get_payout_totals(db: Session) -> Tuple[int, int]:
    """(сумма одобренных выплат, сумма ожидающих выплат)"""
    row = db.query(
        func.coalesce(func.sum(case((Payout.status == PAYOUT_APPROVED, Payout.amount), else_=0)), 0),
        func.coalesce(func.sum(case((Payout.status == PAYOUT_PENDING, Payout.amount), else_=0)), 0),
    ).one()
    return int(row[0]), int(row[1])


def get_reserved_amount_by_user(db: Session, user_id: uuid.UUID) -> int:
    """Сумма ожидающих и одобренных выплат: отклоненные баланс не занимают."""
    total = (
        db.query(func.coalesce(func.sum(Payout.amount), 0))
        .filter(Payout.user_id == user_id, Payout.status != PAYOUT_REJECTED)
        .scalar()
    )
    return int(total or 0)
