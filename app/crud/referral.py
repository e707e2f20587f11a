# app/crud/referral.py
import uuid
from typing import List, Tuple

from sqlalchemy import case, distinct, func, or_
from sqlalchemy.orm import Session

from app.models.referral import Referral, REFERRAL_PAID, REFERRAL_PENDING
from app.models.user import User, ROLE_ADMIN


def create_referral(
    db: Session,
    referrer_id: uuid.UUID | None,
    referred_name: str,
    referred_email: str,
    referred_phone: str,
    course: str,
    course_price: int,
    earnings: int,
) -> Referral:
    db_referral = Referral(
        referrer_id=referrer_id,
        referred_name=referred_name,
        referred_email=referred_email.strip().lower(),
        referred_phone=referred_phone,
        course=course,
        course_price=course_price,
        earnings=earnings,
        status=REFERRAL_PENDING,
    )
    db.add(db_referral)
    db.commit()
    db.refresh(db_referral)
    return db_referral


def get_referral(db: Session, referral_id: uuid.UUID) -> Referral | None:
    return db.query(Referral).filter(Referral.id == referral_id).first()


def get_referrals_by_referrer(
    db: Session, referrer_id: uuid.UUID, skip: int = 0, limit: int = 10
) -> Tuple[List[Referral], int]:
    query = db.query(Referral).filter(Referral.referrer_id == referrer_id)
    total = query.count()
    items = query.order_by(Referral.created_at.desc()).offset(skip).limit(limit).all()
    return items, total


def get_all_referrals(db: Session, skip: int = 0, limit: int = 10) -> Tuple[List[tuple], int]:
    """
    Все рефералы вместе с именем пригласившего.
    Возвращает пары (Referral, referrer_name | None); None - прямая регистрация.
    """
    total = db.query(func.count(Referral.id)).scalar() or 0
    rows = (
        db.query(Referral, User.name)
        .outerjoin(User, Referral.referrer_id == User.id)
        .order_by(Referral.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return rows, total


def update_status(db: Session, referral_id: uuid.UUID, status: str) -> bool:
    """Переход из 'pending' одним условным UPDATE. False - запись уже не в 'pending'."""
    updated = (
        db.query(Referral)
        .filter(Referral.id == referral_id, Referral.status == REFERRAL_PENDING)
        .update({Referral.status: status}, synchronize_session=False)
    )
    db.commit()
    return updated == 1


def mark_referrer_paid(db: Session, referrer_id: uuid.UUID) -> int:
    """Переводит все ожидающие рефералы пригласившего в 'paid'. Возвращает число обновленных строк."""
    updated = (
        db.query(Referral)
        .filter(Referral.referrer_id == referrer_id, Referral.status == REFERRAL_PENDING)
        .update({Referral.status: REFERRAL_PAID}, synchronize_session=False)
    )
    db.commit()
    return updated


def get_stats_by_referrer(db: Session, referrer_id: uuid.UUID) -> Tuple[int, int, int]:
    """(кол-во рефералов, выплаченный заработок, ожидающий заработок)"""
    row = (
        db.query(
            func.count(Referral.id),
            func.coalesce(func.sum(case((Referral.status == REFERRAL_PAID, Referral.earnings), else_=0)), 0),
            func.coalesce(func.sum(case((Referral.status == REFERRAL_PENDING, Referral.earnings), else_=0)), 0),
        )
        .filter(Referral.referrer_id == referrer_id)
        .one()
    )
    return int(row[0]), int(row[1]), int(row[2])


def get_total_stats(db: Session) -> dict:
    """Агрегаты для админского дашборда. Рефералы админов не учитываются."""
    referrals = (
        db.query(
            func.count(Referral.referrer_id),
            func.coalesce(func.sum(Referral.earnings), 0),
            func.coalesce(func.sum(case((Referral.status == REFERRAL_PENDING, Referral.earnings), else_=0)), 0),
            func.coalesce(func.sum(case((Referral.status == REFERRAL_PAID, Referral.earnings), else_=0)), 0),
            func.count(case((Referral.status == REFERRAL_PAID, Referral.id))),
        )
        .select_from(Referral)
        .outerjoin(User, Referral.referrer_id == User.id)
        .filter(or_(User.role.is_(None), User.role != ROLE_ADMIN))
        .one()
    )

    total_codes = (
        db.query(func.count(User.id))
        .filter(User.referral_code.isnot(None), User.referral_code != "", User.role != ROLE_ADMIN)
        .scalar()
    )
    active_codes = (
        db.query(func.count(distinct(Referral.referrer_id)))
        .select_from(Referral)
        .join(User, Referral.referrer_id == User.id)
        .filter(User.role != ROLE_ADMIN)
        .scalar()
    )
    total_students = db.query(func.count(Referral.id)).scalar()
    unique_courses = db.query(func.count(distinct(Referral.course))).scalar()

    return {
        "total_referrals": int(referrals[0]),
        "total_earnings": int(referrals[1]),
        "pending_balance": int(referrals[2]),
        "total_paid_earnings": int(referrals[3]),
        "paid_count": int(referrals[4]),
        "total_codes": total_codes or 0,
        "active_codes": active_codes or 0,
        "total_students": total_students or 0,
        "total_unique_courses": unique_courses or 0,
    }


def get_referrers_stats(db: Session, skip: int = 0, limit: int = 10) -> Tuple[List[dict], int]:
    """Статистика по каждому пригласившему (не админу), по убыванию заработка и использований."""
    base_filter = (User.referral_code.isnot(None), User.referral_code != "", User.role != ROLE_ADMIN)
    total = db.query(func.count(User.id)).filter(*base_filter).scalar() or 0

    total_usage = func.count(Referral.id).label("total_usage")
    total_earnings = func.coalesce(func.sum(Referral.earnings), 0).label("total_earnings")
    rows = (
        db.query(User.id, User.name, User.referral_code, User.is_blocked, total_usage, total_earnings)
        .outerjoin(Referral, Referral.referrer_id == User.id)
        .filter(*base_filter)
        .group_by(User.id, User.name, User.referral_code, User.is_blocked)
        .order_by(total_earnings.desc(), total_usage.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )

    stats = [
        {
            "referrer_id": row.id,
            "referrer_name": row.name,
            "referral_code": row.referral_code,
            "total_usage": int(row.total_usage),
            "total_earnings": int(row.total_earnings),
            "status": "Active" if row.total_usage > 0 else "Inactive",
            "is_blocked": row.is_blocked,
        }
        for row in rows
    ]
    return stats, total

