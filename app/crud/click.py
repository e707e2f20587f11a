# app/crud/click.py
import uuid

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.click import ReferralClick
from app.models.user import User


def record_click(
    db: Session,
    referral_code: str,
    ip_address: str | None,
    user_agent: str | None,
    user_id: uuid.UUID | None = None,
) -> ReferralClick:
    click = ReferralClick(
        referral_code=referral_code,
        user_id=user_id,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.add(click)
    db.commit()
    return click


def count_clicks_by_code(db: Session, referral_code: str) -> int:
    return db.query(func.count(ReferralClick.id)).filter(ReferralClick.referral_code == referral_code).scalar() or 0


def count_clicks_by_user(db: Session, user_id: uuid.UUID) -> int:
    """Клики считаются по реферальному коду пользователя."""
    code = db.query(User.referral_code).filter(User.id == user_id).scalar()
    if not code:
        return 0
    return count_clicks_by_code(db, code)
