# app/crud/reset_token.py
import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.models.reset_token import PasswordResetToken
from app.utils.codes import generate_reset_token

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite возвращает naive datetime, Postgres - aware
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def create_reset_token(db: Session, user_id: uuid.UUID, expires_in: timedelta) -> PasswordResetToken:
    """Создает новый токен сброса. Все предыдущие токены пользователя удаляются."""
    db.query(PasswordResetToken).filter(PasswordResetToken.user_id == user_id).delete(synchronize_session=False)

    db_token = PasswordResetToken(
        user_id=user_id,
        token=generate_reset_token(),
        expires_at=datetime.now(timezone.utc) + expires_in,
    )
    db.add(db_token)
    db.commit()
    db.refresh(db_token)
    return db_token


def get_valid_token(db: Session, token: str) -> PasswordResetToken | None:
    """
    Возвращает живой токен или None.
    Просроченный токен удаляется при обнаружении.
    """
    db_token = db.query(PasswordResetToken).filter(PasswordResetToken.token == token).first()
    if db_token is None:
        return None
    if _as_utc(db_token.expires_at) <= datetime.now(timezone.utc):
        logger.info(f"Expired password reset token for user {db_token.user_id} removed.")
        db.delete(db_token)
        db.commit()
        return None
    return db_token


def delete_token(db: Session, db_token: PasswordResetToken) -> None:
    db.delete(db_token)
    db.commit()


def delete_tokens_for_user(db: Session, user_id: uuid.UUID) -> None:
    db.query(PasswordResetToken).filter(PasswordResetToken.user_id == user_id).delete(synchronize_session=False)
    db.commit()


def cleanup_expired(db: Session) -> int:
    deleted = (
        db.query(PasswordResetToken)
        .filter(PasswordResetToken.expires_at < datetime.now(timezone.utc))
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
