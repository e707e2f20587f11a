# app/services/auth.py

import asyncio
import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from app.core.security import TokenManager, hash_password, verify_password
from app.crud import reset_token as crud_reset_token
from app.crud import user as crud_user
from app.crud.user import UniqueViolation
from app.models.user import ROLE_ADMIN, ROLE_USER, User
from app.schemas.user import AuthResponse, RegisterRequest, User as UserSchema
from app.services import email as email_service
from app.utils.codes import generate_referral_code

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If the email exists, a password reset link will be sent"
PASSWORD_RESET_MESSAGE = "Password has been reset successfully"


def generate_unique_referral_code(db: Session, name: str) -> str:
    """
    Генерирует код, которого еще нет в БД.
    Число попыток ограничено, каждая коллизия логируется.
    """
    for attempt in range(1, settings.REFERRAL_CODE_MAX_ATTEMPTS + 1):
        code = generate_referral_code(name)
        if not crud_user.referral_code_exists(db, code):
            return code
        logger.warning(f"Referral code collision on attempt {attempt}: {code}")
    logger.error(f"Could not generate a unique referral code after {settings.REFERRAL_CODE_MAX_ATTEMPTS} attempts.")
    raise ConflictError("could not generate unique referral code")


def create_user_with_code(
    db: Session,
    email: str,
    password: str,
    name: str,
    phone: str,
    role: str,
    **bank_details,
) -> User:
    """Синхронный вариант для скриптов и сидирования: хеширует пароль в текущем потоке."""
    return create_user_with_hash(db, email, hash_password(password), name, phone, role, **bank_details)


def create_user_with_hash(
    db: Session,
    email: str,
    password_hash: str,
    name: str,
    phone: str,
    role: str,
    **bank_details,
) -> User:
    """
    Создает пользователя с уникальным реферальным кодом.
    Коллизия кода, пойманная уникальным ограничением при гонке, ведет к новой попытке.
    """
    if crud_user.email_exists(db, email):
        raise ConflictError("email already exists")

    for attempt in range(1, settings.REFERRAL_CODE_MAX_ATTEMPTS + 1):
        code = generate_unique_referral_code(db, name)
        try:
            return crud_user.create_user(
                db,
                email=email,
                password_hash=password_hash,
                name=name,
                phone=phone,
                role=role,
                referral_code=code,
                **bank_details,
            )
        except UniqueViolation as e:
            if e.column == "email":
                raise ConflictError("email already exists")
            logger.warning(f"Referral code {code} was taken concurrently (attempt {attempt}), retrying.")
    raise ConflictError("could not generate unique referral code")


def _issue_tokens(tokens: TokenManager, user: User) -> AuthResponse:
    return AuthResponse(
        access_token=tokens.generate_access_token(user.id, user.email, user.role),
        refresh_token=tokens.generate_refresh_token(user.id, user.email, user.role),
        user=UserSchema.model_validate(user),
    )


async def register_user(db: Session, tokens: TokenManager, data: RegisterRequest) -> AuthResponse:
    # bcrypt синхронный: хеширование выполняется в пуле потоков
    password_hash = await asyncio.to_thread(hash_password, data.password)
    user = create_user_with_hash(
        db,
        email=data.email,
        password_hash=password_hash,
        name=data.name,
        phone=data.phone,
        role=ROLE_USER,
        bank_name=data.bank_name,
        account_number=data.account_number,
        account_name=data.account_name,
    )
    logger.info(f"New user registered: {user.id} ({user.referral_code})")
    email_service.send_welcome_email(user.email, user.name)
    return _issue_tokens(tokens, user)


async def login(db: Session, tokens: TokenManager, email: str, password: str) -> AuthResponse:
    user = crud_user.get_user_by_email(db, email)
    if user is None or not await asyncio.to_thread(verify_password, password, user.password_hash):
        raise AuthenticationError("invalid credentials")
    if user.is_blocked:
        logger.info(f"Blocked user {user.id} attempted to log in.")
        raise AuthorizationError("user account is blocked")
    return _issue_tokens(tokens, user)


def refresh(db: Session, tokens: TokenManager, refresh_token: str) -> AuthResponse:
    """Обменивает refresh-токен на новую пару токенов."""
    try:
        claims = tokens.validate_refresh_token(refresh_token)
    except AuthenticationError:
        raise AuthenticationError("invalid or expired refresh token")

    user = crud_user.get_user_by_id(db, claims.user_id)
    if user is None:
        raise AuthenticationError("invalid or expired refresh token")
    if user.is_blocked:
        raise AuthorizationError("user account is blocked")
    return _issue_tokens(tokens, user)


def forgot_password(db: Session, email: str) -> str:
    """
    Создает токен сброса и отправляет письмо.
    Ответ одинаковый независимо от того, существует ли email.
    """
    user = crud_user.get_user_by_email(db, email)
    if user is None:
        logger.info("Password reset requested for unknown email.")
        return FORGOT_PASSWORD_MESSAGE

    reset_token = crud_reset_token.create_reset_token(
        db, user.id, timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
    )
    email_service.send_password_reset_email(user.email, reset_token.token)
    return FORGOT_PASSWORD_MESSAGE


async def reset_password(db: Session, token: str, new_password: str) -> str:
    reset_token = crud_reset_token.get_valid_token(db, token)
    if reset_token is None:
        raise ValidationError("invalid or expired reset token")

    user = crud_user.get_user_by_id(db, reset_token.user_id)
    if user is None:
        crud_reset_token.delete_token(db, reset_token)
        raise ValidationError("invalid or expired reset token")

    password_hash = await asyncio.to_thread(hash_password, new_password)
    crud_user.update_password(db, user, password_hash)
    crud_reset_token.delete_tokens_for_user(db, user.id)
    logger.info(f"Password reset for user {user.id}.")
    return PASSWORD_RESET_MESSAGE


def ensure_admin(db: Session, email: str, password: str, name: str) -> User | None:
    """
    Создает администратора, если его еще нет. Возвращает созданного админа
    или None, если пользователь с таким email уже существует.
    """
    existing = crud_user.get_user_by_email(db, email)
    if existing is not None:
        if existing.role != ROLE_ADMIN:
            logger.warning(
                f"Account {email} exists with role '{existing.role}', not '{ROLE_ADMIN}'. "
                "Admin seeding skipped, no admin account was created."
            )
        else:
            logger.info(f"Admin account {email} already exists, seeding skipped.")
        return None
    admin = create_user_with_code(db, email=email, password=password, name=name, phone="", role=ROLE_ADMIN)
    logger.info(f"Admin account {admin.email} created.")
    return admin
