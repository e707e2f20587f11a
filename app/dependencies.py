# app/dependencies.py

import logging
from typing import Callable, Iterator
from contextlib import contextmanager

from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import TokenClaims, TokenManager, get_token_manager
from app.crud import user as crud_user
from app.db.session import SessionLocal
from app.models.user import ROLE_ADMIN, ROLE_USER, User
from app.schemas.common import PageParams

# --- Инициализация логгера ---
logger = logging.getLogger(__name__)

# --- Управление сессией БД ---
def get_db_session_instance() -> Session:
    """Создает и возвращает экземпляр сессии БД."""
    return SessionLocal()

def get_db() -> Iterator[Session]:
    """
    Основная зависимость FastAPI для получения сессии БД.
    Это генератор, который корректно работает с `Depends`.
    """
    db = get_db_session_instance()
    try:
        yield db
    finally:
        db.close()

@contextmanager
def get_db_context() -> Iterator[Session]:
    """
    Контекстный менеджер для получения сессии БД вне FastAPI (старт приложения, скрипты).
    """
    db = get_db_session_instance()
    try:
        yield db
    finally:
        db.close()

# --- Зависимости аутентификации и авторизации ---

def get_token_claims(
    request: Request,
    tokens: TokenManager = Depends(get_token_manager),
) -> TokenClaims:
    """
    ОБЯЗАТЕЛЬНАЯ зависимость.
    Проверяет заголовок `Authorization: Bearer <token>` и кладет claims
    в `request.state.claims` для последующих зависимостей и хендлеров.
    """
    header = request.headers.get("Authorization")
    if not header:
        raise AuthenticationError("missing authorization header")

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise AuthenticationError("invalid authorization format")

    claims = tokens.validate_access_token(parts[1])
    request.state.claims = claims
    return claims


def require_role(role: str) -> Callable[..., TokenClaims]:
    """
    Фабрика зависимостей: пропускает только запросы с точно такой ролью.
    Иерархии ролей нет: админ не проходит на пользовательские маршруты и наоборот.
    Всегда выполняется после `get_token_claims`, поэтому без токена будет 401, а не 403.
    """
    def role_checker(claims: TokenClaims = Depends(get_token_claims)) -> TokenClaims:
        if claims.role != role:
            logger.warning(f"Role '{claims.role}' of user {claims.user_id} is not allowed here (need '{role}').")
            raise AuthorizationError()
        return claims
    return role_checker


get_admin_claims = require_role(ROLE_ADMIN)
get_user_claims = require_role(ROLE_USER)


def get_current_user(
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_db),
) -> User:
    """
    Загружает пользователя из токена.
    Удаленный пользователь - 401, заблокированный - 403.
    """
    user = crud_user.get_user_by_id(db, claims.user_id)
    if user is None:
        logger.warning(f"User with ID {claims.user_id} from token not found in DB.")
        raise AuthenticationError("user not found")
    if user.is_blocked:
        raise AuthorizationError("account is blocked")
    return user


def get_admin_user(
    claims: TokenClaims = Depends(get_admin_claims),
    db: Session = Depends(get_db),
) -> User:
    """Зависимость для защиты админских эндпоинтов."""
    return get_current_user(claims, db)


def get_referrer_user(
    claims: TokenClaims = Depends(get_user_claims),
    db: Session = Depends(get_db),
) -> User:
    """Зависимость для личного кабинета пригласившего (роль user)."""
    return get_current_user(claims, db)


# --- Пагинация ---

def get_page_params(
    page: int = Query(1, description="Номер страницы, значения < 1 трактуются как 1"),
    per_page: int = Query(10, description="Размер страницы, вне диапазона 1..100 используется 10"),
) -> PageParams:
    if page < 1:
        page = 1
    if per_page < 1 or per_page > 100:
        per_page = 10
    return PageParams(page=page, per_page=per_page)
