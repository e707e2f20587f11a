# tests/conftest.py
import os

# Окружение задается до импорта приложения: settings читаются при импорте
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_EMAIL"] = "owner@cirvee.com"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.clients.paystack import PaystackClient, get_paystack_client
from app.core.redis import get_redis_client
from app.core.security import token_manager
from app.crud import referral as crud_referral
from app.db.session import Base
from app.dependencies import get_db
from app.main import app
from app.models import click, payout, referral, reset_token, user  # noqa: F401  все модели для create_all
from app.models.user import ROLE_ADMIN, ROLE_USER
from app.services import auth as auth_service

# Используем in-memory SQLite для тестов - это быстро и изолированно.
# StaticPool держит одно соединение, чтобы приложение и тест видели одну и ту же базу.
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "password123"


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Фикстура для создания чистой базы данных для каждого теста.
    """
    Base.metadata.create_all(bind=engine) # Создаем все таблицы
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine) # Очищаем все после теста


@pytest.fixture
def mock_redis() -> MagicMock:
    """
    Подмена Redis на словарь: счетчики лимитера, кеш дашборда, ping.
    Содержимое доступно через `mock_redis.store`.
    """
    store = {}
    redis_mock = MagicMock()

    def incr(key):
        store[key] = int(store.get(key, 0)) + 1
        return store[key]

    def set_value(key, value, ex=None, nx=False):
        if nx and key in store:
            return None
        store[key] = value
        return True

    def delete(*keys):
        return sum(1 for key in keys if store.pop(key, None) is not None)

    redis_mock.incr = AsyncMock(side_effect=incr)
    redis_mock.expire = AsyncMock(return_value=True)
    redis_mock.get = AsyncMock(side_effect=lambda key: store.get(key))
    redis_mock.set = AsyncMock(side_effect=set_value)
    redis_mock.delete = AsyncMock(side_effect=delete)
    redis_mock.ping = AsyncMock(return_value=True)
    redis_mock.store = store
    return redis_mock


@pytest.fixture
def sent_emails(mocker) -> MagicMock:
    """Перехватывает фоновую отправку писем: реальный SMTP в тестах не нужен."""
    return mocker.patch("app.services.email.dispatch")


@pytest.fixture
def paystack_handler() -> MagicMock:
    """
    Обработчик запросов к Paystack. Тест задает `return_value` / `side_effect`
    с готовым httpx.Response.
    """
    return MagicMock(return_value=httpx.Response(200, json={"status": True, "data": []}))


@pytest.fixture
def paystack_client(paystack_handler) -> PaystackClient:
    return PaystackClient(
        base_url="https://api.paystack.co",
        secret_key="sk_test_secret",
        transport=httpx.MockTransport(paystack_handler),
    )


@pytest.fixture
async def client(db_session, mock_redis, sent_emails, paystack_client) -> httpx.AsyncClient:
    """HTTP-клиент для приложения с подмененными БД, Redis и Paystack."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = lambda: mock_redis
    app.dependency_overrides[get_paystack_client] = lambda: paystack_client

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as async_client:
        yield async_client

    app.dependency_overrides.clear()
    await paystack_client.aclose()


def auth_headers_for(account) -> dict:
    token = token_manager.generate_access_token(account.id, account.email, account.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_user(db_session):
    return auth_service.create_user_with_code(
        db_session,
        email="john@example.com",
        password=TEST_PASSWORD,
        name="John Doe",
        phone="08012345678",
        role=ROLE_USER,
        bank_name="Access Bank",
        account_number="0123456789",
        account_name="John Doe",
    )


@pytest.fixture
def admin_user(db_session):
    return auth_service.create_user_with_code(
        db_session,
        email="admin@cirvee.com",
        password=TEST_PASSWORD,
        name="Super Admin",
        phone="",
        role=ROLE_ADMIN,
    )


@pytest.fixture
def user_auth_headers(test_user) -> dict:
    return auth_headers_for(test_user)


@pytest.fixture
def admin_auth_headers(admin_user) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def make_user(db_session):
    """Фабрика пригласивших: make_user("mary@example.com", "Mary Ann")."""

    def _make_user(email: str, name: str = "Mary Ann", role: str = ROLE_USER):
        return auth_service.create_user_with_code(
            db_session, email=email, password=TEST_PASSWORD, name=name, phone="0800", role=role
        )

    return _make_user


@pytest.fixture
def make_referral(db_session):
    """Фабрика записей о регистрации студента с нужным статусом и комиссией."""

    def _make_referral(referrer=None, earnings: int = 15000, status: str = "pending", course: str = "Web Development"):
        db_referral = crud_referral.create_referral(
            db_session,
            referrer_id=referrer.id if referrer else None,
            referred_name="Student",
            referred_email="student@example.com",
            referred_phone="0811",
            course=course,
            course_price=150000,
            earnings=earnings if referrer else 0,
        )
        if status != "pending":
            crud_referral.update_status(db_session, db_referral.id, status)
            db_session.refresh(db_referral)
        return db_referral

    return _make_referral


@pytest.fixture
def auth_headers():
    """Заголовки авторизации для произвольного аккаунта."""
    return auth_headers_for
