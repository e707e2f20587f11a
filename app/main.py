# app/main.py

import time
import logging
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Конфигурация и ядро
from app.core.config import settings as config
from app.core.exceptions import AppError, ConflictError, InternalError
from app.core.limiter import global_limiter
from app.core.logging_config import ACCESS_LOGGER, setup_logging
from app.core.redis import redis_client
from app.clients.paystack import paystack_client
from app.crud import reset_token as crud_reset_token
from app.dependencies import get_db_context
from app.services import auth as auth_service

# Роутеры FastAPI
from app.routers.health import router as health_router
from app.routers.v1.api import api_router as api_v1_router

# --- Инициализация ---
logger = logging.getLogger(__name__)
access_logger = logging.getLogger(ACCESS_LOGGER)

STARTUP_LOCK_KEY = "app_startup_lock"

# --- Обработчики ошибок ---
async def app_error_handler(request: Request, exc: AppError):
    """Типизированные ошибки приложения -> {"error": ..., "message": ...}."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error} ({exc.message})")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Ошибки самого фреймворка (404 маршрута, 405 метода) в том же формате."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail).lower()},
        headers=getattr(exc, "headers", None),
    )


def _format_validation_error(error: dict) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{field}: {error.get('msg')}" if field else str(error.get("msg"))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Ошибки валидации запроса отдаются как 400, а не 422."""
    message = ", ".join(_format_validation_error(error) for error in exc.errors())
    return JSONResponse(status_code=400, content={"error": "invalid request", "message": message})


async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Глобальный обработчик для всех необработанных исключений.
    Логирует ошибку с трейсбеком; клиенту уходит только общее сообщение.
    """
    logger.critical(f"Unhandled exception for request: {request.method} {request.url}", exc_info=exc)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# --- Начальная настройка ---
def seed_admin() -> None:
    """Создает администратора из ADMIN_EMAIL/ADMIN_PASSWORD, если его еще нет."""
    if not config.ADMIN_EMAIL or not config.ADMIN_PASSWORD:
        logger.warning("ADMIN_EMAIL/ADMIN_PASSWORD are not set. Admin seeding skipped.")
        return
    with get_db_context() as db:
        try:
            auth_service.ensure_admin(db, config.ADMIN_EMAIL, config.ADMIN_PASSWORD, config.ADMIN_NAME)
        except ConflictError as e:
            logger.info(f"Admin seeding skipped: {e.error}")
        removed = crud_reset_token.cleanup_expired(db)
        if removed:
            logger.info(f"Removed {removed} expired password reset token(s).")


# --- Lifespan Manager (запуск и остановка приложения) ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging("DEBUG" if config.ENV == "development" else None)
    logger.info("Application lifespan startup...")

    # Надежная блокировка через Redis для однократной инициализации
    try:
        is_main_worker = await redis_client.set(STARTUP_LOCK_KEY, "1", ex=60, nx=True)
    except (RedisError, OSError) as e:
        logger.warning(f"Redis unavailable at startup ({e}), running initial setup in this worker.")
        is_main_worker = True

    if is_main_worker:
        logger.info("This is the main worker. Running initial setup...")
        try:
            seed_admin()
        except SQLAlchemyError:
            logger.exception("Initial setup failed: database is not ready.")
    else:
        logger.info("This is a secondary worker. Skipping initial setup.")

    yield

    # Код при остановке
    await paystack_client.aclose()
    if is_main_worker:
        logger.info("Main worker shutting down...")
        try:
            await redis_client.delete(STARTUP_LOCK_KEY)
        except (RedisError, OSError) as e:
            logger.warning(f"Could not release startup lock: {e}")
    else:
        logger.info("Secondary worker shutting down.")
    await redis_client.aclose()

# --- Создание FastAPI приложения ---
# Общий лимит запросов применяется ко всем маршрутам
app = FastAPI(
    title="Cirvee Referral Service",
    description="Referral tracking, commissions and payouts backend",
    version="1.0.0",
    lifespan=lifespan,
    dependencies=[Depends(global_limiter)],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS, # Разрешить запросы с этих доменов
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
    expose_headers=["Link", "Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining"],
    max_age=300,
)


@app.middleware("http")
async def access_log_middleware(request: Request, call_next):
    """Логирует каждый запрос и добавляет базовые заголовки безопасности."""
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    access_logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f} ms)")
    return response


# --- Регистрация обработчиков исключений ---
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Подключение роутеров FastAPI ---
api_router = APIRouter(prefix="/api")
api_router.include_router(api_v1_router)

# Подключаем главный роутер к приложению
app.include_router(api_router)

# Проверка состояния (остается в корне)
app.include_router(health_router, tags=["Health"])
