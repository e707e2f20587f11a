# app/core/limiter.py

import logging

from fastapi import Depends, Request, Response
from redis import asyncio as redis
from redis.exceptions import RedisError

from app.core.config import settings
from app.core.exceptions import RateLimitExceeded
from app.core.redis import get_redis_client

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """
    Определяет IP клиента.
    Приоритет: первый адрес из X-Forwarded-For (за прокси) -> адрес соединения.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimiter:
    """
    Лимитер с фиксированным окном поверх Redis (INCR + EXPIRE).

    Окно начинается с первого запроса клиента и живет `window_seconds`.
    Если Redis недоступен, запрос пропускается (fail-open).
    """

    def __init__(
        self,
        prefix: str,
        requests: int,
        window_seconds: int,
        per_path: bool = False,
        message: str | None = None,
    ):
        self.prefix = prefix
        self.requests = requests
        self.window_seconds = window_seconds
        self.per_path = per_path
        self.message = message

    def build_key(self, request: Request) -> str:
        ip = get_client_ip(request)
        if self.per_path:
            return f"{self.prefix}:{request.url.path}:{ip}"
        return f"{self.prefix}:{ip}"

    async def hit(self, key: str, redis_client: redis.Redis) -> int | None:
        """
        Увеличивает счетчик окна и возвращает его значение.
        None означает, что Redis недоступен и лимит не применяется.
        """
        try:
            count = await redis_client.incr(key)
            if count == 1:
                await redis_client.expire(key, self.window_seconds)
            return count
        except (RedisError, OSError) as e:
            logger.warning(f"Rate limiter storage unavailable for key '{key}', allowing request: {e}")
            return None

    async def __call__(
        self,
        request: Request,
        response: Response,
        redis_client: redis.Redis = Depends(get_redis_client),
    ) -> None:
        key = self.build_key(request)
        count = await self.hit(key, redis_client)
        if count is None:
            return

        if count > self.requests:
            logger.info(f"Rate limit exceeded for key '{key}' ({count}/{self.requests}).")
            raise RateLimitExceeded(
                error=self.message,
                headers={"Retry-After": str(self.window_seconds)},
            )

        response.headers["X-RateLimit-Limit"] = str(self.requests)
        response.headers["X-RateLimit-Remaining"] = str(max(self.requests - count, 0))


# Общий лимит на все API
global_limiter = RateLimiter(
    prefix="rate_limit",
    requests=settings.RATE_LIMIT_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
)

# Более строгий лимит для эндпоинтов аутентификации, считается отдельно для каждого пути
auth_limiter = RateLimiter(
    prefix="auth_rate_limit",
    requests=settings.AUTH_RATE_LIMIT_REQUESTS,
    window_seconds=settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
    per_path=True,
    message="too many authentication attempts, please try again later",
)
