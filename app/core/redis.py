# app/core/redis.py
import redis.asyncio as redis
from app.core.config import settings

# Общий асинхронный клиент: счетчики лимитера, кеш дашборда, блокировка старта.
# Таймауты короткие, лимитер и кеш работают в режиме fail-open
redis_client = redis.Redis.from_url(
    settings.REDIS_URL,
    decode_responses=True,
    socket_connect_timeout=2,
    socket_timeout=2,
)

async def get_redis_client() -> redis.Redis:
    """Зависимость FastAPI; в тестах подменяется через dependency_overrides."""
    return redis_client
