from typing import AsyncGenerator
from redis.asyncio import Redis
from redis.asyncio.connection import ConnectionPool
from cinema_service.core.config import settings

# only idempotency records live here, stored as JSON text
redis_pool = ConnectionPool.from_url(
    settings.REDIS_URL,
    max_connections=settings.REDIS_MAX_CONNECTIONS,
    decode_responses=True
)
redis_client = Redis(connection_pool=redis_pool)


async def get_redis() -> AsyncGenerator[Redis, None]:
    """Yield the shared client; connections are returned to the pool by redis itself."""
    yield redis_client


async def close_redis():
    await redis_client.aclose()
    await redis_pool.disconnect()
