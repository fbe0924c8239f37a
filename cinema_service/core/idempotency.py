import json
import logging
from redis.asyncio import Redis

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "X-Idempotency-Key"


def idempotency_key(scope: str, idem_key: str) -> str:
    return f"idempotency:{scope}:{idem_key}"


async def check_idempotency(redis: Redis, scope: str, idem_key: str | None) -> dict | None:
    """Return the stored response for a repeated key, None for a first attempt."""
    if not idem_key:
        return None
    cached = await redis.get(idempotency_key(scope, idem_key))
    if cached is None:
        return None
    logger.info("replaying %s response for idempotency key %s", scope, idem_key)
    return json.loads(cached)


async def save_idempotent_response(redis: Redis, scope: str, idem_key: str | None, response: dict, ttl: int) -> None:
    if not idem_key:
        return
    await redis.set(idempotency_key(scope, idem_key), json.dumps(response), ex=ttl)
