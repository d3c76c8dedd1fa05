import redis.asyncio as redis

from tablebook.app.core.config import settings


redis_client: redis.Redis | None = None


async def init_redis() -> None:
    """Initialise a shared Redis connection."""
    global redis_client
    redis_client = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )


async def close_redis() -> None:
    """Close the Redis connection if it was initialised."""
    if redis_client is not None:
        await redis_client.aclose()


async def acquire_hold(key: str, token: str, ttl_seconds: int | None = None) -> bool:
    """SET NX with expiry; False when someone else holds ``key``."""
    ttl = ttl_seconds or settings.HOLD_TTL_SECONDS
    acquired = await redis_client.set(key, token, nx=True, px=ttl * 1000)
    return bool(acquired)


async def release_hold(key: str, token: str) -> None:
    # only drop a hold we still own; it may have expired and been retaken
    if await redis_client.get(key) == token:
        await redis_client.delete(key)
