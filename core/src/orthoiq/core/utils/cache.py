from collections.abc import AsyncGenerator

from redis.asyncio import ConnectionPool, Redis

pool: ConnectionPool | None = None
client: Redis | None = None


def create_redis_pool(url: str, socket_timeout: float) -> None:
    """Create the process-wide Redis pool used by readiness checks."""
    global pool, client
    pool = ConnectionPool.from_url(url, socket_timeout=socket_timeout, socket_connect_timeout=socket_timeout)
    client = Redis.from_pool(pool)


async def close_redis_pool() -> None:
    global pool, client
    if client is not None:
        await client.aclose()
    client = None
    pool = None


async def async_get_redis() -> AsyncGenerator[Redis, None]:
    """Get a Redis client bound to the shared pool."""
    if pool is None:
        raise RuntimeError("Redis pool is not initialized")
    async with Redis(connection_pool=pool) as redis:
        yield redis
