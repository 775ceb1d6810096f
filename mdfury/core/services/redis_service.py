import asyncio
import logging
from typing import Optional

import redis.asyncio as redis

from mdfury.core.config import config

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 5


class RedisService:
    """Process-wide Redis connection used for the user cache.

    Redis is optional: with no ``REDIS_URL`` the service reports itself
    disabled and callers skip caching.
    """

    _instance: Optional["RedisService"] = None

    def __init__(self, redis_url: Optional[str] = None):
        self.redis_url = redis_url
        self._client: Optional[redis.Redis] = None
        self._lock: Optional[asyncio.Lock] = None

    @property
    def enabled(self) -> bool:
        return bool(self.redis_url)

    async def get_client(self) -> redis.Redis:
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._client is None:
                client = redis.from_url(self.redis_url, decode_responses=True, health_check_interval=30)
                try:
                    await asyncio.wait_for(client.ping(), timeout=CONNECT_TIMEOUT_SECONDS)
                except (asyncio.TimeoutError, redis.RedisError, OSError) as e:
                    logger.error(f"Redis connection failed: {e!r}")
                    await client.aclose()
                    raise ConnectionError(f"Redis connection failed: {e!r}") from e
                logger.info("Connected to Redis")
                self._client = client
        return self._client

    async def set_value(self, key: str, value: str, expire: Optional[int] = None) -> None:
        """Set ``key``, expiring after ``expire`` seconds when given"""
        client = await self.get_client()
        await client.set(name=key, value=value, ex=expire)

    async def get_value(self, key: str) -> Optional[str]:
        client = await self.get_client()
        return await client.get(name=key)

    async def delete_value(self, key: str) -> None:
        client = await self.get_client()
        await client.delete(key)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @classmethod
    async def get_instance(cls) -> "RedisService":
        if cls._instance is None:
            cls._instance = cls(config.REDIS_URL)
        return cls._instance
