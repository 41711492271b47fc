"""
Redis implementation of the DraftMedium.
"""

import redis.asyncio as redis
from typing import Optional
from marketing_planner.repositories.base import DraftMedium
from marketing_planner.core.config import settings


class RedisDraftMedium(DraftMedium):
    """Keeps questionnaire drafts in Redis with a sliding TTL."""

    def __init__(self, ttl_seconds: Optional[int] = None):
        """Initialize Redis connection settings."""
        self._redis: Optional[redis.Redis] = None
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.DRAFT_TTL_SECONDS

    async def get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                settings.REDIS_URL,
                db=settings.REDIS_DB,
                decode_responses=True,
                encoding="utf-8"
            )
        return self._redis

    async def get(self, key: str) -> Optional[str]:
        """Get raw draft text from Redis."""
        redis_client = await self.get_redis()
        return await redis_client.get(key)

    async def set(self, key: str, value: str) -> bool:
        """Store draft text in Redis, refreshing its TTL."""
        redis_client = await self.get_redis()
        if self.ttl_seconds > 0:
            result = await redis_client.set(key, value, ex=self.ttl_seconds)
        else:
            result = await redis_client.set(key, value)
        return bool(result)

    async def delete(self, key: str) -> bool:
        """Delete a draft from Redis."""
        redis_client = await self.get_redis()
        result = await redis_client.delete(key)
        return result > 0

    async def close(self):
        """Close Redis connection."""
        if self._redis:
            await self._redis.close()
            self._redis = None
