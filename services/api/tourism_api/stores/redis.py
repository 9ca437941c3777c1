"""Redis store for caching guide dashboard payloads.

Handles:
- JSON caching with TTL
- Per-month invalidation after a calculation run or a lock change

TTL policies:
- Guide payout summaries: 5 minutes by default (GUIDE_SUMMARY_CACHE_TTL)

Redis is optional. When REDIS_URL is empty or the server is unreachable at
startup, the service simply runs without a cache.
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from tourism_api.services.months import add_months
from tourism_api.settings import Settings

# TTL constants (in seconds)
TTL_GUIDE_SUMMARY = 300  # 5 minutes

# Key prefixes
PREFIX_GUIDE_SUMMARY = "summary:"

logger = logging.getLogger("uvicorn.error")


def guide_summary_key(guide_id: str, month: str) -> str:
    return f"{PREFIX_GUIDE_SUMMARY}{guide_id}:{month}"


class RedisStore:
    """Thin cache facade over a redis.asyncio client."""

    def __init__(self, client: redis.Redis, summary_ttl: int = TTL_GUIDE_SUMMARY) -> None:
        self._redis = client
        self.summary_ttl = summary_ttl

    @classmethod
    async def connect(cls, settings: Settings) -> "RedisStore | None":
        """Connect and ping; returns None when Redis is not configured."""
        if not settings.redis_url:
            logger.info("Redis not configured, guide summary cache disabled")
            return None
        client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        # Validate connectivity early (especially for `rediss://` in production).
        await client.ping()
        logger.info("Redis connected")
        return cls(client, summary_ttl=settings.guide_summary_cache_ttl)

    async def close(self) -> None:
        """Close Redis connection."""
        await self._redis.aclose()

    # ============================================================
    # Generic cache operations
    # ============================================================

    async def cache_get_json(self, key: str) -> dict[str, Any] | None:
        """Get JSON value from cache.

        Args:
            key: Cache key.

        Returns:
            Parsed JSON dict or None if not found.
        """
        value = await self._redis.get(key)
        if value:
            return json.loads(value)
        return None

    async def cache_set_json(self, key: str, value: dict[str, Any], ttl: int) -> None:
        """Set JSON value in cache with TTL."""
        await self._redis.setex(key, ttl, json.dumps(value, default=str))

    async def cache_delete_matching(self, pattern: str) -> int:
        """Delete every key matching a glob pattern. Returns the number removed."""
        removed = 0
        async for key in self._redis.scan_iter(match=pattern, count=500):
            removed += await self._redis.delete(key)
        return removed

    # ============================================================
    # Guide payout summaries
    # ============================================================

    async def get_guide_summary(self, guide_id: str, month: str) -> dict[str, Any] | None:
        return await self.cache_get_json(guide_summary_key(guide_id, month))

    async def set_guide_summary(self, guide_id: str, month: str, summary: dict[str, Any]) -> None:
        if self.summary_ttl <= 0:
            return
        await self.cache_set_json(guide_summary_key(guide_id, month), summary, self.summary_ttl)

    async def invalidate_guide(self, guide_id: str, month: str | None = None) -> int:
        """Drop cached summaries of one guide, for one month or all of them."""
        return await self.cache_delete_matching(guide_summary_key(guide_id, month or "*"))

    async def invalidate_month(self, month: str) -> int:
        """Drop cached summaries for `month`.

        A guide summary also embeds the three previous months as history, so
        summaries of the following three months are dropped as well.
        """
        removed = 0
        for offset in range(0, 4):
            target = add_months(month, offset)
            removed += await self.cache_delete_matching(f"{PREFIX_GUIDE_SUMMARY}*:{target}")
        return removed
