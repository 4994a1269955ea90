import json
import logging

import redis.asyncio as redis

from blog_api.config import settings

logger = logging.getLogger(__name__)

ARTICLE_LIST_KEY = "articles:list"

# session.info slot holding keys to drop after commit
_PENDING_KEYS = "cache_pending_invalidation"


def article_detail_key(article_id: int) -> str:
    return f"articles:detail:{article_id}"


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    Every method is safe to call when Redis is unavailable: reads return
    None and writes are skipped, so the API keeps serving from the
    database.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis ping failed, cache disabled: %s", exc)
            await self._redis.aclose()
            self._redis = None

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        if not self._redis:
            return None
        try:
            data = await self._redis.get(key)
        except Exception as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            return None
        return json.loads(data) if data is not None else None

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        """
        Store *value* under *key* with an optional TTL (seconds).

        Failures are logged and dropped; a cache write never fails a request.
        """
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except Exception as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete(self, *keys: str) -> None:
        if not self._redis or not keys:
            return
        try:
            await self._redis.delete(*keys)
        except Exception as exc:
            logger.debug("Cache DELETE error for keys=%r: %s", keys, exc)

    # ------------------------------------------------------------------
    # Domain-level invalidation
    # ------------------------------------------------------------------

    def defer_article_invalidation(self, session, article_id: int | None = None) -> None:
        """
        Queue article keys on *session* to be dropped once it commits.

        The list entry is always queued; the detail entry only when
        *article_id* is given.  Dropping before the commit would let a
        concurrent read re-cache the pre-write row.
        """
        keys = session.info.setdefault(_PENDING_KEYS, set())
        keys.add(ARTICLE_LIST_KEY)
        if article_id is not None:
            keys.add(article_detail_key(article_id))

    def discard_pending(self, session) -> None:
        session.info.pop(_PENDING_KEYS, None)

    async def invalidate_pending(self, session) -> None:
        """Drop every key queued on *session*.  Call after a successful commit."""
        keys = session.info.pop(_PENDING_KEYS, None)
        if keys:
            await self.delete(*sorted(keys))


# Module-level singleton shared across all request handlers.
cache = CacheManager()
