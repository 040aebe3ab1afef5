# sportshub/core/redis_client.py
from __future__ import annotations

"""
SportsHub — Redis Client (Async)
================================
Redis access for the transcoding outbox.

• Pooled async client built from `REDIS_URL`, connected lazily on first use
  (with retries and jittered backoff)
• `set_marker` / `clear_marker`: claim-once keys (`SET NX EX`) for dedupe
• `push_json`: append a JSON document to a list used as a work queue

Tests pass an in-memory fake through `client=`.
"""

import asyncio
import json
import logging
import random
from typing import Any, Optional, Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from sportshub.core.config import settings

logger = logging.getLogger("redis")


class _QueueRedis(Protocol):
    async def ping(self) -> Any: ...
    async def set(self, name: str, value: Any, *, ex: Optional[int] = None, nx: Optional[bool] = None) -> Any: ...
    async def delete(self, *names: Any) -> Any: ...
    async def rpush(self, name: str, *values: Any) -> Any: ...
    async def close(self) -> Any: ...


class RedisClient:
    """Lazily connected wrapper around one `redis.asyncio.Redis` pool."""

    def __init__(
        self,
        redis_url: str,
        *,
        client: Optional[_QueueRedis] = None,
        connect_attempts: Optional[int] = None,
    ) -> None:
        self.redis_url = redis_url
        self._client: Optional[_QueueRedis] = client
        self._attempts = max(1, int(connect_attempts or settings.REDIS_CONNECT_ATTEMPTS))
        self._lock = asyncio.Lock()

    async def connect(self) -> _QueueRedis:
        """Return a live client, building and pinging a new pool when needed."""
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is not None:
                return self._client
            last_err: Optional[BaseException] = None
            for attempt in range(1, self._attempts + 1):
                candidate = self._build_client()
                try:
                    await candidate.ping()
                except (RedisError, OSError) as e:
                    last_err = e
                    delay = self._backoff(attempt)
                    logger.warning(
                        "Redis connect attempt %s/%s to %s failed: %r (retry in %.2fs)",
                        attempt, self._attempts, self._safe_url(), e, delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                self._client = candidate
                logger.info("Connected to Redis at %s", self._safe_url())
                return candidate

        logger.error("Redis unreachable after %s attempts", self._attempts)
        raise RedisError(f"Redis connection failed: {last_err!r}")

    async def close(self) -> None:
        if self._client is None:
            return
        try:
            await self._client.close()
        except RedisError as e:
            logger.warning("Error closing Redis connection: %s", e)
        finally:
            self._client = None

    # ── queue helpers ───────────────────────────────────────────────────────
    async def set_marker(self, key: str, *, ttl_seconds: int) -> bool:
        """Claim `key` for `ttl_seconds`. True only for the caller that created it."""
        client = await self.connect()
        return bool(await client.set(key, "1", ex=ttl_seconds, nx=True))

    async def clear_marker(self, key: str) -> None:
        client = await self.connect()
        await client.delete(key)

    async def push_json(self, list_key: str, value: Any) -> int:
        """RPUSH one compact JSON document; returns the queue length after the push."""
        client = await self.connect()
        data = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        return int(await client.rpush(list_key, data))

    # ── internals ───────────────────────────────────────────────────────────
    def _build_client(self) -> _QueueRedis:
        return redis.Redis.from_url(
            self.redis_url.strip(),
            decode_responses=True,
            health_check_interval=30,
            socket_keepalive=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
            retry_on_timeout=True,
            client_name="sportshub-media",
        )

    def _safe_url(self) -> str:
        # hide credentials in logs
        return self.redis_url.rsplit("@", 1)[-1]

    @staticmethod
    def _backoff(attempt: int) -> float:
        return min(3.0, 0.3 * (2 ** (attempt - 1))) + random.uniform(0, 0.25)


redis_wrapper = RedisClient(settings.REDIS_URL)


__all__ = ["RedisClient", "redis_wrapper"]
