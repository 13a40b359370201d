# medsearch/infra/cache/redis_cache.py
import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as aioredis
from fastapi.encoders import jsonable_encoder

from medsearch import config
from medsearch.domain.ports import CachePort

log = logging.getLogger("medsearch.cache")

KEY_PREFIX = "medsearch:"


class RedisSearchCache(CachePort):
    """
    Shared result cache for multi-worker deployments.

    Entries are JSON with `ex=ttl_seconds`. Capacity/LRU eviction is the Redis
    server's job (`maxmemory` + `maxmemory-policy allkeys-lru`), not ours.
    """
    def __init__(self, client: Optional[aioredis.Redis] = None,
                 ttl_seconds: float = config.SEARCH_CACHE_TTL_SECONDS):
        self.r = client or aioredis.from_url(
            config.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
        self.ttl_seconds = max(1, int(ttl_seconds))

    @classmethod
    def from_env(cls):
        url = config.REDIS_URL
        return cls(aioredis.from_url(url, encoding="utf-8", decode_responses=True))

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        raw = await self.r.get(KEY_PREFIX + key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            # stray non-JSON value under our prefix; treat as a miss
            log.warning("cache: undecodable entry for key=%s", key)
            return None

    async def put(self, key: str, value: Dict[str, Any]) -> None:
        await self.r.set(
            KEY_PREFIX + key,
            json.dumps(jsonable_encoder(value), ensure_ascii=False),
            ex=self.ttl_seconds,
        )

    async def clear(self) -> None:
        keys = [k async for k in self.r.scan_iter(match=KEY_PREFIX + "*")]
        if keys:
            await self.r.delete(*keys)

    async def ping(self) -> bool:
        return bool(await self.r.ping())
