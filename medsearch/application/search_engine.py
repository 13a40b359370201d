# medsearch/application/search_engine.py
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from medsearch.application.query_builder import QueryBuilder
from medsearch.domain.errors import TextSearchUnsupported
from medsearch.domain.ports import CachePort, MedicineStorePort
from medsearch.domain.query import SearchMode, SearchQuery

logger = logging.getLogger("medsearch.search")

ResultPage = Dict[str, Any]


class SearchEngine:
    """
    SearchQuery -> ResultPage

      1) canonical key → cache hit returns the stored page as-is
      2) QueryBuilder picks ONE mode (relevance or substring) and builds filter/sort
      3) fetch limit+1 to learn `hasMore` without a count
      4) optional count on the very same filter → exact `total`/`hasMore`
      5) cache the full page

    A store without a usable text index gets the request rebuilt in substring
    mode. Store outages propagate untouched and are never cached.
    """

    def __init__(self, store: MedicineStorePort, cache: Optional[CachePort] = None,
                 builder: Optional[QueryBuilder] = None):
        self.store = store
        self.cache = cache
        self.builder = builder or QueryBuilder(text_search_available=store.supports_text_search)

    # ------- cache is best-effort: failures only cost latency -------
    async def _cache_get(self, key: str) -> Optional[ResultPage]:
        if self.cache is None:
            return None
        try:
            return await self.cache.get(key)
        except Exception:
            logger.warning("search cache read failed key=%s", key, exc_info=True)
            return None

    async def _cache_put(self, key: str, page: ResultPage) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.put(key, page)
        except Exception:
            logger.warning("search cache write failed key=%s", key, exc_info=True)

    async def search(self, query: SearchQuery) -> ResultPage:
        key = query.cache_key()
        cached = await self._cache_get(key)
        if cached is not None:
            logger.debug("search cache hit key=%s", key)
            return cached

        t0 = time.monotonic()
        try:
            page = await self._execute(query)
        except TextSearchUnsupported as e:
            logger.info("text search unavailable (%s); falling back to substring mode", e)
            # store has no usable text index; stop asking for one
            self.builder.text_search_available = False
            page = await self._execute(query, mode=SearchMode.SUBSTRING)

        logger.info(
            "search q=%r mode=%s page=%d limit=%d items=%d total=%s latency_ms=%d",
            query.q, page["mode"], query.page, query.limit, len(page["items"]),
            page["total"], int((time.monotonic() - t0) * 1000),
        )
        await self._cache_put(key, page)
        return page

    async def _execute(self, query: SearchQuery, mode: Optional[SearchMode] = None) -> ResultPage:
        flt, sort, mode = self.builder.build(query, mode)
        skip = query.skip

        fetched = await self.store.find(flt, sort, skip=skip, limit=query.limit + 1)
        items = fetched[:query.limit]
        has_more = len(fetched) > query.limit

        total = None
        if query.count:
            # same `flt` as the data fetch, whichever mode was taken
            total = await self.store.count(flt)
            has_more = skip + len(items) < total

        return {
            "items": items,
            "page": query.page,
            "limit": query.limit,
            "total": total,
            "hasMore": has_more,
            "mode": mode.value,
        }
