# medsearch/container.py
from functools import lru_cache

from medsearch import config
from medsearch.application.lookup_use_case import LookupMedicineUseCase
from medsearch.application.search_engine import SearchEngine
from medsearch.domain.ports import CachePort, MedicineStorePort
from medsearch.infra.cache.lru_cache import SearchCache


@lru_cache
def _store() -> MedicineStorePort:
    if config.STORE_BACKEND == "memory":
        from medsearch.infra.repo.memory_repo import InMemoryMedicineRepo
        return InMemoryMedicineRepo.from_csv(config.CSV_PATH)
    from medsearch.infra.repo.mongo_repo import MongoMedicineRepo
    return MongoMedicineRepo()


@lru_cache
def _cache() -> CachePort:
    if config.SEARCH_CACHE_BACKEND == "redis":
        from medsearch.infra.cache.redis_cache import RedisSearchCache
        return RedisSearchCache.from_env()
    return SearchCache(max_entries=config.SEARCH_CACHE_MAX, ttl_seconds=config.SEARCH_CACHE_TTL_SECONDS)


@lru_cache
def _engine() -> SearchEngine:
    return SearchEngine(store=_store(), cache=_cache())


def get_store() -> MedicineStorePort: return _store()
def get_search_engine() -> SearchEngine: return _engine()
def get_lookup_uc() -> LookupMedicineUseCase: return LookupMedicineUseCase(_store())
