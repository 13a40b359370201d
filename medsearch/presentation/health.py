# medsearch/presentation/health.py
from fastapi import APIRouter, Depends

from medsearch import config
from medsearch.application.search_engine import SearchEngine
from medsearch.container import get_search_engine

router = APIRouter()


@router.get("/healthz")
async def healthz():
    return {"ok": True}


@router.get("/readyz")
async def readyz(engine: SearchEngine = Depends(get_search_engine)):
    checks = {}; ok = True
    # Store (mongo / memory)
    try:
        await engine.store.ensure_indexes()
        checks["store"] = await engine.store.ping()
    except Exception as e:
        checks["store"] = False; checks["store_error"] = str(e); ok = False
    checks["text_search"] = bool(engine.store.supports_text_search)
    # Result cache
    try:
        pong = await engine.cache.ping() if hasattr(engine.cache, "ping") else True
        checks["cache"] = bool(pong); ok = ok and bool(pong)
    except Exception as e:
        checks["cache"] = False; checks["cache_error"] = str(e); ok = False
    checks["cache_backend"] = config.SEARCH_CACHE_BACKEND
    return {"ok": ok, **checks}
