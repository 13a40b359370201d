# main.py
from dotenv import load_dotenv
load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from medsearch import config
from medsearch.presentation.errors import register_error_handlers
from medsearch.presentation.health import router as health_router
from medsearch.presentation.routers import router as v1_router

# --- logging config must come first ---
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="MedSearch",
    version=config.APP_VERSION,
)

# own request logger, not 'uvicorn.access'
app_logger = logging.getLogger("medsearch.request")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    app_logger.info("Incoming %s %s", request.method, request.url.path)
    response = await call_next(request)
    app_logger.info("Completed %s %s -> %s", request.method, request.url.path, response.status_code)
    return response


# ─────────────────────────────────────────────────────────────
# CORS (env: CORS_ALLOW_ORIGINS="https://foo.com,https://bar.com" or "*")
# ─────────────────────────────────────────────────────────────
allow_origins = [o.strip().rstrip("/") for o in config.CORS_ALLOW_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

register_error_handlers(app)

# ─────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────
app.include_router(v1_router, tags=["medicines"])
app.include_router(health_router, tags=["health"])


@app.get("/")
async def root():
    return {
        "name": "MedSearch",
        "version": config.APP_VERSION,
        "ok": True,
    }


# ─────────────────────────────────────────────────────────────
# Startup: make sure the store indexes exist (text index drives relevance mode)
# ─────────────────────────────────────────────────────────────
@app.on_event("startup")
async def ensure_indexes():
    from medsearch.container import get_store
    try:
        await get_store().ensure_indexes()
    except Exception:
        app_logger.exception("index bootstrap failed; serving without it")
