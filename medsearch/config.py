# medsearch/config.py
# All knobs come from the environment (.env is loaded by main.py via python-dotenv).
import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


APP_VERSION = os.getenv("APP_VERSION", "0.1.0")
LOG_LEVEL   = os.getenv("LOG_LEVEL", "INFO")

# ── Store ─────────────────────────────────────────────────────────
STORE_BACKEND = os.getenv("STORE_BACKEND", "mongo")          # "mongo" | "memory"
MONGO_URI     = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB      = os.getenv("MONGO_DB", "medsearch")
MONGO_COLL    = os.getenv("MONGO_COLL", "medicines")
TEXT_SEARCH_ENABLED = _flag("TEXT_SEARCH_ENABLED", "1")
CSV_PATH      = os.getenv("CSV_PATH", "A_Z_medicines_dataset_of_India.csv")

# ── Search result cache ───────────────────────────────────────────
SEARCH_CACHE_BACKEND     = os.getenv("SEARCH_CACHE_BACKEND", "memory")   # "memory" | "redis"
SEARCH_CACHE_MAX         = int(os.getenv("SEARCH_CACHE_MAX", "500"))
SEARCH_CACHE_TTL_SECONDS = float(os.getenv("SEARCH_CACHE_TTL_SECONDS", "30"))
REDIS_URL                = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# ── HTTP ──────────────────────────────────────────────────────────
REQUIRE_API_KEY    = _flag("REQUIRE_API_KEY", "1")
SERVICE_API_KEY    = os.getenv("SERVICE_API_KEY", "")
CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "*")

# ── Import job ────────────────────────────────────────────────────
IMPORT_BATCH = int(os.getenv("IMPORT_BATCH", "500"))
