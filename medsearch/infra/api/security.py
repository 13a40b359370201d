# medsearch/infra/api/security.py
import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security.api_key import APIKeyHeader

from medsearch import config

log = logging.getLogger("medsearch.auth")

API_KEY_NAME = "X-Api-Key"
_api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


async def require_api_key(request: Request, api_key: str = Depends(_api_key_header)):
    if not config.REQUIRE_API_KEY or request.method == "OPTIONS":
        return
    if not config.SERVICE_API_KEY:
        log.warning("auth: SERVICE_API_KEY not configured")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service key not configured")
    if not api_key or api_key != config.SERVICE_API_KEY:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API Key")
