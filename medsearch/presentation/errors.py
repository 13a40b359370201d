# medsearch/presentation/errors.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from medsearch.domain.errors import MedicineNotFound, QueryValidationError, StoreUnavailable

logger = logging.getLogger("medsearch.errors")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def register_error_handlers(app: FastAPI) -> None:
    """Map core exceptions to `{success: false, error}` bodies; no internal detail leaks."""

    @app.exception_handler(QueryValidationError)
    async def _query_invalid(request: Request, exc: QueryValidationError):
        return _error(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _request_invalid(request: Request, exc: RequestValidationError):
        errs = exc.errors()
        first = errs[0] if errs else {}
        field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
        return _error(400, f"{field}: {first.get('msg', 'invalid value')}")

    @app.exception_handler(MedicineNotFound)
    async def _not_found(request: Request, exc: MedicineNotFound):
        return _error(404, "Medicine not found")

    @app.exception_handler(StoreUnavailable)
    async def _store_down(request: Request, exc: StoreUnavailable):
        logger.error("store unavailable on %s %s: %s", request.method, request.url.path, exc)
        return _error(503, "Service temporarily unavailable")

    @app.exception_handler(StarletteHTTPException)
    async def _http(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Server Error")
