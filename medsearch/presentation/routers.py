# medsearch/presentation/routers.py
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from medsearch import config
from medsearch.application import import_job
from medsearch.application.lookup_use_case import LookupMedicineUseCase
from medsearch.application.search_engine import SearchEngine
from medsearch.container import get_lookup_uc, get_search_engine
from medsearch.domain.query import MAX_LIMIT_FILTERED, MAX_LIMIT_LIST, SearchQuery
from medsearch.infra.api.security import require_api_key
from medsearch.presentation.patient_view import to_patient_view
from medsearch.presentation.schemas import (
    ImportAccepted, ImportRequest, MedicineResponse, SearchResponse,
)

logger = logging.getLogger(__name__)

# every route lives under /v1 behind the API key
router = APIRouter(prefix="/v1", dependencies=[Depends(require_api_key)])


def _view(request: Request) -> str:
    return (request.query_params.get("view") or "").strip().lower()


def _present(doc: dict, view: str) -> dict:
    return to_patient_view(doc) if view == "patient" else doc


async def _run_search(request: Request, engine: SearchEngine, max_limit: int) -> SearchResponse:
    query = SearchQuery.from_params(request.query_params, max_limit=max_limit)
    page = await engine.search(query)
    view = _view(request)
    return SearchResponse(
        meta={
            "page": page["page"],
            "limit": page["limit"],
            "total": page["total"],
            "hasMore": page["hasMore"],
            "mode": page["mode"],
        },
        data=[_present(d, view) for d in page["items"]],
    )


# ── SEARCH ───────────────────────────────────────────────────────
@router.get("/medicines/search", response_model=SearchResponse)
async def search_medicines(request: Request, engine: SearchEngine = Depends(get_search_engine)):
    """Rich filtered search, limit capped at 50."""
    return await _run_search(request, engine, MAX_LIMIT_FILTERED)


@router.get("/medicines", response_model=SearchResponse)
async def list_medicines(request: Request, engine: SearchEngine = Depends(get_search_engine)):
    """Plain list endpoint, limit capped at 200."""
    return await _run_search(request, engine, MAX_LIMIT_LIST)


# ── LOOKUP ───────────────────────────────────────────────────────
@router.get("/medicines/lookup/exact", response_model=MedicineResponse)
async def lookup_exact(request: Request, name: str | None = None,
                       uc: LookupMedicineUseCase = Depends(get_lookup_uc)):
    if not name or not name.strip():
        raise HTTPException(status_code=400, detail="name is required")
    doc = await uc.by_exact_name(name)
    return MedicineResponse(data=_present(doc, _view(request)))


# ── IMPORT (admin, fire-and-forget) ──────────────────────────────
@router.post("/medicines/_import", status_code=status.HTTP_202_ACCEPTED, response_model=ImportAccepted)
async def import_from_csv(req: ImportRequest | None = Body(None)):
    # the job runs in a child process and writes to Mongo; a memory store would never see it
    if config.STORE_BACKEND != "mongo":
        raise HTTPException(status_code=409, detail="Import requires STORE_BACKEND=mongo")
    csv_path = Path((req.csvPath if req else None) or config.CSV_PATH)
    if not csv_path.exists():
        raise HTTPException(status_code=400, detail=f"CSV not found at {csv_path}")
    pid = import_job.spawn_import(csv_path)
    logger.info("[import] started pid=%d csv=%s", pid, csv_path)
    return ImportAccepted(message="Import started", pid=pid)


@router.get("/medicines/{medicine_id}", response_model=MedicineResponse)
async def get_medicine(medicine_id: str, request: Request,
                       uc: LookupMedicineUseCase = Depends(get_lookup_uc)):
    doc = await uc.by_id(medicine_id)
    return MedicineResponse(data=_present(doc, _view(request)))
