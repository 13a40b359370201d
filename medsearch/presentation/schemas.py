# medsearch/presentation/schemas.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ── SEARCH ───────────────────────────────────────────────────────
class SearchMeta(BaseModel):
    page: int
    limit: int
    total: Optional[int] = None
    hasMore: bool
    mode: Optional[str] = Field(None, description="relevance | substring")


class SearchResponse(BaseModel):
    success: bool = True
    meta: SearchMeta
    data: List[Dict[str, Any]]


# ── LOOKUP ───────────────────────────────────────────────────────
class MedicineResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]


# ── IMPORT (admin) ───────────────────────────────────────────────
class ImportRequest(BaseModel):
    csvPath: Optional[str] = Field(None, description="CSV path on the server; defaults to CSV_PATH")


class ImportAccepted(BaseModel):
    success: bool = True
    message: str
    pid: int


# ── ERRORS ───────────────────────────────────────────────────────
class ErrorResponse(BaseModel):
    success: bool = False
    error: str
