# medsearch/infra/repo/memory_repo.py
from __future__ import annotations

import copy
import csv
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from medsearch.domain.errors import TextSearchUnsupported
from medsearch.domain.filters import (
    AnyOf, Equals, FilterSpec, Predicate, Range, SortSpec, TextMatch, TextSearch,
)
from medsearch.domain.models import Medicine
from medsearch.domain.normalizer import normalize_many
from medsearch.domain.ports import MedicineStorePort

log = logging.getLogger("medsearch.repo")

HIDDEN_FIELDS = ("nameLc", "manufacturerLc", "compositionLc")


def resolve_path(doc: Dict[str, Any], path: str) -> List[Any]:
    """All values at a dotted path; arrays are flattened like Mongo does."""
    values: List[Any] = [doc]
    for part in path.split("."):
        nxt: List[Any] = []
        for v in values:
            if isinstance(v, list):
                nxt.extend(x.get(part) for x in v if isinstance(x, dict))
            elif isinstance(v, dict):
                nxt.append(v.get(part))
        values = nxt
    out: List[Any] = []
    for v in values:
        if isinstance(v, list):
            out.extend(v)
        elif v is not None:
            out.append(v)
    return out


def matches(doc: Dict[str, Any], p: Predicate) -> bool:
    if isinstance(p, Equals):
        return p.value in resolve_path(doc, p.path)
    if isinstance(p, TextMatch):
        needle = p.text.lower()
        for v in resolve_path(doc, p.path):
            hay = str(v).lower()
            if (hay == needle) if p.exact else (needle in hay):
                return True
        return False
    if isinstance(p, Range):
        for v in resolve_path(doc, p.path):
            if not isinstance(v, (int, float)):
                continue
            if p.gte is not None and v < p.gte:
                continue
            if p.lte is not None and v > p.lte:
                continue
            return True
        return False
    if isinstance(p, AnyOf):
        return any(matches(doc, c) for c in p.clauses)
    if isinstance(p, TextSearch):
        raise TextSearchUnsupported("in-memory store has no text index")
    raise TypeError(f"unsupported predicate: {p!r}")


def _sort_value(doc: Dict[str, Any], path: str):
    vals = resolve_path(doc, path)
    return vals[0] if vals else None


class _Key:
    """Sort key honouring per-field direction; missing values sort first ascending (Mongo order)."""
    __slots__ = ("values", "dirs")

    def __init__(self, values, dirs):
        self.values = values
        self.dirs = dirs

    def __lt__(self, other: "_Key") -> bool:
        for a, b, d in zip(self.values, other.values, self.dirs):
            if a == b:
                continue
            if a is None:
                lt = True
            elif b is None:
                lt = False
            else:
                lt = a < b
            return lt if d > 0 else not lt
        return False


class InMemoryMedicineRepo(MedicineStorePort):
    """
    Catalog held in process memory, typically loaded straight from the CSV
    dataset. No text index: relevance queries raise TextSearchUnsupported and
    the engine answers in substring mode.
    """
    supports_text_search = False

    def __init__(self, medicines: Iterable[Medicine] = ()):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._seq = 0
        self._upsert(medicines)

    @classmethod
    def from_csv(cls, path: str | Path) -> "InMemoryMedicineRepo":
        with open(path, newline="", encoding="utf-8") as f:
            res = normalize_many(csv.DictReader(f))
        log.info("memory store: loaded %d rows from %s (%d rejected)",
                 len(res["accepted"]), path, len(res["rejected"]))
        return cls(res["accepted"])

    def _upsert(self, medicines: Iterable[Medicine]) -> int:
        n = 0
        with self._lock:
            for med in medicines:
                doc = med.to_document()
                key = doc["officialName"]
                prev = self._docs.get(key)
                if prev is not None:
                    doc["id"] = prev["id"]
                else:
                    self._seq += 1
                    doc["id"] = doc.get("sourceId") or f"mem-{self._seq}"
                self._docs[key] = doc
                n += 1
        return n

    def _snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._docs.values())

    @staticmethod
    def _public(doc: Dict[str, Any]) -> Dict[str, Any]:
        out = copy.deepcopy(doc)
        for k in HIDDEN_FIELDS:
            out.pop(k, None)
        return out

    def _select(self, flt: FilterSpec) -> List[Dict[str, Any]]:
        if flt.uses_text_search:
            raise TextSearchUnsupported("in-memory store has no text index")
        return [d for d in self._snapshot() if all(matches(d, c) for c in flt.clauses)]

    # ------- MedicineStorePort -------
    async def ensure_indexes(self) -> None:
        return None

    async def ping(self) -> bool:
        return True

    async def find(self, flt: FilterSpec, sort: SortSpec, skip: int = 0, limit: int = 20) -> List[Dict[str, Any]]:
        docs = self._select(flt)
        if sort.keys:
            dirs = [d for _, d in sort.keys]
            docs.sort(key=lambda d: _Key([_sort_value(d, p) for p, _ in sort.keys], dirs))
        return [self._public(d) for d in docs[skip:skip + limit]]

    async def count(self, flt: FilterSpec) -> int:
        return len(self._select(flt))

    async def get_by_id(self, medicine_id: str) -> Optional[Dict[str, Any]]:
        for d in self._snapshot():
            if d["id"] == str(medicine_id):
                return self._public(d)
        return None

    async def find_by_exact_name(self, name: str) -> Optional[Dict[str, Any]]:
        lc = (name or "").strip().lower()
        if not lc:
            return None
        for d in self._snapshot():
            if d.get("nameLc") == lc:
                return self._public(d)
        return None

    async def upsert_many(self, medicines: Sequence[Medicine]) -> int:
        return self._upsert(medicines)
