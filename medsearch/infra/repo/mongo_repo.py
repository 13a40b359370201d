# medsearch/infra/repo/mongo_repo.py
from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, TEXT, UpdateOne
from pymongo.errors import OperationFailure, PyMongoError

from medsearch import config
from medsearch.domain.errors import StoreUnavailable, TextSearchUnsupported
from medsearch.domain.filters import (
    AnyOf, Equals, FilterSpec, Predicate, Range, SortSpec, TextMatch, TextSearch,
)
from medsearch.domain.models import Medicine
from medsearch.domain.ports import MedicineStorePort

log = logging.getLogger("medsearch.repo")

TEXT_INDEX_NAME = "MedicineTextIndex"
TEXT_INDEX_WEIGHTS = {
    "officialName": 10,
    "activeIngredients.name": 6,
    "manufacturer.name": 3,
    "category": 2,
}
# server code for "text index required for $text query"
_INDEX_NOT_FOUND = 27

# derived lower-case projections are storage-only
HIDDEN_FIELDS = {"nameLc": 0, "manufacturerLc": 0, "compositionLc": 0}
TEXT_SCORE = {"$meta": "textScore"}


# ──────────────────────────────────────────────────────────────
#  FilterSpec / SortSpec → Mongo documents
# ──────────────────────────────────────────────────────────────
def _regex(text: str, exact: bool) -> Dict[str, Any]:
    pat = re.escape(text)
    return {"$regex": f"^{pat}$" if exact else pat, "$options": "i"}


def compile_predicate(p: Predicate) -> Dict[str, Any]:
    if isinstance(p, Equals):
        return {p.path: p.value}
    if isinstance(p, TextMatch):
        return {p.path: _regex(p.text, p.exact)}
    if isinstance(p, Range):
        bounds = {}
        if p.gte is not None:
            bounds["$gte"] = p.gte
        if p.lte is not None:
            bounds["$lte"] = p.lte
        return {p.path: bounds}
    if isinstance(p, AnyOf):
        return {"$or": [compile_predicate(c) for c in p.clauses]}
    if isinstance(p, TextSearch):
        return {"$text": {"$search": p.term}}
    raise TypeError(f"unsupported predicate: {p!r}")


def compile_filter(flt: FilterSpec) -> Dict[str, Any]:
    """
    Merge clauses into one document; fall back to `$and` only when two clauses
    target the same key. `$text` always stays top-level (never inside `$or`).
    """
    merged: Dict[str, Any] = {}
    extra: List[Dict[str, Any]] = []
    for clause in flt.clauses:
        doc = compile_predicate(clause)
        if any(k in merged for k in doc):
            extra.append(doc)
        else:
            merged.update(doc)
    if extra:
        merged["$and"] = extra
    return merged


def compile_sort(sort: SortSpec) -> List[tuple]:
    keys: List[tuple] = []
    if sort.by_text_score:
        keys.append(("score", TEXT_SCORE))
    keys.extend(sort.keys)
    return keys


def _out(doc: Dict[str, Any]) -> Dict[str, Any]:
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


class MongoMedicineRepo(MedicineStorePort):
    """
    Async repository for the `medicines` collection.

    Driver failures surface as StoreUnavailable; a `$text` query against a
    collection without the text index surfaces as TextSearchUnsupported so the
    engine can re-run the request in substring mode.
    """

    def __init__(self, coll: Optional[AsyncIOMotorCollection] = None,
                 text_search: bool = config.TEXT_SEARCH_ENABLED) -> None:
        if coll is None:
            self.client = AsyncIOMotorClient(config.MONGO_URI)
            coll = self.client[config.MONGO_DB][config.MONGO_COLL]
        self.coll = coll
        self.supports_text_search = text_search

    # ──────────────────────────────────────────────────────────────
    #  Indexing
    # ──────────────────────────────────────────────────────────────
    async def ensure_indexes(self) -> None:
        specs = [
            ([("officialName", ASCENDING)], {"unique": True}),
            ([("dosageForm", ASCENDING), ("category", ASCENDING)], {}),
            ([("activeIngredients.name", ASCENDING), ("dosageForm", ASCENDING)], {}),
            ([("pricing.mrp", ASCENDING)], {}),
            (
                [(path, TEXT) for path in TEXT_INDEX_WEIGHTS],
                {"name": TEXT_INDEX_NAME, "weights": TEXT_INDEX_WEIGHTS, "default_language": "english"},
            ),
        ]
        for keys, opts in specs:
            try:
                await self.coll.create_index(keys, **opts)
            except OperationFailure as e:
                # an equivalent index with different options already exists
                log.warning("index %s not created: %s", keys, e)

    async def ping(self) -> bool:
        try:
            await self.coll.database.command("ping")
        except PyMongoError as e:
            raise StoreUnavailable(str(e)) from e
        return True

    # ──────────────────────────────────────────────────────────────
    #  Search capability
    # ──────────────────────────────────────────────────────────────
    def _guard(self, e: PyMongoError, flt: FilterSpec) -> Exception:
        if isinstance(e, OperationFailure) and e.code == _INDEX_NOT_FOUND and flt.uses_text_search:
            return TextSearchUnsupported(str(e))
        return StoreUnavailable(str(e))

    async def find(self, flt: FilterSpec, sort: SortSpec, skip: int = 0, limit: int = 20) -> List[Dict[str, Any]]:
        query = compile_filter(flt)
        projection = dict(HIDDEN_FIELDS)
        if sort.by_text_score:
            projection["score"] = TEXT_SCORE
        try:
            cursor = self.coll.find(query, projection).sort(compile_sort(sort)).skip(skip).limit(limit)
            docs = [doc async for doc in cursor]
        except PyMongoError as e:
            raise self._guard(e, flt) from e
        out = []
        for d in docs:
            d.pop("score", None)
            out.append(_out(d))
        return out

    async def count(self, flt: FilterSpec) -> int:
        try:
            return await self.coll.count_documents(compile_filter(flt))
        except PyMongoError as e:
            raise self._guard(e, flt) from e

    # ──────────────────────────────────────────────────────────────
    #  Exact lookups
    # ──────────────────────────────────────────────────────────────
    async def get_by_id(self, medicine_id: str) -> Optional[Dict[str, Any]]:
        try:
            oid = ObjectId(medicine_id)
        except (InvalidId, TypeError):
            return None
        try:
            doc = await self.coll.find_one({"_id": oid}, HIDDEN_FIELDS)
        except PyMongoError as e:
            raise StoreUnavailable(str(e)) from e
        return _out(doc) if doc else None

    async def find_by_exact_name(self, name: str) -> Optional[Dict[str, Any]]:
        name = (name or "").strip()
        if not name:
            return None
        try:
            doc = await self.coll.find_one({"officialName": _regex(name, exact=True)}, HIDDEN_FIELDS)
        except PyMongoError as e:
            raise StoreUnavailable(str(e)) from e
        return _out(doc) if doc else None

    # ──────────────────────────────────────────────────────────────
    #  Import
    # ──────────────────────────────────────────────────────────────
    async def upsert_many(self, medicines: Sequence[Medicine]) -> int:
        if not medicines:
            return 0
        now = dt.datetime.now(dt.timezone.utc)
        ops = []
        for med in medicines:
            doc = med.to_document()
            doc["updatedAt"] = now
            update = {"$set": doc, "$setOnInsert": {"createdAt": now}}
            # fields that became empty on re-import must not keep stale values
            unset = {k: "" for k, v in med.model_dump(by_alias=True).items() if v is None}
            if unset:
                update["$unset"] = unset
            ops.append(UpdateOne({"officialName": doc["officialName"]}, update, upsert=True))
        try:
            res = await self.coll.bulk_write(ops, ordered=False)
        except PyMongoError as e:
            raise StoreUnavailable(str(e)) from e
        return res.upserted_count + res.matched_count
