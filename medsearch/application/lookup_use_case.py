# medsearch/application/lookup_use_case.py
from __future__ import annotations

from typing import Any, Dict

from medsearch.domain.errors import MedicineNotFound
from medsearch.domain.ports import MedicineStorePort


class LookupMedicineUseCase:
    """Exact lookups; a miss is MedicineNotFound, never an empty dict."""

    def __init__(self, store: MedicineStorePort):
        self.store = store

    async def by_id(self, medicine_id: str) -> Dict[str, Any]:
        doc = await self.store.get_by_id(medicine_id)
        if not doc:
            raise MedicineNotFound(medicine_id)
        return doc

    async def by_exact_name(self, name: str) -> Dict[str, Any]:
        doc = await self.store.find_by_exact_name(name)
        if not doc:
            raise MedicineNotFound(name)
        return doc
