# medsearch/domain/ports.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from .filters import FilterSpec, SortSpec
from .models import Medicine


class MedicineStorePort(ABC):
    """Document store capability used by the search engine and the import job."""

    # full-text relevance search available (text index present and enabled)
    supports_text_search: bool = False

    @abstractmethod
    async def ensure_indexes(self) -> None: ...

    @abstractmethod
    async def find(self, flt: FilterSpec, sort: SortSpec, skip: int = 0, limit: int = 20) -> List[Dict[str, Any]]: ...

    @abstractmethod
    async def count(self, flt: FilterSpec) -> int: ...

    @abstractmethod
    async def get_by_id(self, medicine_id: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def find_by_exact_name(self, name: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def upsert_many(self, medicines: Sequence[Medicine]) -> int: ...

    @abstractmethod
    async def ping(self) -> bool: ...


class CachePort(ABC):
    """Result cache for search pages. Absence of an entry is never an error."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def put(self, key: str, value: Dict[str, Any]) -> None: ...

    @abstractmethod
    async def clear(self) -> None: ...
