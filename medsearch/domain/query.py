# medsearch/domain/query.py
from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Generic, Mapping, Optional, Tuple, TypeVar

from .errors import QueryValidationError

MAX_LIMIT_LIST = 200
MAX_LIMIT_FILTERED = 50
DEFAULT_LIMIT = 20

T = TypeVar("T")


class SortMode(str, Enum):
    RELEVANCE = "relevance"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NAME = "name"


class SearchMode(str, Enum):
    RELEVANCE = "relevance"   # delegated to the store's text index
    SUBSTRING = "substring"   # case-insensitive containment over name/manufacturer/ingredients


@dataclass(frozen=True)
class ParsedValue(Generic[T]):
    """Result of a lenient parse: `discarded` is True when the raw input was present but unusable."""
    value: Optional[T]
    discarded: bool = False


# ──────────────────────────────────────────────────────────────
#  Lenient parsers (bad input -> ignored, reported via `discarded`)
# ──────────────────────────────────────────────────────────────
def _blank(raw: Any) -> bool:
    return raw is None or str(raw).strip() == ""


def parse_price_bound(raw: Any) -> ParsedValue[float]:
    if _blank(raw):
        return ParsedValue(None)
    try:
        v = float(str(raw).strip())
    except ValueError:
        return ParsedValue(None, discarded=True)
    if not math.isfinite(v) or v < 0:
        return ParsedValue(None, discarded=True)
    return ParsedValue(v)


def parse_text(raw: Any) -> Optional[str]:
    if _blank(raw):
        return None
    return str(raw).strip()


# ──────────────────────────────────────────────────────────────
#  Strict parsers (bad input -> QueryValidationError)
# ──────────────────────────────────────────────────────────────
def parse_int_param(name: str, raw: Any, default: int, lo: int, hi: Optional[int] = None) -> int:
    """Missing -> default; non-integer -> error; out of range -> clamped into [lo, hi]."""
    if _blank(raw):
        return default
    try:
        v = int(str(raw).strip())
    except ValueError:
        raise QueryValidationError(name, f"{name} must be an integer")
    v = max(lo, v)
    if hi is not None:
        v = min(hi, v)
    return v


def parse_bool_param(name: str, raw: Any) -> Optional[bool]:
    if _blank(raw):
        return None
    if isinstance(raw, bool):
        return raw
    s = str(raw).strip().lower()
    if s in ("true", "1", "yes"):
        return True
    if s in ("false", "0", "no"):
        return False
    raise QueryValidationError(name, f"{name} must be true or false")


def parse_sort(raw: Any) -> SortMode:
    if _blank(raw):
        return SortMode.RELEVANCE
    try:
        return SortMode(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in SortMode)
        raise QueryValidationError("sort", f"sort must be one of: {allowed}")


@dataclass(frozen=True)
class SearchQuery:
    q: Optional[str] = None
    dosage_form: Optional[str] = None
    category: Optional[str] = None
    manufacturer: Optional[str] = None
    ingredient: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    discontinued: Optional[bool] = None
    page: int = 1
    limit: int = DEFAULT_LIMIT
    sort: SortMode = SortMode.RELEVANCE
    fuzzy: bool = False
    count: bool = False
    # names of parameters that were present but dropped as unusable
    ignored: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(cls, params: Mapping[str, Any], max_limit: int = MAX_LIMIT_FILTERED) -> "SearchQuery":
        """
        Build from raw (string) request parameters. Accepts camelCase keys as sent
        over HTTP. Raises QueryValidationError on the first malformed strict field.
        """
        ignored = []
        prices = {}
        for key in ("minPrice", "maxPrice"):
            pv = parse_price_bound(params.get(key))
            if pv.discarded:
                ignored.append(key)
            prices[key] = pv.value

        return cls(
            q=parse_text(params.get("q")),
            dosage_form=parse_text(params.get("dosageForm")),
            category=parse_text(params.get("category")),
            manufacturer=parse_text(params.get("manufacturer")),
            ingredient=parse_text(params.get("ingredient")),
            min_price=prices["minPrice"],
            max_price=prices["maxPrice"],
            discontinued=parse_bool_param("discontinued", params.get("discontinued")),
            page=parse_int_param("page", params.get("page"), 1, 1),
            limit=parse_int_param("limit", params.get("limit"), min(DEFAULT_LIMIT, max_limit), 1, max_limit),
            sort=parse_sort(params.get("sort")),
            fuzzy=bool(parse_bool_param("fuzzy", params.get("fuzzy"))),
            count=bool(parse_bool_param("count", params.get("count"))),
            ignored=tuple(ignored),
        )

    def cache_key(self) -> str:
        data = asdict(self)
        data.pop("ignored", None)
        data["sort"] = self.sort.value
        data = {k: v for k, v in data.items() if v is not None}
        return "search:" + json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
