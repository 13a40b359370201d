# medsearch/domain/normalizer.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .models import Ingredient, Manufacturer, Medicine, Pricing
from .parsers import infer_dosage_form, parse_composition, parse_packaging, parse_price

# Column candidates, first non-empty wins. Covers both the A-Z India dataset
# headers and the flat export written by older import scripts.
NAME_FIELDS = ("officialName", "name", "medicine_name", "brand_name")
COMPOSITION_FIELDS = (("short_composition1", "composition"), ("short_composition2",))
PACK_FIELDS = ("pack_size_label", "packagingDescription")
PRICE_FIELDS = ("price(₹)", "price", "Price", "mrp")
MANUFACTURER_FIELDS = ("manufacturer_name", "manufacturer")
CATEGORY_FIELDS = ("category", "type")
DISCONTINUED_FIELDS = ("Is_discontinued", "discontinued")
SOURCE_ID_FIELDS = ("id", "ID")

_TRUTHY = {"true", "1", "yes", "y"}


@dataclass(frozen=True)
class Rejected:
    reason: str
    row_index: Optional[int] = None


NormalizeResult = Union[Medicine, Rejected]


def _first(row: Mapping[str, Any], fields: Sequence[str]) -> Optional[str]:
    for f in fields:
        v = row.get(f)
        if v is None:
            continue
        s = str(v).strip()
        if s:
            return s
    return None


def _ingredients(row: Mapping[str, Any]) -> List[Ingredient]:
    out: List[Ingredient] = []
    for candidates in COMPOSITION_FIELDS:
        ing = parse_composition(_first(row, candidates))
        if ing is not None:
            out.append(ing)
    return out


def normalize(row: Mapping[str, Any], row_index: Optional[int] = None) -> NormalizeResult:
    """Raw CSV/dict row -> canonical Medicine, or Rejected when no usable name exists."""
    name = _first(row, NAME_FIELDS)
    if not name:
        return Rejected(reason="missing official name", row_index=row_index)

    pack_label = _first(row, PACK_FIELDS)
    mrp = parse_price(_first(row, PRICE_FIELDS))
    manufacturer = _first(row, MANUFACTURER_FIELDS)

    dosage_form = _first(row, ("dosageForm", "dosage_form"))
    dosage_form = dosage_form.lower() if dosage_form else infer_dosage_form(name, pack_label)

    return Medicine(
        official_name=name,
        source_id=_first(row, SOURCE_ID_FIELDS),
        dosage_form=dosage_form,
        category=_first(row, CATEGORY_FIELDS),
        manufacturer=Manufacturer(name=manufacturer) if manufacturer else None,
        active_ingredients=_ingredients(row),
        packaging=parse_packaging(pack_label),
        pricing=Pricing(mrp=mrp) if mrp is not None else None,
        discontinued=(_first(row, DISCONTINUED_FIELDS) or "").lower() in _TRUTHY,
    )


def normalize_many(rows, start: int = 0) -> Dict[str, list]:
    """Split rows into accepted Medicine entities and Rejected markers."""
    accepted: List[Medicine] = []
    rejected: List[Rejected] = []
    for i, row in enumerate(rows, start):
        res = normalize(row, row_index=i)
        if isinstance(res, Rejected):
            rejected.append(res)
        else:
            accepted.append(res)
    return {"accepted": accepted, "rejected": rejected}
