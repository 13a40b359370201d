# medsearch/domain/models.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

# Stored documents and API payloads are camelCase (officialName, pricing.mrp, ...)
_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)

DEFAULT_CURRENCY = "INR"


def _lc(s: Optional[str]) -> str:
    return (s or "").strip().lower()


class Ingredient(BaseModel):
    model_config = _CAMEL

    name: str
    strength_value: Optional[float] = None
    strength_unit: Optional[str] = None
    strength_display: Optional[str] = None


class Packaging(BaseModel):
    model_config = _CAMEL

    pack_type: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None
    description: Optional[str] = None


class Pricing(BaseModel):
    model_config = _CAMEL

    mrp: float
    currency: str = DEFAULT_CURRENCY


class Manufacturer(BaseModel):
    name: str


class Medicine(BaseModel):
    """
    Canonical catalog entry, upserted by `officialName`.

    The *_lc projections are computed from the canonical fields on every dump,
    so the stored copy always reflects the current name/manufacturer/composition.
    """
    model_config = _CAMEL

    official_name: str = Field(min_length=1)
    source_id: Optional[str] = None
    dosage_form: Optional[str] = None
    category: Optional[str] = None
    manufacturer: Optional[Manufacturer] = None
    active_ingredients: List[Ingredient] = Field(default_factory=list)
    packaging: Packaging = Field(default_factory=Packaging)
    pricing: Optional[Pricing] = None
    discontinued: bool = False

    @computed_field(alias="nameLc")
    @property
    def name_lc(self) -> str:
        return _lc(self.official_name)

    @computed_field(alias="manufacturerLc")
    @property
    def manufacturer_lc(self) -> str:
        return _lc(self.manufacturer.name if self.manufacturer else None)

    @computed_field(alias="compositionLc")
    @property
    def composition_lc(self) -> str:
        return _lc(" ".join(i.name for i in self.active_ingredients))

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
