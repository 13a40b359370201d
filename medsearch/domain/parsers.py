# medsearch/domain/parsers.py
from __future__ import annotations

import re
from typing import Optional

from .models import Ingredient, Packaging

# "<name> (<strength>)" ; name cannot contain parentheses, so nested groups never match
_COMPOSITION_RE = re.compile(r"^\s*([^()]+?)\s*\(([^)]+)\)\s*$")
_FIRST_NUMBER_RE = re.compile(r"[\d.]+")
_STRENGTH_NOISE_RE = re.compile(r"[\d.\s]+")

# "<word> of <integer> <unit> [free text]", e.g. "strip of 10 tablets"
_PACK_RE = re.compile(r"(\w+)\s+of\s+(\d+)\s*([A-Za-z]+)(?:\s+(.*))?", re.IGNORECASE)

_PRICE_NOISE_RE = re.compile(r"[^\d.]")

# Order matters: first hit wins when the text mentions several forms.
KNOWN_DOSAGE_FORMS = (
    "tablet",
    "capsule",
    "syrup",
    "injection",
    "drops",
    "cream",
    "ointment",
    "suspension",
    "gel",
    "spray",
)


def _to_number(s: str) -> Optional[float]:
    try:
        v = float(s)
    except ValueError:
        return None
    return int(v) if v.is_integer() else v


def parse_composition(raw: Optional[str]) -> Optional[Ingredient]:
    """
    "Amoxycillin (500mg)"  -> name=Amoxycillin, 500, "mg", "500mg"
    "Ambroxol (30mg/5ml)"  -> name=Ambroxol, 30, "mg/ml", "30mg/5ml"
    Anything without a trailing "(...)" degrades to a name-only ingredient.
    """
    if raw is None:
        return None
    s = str(raw).strip()
    if not s:
        return None

    m = _COMPOSITION_RE.match(s)
    if not m:
        return Ingredient(name=s)

    name = m.group(1).strip()
    display = m.group(2).strip()
    num = _FIRST_NUMBER_RE.search(display)
    value = _to_number(num.group(0)) if num else None
    unit = _STRENGTH_NOISE_RE.sub("", display) or None
    return Ingredient(
        name=name,
        strength_value=value,
        strength_unit=unit,
        strength_display=display,
    )


def parse_packaging(raw: Optional[str]) -> Packaging:
    if raw is None:
        return Packaging()
    label = str(raw).strip()
    if not label:
        return Packaging()

    m = _PACK_RE.search(label)
    if not m:
        return Packaging(description=label)

    pack_type, quantity, unit, rest = m.groups()
    description = f"{pack_type} of {quantity} {unit} {rest}" if rest else label
    return Packaging(
        pack_type=pack_type.lower(),
        quantity=int(quantity),
        unit=unit.lower(),
        description=description,
    )


def parse_price(raw) -> Optional[float]:
    """
    Keep only digits and dots: "₹1,234.50" -> 1234.5.
    Several dots ("1.2.3") do not form a number and come back as None.
    """
    if raw is None:
        return None
    cleaned = _PRICE_NOISE_RE.sub("", str(raw))
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def infer_dosage_form(name: Optional[str], pack_label: Optional[str]) -> Optional[str]:
    text = f"{name or ''} {pack_label or ''}".lower()
    for form in KNOWN_DOSAGE_FORMS:
        if form in text:
            return form
    return None
