# medsearch/presentation/patient_view.py
# Display-only projection for `view=patient`; never stored, never cached.
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

FORM_ICONS = {
    "tablet": "💊",
    "capsule": "💊",
    "syrup": "🍼",
    "suspension": "🍼",
    "drops": "🍼",
    "injection": "💉",
    "vial": "💉",
    "default": "💊",
}

FORM_COLORS = {
    "tablet": "#FFD54F",
    "capsule": "#FFD54F",
    "syrup": "#81D4FA",
    "suspension": "#81D4FA",
    "drops": "#B2EBF2",
    "injection": "#FFCDD2",
    "vial": "#FFCDD2",
    "default": "#E0E0E0",
}


def format_inr(value: Any) -> Optional[str]:
    """1234.5 -> '₹1,234.50', 123456 -> '₹1,23,456.00' (Indian digit grouping)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        return None
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    grouped = ",".join(groups + [tail]) if groups else tail
    return f"{sign}₹{grouped}.{frac}"


def icon_and_color(dosage_form: Optional[str]) -> Dict[str, str]:
    key = (dosage_form or "").lower()
    return {
        "icon": FORM_ICONS.get(key, FORM_ICONS["default"]),
        "color": FORM_COLORS.get(key, FORM_COLORS["default"]),
    }


def format_ingredients(ingredients: Optional[List[Dict[str, Any]]]) -> List[str]:
    out = []
    for ing in ingredients or []:
        if not ing:
            continue
        strength = ing.get("strengthDisplay")
        if not strength and ing.get("strengthValue") is not None:
            value = ing["strengthValue"]
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            strength = f"{value}{ing.get('strengthUnit') or ''}"
        out.append(f"{ing.get('name') or ''} {strength or ''}".strip())
    return out


def packaging_description(packaging: Optional[Dict[str, Any]]) -> Optional[str]:
    if not packaging:
        return None
    if packaging.get("description"):
        return packaging["description"]
    parts = []
    if packaging.get("packType"):
        parts.append(packaging["packType"])
    if packaging.get("quantity") is not None:
        parts.append(f"of {packaging['quantity']}")
    if packaging.get("unit"):
        parts.append(packaging["unit"])
    return " ".join(parts) or None


def to_patient_view(med: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not med:
        return None
    packaging = med.get("packaging") or {}
    form = med.get("dosageForm")
    style = icon_and_color(form or packaging.get("packType"))

    price = format_inr((med.get("pricing") or {}).get("mrp"))
    pack = packaging_description(packaging)
    if price:
        price = f"{price} ({pack})" if pack else price
    else:
        price = pack

    return {
        "Name": med.get("officialName"),
        "Form": form.capitalize() if form else packaging.get("packType"),
        "Icon": style["icon"],
        "Color": style["color"],
        "Ingredients": format_ingredients(med.get("activeIngredients")),
        "Price": price,
        "Manufacturer": (med.get("manufacturer") or {}).get("name"),
    }
