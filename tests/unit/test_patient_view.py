# tests/unit/test_patient_view.py
from medsearch.domain.normalizer import normalize
from medsearch.presentation.patient_view import format_inr, icon_and_color, to_patient_view


def test_format_inr_uses_indian_grouping():
    assert format_inr(30.91) == "₹30.91"
    assert format_inr(1234.5) == "₹1,234.50"
    assert format_inr(123456) == "₹1,23,456.00"
    assert format_inr(12345678.9) == "₹1,23,45,678.90"
    assert format_inr(None) is None
    assert format_inr("12") is None


def test_icon_and_color_default():
    assert icon_and_color("Injection") == {"icon": "💉", "color": "#FFCDD2"}
    assert icon_and_color(None) == {"icon": "💊", "color": "#E0E0E0"}


def test_patient_view_of_stored_document():
    doc = normalize({
        "name": "Augmentin 625 Duo Tablet", "price(₹)": "223.42", "manufacturer_name": "GSK",
        "pack_size_label": "strip of 10 tablets",
        "short_composition1": "Amoxycillin (500mg)", "short_composition2": "Clavulanic Acid",
    }).to_document()

    view = to_patient_view(doc)
    assert view == {
        "Name": "Augmentin 625 Duo Tablet",
        "Form": "Tablet",
        "Icon": "💊",
        "Color": "#FFD54F",
        "Ingredients": ["Amoxycillin 500mg", "Clavulanic Acid"],
        "Price": "₹223.42 (strip of 10 tablets)",
        "Manufacturer": "GSK",
    }


def test_patient_view_without_price_or_form():
    doc = normalize({"name": "Mystery Mix"}).to_document()
    view = to_patient_view(doc)
    assert view["Form"] is None
    assert view["Price"] is None
    assert view["Icon"] == "💊"
    assert view["Ingredients"] == []
    assert to_patient_view(None) is None
