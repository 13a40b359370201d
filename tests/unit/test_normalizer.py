from medsearch.domain.models import Medicine
from medsearch.domain.normalizer import Rejected, normalize, normalize_many

ROW = {
    "id": "1",
    "name": "Augmentin 625 Duo Tablet",
    "price(₹)": "₹223.42",
    "Is_discontinued": "FALSE",
    "manufacturer_name": "Glaxo SmithKline Pharmaceuticals Ltd",
    "type": "allopathy",
    "pack_size_label": "strip of 10 tablets",
    "short_composition1": "Amoxycillin  (500mg) ",
    "short_composition2": " Clavulanic Acid (125mg)",
}


def test_normalize_full_row():
    med = normalize(ROW)
    assert isinstance(med, Medicine)
    assert med.official_name == "Augmentin 625 Duo Tablet"
    assert med.source_id == "1"
    assert med.category == "allopathy"
    assert med.dosage_form == "tablet"
    assert med.manufacturer.name == "Glaxo SmithKline Pharmaceuticals Ltd"
    assert [i.name for i in med.active_ingredients] == ["Amoxycillin", "Clavulanic Acid"]
    assert med.active_ingredients[1].strength_value == 125
    assert med.packaging.quantity == 10
    assert med.pricing.mrp == 223.42
    assert med.pricing.currency == "INR"
    assert med.discontinued is False


def test_derived_lowercase_fields():
    doc = normalize(ROW).to_document()
    assert doc["nameLc"] == "augmentin 625 duo tablet"
    assert doc["manufacturerLc"] == "glaxo smithkline pharmaceuticals ltd"
    assert doc["compositionLc"] == "amoxycillin clavulanic acid"


def test_derived_fields_follow_canonical_changes():
    med = normalize(ROW)
    med.official_name = "Augmentin DDS"
    assert med.to_document()["nameLc"] == "augmentin dds"


def test_single_composition_is_not_padded():
    row = {k: v for k, v in ROW.items() if k != "short_composition2"}
    med = normalize(row)
    assert len(med.active_ingredients) == 1


def test_name_candidates_in_order():
    med = normalize({"officialName": "", "name": "  ", "medicine_name": "Crocin 500"})
    assert med.official_name == "Crocin 500"


def test_missing_name_is_rejected():
    res = normalize({"name": "", "price": "12"}, row_index=7)
    assert isinstance(res, Rejected)
    assert res.row_index == 7


def test_no_price_no_pricing():
    med = normalize({"name": "Mystery Syrup", "price": "n/a"})
    assert med.pricing is None
    assert med.dosage_form == "syrup"
    assert "pricing" not in med.to_document()


def test_discontinued_flag():
    assert normalize({"name": "X", "Is_discontinued": "TRUE"}).discontinued is True
    assert normalize({"name": "X", "discontinued": "true"}).discontinued is True
    assert normalize({"name": "X"}).discontinued is False


def test_normalize_is_deterministic():
    a = normalize(dict(ROW)).model_dump_json(by_alias=True)
    b = normalize(dict(ROW)).model_dump_json(by_alias=True)
    assert a == b


def test_normalize_many_counts():
    res = normalize_many([ROW, {"name": ""}, {"name": "Dolo 650 Tablet"}])
    assert len(res["accepted"]) == 2
    assert len(res["rejected"]) == 1
    assert res["rejected"][0].row_index == 1
