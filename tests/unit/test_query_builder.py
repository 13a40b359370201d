from medsearch.application.query_builder import QueryBuilder
from medsearch.domain.filters import ASC, DESC, AnyOf, Equals, Range, TextMatch, TextSearch
from medsearch.domain.query import SearchMode, SearchQuery


def _q(**params):
    return SearchQuery.from_params(params)


def test_field_filters_semantics():
    flt, _, _ = QueryBuilder().build(_q(dosageForm="Tablet", category="allopathy",
                                        manufacturer="cipla", ingredient="amox"))
    assert TextMatch("dosageForm", "Tablet", exact=True) in flt.clauses
    assert TextMatch("category", "allopathy", exact=True) in flt.clauses
    assert TextMatch("manufacturer.name", "cipla", exact=False) in flt.clauses
    assert TextMatch("activeIngredients.name", "amox", exact=False) in flt.clauses


def test_price_range_and_discontinued():
    flt, _, _ = QueryBuilder().build(_q(minPrice="10", maxPrice="50", discontinued="false"))
    assert Range("pricing.mrp", gte=10.0, lte=50.0) in flt.clauses
    assert Equals("discontinued", False) in flt.clauses


def test_malformed_price_dropped_from_filter():
    flt, _, _ = QueryBuilder().build(_q(minPrice="cheap"))
    assert flt.clauses == ()


def test_relevance_mode_uses_text_search_only():
    flt, sort, mode = QueryBuilder(text_search_available=True).build(_q(q="dolo"))
    assert mode is SearchMode.RELEVANCE
    assert TextSearch("dolo") in flt.clauses
    assert not any(isinstance(c, AnyOf) for c in flt.clauses)
    assert sort.by_text_score is True


def test_fuzzy_forces_substring_mode():
    flt, sort, mode = QueryBuilder(text_search_available=True).build(_q(q="amox", fuzzy="true"))
    assert mode is SearchMode.SUBSTRING
    assert not flt.uses_text_search
    anyof = [c for c in flt.clauses if isinstance(c, AnyOf)][0]
    assert {c.path for c in anyof.clauses} == {"officialName", "manufacturer.name", "activeIngredients.name"}
    assert sort.by_text_score is False
    assert sort.keys == (("officialName", ASC),)


def test_no_text_capability_means_substring():
    _, _, mode = QueryBuilder(text_search_available=False).build(_q(q="amox"))
    assert mode is SearchMode.SUBSTRING


def test_relevance_sort_without_term_is_name_ascending():
    _, sort, _ = QueryBuilder().build(_q(sort="relevance"))
    assert sort.by_text_score is False
    assert sort.keys == (("officialName", ASC),)


def test_price_sorts_have_name_tiebreak():
    _, asc, _ = QueryBuilder().build(_q(sort="price-asc"))
    _, desc, _ = QueryBuilder().build(_q(q="dolo", sort="price-desc"))
    assert asc.keys == (("pricing.mrp", ASC), ("officialName", ASC))
    assert desc.keys == (("pricing.mrp", DESC), ("officialName", ASC))
    assert desc.by_text_score is False


def test_explicit_mode_override():
    flt, _, mode = QueryBuilder(text_search_available=True).build(_q(q="dolo"), SearchMode.SUBSTRING)
    assert mode is SearchMode.SUBSTRING
    assert not flt.uses_text_search
