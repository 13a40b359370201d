from medsearch.application.query_builder import QueryBuilder
from medsearch.domain.filters import ASC, FilterSpec, SortSpec, TextMatch
from medsearch.domain.query import SearchQuery
from medsearch.infra.repo.mongo_repo import TEXT_SCORE, compile_filter, compile_sort


def _compiled(text_search=True, **params):
    flt, sort, _ = QueryBuilder(text_search_available=text_search).build(SearchQuery.from_params(params))
    return compile_filter(flt), compile_sort(sort)


def test_relevance_query_keeps_text_top_level():
    flt, sort = _compiled(q="dolo", dosageForm="tablet")
    assert flt["$text"] == {"$search": "dolo"}
    assert "$or" not in flt
    assert flt["dosageForm"] == {"$regex": "^tablet$", "$options": "i"}
    assert sort == [("score", TEXT_SCORE), ("officialName", ASC)]


def test_substring_query_is_an_or_of_regexes():
    flt, sort = _compiled(q="a.b", fuzzy="true", manufacturer="cipla")
    assert "$text" not in flt
    assert flt["$or"] == [
        {"officialName": {"$regex": r"a\.b", "$options": "i"}},
        {"manufacturer.name": {"$regex": r"a\.b", "$options": "i"}},
        {"activeIngredients.name": {"$regex": r"a\.b", "$options": "i"}},
    ]
    assert flt["manufacturer.name"] == {"$regex": "cipla", "$options": "i"}
    assert sort == [("officialName", ASC)]


def test_price_range_and_flags():
    flt, _ = _compiled(minPrice="5", discontinued="true")
    assert flt["pricing.mrp"] == {"$gte": 5.0}
    assert flt["discontinued"] is True


def test_colliding_paths_go_to_and():
    spec = FilterSpec((TextMatch("officialName", "dolo"), TextMatch("officialName", "650")))
    flt = compile_filter(spec)
    assert flt["officialName"] == {"$regex": "dolo", "$options": "i"}
    assert flt["$and"] == [{"officialName": {"$regex": "650", "$options": "i"}}]


def test_empty_filter_matches_all():
    assert compile_filter(FilterSpec()) == {}
    assert compile_sort(SortSpec()) == []
