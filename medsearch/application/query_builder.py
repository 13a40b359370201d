# medsearch/application/query_builder.py
from __future__ import annotations

import logging
from typing import Optional, Tuple

from medsearch.domain.filters import (
    ASC, DESC, AnyOf, Equals, FilterSpec, Range, SortSpec, TextMatch, TextSearch,
)
from medsearch.domain.query import SearchMode, SearchQuery, SortMode

log = logging.getLogger("medsearch.query")

# Stored document paths
NAME = "officialName"
DOSAGE_FORM = "dosageForm"
CATEGORY = "category"
MANUFACTURER = "manufacturer.name"
INGREDIENT = "activeIngredients.name"
PRICE = "pricing.mrp"
DISCONTINUED = "discontinued"

# Fields searched by the free-text term in substring mode
FREE_TEXT_PATHS = (NAME, MANUFACTURER, INGREDIENT)

# Field filter semantics (fixed):
#   dosageForm, category     -> case-insensitive exact
#   manufacturer, ingredient -> case-insensitive substring
FIELD_MATCHERS = (
    ("dosage_form", DOSAGE_FORM, True),
    ("category", CATEGORY, True),
    ("manufacturer", MANUFACTURER, False),
    ("ingredient", INGREDIENT, False),
)


class QueryBuilder:
    """SearchQuery -> (FilterSpec, SortSpec, SearchMode). Pure; one filter path per request."""

    def __init__(self, text_search_available: bool = True):
        self.text_search_available = text_search_available

    def choose_mode(self, query: SearchQuery) -> SearchMode:
        if query.q and self.text_search_available and not query.fuzzy:
            return SearchMode.RELEVANCE
        return SearchMode.SUBSTRING

    def build(self, query: SearchQuery, mode: Optional[SearchMode] = None) -> Tuple[FilterSpec, SortSpec, SearchMode]:
        mode = mode or self.choose_mode(query)
        flt = self.build_filter(query, mode)
        sort = self.build_sort(query, mode)
        if query.ignored:
            log.debug("query: ignored malformed params %s", ",".join(query.ignored))
        return flt, sort, mode

    def build_filter(self, query: SearchQuery, mode: SearchMode) -> FilterSpec:
        flt = FilterSpec()

        for attr, path, exact in FIELD_MATCHERS:
            value = getattr(query, attr)
            if value:
                flt = flt.with_clause(TextMatch(path, value, exact=exact))

        if query.discontinued is not None:
            flt = flt.with_clause(Equals(DISCONTINUED, query.discontinued))

        if query.min_price is not None or query.max_price is not None:
            flt = flt.with_clause(Range(PRICE, gte=query.min_price, lte=query.max_price))

        if query.q:
            if mode is SearchMode.RELEVANCE:
                flt = flt.with_clause(TextSearch(query.q))
            else:
                flt = flt.with_clause(AnyOf(tuple(TextMatch(p, query.q) for p in FREE_TEXT_PATHS)))
        return flt

    def build_sort(self, query: SearchQuery, mode: SearchMode) -> SortSpec:
        # officialName is unique, so ending on it makes page boundaries stable
        if query.sort is SortMode.PRICE_ASC:
            return SortSpec(keys=((PRICE, ASC), (NAME, ASC)))
        if query.sort is SortMode.PRICE_DESC:
            return SortSpec(keys=((PRICE, DESC), (NAME, ASC)))
        if query.sort is SortMode.RELEVANCE and query.q and mode is SearchMode.RELEVANCE:
            return SortSpec(keys=((NAME, ASC),), by_text_score=True)
        return SortSpec(keys=((NAME, ASC),))
