# medsearch/domain/filters.py
"""
Store-neutral filter/sort description produced by the QueryBuilder.

Adapters translate it: the Mongo repo compiles it to a filter document, the
in-memory repo evaluates it row by row. Paths use the stored (camelCase)
document layout, e.g. "manufacturer.name" or "activeIngredients.name".
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Equals:
    path: str
    value: object


@dataclass(frozen=True)
class TextMatch:
    """Case-insensitive match; `exact` compares the whole value, otherwise containment."""
    path: str
    text: str
    exact: bool = False


@dataclass(frozen=True)
class Range:
    path: str
    gte: Optional[float] = None
    lte: Optional[float] = None


@dataclass(frozen=True)
class AnyOf:
    clauses: Tuple["Predicate", ...]


@dataclass(frozen=True)
class TextSearch:
    term: str


Predicate = Union[Equals, TextMatch, Range, AnyOf, TextSearch]


@dataclass(frozen=True)
class FilterSpec:
    """Conjunction of predicates; empty means match-all."""
    clauses: Tuple[Predicate, ...] = ()

    def with_clause(self, clause: Predicate) -> "FilterSpec":
        return FilterSpec(self.clauses + (clause,))

    @property
    def uses_text_search(self) -> bool:
        return any(isinstance(c, TextSearch) for c in self.clauses)


ASC = 1
DESC = -1


@dataclass(frozen=True)
class SortSpec:
    keys: Tuple[Tuple[str, int], ...] = field(default_factory=tuple)
    by_text_score: bool = False
