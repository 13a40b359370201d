import asyncio

import pytest

from medsearch.application.search_engine import SearchEngine
from medsearch.domain.errors import StoreUnavailable
from medsearch.domain.normalizer import normalize
from medsearch.domain.query import SearchQuery
from medsearch.infra.cache.lru_cache import SearchCache
from medsearch.infra.repo.memory_repo import InMemoryMedicineRepo


class CountingRepo(InMemoryMedicineRepo):
    def __init__(self, *a, **kw):
        super().__init__(*a, **kw)
        self.find_calls = 0
        self.count_calls = 0

    async def find(self, *a, **kw):
        self.find_calls += 1
        return await super().find(*a, **kw)

    async def count(self, *a, **kw):
        self.count_calls += 1
        return await super().count(*a, **kw)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _catalog(n=25):
    return [normalize({"name": f"Med {i:02d} Tablet", "price": str(i)}) for i in range(1, n + 1)]


AMOX_ROWS = [
    {"name": "Amoxil 500 Capsule", "manufacturer_name": "GSK"},
    {"name": "Mox 250 Capsule", "manufacturer_name": "Amox Labs"},
    {"name": "Novamox Syrup", "manufacturer_name": "Cipla"},
    {"name": "Clavam 625 Tablet", "manufacturer_name": "Alkem",
     "short_composition1": "Amoxycillin (500mg)", "short_composition2": "Clavulanic Acid (125mg)"},
    {"name": "Dolo 650 Tablet", "manufacturer_name": "Micro Labs",
     "short_composition1": "Paracetamol (650mg)"},
    {"name": "Crocin Tablet", "manufacturer_name": "GSK", "short_composition1": "Paracetamol (500mg)"},
]


def _search(engine, **params):
    return asyncio.run(engine.search(SearchQuery.from_params(params)))


def test_pagination_boundaries():
    engine = SearchEngine(InMemoryMedicineRepo(_catalog()))
    first = _search(engine, limit="10", page="1")
    assert len(first["items"]) == 10
    assert first["hasMore"] is True
    assert first["total"] is None

    last = _search(engine, limit="10", page="3")
    assert len(last["items"]) == 5
    assert last["hasMore"] is False
    assert [d["officialName"] for d in last["items"]][0] == "Med 21 Tablet"


def test_count_uses_same_filter():
    repo = CountingRepo(_catalog())
    engine = SearchEngine(repo)
    page = _search(engine, limit="10", page="2", count="true", maxPrice="20")
    assert page["total"] == 20
    assert page["hasMore"] is False
    assert len(page["items"]) == 10
    assert repo.count_calls == 1

    page = _search(engine, limit="10", page="1", count="true")
    assert page["total"] == 25 and page["hasMore"] is True


def test_fuzzy_substring_matches_name_manufacturer_and_ingredient():
    repo = InMemoryMedicineRepo([normalize(r) for r in AMOX_ROWS])
    engine = SearchEngine(repo)
    page = _search(engine, q="amox", fuzzy="true", count="true")
    names = {d["officialName"] for d in page["items"]}
    assert names == {"Amoxil 500 Capsule", "Mox 250 Capsule", "Novamox Syrup", "Clavam 625 Tablet"}
    assert page["total"] == 4
    assert page["mode"] == "substring"


def test_free_text_combines_with_filters():
    engine = SearchEngine(InMemoryMedicineRepo([normalize(r) for r in AMOX_ROWS]))
    page = _search(engine, q="amox", fuzzy="true", dosageForm="capsule")
    assert {d["officialName"] for d in page["items"]} == {"Amoxil 500 Capsule", "Mox 250 Capsule"}


def test_cache_hits_store_once_until_ttl():
    clock = FakeClock()
    repo = CountingRepo(_catalog())
    engine = SearchEngine(repo, cache=SearchCache(max_entries=10, ttl_seconds=30, clock=clock))

    a = _search(engine, dosageForm="tablet", page="1")
    b = _search(engine, page="1", dosageForm="tablet")
    assert repo.find_calls == 1
    assert a == b

    clock.now += 31
    _search(engine, dosageForm="tablet", page="1")
    assert repo.find_calls == 2


def test_cache_absence_does_not_change_results():
    with_cache = SearchEngine(InMemoryMedicineRepo(_catalog()), cache=SearchCache())
    without = SearchEngine(InMemoryMedicineRepo(_catalog()))
    params = dict(limit="7", page="2", sort="price-desc", count="true")
    assert _search(with_cache, **params) == _search(without, **params)
    assert _search(with_cache, **params) == _search(without, **params)


def test_relevance_falls_back_when_store_has_no_text_index():
    repo = CountingRepo([normalize(r) for r in AMOX_ROWS])
    repo.supports_text_search = True          # claims it, then refuses the $text query
    engine = SearchEngine(repo)
    page = _search(engine, q="paracetamol")
    assert page["mode"] == "substring"
    assert {d["officialName"] for d in page["items"]} == {"Dolo 650 Tablet", "Crocin Tablet"}


class BrokenStore(InMemoryMedicineRepo):
    async def find(self, *a, **kw):
        raise StoreUnavailable("connection refused")


def test_store_failure_propagates_and_is_not_cached():
    cache = SearchCache()
    engine = SearchEngine(BrokenStore(), cache=cache)
    with pytest.raises(StoreUnavailable):
        _search(engine, q="dolo")
    assert len(cache) == 0


class BrokenCache(SearchCache):
    async def get(self, key):
        raise ConnectionError("redis down")

    async def put(self, key, value):
        raise ConnectionError("redis down")


def test_cache_failure_is_transparent():
    engine = SearchEngine(InMemoryMedicineRepo(_catalog(3)), cache=BrokenCache())
    page = _search(engine)
    assert len(page["items"]) == 3


def test_fallback_sticks_after_first_refusal():
    repo = CountingRepo([normalize(r) for r in AMOX_ROWS])
    repo.supports_text_search = True
    engine = SearchEngine(repo)

    _search(engine, q="paracetamol")
    assert repo.find_calls == 2          # refused $text, then substring

    page = _search(engine, q="amox")
    assert page["mode"] == "substring"
    assert repo.find_calls == 3
    assert engine.builder.text_search_available is False
