import asyncio
import time

import pytest

from app.services.providers import ProviderSearchResult, YelpProvider
from app.services.restaurant_service import RestaurantResolver

from conftest import FakeProvider, make_record


@pytest.fixture
def resolver_factory(store):
    created = []

    def factory(primary, secondary, **kwargs):
        resolver = RestaurantResolver(store, primary, secondary, **kwargs)
        created.append(resolver)
        return resolver

    yield factory
    for resolver in created:
        resolver.close()


def test_cache_hit_skips_providers(store, resolver_factory):
    store.upsert(make_record("seed_1", "Sushi Go", rating=4.0))
    yelp = FakeProvider("yelp", [make_record("yelp_x", "Other", rating=5.0)])
    google = FakeProvider("google_places")
    resolver = resolver_factory(yelp, google)

    results = asyncio.run(resolver.search("sushi"))

    assert [r.id for r in results] == ["seed_1"]
    assert yelp.calls == []
    assert google.calls == []


def test_cache_miss_merges_and_persists(store, resolver_factory):
    yelp = FakeProvider("yelp", [make_record("a1", "Sushi Go", rating=4.2)])
    google = FakeProvider("google_places", [make_record("b1", "Sushi Go", rating=4.0)])
    resolver = resolver_factory(yelp, google)

    results = asyncio.run(resolver.search("sushi"))

    assert len(results) == 1
    assert results[0].name == "Sushi Go"
    assert results[0].rating == 4.2
    assert store.find_by_id("a1") is not None
    assert store.find_by_id("b1") is None


def test_second_search_is_served_from_cache(store, resolver_factory):
    yelp = FakeProvider("yelp", [make_record("a1", "Sushi Go", rating=4.2)])
    google = FakeProvider("google_places")
    resolver = resolver_factory(yelp, google)

    asyncio.run(resolver.search("sushi"))
    results = asyncio.run(resolver.search("sushi"))

    assert [r.id for r in results] == ["a1"]
    assert len(yelp.calls) == 1


def test_location_is_passed_to_both_providers(resolver_factory):
    yelp = FakeProvider("yelp")
    google = FakeProvider("google_places")
    resolver = resolver_factory(yelp, google)

    asyncio.run(resolver.search("tacos", 37.7, -122.4))

    assert yelp.calls == [("tacos", 37.7, -122.4)]
    assert google.calls == [("tacos", 37.7, -122.4)]


def test_providers_run_in_parallel(resolver_factory):
    delay = 0.4
    yelp = FakeProvider("yelp", [make_record("a1", "Slow A", rating=4.0)], delay=delay)
    google = FakeProvider("google_places", [make_record("b1", "Slow B", rating=3.0)], delay=delay)
    resolver = resolver_factory(yelp, google)

    start = time.perf_counter()
    results = asyncio.run(resolver.search("slow"))
    elapsed = time.perf_counter() - start

    assert len(results) == 2
    assert elapsed < delay * 2 - 0.1


def test_search_waits_for_slow_provider(resolver_factory):
    yelp = FakeProvider("yelp", [make_record("a1", "Fast", rating=4.0)])
    google = FakeProvider("google_places", [make_record("b1", "Slow", rating=4.5)], delay=0.2)
    resolver = resolver_factory(yelp, google)

    results = asyncio.run(resolver.search("anything"))

    assert [r.id for r in results] == ["b1", "a1"]


def test_unconfigured_provider_degrades_to_other_results(resolver_factory):
    yelp = YelpProvider(None)
    google = FakeProvider("google_places", [make_record("b1", "Taqueria", rating=4.4)])
    resolver = resolver_factory(yelp, google)

    results = asyncio.run(resolver.search("tacos"))

    assert [r.id for r in results] == ["b1"]


def test_both_providers_failing_returns_empty(store, resolver_factory):
    class FailingProvider(FakeProvider):
        def search_restaurants(self, query, latitude=None, longitude=None):
            self.calls.append((query, latitude, longitude))
            return ProviderSearchResult(provider=self.name, error="Request failed: boom")

    resolver = resolver_factory(FailingProvider("yelp"), FailingProvider("google_places"))

    assert asyncio.run(resolver.search("pho")) == []
    assert store.get_trending() == []


def test_persistence_failure_still_returns_results(store, resolver_factory, monkeypatch):
    monkeypatch.setattr(store, "upsert", lambda record: False)
    yelp = FakeProvider("yelp", [make_record("a1", "Curry Corner", rating=4.0)])
    resolver = resolver_factory(yelp, FakeProvider("google_places"))

    results = asyncio.run(resolver.search("curry"))

    assert [r.id for r in results] == ["a1"]


def test_cache_search_limit(store, resolver_factory):
    for i in range(4):
        store.upsert(make_record(f"r{i}", f"Dumpling {i}"))
    resolver = resolver_factory(FakeProvider("yelp"), FakeProvider("google_places"), cache_search_limit=2)

    assert len(asyncio.run(resolver.search("dumpling"))) == 2


def test_get_by_id_and_trending(store, resolver_factory):
    store.upsert(make_record("a", "A", rating=3.0))
    store.upsert(make_record("b", "B", rating=5.0))
    resolver = resolver_factory(FakeProvider("yelp"), FakeProvider("google_places"))

    assert asyncio.run(resolver.get_by_id("a")).name == "A"
    assert asyncio.run(resolver.get_by_id("missing")) is None
    assert [r.id for r in asyncio.run(resolver.get_trending(limit=1))] == ["b"]


def test_cache_reads_are_not_blocked_by_slow_providers(store, resolver_factory):
    store.upsert(make_record("r1", "Falafel Stand"))
    resolver = resolver_factory(
        FakeProvider("yelp", delay=0.5),
        FakeProvider("google_places", delay=0.5),
        max_workers=2,
        provider_workers=2,
    )

    async def scenario():
        misses = [asyncio.create_task(resolver.search(q)) for q in ("pho", "ramen")]
        await asyncio.sleep(0.1)
        started = time.perf_counter()
        hit = await resolver.search("falafel")
        elapsed = time.perf_counter() - started
        await asyncio.gather(*misses)
        return hit, elapsed

    hit, elapsed = asyncio.run(scenario())

    assert [r.id for r in hit] == ["r1"]
    assert elapsed < 0.3


def test_malformed_provider_entries_never_reach_the_caller(store, resolver_factory):
    yelp = YelpProvider("key")
    yelp._fetch = lambda query, latitude, longitude: {
        "businesses": [
            {"id": "x1", "name": 12345},
            {"id": "x2", "name": "Sushi Zen", "rating": 4.0},
        ]
    }
    resolver = resolver_factory(yelp, FakeProvider("google_places"))

    results = asyncio.run(resolver.search("sushi"))

    assert [r.id for r in results] == ["yelp_x2"]
    assert store.find_by_id("yelp_x1") is None
