import sys
import time
from pathlib import Path

import pytest
from sqlalchemy.pool import StaticPool

# Ensure the `app` package is importable when running pytest from the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.database import create_db_engine
from app.models.records import RestaurantRecord
from app.services.database_service import RestaurantStore
from app.services.providers import ProviderSearchResult


class FakeClock:
    """Epoch-ms clock that moves forward one millisecond per reading."""

    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def __call__(self):
        self.now += 1
        return self.now


class FakeProvider:
    """Stands in for a search provider; records calls and can be slowed down."""

    def __init__(self, name, restaurants=None, delay=0.0):
        self.name = name
        self.restaurants = restaurants or []
        self.delay = delay
        self.calls = []

    def search_restaurants(self, query, latitude=None, longitude=None):
        self.calls.append((query, latitude, longitude))
        if self.delay:
            time.sleep(self.delay)
        return ProviderSearchResult(restaurants=list(self.restaurants), provider=self.name)


def make_record(id, name, rating=0.0, **kwargs):
    return RestaurantRecord(id=id, name=name, rating=rating, **kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    restaurant_store = RestaurantStore(engine, clock=clock)
    restaurant_store.create_schema()
    yield restaurant_store
    restaurant_store.close()
