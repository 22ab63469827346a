from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RestaurantRecord:
    """
    Canonical restaurant entity shared by providers, the matcher and the store.

    Provider-sourced ids are namespaced by origin ("yelp_<id>", "google_<id>")
    so the same physical restaurant never collides across providers.
    """
    id: str
    name: str
    latitude: float = 0.0  # 0.0 when the provider omits geometry
    longitude: float = 0.0
    cuisines: List[str] = field(default_factory=list)
    rating: float = 0.0
    review_count: int = 0
    image_url: str = ""

    # Origin ids, only set on records that came from that provider
    yelp_id: Optional[str] = None
    google_place_id: Optional[str] = None

    # Epoch milliseconds, populated when read back from the store
    created_at: Optional[int] = None
    updated_at: Optional[int] = None


CUISINE_SEPARATOR = ","


def join_cuisines(cuisines: List[str]) -> str:
    return CUISINE_SEPARATOR.join(cuisines)


def split_cuisines(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [c.strip() for c in value.split(CUISINE_SEPARATOR) if c.strip()]
