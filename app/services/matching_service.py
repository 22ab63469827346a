from typing import List, Sequence

from app.models.records import RestaurantRecord


def normalize_name(name: str) -> str:
    """Merge key used to detect the same restaurant across providers."""
    return name.strip().lower()


def dedupe_by_name(restaurants: Sequence[RestaurantRecord]) -> List[RestaurantRecord]:
    """
    Drop later records whose normalized name was already seen.

    Two distinct restaurants that share a name collapse into one; the first
    occurrence is kept unchanged.
    """
    seen = set()
    unique = []
    for restaurant in restaurants:
        key = normalize_name(restaurant.name)
        if key in seen:
            continue
        seen.add(key)
        unique.append(restaurant)
    return unique


def merge_and_rank(
    primary: Sequence[RestaurantRecord],
    secondary: Sequence[RestaurantRecord],
) -> List[RestaurantRecord]:
    """
    Merge two providers' results into one ranked list.

    Args:
        primary: Results whose records win on a name collision
        secondary: Results appended after primary

    Returns:
        Deduplicated records sorted by rating descending. Equal ratings keep
        their post-dedup order (sorted() is stable).
    """
    combined = dedupe_by_name(list(primary) + list(secondary))
    return sorted(combined, key=lambda r: r.rating, reverse=True)
