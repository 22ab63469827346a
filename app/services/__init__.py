# Store exports
from app.services.database_service import (
    RestaurantStore,
    UpsertReport,
    DatabaseServiceError,
)

# Matching exports
from app.services.matching_service import (
    normalize_name,
    dedupe_by_name,
    merge_and_rank,
)

# Resolver exports
from app.services.restaurant_service import RestaurantResolver

__all__ = [
    "RestaurantStore",
    "UpsertReport",
    "DatabaseServiceError",
    "normalize_name",
    "dedupe_by_name",
    "merge_and_rank",
    "RestaurantResolver",
]
