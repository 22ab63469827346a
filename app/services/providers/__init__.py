"""
Provider abstraction layer for restaurant search services.

This module provides a unified interface for searching restaurants
across multiple providers (Yelp, Google Places).
"""

from .base import (
    RestaurantProvider,
    ProviderSearchResult,
    ProviderError,
    ProviderType,
    is_placeholder_key,
)
from .google_places import GooglePlacesProvider
from .yelp import YelpProvider
from .factory import get_provider, get_search_providers

__all__ = [
    "RestaurantProvider",
    "ProviderSearchResult",
    "ProviderError",
    "ProviderType",
    "is_placeholder_key",
    "GooglePlacesProvider",
    "YelpProvider",
    "get_provider",
    "get_search_providers",
]
